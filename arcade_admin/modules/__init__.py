"""Feature modules of the admin server."""
