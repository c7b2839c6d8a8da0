"""Administrative backend for the arcade distribution hierarchy."""

__version__ = "1.0.0"
