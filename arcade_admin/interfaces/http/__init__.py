"""HTTP interface: dependencies, middleware, error handlers and routers."""
