"""FastAPI application, envelope, middleware and introspection routers."""
