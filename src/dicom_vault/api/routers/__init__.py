"""API routers shared across features."""
