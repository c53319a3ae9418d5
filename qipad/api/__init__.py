"""HTTP API - FastAPI routers, request dependencies and error handlers."""
