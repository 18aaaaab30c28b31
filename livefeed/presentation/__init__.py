"""Presentation layer: FastAPI routers, middleware and the SSE session."""
