"""ASGI middleware for the FastAPI application.

This module provides ASGI middleware for:
- Request tracing headers (X-Request-Id, X-Response-Time-Ms)
"""

from .request_context import RequestContextMiddleware

__all__ = [
    "RequestContextMiddleware",
]
