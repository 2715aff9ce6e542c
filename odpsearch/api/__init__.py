"""API utilities and dependencies.

This package contains shared API utilities:
- deps: service wiring and FastAPI dependency injection functions
"""

from .deps import (
    Services,
    build_services,
    get_index_builder,
    get_query_service,
    get_services,
    load_generation,
    sanitize_error_message,
)

__all__ = [
    "Services",
    "build_services",
    "load_generation",
    "get_services",
    "get_query_service",
    "get_index_builder",
    "sanitize_error_message",
]
