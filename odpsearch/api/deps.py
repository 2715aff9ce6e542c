"""FastAPI dependency injection functions.

This module contains shared dependencies for API endpoints:
- Service construction and index loading at startup
- Service accessors backed by ``app.state``
- Error sanitization
"""

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, HTTPException
from fastapi import Request as FastAPIRequest

from ..config import Settings
from ..engine.index.embedding_index import RandomIndexingModel
from ..engine.index.registry import IndexGeneration, IndexRegistry
from ..engine.index.term_index import TermIndex
from ..engine.search import ScoreFusionEngine, default_strategies
from ..errors import IndexUnavailableError
from ..services.index_builder import IndexBuilder
from ..services.lexical_expander import build_expander
from ..services.query_service import QueryService

logger = logging.getLogger(__name__)


# ============ ERROR SANITIZATION ============


def sanitize_error_message(error: Exception) -> str:
    """
    Sanitize error messages to prevent information disclosure.

    Returns a generic message for unexpected errors while preserving
    useful information for known error types.
    """
    error_str = str(error)

    # Known safe error patterns that can be returned to client
    safe_patterns = [
        "Pattern not found",
        "Document not available",
        "Unknown index field",
        "Index rebuild already in progress",
        "Term index is not loaded",
        "Embedding index is not loaded",
    ]

    for pattern in safe_patterns:
        if pattern.lower() in error_str.lower():
            return error_str

    # Log the actual error for debugging
    logger.error(f"Request error: {error}", exc_info=True)

    # Return generic message for unknown errors
    return "An error occurred processing your request. Please try again."


# ============ SERVICE CONTAINER ============


@dataclass
class Services:
    """Everything the endpoints need, built once per application."""

    settings: Settings
    registry: IndexRegistry
    builder: IndexBuilder
    query_service: QueryService


def load_generation(config: Settings) -> IndexGeneration:
    """Load the persisted indices; a missing index is reported as unavailable."""
    term_index: TermIndex | None = None
    embedding_index: RandomIndexingModel | None = None

    try:
        term_index = TermIndex.load(config.term_index_path)
    except IndexUnavailableError as e:
        logger.warning(f"Term index unavailable until the next rebuild: {e}")

    try:
        embedding_index = RandomIndexingModel.load(config.embedding_index_path)
    except IndexUnavailableError as e:
        logger.warning(f"Embedding index unavailable until the next rebuild: {e}")

    return IndexGeneration(term_index=term_index, embedding_index=embedding_index)


def build_services(config: Settings) -> Services:
    """Wire registry, builder and query service from settings."""
    registry = IndexRegistry(load_generation(config))
    expander = build_expander(config.lexical_expander)
    engine = ScoreFusionEngine(
        default_strategies(
            lexical_limit=config.lexical_limit,
            embedding_neighbors=config.embedding_neighbors,
        )
    )
    builder = IndexBuilder.from_settings(config, registry, expander=expander)
    query_service = QueryService(
        registry,
        expander=expander,
        engine=engine,
        category_list_path=config.category_list_path,
    )
    logger.info(
        f"Services ready: {registry.current.documents} patterns loaded, "
        f"expander={config.lexical_expander}"
    )
    return Services(settings=config, registry=registry, builder=builder, query_service=query_service)


# ============ SERVICE DEPENDENCIES ============


def get_services(request: FastAPIRequest) -> Services:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=503, detail="Service is starting up")
    return services


def get_query_service(services: Annotated[Services, Depends(get_services)]) -> QueryService:
    return services.query_service


def get_index_builder(services: Annotated[Services, Depends(get_services)]) -> IndexBuilder:
    return services.builder
