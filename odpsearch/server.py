"""FastAPI server for ontology design pattern search."""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from . import __version__
from .api.deps import (
    Services,
    build_services,
    get_index_builder,
    get_query_service,
    get_services,
    sanitize_error_message,
)
from .config import Settings, configure_logging, settings
from .models import (
    ANY_CATEGORY,
    CategoryListResponse,
    FilterConfiguration,
    HealthResponse,
    IndexState,
    PatternListResponse,
    PatternRecord,
    RankedPattern,
    ReadyResponse,
    SearchParams,
    SearchResponse,
    SearchResult,
)
from .middleware import RequestContextMiddleware
from .services.index_builder import REBUILD_IN_PROGRESS_MESSAGE, IndexBuilder
from .services.query_service import QueryService

logger = logging.getLogger(__name__)

router = APIRouter()

# ============ SENTRY INITIALIZATION ============


def _filter_sentry_event(event: dict) -> dict:
    """Remove sensitive data from Sentry events."""
    if "request" in event and "headers" in event["request"]:
        headers = event["request"]["headers"]
        for key in ["authorization", "cookie"]:
            if key in headers:
                headers[key] = "[REDACTED]"
    return event


def init_sentry(config: Settings) -> None:
    """Initialize Sentry if a DSN is configured."""
    if not config.sentry_dsn:
        logger.debug("Sentry DSN not configured - error tracking disabled")
        return
    try:
        import sentry_sdk
        from sentry_sdk.integrations.fastapi import FastApiIntegration
        from sentry_sdk.integrations.starlette import StarletteIntegration

        sentry_sdk.init(
            dsn=config.sentry_dsn,
            environment=config.environment,
            traces_sample_rate=0.1 if config.environment == "production" else 1.0,
            integrations=[
                FastApiIntegration(),
                StarletteIntegration(),
            ],
            before_send=lambda event, hint: _filter_sentry_event(event),
        )
        logger.info("Sentry error tracking initialized")
    except ImportError:
        logger.warning("Sentry DSN configured but sentry-sdk not installed")


# ============ HELPERS ============


def _to_response(query: str, results: list[SearchResult]) -> SearchResponse:
    ranked = [
        RankedPattern(pattern=r.pattern, confidence=r.confidence)
        for r in results
        if r.pattern is not None
    ]
    return SearchResponse(query=query, results=ranked, total=len(ranked))


# ============ HEALTH ENDPOINTS ============


@router.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check() -> HealthResponse:
    """Health check endpoint (lightweight liveness check)."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        timestamp=datetime.now(timezone.utc),
    )


@router.get("/ready", tags=["Health"])
async def readiness_check(services: Annotated[Services, Depends(get_services)]):
    """Readiness check - reports which indices are loaded.

    Ready once the term index is loaded; a missing embedding index only
    degrades ranking.
    """
    generation = services.registry.current
    indices = generation.states()
    term_ok = indices["term"] == IndexState.LOADED
    all_ok = term_ok and all(state == IndexState.LOADED for state in indices.values())

    response = ReadyResponse(
        status="ready" if all_ok else ("degraded" if term_ok else "not_ready"),
        version=__version__,
        indices=indices,
        documents=generation.documents,
    )
    return JSONResponse(
        content=response.model_dump(mode="json"),
        status_code=200 if term_ok else 503,
    )


@router.get("/", tags=["Health"])
async def root():
    """Root endpoint with API info."""
    return {
        "name": "ODP Search",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "search": "/search",
    }


# ============ SEARCH ENDPOINTS ============


@router.post("/search", response_model=SearchResponse, tags=["Search"])
async def search_patterns(
    params: SearchParams,
    services: Annotated[Services, Depends(get_services)],
) -> SearchResponse:
    """Composite search over the pattern catalogue.

    A query without searchable terms returns an empty result list.
    """
    limit = params.limit or services.settings.default_result_limit
    results = await services.query_service.search(params.query, params.filters, limit)
    return _to_response(params.query, results)


@router.get("/search", response_model=SearchResponse, tags=["Search"])
async def search_patterns_get(
    services: Annotated[Services, Depends(get_services)],
    query: str = Query(default="", description="Free-text query or competency question"),
    category: str = Query(default=ANY_CATEGORY, description="Category filter"),
    limit: int | None = Query(default=None, ge=1, le=1000),
) -> SearchResponse:
    """Convenience search with only a category filter."""
    filters = FilterConfiguration(category=category)
    results = await services.query_service.search(
        query, filters, limit or services.settings.default_result_limit
    )
    return _to_response(query, results)


# ============ INDEX ENDPOINTS ============


@router.post("/index/rebuild", response_class=PlainTextResponse, tags=["Index"])
async def rebuild_index(
    builder: Annotated[IndexBuilder, Depends(get_index_builder)],
) -> PlainTextResponse:
    """Rebuild the term and embedding indices from the pattern repository.

    Returns a human-readable status line.
    """
    report = await asyncio.to_thread(builder.rebuild)
    if report.success:
        status_code = 200
    elif report.message == REBUILD_IN_PROGRESS_MESSAGE:
        status_code = 409
    else:
        status_code = 500
    return PlainTextResponse(report.message, status_code=status_code)


# ============ PATTERN ENDPOINTS ============


@router.get("/patterns/detail", response_model=PatternRecord, tags=["Patterns"])
async def get_pattern_detail(
    query_service: Annotated[QueryService, Depends(get_query_service)],
    iri: str = Query(..., min_length=1, description="Pattern IRI"),
) -> PatternRecord:
    """Full metadata of one pattern."""
    record = query_service.get_pattern(iri)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Pattern not found: {iri}")
    return record


@router.get("/patterns", response_model=PatternListResponse, tags=["Patterns"])
async def list_patterns(
    query_service: Annotated[QueryService, Depends(get_query_service)],
    category: str = Query(default=ANY_CATEGORY),
) -> PatternListResponse:
    """Patterns in a category ('Any' lists all)."""
    patterns = query_service.list_patterns_by_category(category)
    return PatternListResponse(category=category, patterns=patterns, total=len(patterns))


@router.get("/categories", response_model=CategoryListResponse, tags=["Patterns"])
async def list_categories(
    query_service: Annotated[QueryService, Depends(get_query_service)],
) -> CategoryListResponse:
    return CategoryListResponse(categories=query_service.list_categories())


@router.get("/patterns/document", response_class=PlainTextResponse, tags=["Patterns"])
async def get_pattern_document(
    query_service: Annotated[QueryService, Depends(get_query_service)],
    iri: str = Query(..., min_length=1, description="Pattern IRI"),
    format: Literal["turtle", "xml", "nt", "json-ld"] = Query(default="turtle"),
) -> PlainTextResponse:
    """The stored ontology document of a pattern, re-serialized."""
    document = await asyncio.to_thread(query_service.get_pattern_document, iri, format)
    if document is None:
        raise HTTPException(status_code=404, detail=f"Document not available: {iri}")
    return PlainTextResponse(document)


# ============ APPLICATION ============


def create_app(config: Settings | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Settings to use (defaults to the module-level settings).
    """
    config = config or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler for startup/shutdown."""
        # Startup
        configure_logging(config)
        logger.info(f"Starting ODP Search v{__version__}")

        # Validate CORS configuration in production
        if not config.debug and config.cors_allowed_origins == "*":
            logger.warning(
                "SECURITY WARNING: CORS is configured to allow all origins ('*'). "
                "Set ODPSEARCH_CORS_ALLOWED_ORIGINS to specific domains in production."
            )

        config.validate_startup()
        app.state.services = await asyncio.to_thread(build_services, config)

        yield
        # Shutdown
        app.state.services = None
        logger.info("ODP Search stopped")

    init_sentry(config)

    app = FastAPI(
        title="ODP Search",
        description="Composite search over ontology design patterns",
        version=__version__,
        lifespan=lifespan,
    )

    # Request tracing headers
    app.add_middleware(RequestContextMiddleware)

    # CORS middleware - use configured origins instead of wildcard
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=config.cors_allowed_origins != "*",
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-Id"],
    )

    # ============ EXCEPTION HANDLERS ============

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle HTTP exceptions with consistent response format."""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error": exc.detail,
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle unexpected exceptions with sanitized error messages."""
        logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": sanitize_error_message(exc),
            },
        )

    app.include_router(router)
    return app


app = create_app()


# ============ MAIN ============


def main():
    """Run the server with uvicorn."""
    import uvicorn

    uvicorn.run(
        "odpsearch.server:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
