"""FastAPI application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import make_asgi_app

from enrichment_tracker.api.errors import register_exception_handlers
from enrichment_tracker.api.middleware import RequestContextMiddleware
from enrichment_tracker.api.routes import (
    enrichment,
    facts,
    failed_jobs,
    health,
    insights,
    organizations,
)
from enrichment_tracker.core.database import close_pool, init_pool
from enrichment_tracker.core.settings import get_settings
from enrichment_tracker.observability.logging import configure_logging, get_logger
from enrichment_tracker.observability.metrics import app_info

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    settings = get_settings()
    configure_logging()
    app_info.info({"version": settings.app_version, "environment": settings.environment})
    init_pool()
    logger.info("application_started", environment=settings.environment)

    yield

    close_pool()
    logger.info("application_stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title="Enrichment Tracker",
        description="REST API over company enrichment jobs, facts and run analytics",
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request context middleware (for correlation IDs)
    app.add_middleware(RequestContextMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router, tags=["Health"])
    app.include_router(enrichment.router, prefix="/api/enrichment", tags=["Enrichment"])
    app.include_router(insights.router, prefix="/api/enrichment", tags=["Job Insights"])
    app.include_router(facts.router, prefix="/api/facts", tags=["Facts"])
    app.include_router(
        organizations.router, prefix="/api/organization", tags=["Organizations"]
    )
    app.include_router(failed_jobs.router, prefix="/api/failed-jobs", tags=["Failed Jobs"])

    if settings.metrics_enabled:
        app.mount("/metrics", make_asgi_app())

    return app


# Create app instance
app = create_app()
