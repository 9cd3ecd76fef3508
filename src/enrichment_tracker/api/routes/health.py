"""Health check endpoints."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from enrichment_tracker.core import database
from enrichment_tracker.core.settings import get_settings
from enrichment_tracker.core.time import utc_now
from enrichment_tracker.observability.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: str
    version: str
    environment: str


class CheckResult(BaseModel):
    status: str
    message: str


class ReadinessResponse(HealthResponse):
    """Readiness check response."""

    checks: dict[str, CheckResult]


@router.get("/health", response_model=HealthResponse)
@router.get("/health/live", response_model=HealthResponse)
def liveness():
    """Liveness check - is the service running?"""
    settings = get_settings()
    return HealthResponse(
        status="healthy",
        timestamp=utc_now().isoformat(),
        version=settings.app_version,
        environment=settings.environment,
    )


def _check_database() -> CheckResult:
    try:
        database.ping()
    except Exception as e:
        logger.error("readiness_db_check_failed", error=str(e))
        return CheckResult(status="unhealthy", message="Database connection failed")
    return CheckResult(status="healthy", message="Database connection successful")


def _check_environment() -> CheckResult:
    missing = get_settings().missing_required_settings()
    if missing:
        return CheckResult(
            status="unhealthy",
            message=f"Missing environment variables: {', '.join(missing)}",
        )
    return CheckResult(status="healthy", message="All required environment variables are set")


@router.get("/health/ready", response_model=ReadinessResponse)
def readiness():
    """Readiness check - can the service accept traffic?

    Returns 503 when any check fails so load balancers stop routing to it.
    """
    settings = get_settings()
    checks = {
        "database": _check_database(),
        "environment_variables": _check_environment(),
    }
    healthy = all(check.status == "healthy" for check in checks.values())

    body = ReadinessResponse(
        status="healthy" if healthy else "degraded",
        timestamp=utc_now().isoformat(),
        version=settings.app_version,
        environment=settings.environment,
        checks=checks,
    )
    return JSONResponse(status_code=200 if healthy else 503, content=body.model_dump())
