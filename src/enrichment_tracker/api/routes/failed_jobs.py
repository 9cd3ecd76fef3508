"""Failed job (dead letter) endpoints."""

from fastapi import APIRouter, Depends, Query

from enrichment_tracker.api.deps import get_failed_job_repository
from enrichment_tracker.core.domains import normalize_domain
from enrichment_tracker.repositories import FailedJobRepository

router = APIRouter()


@router.get("")
def list_failed_jobs(
    domain: str | None = Query(None, description="Filter by domain"),
    limit: int = Query(100, ge=1, le=500, description="Maximum entries to return (1-500)"),
    failed: FailedJobRepository = Depends(get_failed_job_repository),
):
    """Failures recorded by the runner, most recent first."""
    items, total = failed.list_failed(
        domain=normalize_domain(domain) if domain else None,
        limit=limit,
    )
    return {"success": True, "items": items, "total": total}
