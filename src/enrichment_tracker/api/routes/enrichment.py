"""Enrichment job endpoints - create, list, inspect, delete and lifecycle."""

from fastapi import APIRouter, Depends, Query

from enrichment_tracker.api.deps import (
    get_fact_repository,
    get_job_repository,
    job_id_path,
    require_job,
)
from enrichment_tracker.api.schemas import (
    CreateJobRequest,
    serialize_fact,
    serialize_job,
    serialize_log,
)
from enrichment_tracker.core.domains import normalize_domain, validate_domain
from enrichment_tracker.core.exceptions import InvalidDomainError, JobNotFoundError
from enrichment_tracker.core.models import JobStatus
from enrichment_tracker.core.settings import get_settings
from enrichment_tracker.observability.logging import get_logger
from enrichment_tracker.observability.metrics import (
    job_transitions_counter,
    jobs_created_counter,
    jobs_deleted_counter,
)
from enrichment_tracker.repositories import FactRepository, JobRepository
from enrichment_tracker.services.pipeline import workflow_summary

router = APIRouter()
logger = get_logger(__name__)

DETAIL_LOG_LIMIT = 20


@router.post("", status_code=201)
def create_job(
    request: CreateJobRequest,
    jobs: JobRepository = Depends(get_job_repository),
):
    """Create a pending enrichment job for a company domain.

    The external runner picks pending jobs up; this endpoint only records
    the request.
    """
    domain = normalize_domain(request.domain)
    # "www.com" passes as typed but normalizes to a bare TLD
    if not validate_domain(request.domain) or not validate_domain(domain):
        raise InvalidDomainError(request.domain)

    llm = request.llm_choice or get_settings().default_llm
    job = jobs.create(domain, metadata=request.metadata, llm_used=llm)
    jobs_created_counter.labels(llm=llm).inc()

    logger.info("job_created_via_api", job_id=str(job["id"]), domain=domain, llm=llm)
    return {"success": True, "job": serialize_job(job)}


@router.get("")
def list_jobs(
    status: JobStatus | None = Query(None, description="Filter by job status"),
    domain: str | None = Query(None, description="Filter by domain"),
    limit: int = Query(50, ge=1, le=500, description="Maximum jobs to return (1-500)"),
    offset: int = Query(0, ge=0, description="Pagination offset"),
    jobs: JobRepository = Depends(get_job_repository),
):
    """List jobs newest first."""
    rows, total = jobs.list_jobs(
        status=status,
        domain=normalize_domain(domain) if domain else None,
        limit=limit,
        offset=offset,
    )
    return {"success": True, "jobs": [serialize_job(row) for row in rows], "total": total}


@router.get("/stats")
def dashboard_stats(jobs: JobRepository = Depends(get_job_repository)):
    """Job counts, success rate and fact totals for the dashboard."""
    stats = jobs.get_dashboard_stats()
    return {
        "success": True,
        "stats": {
            "totalJobs": stats["total_jobs"],
            "completedJobs": stats["completed_jobs"],
            "runningJobs": stats["running_jobs"],
            "failedJobs": stats["failed_jobs"],
            "successRate": stats["success_rate"],
            "avgConfidence": stats["avg_confidence"],
            "factsFound": stats["facts_found"],
        },
    }


@router.get("/{job_id}")
def get_job(
    job_id: str = Depends(job_id_path),
    jobs: JobRepository = Depends(get_job_repository),
    facts: FactRepository = Depends(get_fact_repository),
):
    """Job with its workflow state, facts, fact statistics and recent logs."""
    job = require_job(jobs, job_id)
    fact_rows = facts.find_by_job(job_id)
    statistics = {
        **facts.job_statistics(job_id),
        **facts.tier_statistics(job_id),
        "runtime": job.get("total_runtime_seconds") or 0,
        "llmUsed": job.get("llm_used"),
        "pagesScraped": job.get("pages_scraped") or 0,
    }
    logs = jobs.get_logs(job_id, limit=DETAIL_LOG_LIMIT)

    return {
        "job": {**serialize_job(job), "workflow": workflow_summary(job)},
        "facts": [serialize_fact(row) for row in fact_rows],
        "statistics": statistics,
        "logs": [serialize_log(row) for row in logs],
    }


@router.delete("/{job_id}")
def delete_job(
    job_id: str = Depends(job_id_path),
    jobs: JobRepository = Depends(get_job_repository),
):
    """Delete a job together with its logs, facts and analytics rows."""
    if not jobs.delete(job_id):
        raise JobNotFoundError(job_id)
    jobs_deleted_counter.inc()
    return {"success": True, "message": "Job deleted successfully"}


@router.post("/{job_id}/start", status_code=202)
def start_job(
    job_id: str = Depends(job_id_path),
    jobs: JobRepository = Depends(get_job_repository),
):
    """Queue a pending, failed or cancelled job for the runner.

    Returns 409 for a job that is running or already finished successfully.
    """
    job = jobs.queue_for_start(job_id)
    job_transitions_counter.labels(status=JobStatus.PENDING.value).inc()
    return {"success": True, "job": serialize_job(job)}


@router.get("/{job_id}/start")
def start_status(
    job_id: str = Depends(job_id_path),
    jobs: JobRepository = Depends(get_job_repository),
):
    """Current status and step states of a job."""
    job = require_job(jobs, job_id)
    return {
        "success": True,
        "job_id": str(job["id"]),
        "status": job["status"],
        "steps": workflow_summary(job)["steps"],
    }


@router.post("/{job_id}/cancel")
def cancel_job(
    job_id: str = Depends(job_id_path),
    jobs: JobRepository = Depends(get_job_repository),
):
    """Cancel a job that has not finished yet."""
    job = jobs.cancel(job_id)
    job_transitions_counter.labels(status=JobStatus.CANCELLED.value).inc()
    return {"success": True, "job": serialize_job(job)}


@router.get("/{job_id}/logs")
def job_logs(
    job_id: str = Depends(job_id_path),
    limit: int = Query(50, ge=1, le=500, description="Maximum log entries to return"),
    offset: int = Query(0, ge=0, description="Pagination offset"),
    jobs: JobRepository = Depends(get_job_repository),
):
    """Job logs, newest first."""
    require_job(jobs, job_id)
    rows = jobs.get_logs(job_id, limit=limit, offset=offset)
    total = jobs.count_logs(job_id)
    return {
        "success": True,
        "logs": [serialize_log(row) for row in rows],
        "pagination": {
            "limit": limit,
            "offset": offset,
            "total": total,
            "hasMore": offset + len(rows) < total,
        },
    }
