"""Live and developer views of a single job.

Activity, metrics and pipeline are derived from the job row and its logs.
Debug, prompts and chunks read the runner's analytics tables and fall back
to empty payloads on databases that do not have them yet.
"""

import math
from typing import Any

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from psycopg import errors as pg_errors

from enrichment_tracker.api.deps import (
    get_analytics_repository,
    get_job_repository,
    job_id_path,
    require_job,
)
from enrichment_tracker.core.exceptions import JobNotFoundError
from enrichment_tracker.core.models import is_uuid
from enrichment_tracker.core.time import utc_now
from enrichment_tracker.observability.logging import get_logger
from enrichment_tracker.repositories import AnalyticsRepository, JobRepository
from enrichment_tracker.repositories.base import to_float, to_int
from enrichment_tracker.services.activity import build_activity_feed
from enrichment_tracker.services.metrics import compute_job_metrics
from enrichment_tracker.services.pipeline import build_pipeline_steps

router = APIRouter()
logger = get_logger(__name__)

ACTIVITY_LOG_LIMIT = 50
DEBUG_LOG_LIMIT = 100


@router.get("/{job_id}/activity")
def job_activity(job_id: str, jobs: JobRepository = Depends(get_job_repository)):
    """Activity feed, oldest first."""
    job = jobs.get(job_id) if is_uuid(job_id) else None
    if job is None:
        return JSONResponse(
            status_code=404, content={"success": False, "message": "Job not found"}
        )
    logs = jobs.get_logs(job_id, limit=ACTIVITY_LOG_LIMIT)
    return {"success": True, "activities": build_activity_feed(job, logs)}


@router.get("/{job_id}/metrics")
def job_metrics(
    job_id: str = Depends(job_id_path),
    jobs: JobRepository = Depends(get_job_repository),
):
    """Estimated live metrics for a job."""
    job = require_job(jobs, job_id)
    now = utc_now()
    return {
        "success": True,
        "metrics": compute_job_metrics(job, now),
        "timestamp": now.isoformat(),
    }


@router.get("/{job_id}/pipeline")
def job_pipeline(
    job_id: str = Depends(job_id_path),
    jobs: JobRepository = Depends(get_job_repository),
):
    """Per-step progress, quality and bottleneck flags."""
    job = require_job(jobs, job_id)
    return {
        "success": True,
        "steps": build_pipeline_steps(job),
        "timestamp": utc_now().isoformat(),
    }


def _empty_debug() -> dict[str, Any]:
    return {
        "job": None,
        "steps": [],
        "logs": [],
        "metrics": [],
        "errors": [],
        "summary": _debug_summary({}, {}),
    }


def _debug_summary(job: dict[str, Any], totals: dict[str, Any]) -> dict[str, Any]:
    return {
        "total_chunks": to_int(job.get("chunks_created")),
        "total_embeddings": to_int(job.get("embeddings_generated")),
        "total_facts": to_int(job.get("total_facts")),
        "total_prompts": to_int(totals.get("total_prompts")),
        "total_model_responses": to_int(totals.get("total_model_responses")),
        "avg_confidence": to_float(job.get("avg_confidence")),
        "avg_chunk_quality": to_float(totals.get("avg_chunk_quality")),
        "total_api_cost": to_float(totals.get("total_api_cost")),
        "total_tokens_used": to_int(totals.get("total_tokens_used")),
        "avg_response_time": to_float(totals.get("avg_response_time")),
        "total_duration_ms": to_float(job.get("total_duration_ms")),
    }


@router.get("/{job_id}/debug")
def job_debug(
    job_id: str = Depends(job_id_path),
    analytics: AnalyticsRepository = Depends(get_analytics_repository),
):
    """Job row with aggregates, step states and the latest 100 log lines."""
    try:
        job = analytics.debug_summary(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        steps = analytics.step_statuses(job_id)
        logs = analytics.recent_logs(job_id, DEBUG_LOG_LIMIT)
    except pg_errors.UndefinedTable as e:
        logger.warning("debug_tables_missing", job_id=job_id, error=str(e))
        return _empty_debug()

    try:
        totals = analytics.run_totals(job_id) or {}
    except pg_errors.UndefinedTable as e:
        logger.warning("run_analytics_tables_missing", job_id=job_id, error=str(e))
        totals = {}

    return {
        "job": job,
        "steps": steps,
        "logs": logs,
        "metrics": [],
        "errors": [],
        "summary": _debug_summary(job, totals),
    }


def _prompt_summary(prompts: list[dict[str, Any]]) -> dict[str, Any]:
    count = len(prompts)
    response_time = sum(to_float(p.get("response_time_ms")) for p in prompts)
    return {
        "total_prompts": count,
        "total_cost": sum(to_float(p.get("api_cost_usd")) for p in prompts),
        "total_tokens": sum(to_int(p.get("total_tokens")) for p in prompts),
        "avg_response_time": response_time / count if count else 0,
    }


@router.get("/{job_id}/prompts")
def job_prompts(
    job_id: str = Depends(job_id_path),
    analytics: AnalyticsRepository = Depends(get_analytics_repository),
):
    """Prompts sent for a job, their responses, cost and token usage."""
    try:
        prompts = analytics.prompts(job_id)
        prompt_analytics = analytics.prompt_analytics(job_id)
        token_usage = analytics.token_usage(job_id)
    except pg_errors.UndefinedTable as e:
        logger.warning("prompt_tables_missing", job_id=job_id, error=str(e))
        prompts, prompt_analytics, token_usage = [], [], []

    return {
        "prompts": prompts,
        "analytics": prompt_analytics,
        "tokenUsage": token_usage,
        "summary": _prompt_summary(prompts),
    }


def _pagination(page: int, limit: int, total: int) -> dict[str, Any]:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": math.ceil(total / limit),
        "hasNext": page * limit < total,
        "hasPrev": page > 1,
    }


@router.get("/{job_id}/chunks")
def job_chunks(
    job_id: str = Depends(job_id_path),
    page: int = Query(1, ge=1, description="Page number, starting at 1"),
    limit: int = Query(20, ge=1, le=100, description="Chunks per page (1-100)"),
    analytics: AnalyticsRepository = Depends(get_analytics_repository),
):
    """A page of chunks with chunk quality analytics and per-source counts."""
    offset = (page - 1) * limit
    try:
        chunks = analytics.chunks(job_id, limit=limit, offset=offset)
        total = analytics.chunk_count(job_id)
        chunk_analytics = analytics.chunk_analytics(job_id)
        sources = analytics.chunk_sources(job_id)
    except pg_errors.UndefinedTable as e:
        logger.warning("chunk_tables_missing", job_id=job_id, error=str(e))
        chunks, total, chunk_analytics, sources = [], 0, {}, []

    return {
        "chunks": chunks,
        "pagination": _pagination(page, limit, total),
        "analytics": chunk_analytics,
        "sources": sources,
    }
