"""Live job metrics estimated from the job row alone.

The runner does not report token counts or memory, so these are rough
estimates driven by the number of extracted facts.
"""

from datetime import datetime
from typing import Any

from enrichment_tracker.core.models import JobStatus
from enrichment_tracker.core.time import as_utc, utc_now

TOKENS_PER_FACT = 150
COST_PER_TOKEN_USD = 0.00002
BASE_MEMORY_MB = 30
MEMORY_PER_FACT_MB = 0.5
MIN_MEMORY_MB = 50


def _metric(value: float, unit: str, trend: str) -> dict[str, Any]:
    return {"value": value, "unit": unit, "trend": trend}


def elapsed_seconds(job: dict[str, Any], now: datetime | None = None) -> int:
    """Whole seconds since the job started (or was created)."""
    start = job.get("started_at") or job.get("created_at")
    if start is None:
        return 0
    now = now or utc_now()
    return max(0, int((now - as_utc(start)).total_seconds()))


def completion_percentage(status: str, facts: int) -> int:
    if status == JobStatus.COMPLETED.value:
        return 100
    if status == JobStatus.RUNNING.value:
        return min(90, facts * 10)
    return 0


def compute_job_metrics(job: dict[str, Any], now: datetime | None = None) -> dict[str, Any]:
    """Processing speed, cost, tokens, completion, memory and elapsed time."""
    status = job.get("status")
    facts = job.get("facts_extracted") or 0
    pages = job.get("pages_scraped") or 0
    elapsed = elapsed_seconds(job, now)

    speed = pages / (elapsed / 60) if elapsed > 0 else 0.0
    tokens = facts * TOKENS_PER_FACT
    cost = tokens * COST_PER_TOKEN_USD
    memory = max(MIN_MEMORY_MB, facts * MEMORY_PER_FACT_MB + BASE_MEMORY_MB)
    live_trend = "up" if status == JobStatus.RUNNING.value else "stable"

    return {
        "processingSpeed": _metric(round(speed, 1), "pages/min", "stable"),
        "apiCost": _metric(cost, "USD", "up"),
        "tokenUsage": _metric(tokens, "tokens", "up"),
        "completionPercentage": _metric(completion_percentage(status, facts), "%", live_trend),
        "memoryUsage": _metric(round(memory), "MB", "stable"),
        "elapsedTime": _metric(elapsed, "seconds", live_trend),
    }
