"""Per-step pipeline view and the workflow summary for job details."""

from typing import Any

from enrichment_tracker.core.models import WORKFLOW_STEPS, JobStatus, StepStatus, WorkflowStep

# Minimum items per second of runtime before a running step counts as a bottleneck
BOTTLENECK_RATE_FLOOR = {
    "crawling": 0.1,
    "chunking": 0.5,
    "embedding": 0.3,
    "extraction": 0.1,
}

# Milliseconds per item assumed before a step has processed anything
DEFAULT_PROCESSING_MS = {
    "crawling": 2000,
    "chunking": 500,
    "embedding": 1000,
    "extraction": 3000,
}

# (item-count upper bound, completed score, running score); None means no bound
_QUALITY_BUCKETS: tuple[tuple[int | None, float, float], ...] = (
    (1, 0.5, 0.4),
    (5, 0.6, 0.5),
    (20, 0.75, 0.65),
    (50, 0.85, 0.75),
    (None, 0.9, 0.8),
)


def step_progress(status: str, processed: int, total: int) -> float:
    if status == StepStatus.COMPLETED.value:
        return 100
    if status == StepStatus.RUNNING.value:
        if total == 0:
            return 50
        return min(95, processed / total * 100)
    return 0


def quality_score(status: str, processed: int) -> float:
    if status in (StepStatus.FAILED.value, StepStatus.PENDING.value):
        return 0
    if status not in (StepStatus.COMPLETED.value, StepStatus.RUNNING.value):
        return 0.5
    for bound, completed_score, running_score in _QUALITY_BUCKETS:
        if bound is None or processed < bound:
            return completed_score if status == StepStatus.COMPLETED.value else running_score
    return 0.5


def is_bottleneck(step_id: str, status: str, processed: int, runtime_seconds: int) -> bool:
    """A running step whose throughput is under its floor."""
    if status != StepStatus.RUNNING.value:
        return False
    runtime = runtime_seconds or 1
    return processed / runtime < BOTTLENECK_RATE_FLOOR.get(step_id, 0)


def avg_processing_time_ms(step_id: str, processed: int, runtime_seconds: int) -> float:
    if processed == 0:
        return DEFAULT_PROCESSING_MS.get(step_id, 1000)
    runtime = runtime_seconds or 1
    return runtime * 1000 / processed


def _upstream_total(step: WorkflowStep, job: dict[str, Any]) -> int:
    """Items the step has to get through: pages scraped, then the previous counter."""
    index = WORKFLOW_STEPS.index(step)
    if index == 0:
        return job.get("pages_scraped") or 0
    return job.get(WORKFLOW_STEPS[index - 1].counter_column) or 0


def build_pipeline_steps(job: dict[str, Any]) -> list[dict[str, Any]]:
    """One entry per workflow step with progress, quality and throughput."""
    runtime = job.get("total_runtime_seconds") or 0
    steps = []
    for step in WORKFLOW_STEPS:
        status = job.get(step.status_column) or StepStatus.PENDING.value
        processed = job.get(step.counter_column) or 0
        total = _upstream_total(step, job)
        steps.append(
            {
                "id": step.id,
                "name": step.name,
                "status": status,
                "progress": step_progress(status, processed, total),
                "itemsProcessed": processed,
                "totalItems": max(total, 1),
                "quality": quality_score(status, processed),
                "bottleneck": is_bottleneck(step.id, status, processed, runtime),
                "errors": 0,
                "avgProcessingTime": avg_processing_time_ms(step.id, processed, runtime),
            }
        )
    return steps


def workflow_summary(job: dict[str, Any]) -> dict[str, Any]:
    """Step statuses, current step and progress counters for a job."""
    steps = [
        {"id": step.id, "name": step.name, "status": job.get(step.status_column)}
        for step in WORKFLOW_STEPS
    ]
    running = next(
        (step["id"] for step in steps if step["status"] == StepStatus.RUNNING.value), None
    )
    if running is None:
        running = "completed" if job.get("status") == JobStatus.COMPLETED.value else "pending"

    return {
        "steps": steps,
        "currentStep": running,
        "completedSteps": sum(
            1 for step in steps if step["status"] == StepStatus.COMPLETED.value
        ),
        "totalSteps": len(steps),
        "progress": {
            "pagesCrawled": job.get("pages_crawled") or 0,
            "chunksCreated": job.get("chunks_created") or 0,
            "embeddingsGenerated": job.get("embeddings_generated") or 0,
            "factsExtracted": job.get("facts_extracted") or 0,
        },
    }
