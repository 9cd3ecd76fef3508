"""Live activity feed built from job logs."""

from typing import Any

from enrichment_tracker.core.models import ActivityType, JobStatus
from enrichment_tracker.core.time import isoformat

# Checked in order; the first keyword found in the message wins.
_KEYWORD_TYPES: tuple[tuple[tuple[str, ...], ActivityType], ...] = (
    (("crawl",), ActivityType.CRAWLING),
    (("chunk",), ActivityType.CHUNKING),
    (("embed",), ActivityType.EMBEDDING),
    (("extract", "fact"), ActivityType.EXTRACTION),
    (("completed", "finished"), ActivityType.COMPLETED),
)


def classify_activity(message: str | None, level: str | None) -> ActivityType:
    """Pick an activity type from a log message and level."""
    lowered = (message or "").lower()
    for keywords, activity_type in _KEYWORD_TYPES:
        if any(keyword in lowered for keyword in keywords):
            return activity_type
    if level == "error":
        return ActivityType.ERROR
    return ActivityType.PROCESSING


def _details_text(log: dict[str, Any]) -> str:
    details = log.get("details")
    if isinstance(details, dict) and details.get("message"):
        return details["message"]
    return log.get("message") or ""


def build_activity_feed(
    job: dict[str, Any], logs: list[dict[str, Any]]
) -> list[dict[str, Any]]:
    """Turn newest-first job logs into an oldest-first activity feed.

    A running job with no logs yet gets a single synthetic system entry so
    the feed is never blank while work is in progress.
    """
    activities = [
        {
            "id": str(log["id"]),
            "timestamp": isoformat(log.get("created_at")),
            "type": classify_activity(log.get("message"), log.get("level")).value,
            "message": log.get("message"),
            "details": _details_text(log),
            "level": log.get("level"),
        }
        for log in logs
    ]

    if not activities and job.get("status") == JobStatus.RUNNING.value:
        activities.append(
            {
                "id": "init",
                "timestamp": isoformat(job.get("started_at") or job.get("created_at")),
                "type": ActivityType.SYSTEM.value,
                "message": f"Job started for {job['domain']}",
                "details": "Enrichment job initialized",
                "level": "info",
            }
        )

    activities.reverse()
    return activities
