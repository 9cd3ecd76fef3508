"""Domain models."""

import uuid
from dataclasses import dataclass
from enum import Enum, IntEnum


class JobStatus(str, Enum):
    """Overall status of an enrichment job."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    PARTIAL_SUCCESS = "partial_success"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_JOB_STATUSES


TERMINAL_JOB_STATUSES = frozenset(
    {
        JobStatus.COMPLETED,
        JobStatus.PARTIAL_SUCCESS,
        JobStatus.FAILED,
        JobStatus.CANCELLED,
    }
)

# Statuses from which a job may be queued for the runner again
STARTABLE_JOB_STATUSES = frozenset(
    {JobStatus.PENDING, JobStatus.FAILED, JobStatus.CANCELLED}
)


class StepStatus(str, Enum):
    """Status of a single workflow step."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class FactStatus(str, Enum):
    """Review status of an extracted fact."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Tier(IntEnum):
    """Escalation level the runner used to source a fact."""

    CORPORATE_SITE = 1
    PROFESSIONAL = 2
    NEWS = 3


class LogLevel(str, Enum):
    """Levels accepted by the job_logs table."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    WARNING = "warning"
    ERROR = "error"


class ActivityType(str, Enum):
    """Category of an entry in the live activity feed."""

    CRAWLING = "crawling"
    CHUNKING = "chunking"
    EMBEDDING = "embedding"
    EXTRACTION = "extraction"
    COMPLETED = "completed"
    ERROR = "error"
    PROCESSING = "processing"
    SYSTEM = "system"


@dataclass(frozen=True)
class WorkflowStep:
    """One step of the enrichment workflow and the job columns it owns."""

    id: str
    name: str
    status_column: str
    counter_column: str


WORKFLOW_STEPS: tuple[WorkflowStep, ...] = (
    WorkflowStep("crawling", "Web Crawling", "crawling_status", "pages_crawled"),
    WorkflowStep("chunking", "Text Chunking", "chunking_status", "chunks_created"),
    WorkflowStep("embedding", "Embeddings", "embedding_status", "embeddings_generated"),
    WorkflowStep("extraction", "Fact Extraction", "extraction_status", "facts_extracted"),
)

STEPS_BY_ID = {step.id: step for step in WORKFLOW_STEPS}

# Counter columns the runner may bump through update_progress
PROGRESS_COUNTERS = frozenset(step.counter_column for step in WORKFLOW_STEPS)


def is_uuid(value: str) -> bool:
    """True when ``value`` parses as a UUID; ids are never sent to SQL otherwise."""
    try:
        uuid.UUID(value)
    except (TypeError, ValueError, AttributeError):
        return False
    return True
