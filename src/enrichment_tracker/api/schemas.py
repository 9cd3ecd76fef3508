"""Request and response schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class CreateJobRequest(BaseModel):
    """Request to create an enrichment job."""

    domain: str = Field(..., min_length=1, max_length=255, description="Company domain")
    llm_choice: str | None = Field(None, max_length=50, description="Model the runner should use")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Free-form job metadata")


class JobSchema(BaseModel):
    """An enrichment_jobs row as returned by the API."""

    id: UUID
    domain: str
    status: str
    crawling_status: str | None = None
    chunking_status: str | None = None
    embedding_status: str | None = None
    extraction_status: str | None = None
    pages_crawled: int = 0
    chunks_created: int = 0
    embeddings_generated: int = 0
    facts_extracted: int = 0
    pages_scraped: int = 0
    total_runtime_seconds: int = 0
    llm_used: str | None = None
    retry_count: int = 0
    metadata: dict[str, Any] = Field(default_factory=dict)
    error_message: str | None = None
    created_at: datetime
    updated_at: datetime | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None


def serialize_job(row: dict[str, Any]) -> dict[str, Any]:
    """JSON-ready job dict with NULL counters read as zero."""
    data = {key: value for key, value in row.items() if value is not None}
    return JobSchema.model_validate(data).model_dump(mode="json")


def serialize_log(row: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": str(row["id"]),
        "level": row["level"],
        "message": row["message"],
        "details": row.get("details") or {},
        "timestamp": row["created_at"].isoformat() if row.get("created_at") else None,
    }


def serialize_fact(row: dict[str, Any]) -> dict[str, Any]:
    """Camel-cased fact for the job detail view."""
    confidence = row.get("confidence_score")
    return {
        "id": str(row["id"]),
        "type": row.get("fact_type"),
        "data": row.get("fact_data") or {},
        "confidence": float(confidence) if confidence is not None else None,
        "evidence": row.get("source_text"),
        "sourceUrl": row.get("source_url"),
        "tier": row.get("tier_used"),
        "status": row.get("status"),
        "validated": row.get("validated"),
        "validationNotes": row.get("validation_notes"),
        "createdAt": row["created_at"].isoformat() if row.get("created_at") else None,
    }
