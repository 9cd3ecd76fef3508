"""FastAPI dependencies - repository factories and id parsing.

Routers receive repositories through ``Depends`` so tests can swap them
with ``app.dependency_overrides``.
"""

from fastapi import Path

from enrichment_tracker.core.exceptions import FactNotFoundError, JobNotFoundError
from enrichment_tracker.core.models import is_uuid
from enrichment_tracker.repositories import (
    AnalyticsRepository,
    FactRepository,
    FailedJobRepository,
    JobRepository,
    OrganizationRepository,
    SiteRepository,
)


def get_job_repository() -> JobRepository:
    return JobRepository()


def get_fact_repository() -> FactRepository:
    return FactRepository()


def get_analytics_repository() -> AnalyticsRepository:
    return AnalyticsRepository()


def get_failed_job_repository() -> FailedJobRepository:
    return FailedJobRepository()


def get_organization_repository() -> OrganizationRepository:
    return OrganizationRepository()


def get_site_repository() -> SiteRepository:
    return SiteRepository()


def job_id_path(job_id: str = Path(..., description="Enrichment job ID")) -> str:
    """Path job id; anything that is not a UUID is an unknown job."""
    if not is_uuid(job_id):
        raise JobNotFoundError(job_id)
    return job_id


def fact_id_path(fact_id: str = Path(..., description="Fact ID")) -> str:
    if not is_uuid(fact_id):
        raise FactNotFoundError(fact_id)
    return fact_id


def require_job(jobs: JobRepository, job_id: str) -> dict:
    """Fetch a job or raise ``JobNotFoundError``."""
    job = jobs.get(job_id)
    if job is None:
        raise JobNotFoundError(job_id)
    return job
