"""Raw-SQL repositories over the enrichment schema."""

from enrichment_tracker.repositories.analytics import AnalyticsRepository
from enrichment_tracker.repositories.facts import FactRepository
from enrichment_tracker.repositories.failed_jobs import FailedJobRepository
from enrichment_tracker.repositories.jobs import JobRepository
from enrichment_tracker.repositories.organizations import OrganizationRepository, SiteRepository

__all__ = [
    "AnalyticsRepository",
    "FactRepository",
    "FailedJobRepository",
    "JobRepository",
    "OrganizationRepository",
    "SiteRepository",
]
