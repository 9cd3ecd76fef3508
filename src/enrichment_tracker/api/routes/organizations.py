"""Organization viewer endpoint."""

from fastapi import APIRouter, Depends
from psycopg import errors as pg_errors

from enrichment_tracker.api.deps import (
    get_fact_repository,
    get_organization_repository,
    get_site_repository,
)
from enrichment_tracker.core.domains import normalize_domain
from enrichment_tracker.core.exceptions import OrganizationNotFoundError
from enrichment_tracker.observability.logging import get_logger
from enrichment_tracker.repositories import FactRepository, OrganizationRepository, SiteRepository
from enrichment_tracker.services.organization import build_organization_profile

router = APIRouter()
logger = get_logger(__name__)


@router.get("/{domain}")
def get_organization(
    domain: str,
    facts: FactRepository = Depends(get_fact_repository),
    organizations: OrganizationRepository = Depends(get_organization_repository),
    sites: SiteRepository = Depends(get_site_repository),
):
    """Organization, sites and people for a domain that has facts.

    A stored organization record supplies the identity and its stored
    sites; otherwise the profile is assembled from the facts alone.
    """
    normalized = normalize_domain(domain)
    rows = facts.find_by_domain(normalized) if normalized else []
    if not rows:
        raise OrganizationNotFoundError(domain)

    try:
        organization = organizations.find_by_domain(normalized)
        stored_sites = (
            sites.find_by_organization(str(organization["organization_id"]))
            if organization
            else []
        )
    except pg_errors.UndefinedTable as e:
        logger.warning("organization_tables_missing", domain=normalized, error=str(e))
        organization, stored_sites = None, []

    return build_organization_profile(
        normalized, rows, organization=organization, stored_sites=stored_sites
    )
