"""Fact endpoints - list by domain and record review decisions."""

from fastapi import APIRouter, Depends, Query

from enrichment_tracker.api.deps import fact_id_path, get_fact_repository
from enrichment_tracker.core.domains import normalize_domain
from enrichment_tracker.core.exceptions import FactNotFoundError, MissingParameterError
from enrichment_tracker.core.models import FactStatus
from enrichment_tracker.observability.metrics import fact_reviews_counter
from enrichment_tracker.repositories import FactRepository

router = APIRouter()


@router.get("")
def list_facts(
    domain: str | None = Query(None, description="Company domain (required)"),
    facts: FactRepository = Depends(get_fact_repository),
):
    """All facts for a domain, most confident first."""
    if not domain or not domain.strip():
        raise MissingParameterError("domain")
    rows = facts.find_by_domain(normalize_domain(domain))
    return {"facts": rows, "total": len(rows)}


def _review(facts: FactRepository, fact_id: str, status: FactStatus) -> dict:
    fact = facts.set_status(fact_id, status)
    if fact is None:
        raise FactNotFoundError(fact_id)
    fact_reviews_counter.labels(decision=status.value).inc()
    return {"success": True, "fact": fact}


@router.post("/{fact_id}/approve")
def approve_fact(
    fact_id: str = Depends(fact_id_path),
    facts: FactRepository = Depends(get_fact_repository),
):
    return _review(facts, fact_id, FactStatus.APPROVED)


@router.post("/{fact_id}/reject")
def reject_fact(
    fact_id: str = Depends(fact_id_path),
    facts: FactRepository = Depends(get_fact_repository),
):
    return _review(facts, fact_id, FactStatus.REJECTED)
