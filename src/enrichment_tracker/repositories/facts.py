"""Fact repository - enrichment_facts reads, review decisions and stats."""

from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from enrichment_tracker.core.models import FactStatus, Tier
from enrichment_tracker.observability.logging import get_logger
from enrichment_tracker.repositories.base import BaseRepository, to_float, to_int

logger = get_logger(__name__)

_INSERT_FACT = """
    INSERT INTO enrichment_facts (
        job_id, fact_type, fact_data, confidence_score, source_url,
        source_text, embedding_id, validated, validation_notes, tier_used
    ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
    RETURNING *
"""


def _fact_params(fact: dict[str, Any]) -> tuple:
    return (
        fact["job_id"],
        fact["fact_type"],
        Jsonb(fact.get("fact_data") or {}),
        fact["confidence_score"],
        fact.get("source_url"),
        fact.get("source_text"),
        fact.get("embedding_id"),
        bool(fact.get("validated", False)),
        fact.get("validation_notes"),
        fact.get("tier_used"),
    )


class FactRepository(BaseRepository):
    """Reads and reviews extracted facts."""

    def create(self, fact: dict[str, Any]) -> dict[str, Any]:
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(_INSERT_FACT, _fact_params(fact))
                row = cur.fetchone()
                conn.commit()
        return row

    def create_batch(self, facts: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Insert several facts; all of them or none are stored."""
        if not facts:
            return []

        created = []
        with self._get_conn() as conn:
            with conn.transaction():
                with conn.cursor(row_factory=dict_row) as cur:
                    for fact in facts:
                        cur.execute(_INSERT_FACT, _fact_params(fact))
                        created.append(cur.fetchone())
        return created

    def get(self, fact_id: str) -> dict[str, Any] | None:
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute("SELECT * FROM enrichment_facts WHERE id = %s", (fact_id,))
                return cur.fetchone()

    def find_by_job(self, job_id: str) -> list[dict[str, Any]]:
        """Facts for a job, most confident first."""
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT * FROM enrichment_facts
                    WHERE job_id = %s
                    ORDER BY confidence_score DESC, created_at DESC
                    """,
                    (job_id,),
                )
                return list(cur.fetchall())

    def find_by_domain(self, domain: str) -> list[dict[str, Any]]:
        """Facts from every job run against ``domain``."""
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT
                        f.id, f.job_id, f.fact_type, f.fact_data, f.confidence_score,
                        f.source_text, f.source_url, f.validated, f.validation_notes,
                        f.embedding_id, f.status, f.tier_used, f.created_at,
                        j.domain, j.status AS job_status
                    FROM enrichment_facts f
                    JOIN enrichment_jobs j ON f.job_id = j.id
                    WHERE j.domain = %s
                    ORDER BY f.confidence_score DESC, f.created_at DESC
                    """,
                    (domain,),
                )
                return list(cur.fetchall())

    def find_by_type(self, fact_type: str, limit: int = 100) -> list[dict[str, Any]]:
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT * FROM enrichment_facts
                    WHERE fact_type = %s
                    ORDER BY confidence_score DESC, created_at DESC
                    LIMIT %s
                    """,
                    (fact_type, limit),
                )
                return list(cur.fetchall())

    def find_by_confidence_threshold(
        self, threshold: float, limit: int = 100
    ) -> list[dict[str, Any]]:
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT * FROM enrichment_facts
                    WHERE confidence_score >= %s
                    ORDER BY confidence_score DESC, created_at DESC
                    LIMIT %s
                    """,
                    (threshold, limit),
                )
                return list(cur.fetchall())

    def find_by_tier(self, tier: Tier, limit: int = 100) -> list[dict[str, Any]]:
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT * FROM enrichment_facts
                    WHERE tier_used = %s
                    ORDER BY confidence_score DESC, created_at DESC
                    LIMIT %s
                    """,
                    (int(Tier(tier)), limit),
                )
                return list(cur.fetchall())

    def search(self, term: str, limit: int = 50) -> list[dict[str, Any]]:
        """Case-insensitive substring search over source text and fact data."""
        pattern = f"%{term}%"
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT * FROM enrichment_facts
                    WHERE source_text ILIKE %s OR fact_data::text ILIKE %s
                    ORDER BY confidence_score DESC, created_at DESC
                    LIMIT %s
                    """,
                    (pattern, pattern, limit),
                )
                return list(cur.fetchall())

    def set_status(self, fact_id: str, status: FactStatus) -> dict[str, Any] | None:
        """Record a review decision. Returns None for an unknown fact."""
        status = FactStatus(status)
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    "UPDATE enrichment_facts SET status = %s WHERE id = %s RETURNING *",
                    (status.value, fact_id),
                )
                row = cur.fetchone()
                conn.commit()

        if row is not None:
            logger.info("fact_reviewed", fact_id=str(fact_id), status=status.value)
        return row

    def update_validation(
        self, fact_id: str, validated: bool, notes: str | None = None
    ) -> bool:
        with self._get_conn() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE enrichment_facts
                    SET validated = %s, validation_notes = %s
                    WHERE id = %s
                    """,
                    (validated, notes, fact_id),
                )
                updated = cur.rowcount > 0
                conn.commit()
        return updated

    def delete(self, fact_id: str) -> bool:
        with self._get_conn() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM enrichment_facts WHERE id = %s", (fact_id,))
                deleted = cur.rowcount > 0
                conn.commit()
        return deleted

    def job_statistics(self, job_id: str) -> dict[str, Any]:
        """Fact counts, review breakdown and type distribution for one job."""
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT
                        COUNT(*) AS total_facts,
                        COUNT(*) FILTER (WHERE validated) AS validated_facts,
                        COUNT(*) FILTER (WHERE status = 'approved') AS approved_facts,
                        COUNT(*) FILTER (WHERE status = 'rejected') AS rejected_facts,
                        COUNT(*) FILTER (WHERE status = 'pending') AS pending_facts,
                        AVG(confidence_score) AS avg_confidence
                    FROM enrichment_facts
                    WHERE job_id = %s
                    """,
                    (job_id,),
                )
                stats = cur.fetchone()

                cur.execute(
                    """
                    SELECT fact_type, COUNT(*) AS count
                    FROM enrichment_facts
                    WHERE job_id = %s
                    GROUP BY fact_type
                    ORDER BY count DESC
                    """,
                    (job_id,),
                )
                fact_types = {row["fact_type"]: to_int(row["count"]) for row in cur.fetchall()}

        return {
            "total_facts": to_int(stats["total_facts"]),
            "validated_facts": to_int(stats["validated_facts"]),
            "approved_facts": to_int(stats["approved_facts"]),
            "rejected_facts": to_int(stats["rejected_facts"]),
            "pending_facts": to_int(stats["pending_facts"]),
            "fact_types": fact_types,
            "avg_confidence": to_float(stats["avg_confidence"]),
        }

    def tier_statistics(self, job_id: str) -> dict[str, Any]:
        """Fact count and mean confidence per tier for one job."""
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT tier_used, COUNT(*) AS count, AVG(confidence_score) AS avg_confidence
                    FROM enrichment_facts
                    WHERE job_id = %s AND tier_used IS NOT NULL
                    GROUP BY tier_used
                    ORDER BY tier_used
                    """,
                    (job_id,),
                )
                rows = cur.fetchall()

        return {
            "tier_distribution": {int(row["tier_used"]): to_int(row["count"]) for row in rows},
            "tier_confidence": {
                int(row["tier_used"]): to_float(row["avg_confidence"]) for row in rows
            },
        }
