"""Organization and site repositories - curated records for the fact viewer."""

from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from enrichment_tracker.observability.logging import get_logger
from enrichment_tracker.repositories.base import BaseRepository

logger = get_logger(__name__)

_ORGANIZATION_COLUMNS = """
    organization_id, company_name, website, headquarters_address,
    industry_sectors, parent_company, subsidiaries, last_verified_date
"""

_SITE_LIST_COLUMNS = ("certifications", "major_products")
_SITE_COLUMNS = (
    "organization_id",
    "site_name",
    "address",
    "city",
    "state_province",
    "country",
    "postal_code",
    "geo_coordinates",
    "site_type",
    "site_purpose",
    "certifications",
    "operating_status",
    "production_capacity",
    "employee_count",
    "major_products",
    "evidence_text",
    "source",
    "confidence_score",
    "enrichment_job_id",
)


class OrganizationRepository(BaseRepository):
    """Reads and writes the organizations table."""

    def create(
        self,
        company_name: str,
        website: str | None = None,
        headquarters_address: str | None = None,
        industry_sectors: list[str] | None = None,
        parent_company: str | None = None,
        subsidiaries: list[str] | None = None,
    ) -> dict[str, Any]:
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO organizations (
                        company_name, website, headquarters_address,
                        industry_sectors, parent_company, subsidiaries
                    )
                    VALUES (%s, %s, %s, %s, %s, %s)
                    RETURNING {_ORGANIZATION_COLUMNS}
                    """,
                    (
                        company_name,
                        website,
                        headquarters_address,
                        Jsonb(industry_sectors or []),
                        parent_company,
                        Jsonb(subsidiaries or []),
                    ),
                )
                row = cur.fetchone()
                conn.commit()

        logger.info(
            "organization_created",
            organization_id=str(row["organization_id"]),
            company_name=company_name,
        )
        return row

    def get(self, organization_id: str) -> dict[str, Any] | None:
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_ORGANIZATION_COLUMNS} FROM organizations WHERE organization_id = %s",
                    (organization_id,),
                )
                return cur.fetchone()

    def find_by_domain(self, domain: str) -> dict[str, Any] | None:
        """Organization whose website mentions ``domain``.

        A plain ``domain`` match ranks ahead of ``www.domain`` which ranks
        ahead of ``scheme://domain``.
        """
        patterns = (f"%{domain}%", f"%www.{domain}%", f"%://{domain}%")
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_ORGANIZATION_COLUMNS}
                    FROM organizations
                    WHERE website ILIKE %(plain)s
                       OR website ILIKE %(www)s
                       OR website ILIKE %(scheme)s
                    ORDER BY
                        CASE
                            WHEN website ILIKE %(plain)s THEN 1
                            WHEN website ILIKE %(www)s THEN 2
                            ELSE 3
                        END,
                        last_verified_date DESC
                    LIMIT 1
                    """,
                    dict(zip(("plain", "www", "scheme"), patterns)),
                )
                return cur.fetchone()


class SiteRepository(BaseRepository):
    """Reads and writes the sites table."""

    def create(self, site: dict[str, Any]) -> dict[str, Any]:
        """Insert a site; ``site_name``, ``evidence_text`` and ``source`` are required."""
        values = []
        for column in _SITE_COLUMNS:
            value = site.get(column)
            if column in _SITE_LIST_COLUMNS:
                value = Jsonb(value or [])
            elif column == "geo_coordinates" and value is not None:
                value = Jsonb(value)
            values.append(value)
        placeholders = ", ".join(["%s"] * len(_SITE_COLUMNS))
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO sites ({", ".join(_SITE_COLUMNS)})
                    VALUES ({placeholders})
                    RETURNING *
                    """,
                    values,
                )
                row = cur.fetchone()
                conn.commit()
        return row

    def find_by_organization(self, organization_id: str) -> list[dict[str, Any]]:
        """An organization's sites, most confident first."""
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT * FROM sites
                    WHERE organization_id = %s
                    ORDER BY confidence_score DESC NULLS LAST, site_name
                    """,
                    (organization_id,),
                )
                return list(cur.fetchall())
