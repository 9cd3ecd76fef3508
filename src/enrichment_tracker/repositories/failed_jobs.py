"""Failed job repository - the dead letter table written by log_error."""

from typing import Any

from psycopg.rows import dict_row

from enrichment_tracker.repositories.base import BaseRepository, to_int


class FailedJobRepository(BaseRepository):
    """Read access to failed_jobs."""

    def list_failed(
        self, domain: str | None = None, limit: int = 100
    ) -> tuple[list[dict[str, Any]], int]:
        """Most recent failures first, with the total matching count."""
        where = "WHERE domain = %s" if domain else ""
        params: list[Any] = [domain] if domain else []

        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(f"SELECT COUNT(*) AS total FROM failed_jobs {where}", params)
                total = to_int(cur.fetchone()["total"])

                cur.execute(
                    f"""
                    SELECT id, original_job_id, domain, failure_step, error_message,
                           error_details, failed_at, retry_attempted, retry_count
                    FROM failed_jobs
                    {where}
                    ORDER BY failed_at DESC
                    LIMIT %s
                    """,
                    [*params, limit],
                )
                return list(cur.fetchall()), total

    def get(self, failed_job_id: str) -> dict[str, Any] | None:
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute("SELECT * FROM failed_jobs WHERE id = %s", (failed_job_id,))
                return cur.fetchone()
