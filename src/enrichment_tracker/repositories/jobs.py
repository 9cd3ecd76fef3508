"""Job repository - enrichment_jobs, job_logs and the failure path."""

from typing import Any

from psycopg import sql
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from enrichment_tracker.core.exceptions import InvalidStateError, JobNotFoundError
from enrichment_tracker.core.models import (
    PROGRESS_COUNTERS,
    STARTABLE_JOB_STATUSES,
    STEPS_BY_ID,
    TERMINAL_JOB_STATUSES,
    JobStatus,
    LogLevel,
    StepStatus,
)
from enrichment_tracker.core.time import utc_now
from enrichment_tracker.observability.logging import get_logger
from enrichment_tracker.repositories.base import BaseRepository, to_float, to_int

logger = get_logger(__name__)


class JobRepository(BaseRepository):
    """Reads and writes enrichment jobs and their logs."""

    def create(
        self,
        domain: str,
        metadata: dict[str, Any] | None = None,
        llm_used: str | None = None,
    ) -> dict[str, Any]:
        """Insert a pending job and return the stored row."""
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    INSERT INTO enrichment_jobs (domain, status, metadata, llm_used)
                    VALUES (%s, %s, %s, %s)
                    RETURNING *
                    """,
                    (domain, JobStatus.PENDING.value, Jsonb(metadata or {}), llm_used),
                )
                row = cur.fetchone()
                conn.commit()

        logger.info("job_created", job_id=str(row["id"]), domain=domain)
        return row

    def get(self, job_id: str) -> dict[str, Any] | None:
        """Get job by ID."""
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute("SELECT * FROM enrichment_jobs WHERE id = %s", (job_id,))
                return cur.fetchone()

    def list_jobs(
        self,
        status: JobStatus | None = None,
        domain: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[dict[str, Any]], int]:
        """List jobs newest first with the total matching count."""
        conditions = []
        params: list[Any] = []
        if status is not None:
            conditions.append("status = %s")
            params.append(JobStatus(status).value)
        if domain:
            conditions.append("domain = %s")
            params.append(domain)
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT COUNT(*) AS total FROM enrichment_jobs {where}",
                    params,
                )
                total = to_int(cur.fetchone()["total"])

                cur.execute(
                    f"""
                    SELECT * FROM enrichment_jobs
                    {where}
                    ORDER BY created_at DESC
                    LIMIT %s OFFSET %s
                    """,
                    [*params, limit, offset],
                )
                return list(cur.fetchall()), total

    def find_by_domain(self, domain: str) -> list[dict[str, Any]]:
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT * FROM enrichment_jobs
                    WHERE domain = %s
                    ORDER BY created_at DESC
                    """,
                    (domain,),
                )
                return list(cur.fetchall())

    def find_by_status(self, status: JobStatus, limit: int = 100) -> list[dict[str, Any]]:
        """Jobs in ``status``, oldest first (the order a runner picks them up)."""
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT * FROM enrichment_jobs
                    WHERE status = %s
                    ORDER BY created_at ASC
                    LIMIT %s
                    """,
                    (JobStatus(status).value, limit),
                )
                return list(cur.fetchall())

    def update_status(self, job_id: str, status: JobStatus) -> bool:
        """Set the job status, stamping started_at or completed_at."""
        status = JobStatus(status)
        assignments = ["status = %s"]
        if status == JobStatus.RUNNING:
            assignments.append("started_at = NOW()")
        elif status in TERMINAL_JOB_STATUSES:
            assignments.append("completed_at = NOW()")

        with self._get_conn() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"UPDATE enrichment_jobs SET {', '.join(assignments)} WHERE id = %s",
                    (status.value, job_id),
                )
                updated = cur.rowcount > 0
                conn.commit()

        logger.info("job_status_updated", job_id=job_id, status=status.value)
        return updated

    def update_step_status(self, job_id: str, step: str, status: StepStatus) -> bool:
        """Set one workflow step's status column."""
        if step not in STEPS_BY_ID:
            raise ValueError(f"Unknown workflow step: {step}")
        column = STEPS_BY_ID[step].status_column

        with self._get_conn() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    sql.SQL("UPDATE enrichment_jobs SET {} = %s WHERE id = %s").format(
                        sql.Identifier(column)
                    ),
                    (StepStatus(status).value, job_id),
                )
                updated = cur.rowcount > 0
                conn.commit()
        return updated

    def update_progress(self, job_id: str, **counters: int) -> bool:
        """Overwrite progress counters, e.g. ``pages_crawled=12``.

        Only the four step counters are accepted. Calling with no counters
        does nothing.
        """
        unknown = set(counters) - PROGRESS_COUNTERS
        if unknown:
            raise ValueError(f"Unknown progress counters: {sorted(unknown)}")
        if not counters:
            return False

        columns = sorted(counters)
        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(column)) for column in columns
        )
        with self._get_conn() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    sql.SQL("UPDATE enrichment_jobs SET {} WHERE id = %s").format(assignments),
                    [*(counters[column] for column in columns), job_id],
                )
                updated = cur.rowcount > 0
                conn.commit()
        return updated

    def update_run_fields(
        self,
        job_id: str,
        llm_used: str | None = None,
        pages_scraped: int | None = None,
        total_runtime_seconds: int | None = None,
    ) -> bool:
        """Record which model ran and how much work it took."""
        fields = {
            "llm_used": llm_used,
            "pages_scraped": pages_scraped,
            "total_runtime_seconds": total_runtime_seconds,
        }
        fields = {name: value for name, value in fields.items() if value is not None}
        if not fields:
            return False

        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(name)) for name in fields
        )
        with self._get_conn() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    sql.SQL("UPDATE enrichment_jobs SET {} WHERE id = %s").format(assignments),
                    [*fields.values(), job_id],
                )
                updated = cur.rowcount > 0
                conn.commit()
        return updated

    def increment_retry_count(self, job_id: str) -> bool:
        with self._get_conn() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "UPDATE enrichment_jobs SET retry_count = retry_count + 1 WHERE id = %s",
                    (job_id,),
                )
                updated = cur.rowcount > 0
                conn.commit()
        return updated

    def log_error(self, job_id: str, error: str, step: str | None = None) -> None:
        """Fail a job, dead-letter it and log the failure in one transaction.

        Raises:
            JobNotFoundError: If the job does not exist. Nothing is written.
        """
        step = step or "unknown"
        details = {
            "timestamp": utc_now().isoformat(),
            "step": step,
            "error_type": "enrichment_failure",
            "job_id": str(job_id),
        }

        with self._get_conn() as conn:
            with conn.transaction():
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        "SELECT domain FROM enrichment_jobs WHERE id = %s FOR UPDATE",
                        (job_id,),
                    )
                    row = cur.fetchone()
                    if row is None:
                        raise JobNotFoundError(str(job_id))

                    cur.execute(
                        """
                        UPDATE enrichment_jobs
                        SET status = %s, error_message = %s
                        WHERE id = %s
                        """,
                        (JobStatus.FAILED.value, error, job_id),
                    )
                    cur.execute(
                        """
                        INSERT INTO failed_jobs (
                            original_job_id, domain, failure_step, error_message,
                            error_details, failed_at, retry_attempted, retry_count
                        ) VALUES (%s, %s, %s, %s, %s, NOW(), FALSE, 0)
                        """,
                        (job_id, row["domain"], step, error, Jsonb(details)),
                    )
                    cur.execute(
                        """
                        INSERT INTO job_logs (job_id, level, message, details)
                        VALUES (%s, %s, %s, %s)
                        """,
                        (
                            job_id,
                            LogLevel.ERROR.value,
                            f"Job failed at step: {step} - {error}",
                            Jsonb(details),
                        ),
                    )

        logger.warning("job_failed", job_id=str(job_id), step=step, error=error)

    def queue_for_start(self, job_id: str) -> dict[str, Any]:
        """Put a pending, failed or cancelled job back in the runner's queue.

        A failed job counts as a retry. Running and completed jobs are left
        alone.

        Raises:
            JobNotFoundError: If the job does not exist.
            InvalidStateError: If the job is not in a startable status.
        """
        with self._get_conn() as conn:
            with conn.transaction():
                with conn.cursor(row_factory=dict_row) as cur:
                    current = self._lock_status(cur, job_id)
                    if current not in STARTABLE_JOB_STATUSES:
                        raise InvalidStateError(str(job_id), current.value, "start")

                    retry_increment = 1 if current == JobStatus.FAILED else 0
                    cur.execute(
                        """
                        UPDATE enrichment_jobs
                        SET status = %s,
                            error_message = NULL,
                            completed_at = NULL,
                            retry_count = retry_count + %s
                        WHERE id = %s
                        RETURNING *
                        """,
                        (JobStatus.PENDING.value, retry_increment, job_id),
                    )
                    job = cur.fetchone()
                    message = (
                        f"Job queued for retry {job['retry_count']}"
                        if retry_increment
                        else "Job queued for enrichment"
                    )
                    self._insert_log(
                        cur, job_id, LogLevel.INFO, message, {"previous_status": current.value}
                    )

        logger.info("job_queued", job_id=str(job_id), previous_status=current.value)
        return job

    def cancel(self, job_id: str) -> dict[str, Any]:
        """Cancel a job that has not reached a terminal status.

        Raises:
            JobNotFoundError: If the job does not exist.
            InvalidStateError: If the job already finished.
        """
        with self._get_conn() as conn:
            with conn.transaction():
                with conn.cursor(row_factory=dict_row) as cur:
                    current = self._lock_status(cur, job_id)
                    if current in TERMINAL_JOB_STATUSES:
                        raise InvalidStateError(str(job_id), current.value, "cancel")

                    cur.execute(
                        """
                        UPDATE enrichment_jobs
                        SET status = %s, completed_at = NOW()
                        WHERE id = %s
                        RETURNING *
                        """,
                        (JobStatus.CANCELLED.value, job_id),
                    )
                    job = cur.fetchone()
                    self._insert_log(
                        cur, job_id, LogLevel.WARN, "Job cancelled", {"previous_status": current.value}
                    )

        logger.info("job_cancelled", job_id=str(job_id), previous_status=current.value)
        return job

    def add_log(
        self,
        job_id: str,
        level: LogLevel,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Append a job_logs row."""
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                row = self._insert_log(cur, job_id, LogLevel(level), message, details)
                conn.commit()
        return row

    def get_logs(self, job_id: str, limit: int = 50, offset: int = 0) -> list[dict[str, Any]]:
        """Logs for a job, newest first."""
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, job_id, level, message, details, created_at
                    FROM job_logs
                    WHERE job_id = %s
                    ORDER BY created_at DESC, id DESC
                    LIMIT %s OFFSET %s
                    """,
                    (job_id, limit, offset),
                )
                return list(cur.fetchall())

    def count_logs(self, job_id: str) -> int:
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    "SELECT COUNT(*) AS total FROM job_logs WHERE job_id = %s",
                    (job_id,),
                )
                return to_int(cur.fetchone()["total"])

    def delete(self, job_id: str) -> bool:
        """Delete a job; logs, facts and analytics rows cascade."""
        with self._get_conn() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM enrichment_jobs WHERE id = %s", (job_id,))
                deleted = cur.rowcount > 0
                conn.commit()

        if deleted:
            logger.info("job_deleted", job_id=str(job_id))
        return deleted

    def get_dashboard_stats(self) -> dict[str, Any]:
        """Counts and rates for the dashboard header."""
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT
                        COUNT(*) AS total_jobs,
                        COUNT(*) FILTER (WHERE status = 'completed') AS completed_jobs,
                        COUNT(*) FILTER (WHERE status = 'running') AS running_jobs,
                        COUNT(*) FILTER (WHERE status = 'failed') AS failed_jobs
                    FROM enrichment_jobs
                    """
                )
                jobs = cur.fetchone()

                cur.execute(
                    """
                    SELECT COUNT(*) AS facts_found, AVG(confidence_score) AS avg_confidence
                    FROM enrichment_facts
                    """
                )
                facts = cur.fetchone()

        total = to_int(jobs["total_jobs"])
        completed = to_int(jobs["completed_jobs"])
        return {
            "total_jobs": total,
            "completed_jobs": completed,
            "running_jobs": to_int(jobs["running_jobs"]),
            "failed_jobs": to_int(jobs["failed_jobs"]),
            "success_rate": round(completed / total * 100, 1) if total else 0.0,
            "avg_confidence": round(to_float(facts["avg_confidence"]), 2),
            "facts_found": to_int(facts["facts_found"]),
        }

    @staticmethod
    def _lock_status(cur, job_id: str) -> JobStatus:
        cur.execute(
            "SELECT status FROM enrichment_jobs WHERE id = %s FOR UPDATE",
            (job_id,),
        )
        row = cur.fetchone()
        if row is None:
            raise JobNotFoundError(str(job_id))
        return JobStatus(row["status"])

    @staticmethod
    def _insert_log(
        cur,
        job_id: str,
        level: LogLevel,
        message: str,
        details: dict[str, Any] | None,
    ) -> dict[str, Any]:
        cur.execute(
            """
            INSERT INTO job_logs (job_id, level, message, details)
            VALUES (%s, %s, %s, %s)
            RETURNING id, job_id, level, message, details, created_at
            """,
            (job_id, level.value, message, Jsonb(details or {})),
        )
        return cur.fetchone()
