"""Analytics repository - developer views over runner-written tables.

The prompt, chunk and embedding tables are created by later migrations and
may be missing on older databases. Callers catch
``psycopg.errors.UndefinedTable`` and fall back to empty payloads.
"""

from typing import Any

from psycopg.rows import dict_row

from enrichment_tracker.repositories.base import BaseRepository


class AnalyticsRepository(BaseRepository):
    """Read-only queries behind the debug, prompts and chunks views."""

    def debug_summary(self, job_id: str) -> dict[str, Any] | None:
        """Job row plus fact count, mean confidence and run duration in ms."""
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT
                        j.*,
                        COUNT(DISTINCT f.id) AS total_facts,
                        AVG(f.confidence_score) AS avg_confidence,
                        EXTRACT(EPOCH FROM (j.completed_at - j.started_at)) * 1000
                            AS total_duration_ms
                    FROM enrichment_jobs j
                    LEFT JOIN enrichment_facts f ON j.id = f.job_id
                    WHERE j.id = %s
                    GROUP BY j.id
                    """,
                    (job_id,),
                )
                return cur.fetchone()

    def step_statuses(self, job_id: str) -> list[dict[str, Any]]:
        """One ``{step_name, status}`` row per workflow step, in order."""
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT step_name, status FROM (
                        SELECT 'crawling' AS step_name, crawling_status AS status, 1 AS sort_order
                        FROM enrichment_jobs WHERE id = %(id)s
                        UNION ALL
                        SELECT 'chunking', chunking_status, 2
                        FROM enrichment_jobs WHERE id = %(id)s
                        UNION ALL
                        SELECT 'embedding', embedding_status, 3
                        FROM enrichment_jobs WHERE id = %(id)s
                        UNION ALL
                        SELECT 'extraction', extraction_status, 4
                        FROM enrichment_jobs WHERE id = %(id)s
                    ) steps
                    ORDER BY sort_order
                    """,
                    {"id": job_id},
                )
                return list(cur.fetchall())

    def recent_logs(self, job_id: str, limit: int = 100) -> list[dict[str, Any]]:
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT level AS log_level, message, details, created_at
                    FROM job_logs
                    WHERE job_id = %s
                    ORDER BY created_at DESC
                    LIMIT %s
                    """,
                    (job_id, limit),
                )
                return list(cur.fetchall())

    def prompts(self, job_id: str) -> list[dict[str, Any]]:
        """Prompts with their model response and the facts they produced."""
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT
                        p.id, p.step_name, p.template_name, p.template_version,
                        p.system_prompt, p.user_prompt, p.rendered_prompt,
                        p.prompt_tokens, p.max_tokens, p.temperature, p.model_name,
                        p.created_at,
                        mr.id AS response_id,
                        mr.response_text,
                        mr.response_tokens,
                        mr.total_tokens,
                        mr.response_time_ms,
                        mr.api_cost_usd,
                        mr.model_version,
                        mr.finish_reason,
                        mr.response_metadata,
                        mr.error_message AS response_error,
                        COUNT(f.id) AS facts_generated,
                        AVG(f.confidence_score) AS avg_fact_confidence
                    FROM enrichment_prompts p
                    LEFT JOIN enrichment_model_responses mr ON p.id = mr.prompt_id
                    LEFT JOIN enrichment_facts f ON p.id = f.prompt_id
                    WHERE p.job_id = %s
                    GROUP BY p.id, mr.id
                    ORDER BY p.created_at ASC
                    """,
                    (job_id,),
                )
                return list(cur.fetchall())

    def prompt_analytics(self, job_id: str) -> list[dict[str, Any]]:
        """Response time, tokens, cost and yield per step and template."""
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT
                        p.step_name,
                        p.template_name,
                        COUNT(p.id) AS prompt_count,
                        AVG(mr.response_time_ms) AS avg_response_time,
                        AVG(mr.total_tokens) AS avg_tokens,
                        SUM(mr.api_cost_usd) AS total_cost,
                        AVG(f.confidence_score) AS avg_confidence,
                        COUNT(f.id) AS total_facts
                    FROM enrichment_prompts p
                    LEFT JOIN enrichment_model_responses mr ON p.id = mr.prompt_id
                    LEFT JOIN enrichment_facts f ON p.id = f.prompt_id
                    WHERE p.job_id = %s
                    GROUP BY p.step_name, p.template_name
                    ORDER BY p.step_name
                    """,
                    (job_id,),
                )
                return list(cur.fetchall())

    def token_usage(self, job_id: str) -> list[dict[str, Any]]:
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT
                        p.step_name,
                        SUM(p.prompt_tokens) AS total_prompt_tokens,
                        SUM(mr.response_tokens) AS total_response_tokens,
                        SUM(mr.total_tokens) AS total_tokens,
                        AVG(p.prompt_tokens) AS avg_prompt_tokens,
                        AVG(mr.response_tokens) AS avg_response_tokens,
                        MAX(p.prompt_tokens) AS max_prompt_tokens,
                        MIN(p.prompt_tokens) AS min_prompt_tokens
                    FROM enrichment_prompts p
                    LEFT JOIN enrichment_model_responses mr ON p.id = mr.prompt_id
                    WHERE p.job_id = %s
                    GROUP BY p.step_name
                    ORDER BY total_tokens DESC NULLS LAST
                    """,
                    (job_id,),
                )
                return list(cur.fetchall())

    def chunks(self, job_id: str, limit: int = 20, offset: int = 0) -> list[dict[str, Any]]:
        """A page of chunks with their embedding and the facts drawn from them."""
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT
                        c.id, c.chunk_index, c.content, c.content_length,
                        c.source_url, c.source_page_title, c.chunk_metadata,
                        c.quality_score, c.created_at,
                        e.id AS embedding_id,
                        e.vector_id,
                        e.embedding_model,
                        e.vector_dimensions,
                        e.embedding_metadata,
                        COUNT(f.id) AS facts_generated,
                        AVG(f.confidence_score) AS avg_fact_confidence,
                        array_agg(f.fact_type) FILTER (WHERE f.fact_type IS NOT NULL)
                            AS fact_types
                    FROM enrichment_chunks c
                    LEFT JOIN enrichment_embeddings e ON c.id = e.chunk_id
                    LEFT JOIN enrichment_facts f ON c.id = f.chunk_id
                    WHERE c.job_id = %s
                    GROUP BY c.id, e.id
                    ORDER BY c.chunk_index ASC
                    LIMIT %s OFFSET %s
                    """,
                    (job_id, limit, offset),
                )
                return list(cur.fetchall())

    def chunk_count(self, job_id: str) -> int:
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    "SELECT COUNT(*) AS total FROM enrichment_chunks WHERE job_id = %s",
                    (job_id,),
                )
                return int(cur.fetchone()["total"])

    def chunk_analytics(self, job_id: str) -> dict[str, Any]:
        """Length and quality distribution across a job's chunks."""
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT
                        COUNT(*) AS total_chunks,
                        AVG(content_length) AS avg_content_length,
                        MAX(content_length) AS max_content_length,
                        MIN(content_length) AS min_content_length,
                        AVG(quality_score) AS avg_quality_score,
                        COUNT(DISTINCT source_url) AS unique_sources,
                        COUNT(*) FILTER (WHERE quality_score >= 0.8) AS high_quality_chunks,
                        COUNT(*) FILTER (WHERE quality_score >= 0.6 AND quality_score < 0.8)
                            AS medium_quality_chunks,
                        COUNT(*) FILTER (WHERE quality_score < 0.6) AS low_quality_chunks
                    FROM enrichment_chunks
                    WHERE job_id = %s
                    """,
                    (job_id,),
                )
                return cur.fetchone()

    def chunk_sources(self, job_id: str) -> list[dict[str, Any]]:
        """Chunk counts and fact yield per crawled page."""
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT
                        c.source_url,
                        c.source_page_title,
                        COUNT(*) AS chunk_count,
                        AVG(c.content_length) AS avg_content_length,
                        AVG(c.quality_score) AS avg_quality_score,
                        SUM(CASE WHEN f.id IS NOT NULL THEN 1 ELSE 0 END) AS facts_generated
                    FROM enrichment_chunks c
                    LEFT JOIN enrichment_facts f ON c.id = f.chunk_id
                    WHERE c.job_id = %s
                    GROUP BY c.source_url, c.source_page_title
                    ORDER BY chunk_count DESC
                    """,
                    (job_id,),
                )
                return list(cur.fetchall())

    def run_totals(self, job_id: str) -> dict[str, Any]:
        """Prompt, model response and chunk totals for the debug summary."""
        with self._get_conn() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT
                        p.total_prompts,
                        r.total_model_responses,
                        r.total_api_cost,
                        r.total_tokens_used,
                        r.avg_response_time,
                        c.avg_chunk_quality
                    FROM
                        (SELECT COUNT(*) AS total_prompts
                         FROM enrichment_prompts WHERE job_id = %(id)s) p,
                        (SELECT COUNT(*) AS total_model_responses,
                                SUM(api_cost_usd) AS total_api_cost,
                                SUM(total_tokens) AS total_tokens_used,
                                AVG(response_time_ms) AS avg_response_time
                         FROM enrichment_model_responses WHERE job_id = %(id)s) r,
                        (SELECT AVG(quality_score) AS avg_chunk_quality
                         FROM enrichment_chunks WHERE job_id = %(id)s) c
                    """,
                    {"id": job_id},
                )
                return cur.fetchone()
