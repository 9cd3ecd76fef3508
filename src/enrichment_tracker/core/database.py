"""Database connection pool and migration management using psycopg3."""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import psycopg
from psycopg import sql
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from enrichment_tracker.core.settings import get_settings
from enrichment_tracker.observability.logging import get_logger

logger = get_logger(__name__)

_pool: ConnectionPool | None = None


def init_pool() -> ConnectionPool:
    """Initialize the connection pool."""
    global _pool
    if _pool is not None:
        return _pool

    settings = get_settings()
    _pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        timeout=settings.db_pool_timeout,
        kwargs={"row_factory": dict_row},
        open=True,
    )
    logger.info(
        "db_pool_opened",
        host=settings.database_host,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
    )
    return _pool


def get_pool() -> ConnectionPool:
    """Get the connection pool, initializing if needed."""
    if _pool is None:
        return init_pool()
    return _pool


def close_pool() -> None:
    """Close the connection pool."""
    global _pool
    if _pool is not None:
        _pool.close()
        _pool = None
        logger.info("db_pool_closed")


@contextmanager
def get_connection() -> Iterator[psycopg.Connection]:
    """Get a connection from the pool.

    The connection goes back to the pool when the block exits, whether it
    exits normally or with an exception.
    """
    with get_pool().connection() as conn:
        yield conn


@contextmanager
def transaction() -> Iterator[psycopg.Connection]:
    """Context manager for a pooled connection inside a transaction."""
    with get_connection() as conn:
        with conn.transaction():
            yield conn


def default_migrations_dir() -> Path:
    """Locate the migrations directory shipped with the repository."""
    migrations_dir = Path(__file__).resolve().parents[3] / "migrations"
    if not migrations_dir.exists():
        migrations_dir = Path("migrations")
    return migrations_dir


def apply_migrations(conn: psycopg.Connection, migrations_dir: Path) -> list[str]:
    """Apply pending ``*.sql`` files in name order.

    Returns:
        Names of the migration files applied by this call.
    """
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS _migrations (
            name TEXT PRIMARY KEY,
            applied_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
        """
    )
    conn.commit()

    result = conn.execute("SELECT name FROM _migrations")
    applied = {row["name"] for row in result.fetchall()}

    newly_applied = []
    for migration_file in sorted(migrations_dir.glob("*.sql")):
        if migration_file.name in applied:
            logger.debug("migration_already_applied", filename=migration_file.name)
            continue

        logger.info("applying_migration", filename=migration_file.name)
        try:
            conn.execute(migration_file.read_text())
            conn.execute(
                "INSERT INTO _migrations (name) VALUES (%s)",
                (migration_file.name,),
            )
            conn.commit()
        except psycopg.Error:
            conn.rollback()
            logger.exception("migration_failed", filename=migration_file.name)
            raise

        newly_applied.append(migration_file.name)
        logger.info("migration_applied", filename=migration_file.name)

    return newly_applied


def applied_migrations(conn: psycopg.Connection) -> list[str]:
    """List applied migrations, oldest first (empty if never migrated)."""
    exists = conn.execute("SELECT to_regclass('public._migrations') AS tbl").fetchone()
    if exists is None or exists["tbl"] is None:
        return []
    result = conn.execute("SELECT name FROM _migrations ORDER BY name")
    return [row["name"] for row in result.fetchall()]


def init_db(migrations_dir: Path | None = None) -> list[str]:
    """Initialize database schema by applying pending migrations."""
    migrations_dir = migrations_dir or default_migrations_dir()
    if not migrations_dir.exists():
        raise FileNotFoundError(f"Migrations directory not found: {migrations_dir}")

    with get_connection() as conn:
        return apply_migrations(conn, migrations_dir)


def reset_db() -> int:
    """Drop every table in the public schema."""
    with get_connection() as conn:
        result = conn.execute(
            "SELECT tablename FROM pg_tables WHERE schemaname = 'public'"
        )
        tables = [row["tablename"] for row in result.fetchall()]

        for table in tables:
            conn.execute(
                sql.SQL("DROP TABLE IF EXISTS {} CASCADE").format(
                    sql.Identifier(table)
                )
            )
        conn.commit()

    logger.info("database_reset", tables_dropped=len(tables))
    return len(tables)


def ping() -> None:
    """Run a trivial query; raises if the database is unreachable."""
    with get_connection() as conn:
        conn.execute("SELECT 1")


def reset_pool() -> None:
    """Reset the pool (for testing)."""
    global _pool
    if _pool is not None:
        _pool.close()
    _pool = None
