"""Shared plumbing for the raw-SQL repositories."""

from contextlib import contextmanager
from typing import Any, Iterator

import psycopg

from enrichment_tracker.core.database import get_pool


class BaseRepository:
    """Repository that borrows a pooled connection per call.

    Passing ``conn`` pins every call to that connection, which is how tests
    and multi-repository transactions share one session. A pinned connection
    is never closed by the repository.
    """

    def __init__(self, conn: psycopg.Connection | None = None):
        """Initialize with optional connection."""
        self._conn = conn

    @contextmanager
    def _get_conn(self) -> Iterator[psycopg.Connection]:
        """Get connection from pool or use provided one."""
        if self._conn is not None:
            yield self._conn
            return
        with get_pool().connection() as conn:
            yield conn


def to_float(value: Any) -> float:
    """Coerce NUMERIC aggregates (Decimal or None) to a plain float."""
    if value is None:
        return 0.0
    return float(value)


def to_int(value: Any) -> int:
    if value is None:
        return 0
    return int(value)
