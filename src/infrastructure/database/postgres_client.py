"""PostgreSQL client for running the profile store locally.

Used instead of the hosted table when ``USE_LOCAL_DB=1``. Expects a
``user_profiles`` table with the same columns as the hosted one.
"""
from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Any, Generator

import psycopg2
from psycopg2 import pool, sql
from psycopg2.extras import RealDictCursor

logger = logging.getLogger(__name__)


def local_db_enabled() -> bool:
    return os.getenv("USE_LOCAL_DB", "0") == "1"


class PostgresClient:
    """Pooled connections returning rows as dictionaries."""

    def __init__(self) -> None:
        try:
            self._pool = pool.SimpleConnectionPool(
                minconn=1,
                maxconn=int(os.getenv("POSTGRES_POOL_SIZE", "10")),
                host=os.getenv("POSTGRES_HOST", "localhost"),
                port=int(os.getenv("POSTGRES_PORT", "5432")),
                database=os.getenv("POSTGRES_DB", "civicconnect"),
                user=os.getenv("POSTGRES_USER", "civicconnect"),
                password=os.getenv("POSTGRES_PASSWORD", "civicconnect_dev_password"),
            )
        except psycopg2.Error as exc:  # pragma: no cover
            raise RuntimeError(f"Failed to initialize PostgreSQL connection pool: {exc}") from exc
        logger.info("PostgreSQL pool ready on %s", os.getenv("POSTGRES_HOST", "localhost"))

    @contextmanager
    def cursor(self) -> Generator[Any, None, None]:
        """Yield a dict cursor; commits on success, rolls back on error."""
        conn = self._pool.getconn()
        try:
            with conn.cursor(cursor_factory=RealDictCursor) as cur:
                yield cur
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._pool.putconn(conn)

    def fetch_one(self, query: str | sql.Composable, params: tuple = ()) -> dict[str, Any] | None:
        """Run a query (SELECT, or a write with RETURNING) and return the first row."""
        with self.cursor() as cur:
            cur.execute(query, params)
            row = cur.fetchone()
            return dict(row) if row else None


_POSTGRES_CLIENT: PostgresClient | None = None


def get_postgres_client() -> PostgresClient | None:
    global _POSTGRES_CLIENT
    if not local_db_enabled():
        return None
    if _POSTGRES_CLIENT is None:
        _POSTGRES_CLIENT = PostgresClient()
    return _POSTGRES_CLIENT
