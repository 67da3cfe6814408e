from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg_pool import ConnectionPool

from palmleaf.config.settings import Settings
from palmleaf.processor.exceptions import StoreError

_pool: ConnectionPool | None = None

_SCHEMA = """
CREATE TABLE IF NOT EXISTS manuscripts (
    id BIGSERIAL PRIMARY KEY,
    timestamp BIGINT NOT NULL,
    original_image TEXT NOT NULL,
    restored_image TEXT NULL,
    analysis JSONB NULL
)
"""

_SCHEMA_INDEX = """
CREATE INDEX IF NOT EXISTS manuscripts_timestamp_idx
ON manuscripts (timestamp DESC, id DESC)
"""


def init_pool(settings: Settings) -> None:
    """Initialize the global connection pool from settings."""
    global _pool  # noqa: PLW0603
    conninfo = (
        f"host={settings.db_host} "
        f"port={settings.db_port} "
        f"dbname={settings.db_database} "
        f"user={settings.db_username} "
        f"password={settings.db_password}"
    )
    _pool = ConnectionPool(conninfo, min_size=1, max_size=4, open=True)


def close_pool() -> None:
    """Close the global connection pool."""
    global _pool  # noqa: PLW0603
    if _pool is not None:
        _pool.close()
        _pool = None


@contextmanager
def get_connection() -> Generator[psycopg.Connection[Any], None, None]:
    """Yield a connection from the pool. Caller manages commit/rollback."""
    if _pool is None:
        raise RuntimeError("Connection pool not initialized. Call init_pool() first.")
    with _pool.connection() as conn:
        yield conn


def ensure_schema() -> None:
    """Create the manuscripts table and its ordering index if missing.

    Raises:
        StoreError: if the database cannot be reached or the DDL fails.
    """
    try:
        with get_connection() as conn:
            conn.execute(_SCHEMA)
            conn.execute(_SCHEMA_INDEX)
            conn.commit()
    except psycopg.Error as exc:
        raise StoreError(f"Failed to prepare manuscripts table: {exc}") from exc
