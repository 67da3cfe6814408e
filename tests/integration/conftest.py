import os
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from palmleaf.config.settings import Settings
from palmleaf.database.connection import close_pool, ensure_schema, get_connection, init_pool
from palmleaf.database.repositories.manuscript_repository import ManuscriptRepository


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "palmleaf_test")
    return Settings(inference_provider="example")


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        psycopg.connect(
            host=test_settings.db_host,
            port=test_settings.db_port,
            dbname=test_settings.db_database,
            user=test_settings.db_username,
            password=test_settings.db_password,
            connect_timeout=3,
        ).close()
    except psycopg.OperationalError as e:
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run these tests")
    init_pool(test_settings)
    ensure_schema()
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def repository(integration_pool: None) -> ManuscriptRepository:
    return ManuscriptRepository()


@pytest.fixture
def created_ids(integration_pool: None) -> Generator[list[int], None, None]:
    """Ids appended here are deleted after the test."""
    ids: list[int] = []
    yield ids
    if not ids:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute("DELETE FROM manuscripts WHERE id = ANY(%s)", (ids,))
        conn.commit()
