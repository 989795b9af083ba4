# tests/integration/conftest.py
# PostgreSQL via TestContainers, migrated with Alembic once per session.
# Skipped entirely when testcontainers or Docker are unavailable.

import os
from typing import Iterator

import pytest  # type: ignore[import-not-found]
import pytest_asyncio
from sqlalchemy import delete

from alembic import command as alembic_command
from alembic.config import Config as AlembicConfig

from snippetsync.db.base import Database, to_async_url
from snippetsync.models.share_code_table import share_codes
from snippetsync.models.snippet_table import snippets

postgres = pytest.importorskip("testcontainers.postgres", reason="testcontainers is not installed")

ALEMBIC_INI = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "alembic.ini")


@pytest.fixture(scope="session")
def postgres_url() -> Iterator[str]:
    # start test container (PostgreSQL)
    try:
        container = postgres.PostgresContainer("postgres:16-alpine", driver=None)
        container.start()
    except Exception as e:
        pytest.skip(f"Docker is not available: {e}")
    try:
        yield to_async_url(container.get_connection_url())
    finally:
        container.stop()


@pytest.fixture(scope="session")
def migrated_url(postgres_url: str) -> str:
    cfg = AlembicConfig(ALEMBIC_INI)
    cfg.set_main_option("sqlalchemy.url", postgres_url)
    alembic_command.upgrade(cfg, "head")
    return postgres_url


@pytest_asyncio.fixture
async def pg_database(migrated_url: str):
    db = Database(migrated_url)
    yield db
    async with db.session() as session:
        await session.execute(delete(share_codes))
        await session.execute(delete(snippets))
        await session.commit()
    await db.dispose()
