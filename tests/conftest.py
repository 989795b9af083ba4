# tests/conftest.py
# Shared fixtures: a throwaway SQLite database per test, a controllable clock,
# and scripted code candidates for collision scenarios.

import os

import pytest
import pytest_asyncio

os.environ.setdefault("LOGS_PATH", os.path.join(os.path.dirname(__file__), ".logs"))

from snippetsync.db.base import Database  # noqa: E402
from snippetsync.repositories.share_code_repository import ShareCodeRepository  # noqa: E402
from snippetsync.repositories.snippet_repository import SnippetRepository  # noqa: E402
from snippetsync.services.code_generator import CodeGenerator  # noqa: E402
from snippetsync.services.share_code_service import ShareCodeService  # noqa: E402
from tests.helpers import FakeClock, ScriptedCandidates  # noqa: E402


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture
async def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'snippetsync-test.db'}")
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def share_code_repo(database) -> ShareCodeRepository:
    return ShareCodeRepository(database)


@pytest.fixture
def snippet_repo(database) -> SnippetRepository:
    return SnippetRepository(database)


@pytest.fixture
def make_service(share_code_repo, snippet_repo, clock):
    """Build a ShareCodeService, optionally with scripted candidates."""

    def _make(candidates=None, share_codes=None) -> ShareCodeService:
        generator = CodeGenerator(candidate_source=ScriptedCandidates(candidates)) if candidates else CodeGenerator()
        return ShareCodeService(
            share_codes=share_codes or share_code_repo,
            snippets=snippet_repo,
            generator=generator,
            clock=clock,
        )

    return _make


@pytest_asyncio.fixture
async def snippet(snippet_repo, clock):
    return await snippet_repo.create(
        title="Debounce hook",
        description="useDebounce for React",
        language="typescript",
        code="export const useDebounce = () => {}",
        author_id="user-1",
        now=clock.now(),
    )


@pytest_asyncio.fixture
async def other_snippet(snippet_repo, clock):
    return await snippet_repo.create(
        title="Quicksort",
        language="python",
        code="def quicksort(xs): ...",
        author_id="user-2",
        visibility="PRIVATE",
        now=clock.now(),
    )
