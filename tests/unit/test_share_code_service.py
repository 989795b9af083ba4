# tests/unit/test_share_code_service.py
# Issuance, redemption, expiry and retry behaviour of ShareCodeService

import asyncio
import re
from datetime import timedelta

import pytest

from snippetsync.constants import SHARE_CODE_TTL
from snippetsync.exceptions import (
    CodeExpiredError,
    CodeNotFoundError,
    DuplicateCodeError,
    GenerationExhaustedError,
    SnippetNotFoundError,
)
from snippetsync.repositories.share_code_repository import ShareCodeRepository
from snippetsync.services.code_generator import CodeGenerator
from snippetsync.services.share_code_service import ShareCodeService

from tests.helpers import T0, ScriptedCandidates

CODE_RE = re.compile(r"^[a-z0-9]{6}$")


# --- Issuance ---

@pytest.mark.asyncio
async def test_issue_returns_code_expiring_in_five_minutes(make_service, snippet, clock):
    service = make_service()

    issued = await service.issue_code_for(snippet.id)

    assert CODE_RE.match(issued.code)
    assert issued.expires_at == T0 + timedelta(seconds=300)


@pytest.mark.asyncio
async def test_issue_for_missing_snippet_persists_nothing(make_service, share_code_repo):
    service = make_service()

    with pytest.raises(SnippetNotFoundError) as exc_info:
        await service.issue_code_for("3f0e7a52-0000-0000-0000-000000000000")

    assert exc_info.value.status_code == 404
    assert await share_code_repo.count() == 0


@pytest.mark.asyncio
async def test_issue_is_not_scoped_to_owner_or_visibility(make_service, other_snippet):
    # private snippet owned by someone else: minting is still allowed
    issued = await make_service().issue_code_for(other_snippet.id)
    assert CODE_RE.match(issued.code)


@pytest.mark.asyncio
async def test_issue_retries_past_colliding_candidates(make_service, share_code_repo, snippet, clock):
    now = clock.now()
    await share_code_repo.create(snippet.id, "same01", now, now + SHARE_CODE_TTL)
    service = make_service(candidates=["same01", "same01", "uniq01"])

    issued = await service.issue_code_for(snippet.id)

    assert issued.code == "uniq01"
    assert issued.code != "same01"


@pytest.mark.asyncio
async def test_issue_exhaustion_persists_nothing(make_service, share_code_repo, snippet, clock):
    now = clock.now()
    taken = [f"full0{i}" for i in range(10)]
    for code in taken:
        await share_code_repo.create(snippet.id, code, now, now + SHARE_CODE_TTL)
    service = make_service(candidates=taken)

    with pytest.raises(GenerationExhaustedError):
        await service.issue_code_for(snippet.id)

    assert await share_code_repo.count() == 10


@pytest.mark.asyncio
async def test_issue_reuses_value_of_expired_code(make_service, share_code_repo, snippet, other_snippet, clock):
    past = clock.now() - timedelta(minutes=20)
    await share_code_repo.create(snippet.id, "reuse1", past, past + SHARE_CODE_TTL)
    service = make_service(candidates=["reuse1"])

    issued = await service.issue_code_for(other_snippet.id)

    assert issued.code == "reuse1"
    row = await share_code_repo.find_by_code("reuse1")
    assert row.snippet_id == other_snippet.id


class BlindShareCodeRepository(ShareCodeRepository):
    """Existence checks never see stored rows, as if another request
    inserted the same value between our check and our insert."""

    def __init__(self, database, blind_for: int):
        super().__init__(database)
        self._blind_for = blind_for

    async def find_by_code(self, code):
        if self._blind_for > 0:
            self._blind_for -= 1
            return None
        return await super().find_by_code(code)


@pytest.mark.asyncio
async def test_insert_conflict_is_retried_with_fresh_candidate(make_service, database, share_code_repo, snippet, clock):
    now = clock.now()
    await share_code_repo.create(snippet.id, "raced1", now, now + SHARE_CODE_TTL)
    blind = BlindShareCodeRepository(database, blind_for=1)
    service = make_service(candidates=["raced1", "fresh1"], share_codes=blind)

    issued = await service.issue_code_for(snippet.id)

    assert issued.code == "fresh1"
    assert await share_code_repo.count() == 2


class AlwaysConflictingRepository(ShareCodeRepository):
    async def create(self, snippet_id, code, created_at, expires_at):
        raise DuplicateCodeError(code)


@pytest.mark.asyncio
async def test_persistent_insert_conflicts_end_in_exhaustion(make_service, database, share_code_repo, snippet):
    service = make_service(share_codes=AlwaysConflictingRepository(database))

    with pytest.raises(GenerationExhaustedError) as exc_info:
        await service.issue_code_for(snippet.id)

    assert exc_info.value.attempts == 10
    assert await share_code_repo.count() == 0


class RendezvousShareCodeRepository(ShareCodeRepository):
    """Holds the first existence check until every racer has made theirs."""

    def __init__(self, database, barrier: asyncio.Barrier):
        super().__init__(database)
        self._barrier = barrier
        self._waited = False

    async def find_by_code(self, code):
        record = await super().find_by_code(code)
        if not self._waited:
            self._waited = True
            await self._barrier.wait()
        return record


@pytest.mark.asyncio
async def test_concurrent_issuance_with_same_first_candidate(database, snippet_repo, share_code_repo, snippet, other_snippet, clock):
    barrier = asyncio.Barrier(2)

    def racer(fallback):
        return ShareCodeService(
            share_codes=RendezvousShareCodeRepository(database, barrier),
            snippets=snippet_repo,
            generator=CodeGenerator(candidate_source=ScriptedCandidates(["clash1", fallback])),
            clock=clock,
        )

    first, second = await asyncio.gather(
        racer("alt001").issue_code_for(snippet.id),
        racer("alt002").issue_code_for(other_snippet.id),
    )

    codes = {first.code, second.code}
    assert len(codes) == 2
    assert "clash1" in codes
    assert await share_code_repo.count() == 2
    for code in codes:
        assert (await share_code_repo.find_by_code(code)) is not None


@pytest.mark.asyncio
async def test_multiple_active_codes_per_snippet(make_service, snippet, clock):
    service = make_service()

    first = await service.issue_code_for(snippet.id)
    clock.set(10)
    second = await service.issue_code_for(snippet.id)

    assert first.code != second.code
    assert (await service.resolve_code(first.code)).id == snippet.id
    assert (await service.resolve_code(second.code)).id == snippet.id


# --- Resolution ---

@pytest.mark.asyncio
async def test_resolve_timeline(make_service, share_code_repo, snippet, clock):
    service = make_service()
    issued = await service.issue_code_for(snippet.id)

    clock.set(299)
    resolved = await service.resolve_code(issued.code)
    assert resolved.id == snippet.id
    assert resolved.code == snippet.code

    clock.set(301)
    with pytest.raises(CodeExpiredError) as exc_info:
        await service.resolve_code(issued.code)
    assert exc_info.value.status_code == 410

    # the expired row was deleted as a side effect
    assert await share_code_repo.find_by_code(issued.code) is None

    clock.set(302)
    with pytest.raises(CodeNotFoundError):
        await service.resolve_code(issued.code)


@pytest.mark.asyncio
async def test_code_is_expired_exactly_at_expires_at(make_service, snippet, clock):
    service = make_service()
    issued = await service.issue_code_for(snippet.id)

    clock.set(300)
    with pytest.raises(CodeExpiredError):
        await service.resolve_code(issued.code)


@pytest.mark.asyncio
async def test_resolve_is_repeatable_within_window(make_service, snippet, clock):
    service = make_service()
    issued = await service.issue_code_for(snippet.id)

    for offset in (0, 60, 120, 299):
        clock.set(offset)
        assert (await service.resolve_code(issued.code)).id == snippet.id


@pytest.mark.asyncio
async def test_resolve_never_issued_code(make_service):
    with pytest.raises(CodeNotFoundError) as exc_info:
        await make_service().resolve_code("zz9zz9")
    assert exc_info.value.error_code == "CODE_NOT_FOUND"


@pytest.mark.asyncio
async def test_resolve_normalizes_case_and_whitespace(make_service, snippet):
    service = make_service(candidates=["k3y9ab"])
    await service.issue_code_for(snippet.id)

    assert (await service.resolve_code("  K3Y9AB ")).id == snippet.id


@pytest.mark.asyncio
async def test_resolve_malformed_code_is_not_found(make_service):
    with pytest.raises(CodeNotFoundError):
        await make_service().resolve_code("not-a-code")


@pytest.mark.asyncio
async def test_independent_expiry_of_two_codes(make_service, share_code_repo, snippet, clock):
    service = make_service()
    first = await service.issue_code_for(snippet.id)
    clock.set(10)
    second = await service.issue_code_for(snippet.id)

    clock.set(305)
    with pytest.raises(CodeExpiredError):
        await service.resolve_code(first.code)
    assert (await service.resolve_code(second.code)).id == snippet.id

    clock.set(310)
    with pytest.raises(CodeExpiredError):
        await service.resolve_code(second.code)


@pytest.mark.asyncio
async def test_deleting_one_code_leaves_the_other(make_service, share_code_repo, snippet, clock):
    service = make_service()
    first = await service.issue_code_for(snippet.id)
    second = await service.issue_code_for(snippet.id)

    row = await share_code_repo.find_by_code(first.code)
    await share_code_repo.delete_by_id(row.id)

    with pytest.raises(CodeNotFoundError):
        await service.resolve_code(first.code)
    assert (await service.resolve_code(second.code)).id == snippet.id


@pytest.mark.asyncio
async def test_resolve_after_snippet_deleted(make_service, snippet_repo, snippet):
    service = make_service()
    issued = await service.issue_code_for(snippet.id)

    await snippet_repo.delete(snippet.id)

    with pytest.raises(CodeNotFoundError):
        await service.resolve_code(issued.code)


# --- Active code and sweep ---

@pytest.mark.asyncio
async def test_active_code_for_returns_newest_live_code(make_service, snippet, clock):
    service = make_service()
    await service.issue_code_for(snippet.id)
    clock.set(30)
    newest = await service.issue_code_for(snippet.id)

    active = await service.active_code_for(snippet.id)
    assert active.code == newest.code

    clock.set(400)
    assert await service.active_code_for(snippet.id) is None


@pytest.mark.asyncio
async def test_sweep_expired_removes_only_dead_codes(make_service, share_code_repo, snippet, clock):
    service = make_service()
    old = await service.issue_code_for(snippet.id)
    clock.set(200)
    live = await service.issue_code_for(snippet.id)

    clock.set(350)
    assert await service.sweep_expired() == 1

    assert await share_code_repo.find_by_code(old.code) is None
    assert await share_code_repo.find_by_code(live.code) is not None
    assert await service.sweep_expired() == 0


@pytest.mark.asyncio
async def test_no_two_active_rows_share_a_code(make_service, share_code_repo, snippet, clock):
    service = make_service()
    issued = [await service.issue_code_for(snippet.id) for _ in range(25)]

    assert len({i.code for i in issued}) == 25
    assert await share_code_repo.count() == 25
