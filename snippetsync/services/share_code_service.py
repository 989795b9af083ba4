# snippetsync/services/share_code_service.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from snippetsync.constants import MAX_CODE_ATTEMPTS, SHARE_CODE_TTL
from snippetsync.exceptions import (
    CodeExpiredError,
    CodeNotFoundError,
    DuplicateCodeError,
    GenerationExhaustedError,
    SnippetNotFoundError,
)
from snippetsync.observability.metrics import (
    SHARE_CODE_CONFLICTS,
    SHARE_CODE_RESOLUTIONS,
    SHARE_CODES_ISSUED,
    SHARE_CODES_SWEPT,
)
from snippetsync.repositories.share_code_repository import ShareCodeRecord, ShareCodeRepository
from snippetsync.repositories.snippet_repository import SnippetRecord, SnippetRepository
from snippetsync.services.code_generator import CodeGenerator, is_well_formed
from snippetsync.utils.clock import SystemClock
from snippetsync.utils.logger import log_info

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedShareCode:
    code: str
    expires_at: datetime


class ShareCodeService:
    """Issues and redeems temporary share codes.

    Issuance is open to any caller for any existing snippet, and redemption
    does not re-check visibility: a code acts as a short-lived public link.
    """

    def __init__(
        self,
        share_codes: ShareCodeRepository,
        snippets: SnippetRepository,
        generator: Optional[CodeGenerator] = None,
        clock=None,
        max_attempts: int = MAX_CODE_ATTEMPTS,
    ):
        self._share_codes = share_codes
        self._snippets = snippets
        self._generator = generator or CodeGenerator()
        self._clock = clock or SystemClock()
        self.max_attempts = max_attempts

    async def issue_code_for(self, snippet_id: str) -> IssuedShareCode:
        """Mint a fresh code for snippet_id valid for SHARE_CODE_TTL."""
        if not await self._snippets.exists(snippet_id):
            raise SnippetNotFoundError(snippet_id)

        for attempt in range(1, self.max_attempts + 1):
            now = self._clock.now()
            code = await self._generator.generate_unique(self._share_codes, now)
            try:
                record = await self._share_codes.create(
                    snippet_id=snippet_id,
                    code=code,
                    created_at=now,
                    expires_at=now + SHARE_CODE_TTL,
                )
            except DuplicateCodeError:
                # lost the race between the existence check and the insert
                SHARE_CODE_CONFLICTS.inc()
                logger.info(f"share code insert conflict, retrying (attempt {attempt}/{self.max_attempts})")
                continue

            SHARE_CODES_ISSUED.inc()
            log_info(f"ShareCodeService: issued share code for snippet={snippet_id} expires_at={record.expires_at.isoformat()}")
            return IssuedShareCode(code=record.code, expires_at=record.expires_at)

        raise GenerationExhaustedError(self.max_attempts)

    async def resolve_code(self, code: str) -> SnippetRecord:
        """Return the snippet behind a live code.

        Codes are not single-use. An expired code is deleted on sight and
        reported as CodeExpiredError, distinct from CodeNotFoundError.
        """
        code = (code or "").strip().lower()
        record = await self._share_codes.find_by_code(code) if is_well_formed(code) else None
        if record is None:
            SHARE_CODE_RESOLUTIONS.labels(outcome="not_found").inc()
            raise CodeNotFoundError(code)

        if record.is_expired(self._clock.now()):
            await self._share_codes.delete_by_id(record.id)
            SHARE_CODE_RESOLUTIONS.labels(outcome="expired").inc()
            log_info(f"ShareCodeService: removed expired share code id={record.id}")
            raise CodeExpiredError(code)

        try:
            snippet = await self._snippets.get_by_id(record.snippet_id)
        except SnippetNotFoundError:
            # only reachable if the snippet went away mid-request
            SHARE_CODE_RESOLUTIONS.labels(outcome="not_found").inc()
            raise CodeNotFoundError(code)

        SHARE_CODE_RESOLUTIONS.labels(outcome="ok").inc()
        return snippet

    async def active_code_for(self, snippet_id: str) -> ShareCodeRecord | None:
        return await self._share_codes.find_active_for_snippet(snippet_id, self._clock.now())

    async def sweep_expired(self) -> int:
        """Delete every expired code; returns the number removed."""
        removed = await self._share_codes.delete_expired_before(self._clock.now())
        if removed:
            SHARE_CODES_SWEPT.inc(removed)
            log_info(f"ShareCodeService: swept {removed} expired share codes")
        return removed
