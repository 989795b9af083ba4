# snippetsync/services/snippet_service.py

from __future__ import annotations

from typing import Optional, Tuple

from snippetsync.constants import SNIPPET_VISIBILITIES
from snippetsync.exceptions import ForbiddenError, SnippetNotFoundError, ValidationError
from snippetsync.repositories.snippet_repository import SnippetRecord, SnippetRepository
from snippetsync.services.share_code_service import IssuedShareCode, ShareCodeService
from snippetsync.utils.clock import SystemClock
from snippetsync.utils.logger import log_info

UPDATABLE_FIELDS = ("title", "description", "language", "code", "visibility")


class SnippetService:
    """Ownership checks around snippet persistence."""

    def __init__(self, repository: SnippetRepository, share_codes: ShareCodeService, clock=None):
        self._repo = repository
        self._share_codes = share_codes
        self._clock = clock or SystemClock()

    async def create_snippet(
        self,
        author_id: str,
        title: str,
        language: str,
        code: str,
        description: Optional[str] = None,
        visibility: str = "PUBLIC",
    ) -> Tuple[SnippetRecord, IssuedShareCode]:
        """Store a snippet and hand back a share code for it straight away,
        which is what the editor extension's export flow shows the user."""
        if visibility not in SNIPPET_VISIBILITIES:
            raise ValidationError(
                "visibility must be PUBLIC or PRIVATE",
                details={"visibility": visibility},
            )
        snippet = await self._repo.create(
            title=title,
            description=description,
            language=language,
            code=code,
            visibility=visibility,
            author_id=author_id,
            now=self._clock.now(),
        )
        try:
            issued = await self._share_codes.issue_code_for(snippet.id)
        except Exception:
            # a snippet is never left stored without its first code
            await self._repo.delete(snippet.id)
            log_info(f"SnippetService: rolled back snippet id={snippet.id} after share code failure")
            raise
        log_info(f"SnippetService: created snippet id={snippet.id} author={author_id}")
        return snippet, issued

    async def get_snippet(self, snippet_id: str, requester_id: Optional[str] = None) -> SnippetRecord:
        snippet = await self._repo.get_by_id(snippet_id)
        if snippet.is_private and snippet.author_id != requester_id:
            raise ForbiddenError()
        return snippet

    async def update_snippet(self, snippet_id: str, requester_id: str, **changes) -> SnippetRecord:
        """Author-only partial update. Live share codes keep pointing at the
        snippet, so the next import returns the new content."""
        snippet = await self._repo.get_by_id(snippet_id)
        if snippet.author_id != requester_id:
            raise ForbiddenError()
        changes = {
            k: v for k, v in changes.items()
            if k in UPDATABLE_FIELDS and (v is not None or k == "description")
        }
        if "visibility" in changes and changes["visibility"] not in SNIPPET_VISIBILITIES:
            raise ValidationError(
                "visibility must be PUBLIC or PRIVATE",
                details={"visibility": changes["visibility"]},
            )
        if not changes:
            return snippet
        updated = await self._repo.update(snippet_id, changes, now=self._clock.now())
        log_info(f"SnippetService: updated snippet id={snippet_id} fields={sorted(changes)}")
        return updated

    async def delete_snippet(self, snippet_id: str, requester_id: str) -> None:
        snippet = await self._repo.get_by_id(snippet_id)
        if snippet.author_id != requester_id:
            raise ForbiddenError()
        if not await self._repo.delete(snippet_id):
            raise SnippetNotFoundError(snippet_id)
        log_info(f"SnippetService: deleted snippet id={snippet_id}")
