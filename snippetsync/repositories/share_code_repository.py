# snippetsync/repositories/share_code_repository.py
# Persistence for share codes; expiry rules live in the service, not here

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from sqlalchemy import delete, func, insert, select
from sqlalchemy.exc import IntegrityError

from snippetsync.db.base import Database
from snippetsync.exceptions import DuplicateCodeError, SnippetNotFoundError
from snippetsync.models.share_code_table import share_codes


@dataclass(frozen=True)
class ShareCodeRecord:
    id: int
    code: str
    snippet_id: str
    created_at: datetime
    expires_at: datetime

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ShareCodeRecord":
        return cls(
            id=row["id"],
            code=row["code"],
            snippet_id=row["snippet_id"],
            created_at=row["created_at"],
            expires_at=row["expires_at"],
        )

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class ShareCodeRepository:
    """Data access for the share_codes table."""

    def __init__(self, database: Database):
        self._db = database

    async def find_by_code(self, code: str) -> ShareCodeRecord | None:
        """Exact-match lookup. Expired rows are returned as-is."""
        stmt = select(share_codes).where(share_codes.c.code == code)
        async with self._db.session() as session:
            result = await session.execute(stmt)
            row = result.mappings().first()
            return ShareCodeRecord.from_row(row) if row else None

    async def create(
        self,
        snippet_id: str,
        code: str,
        created_at: datetime,
        expires_at: datetime,
    ) -> ShareCodeRecord:
        """Insert a new code.

        Raises DuplicateCodeError when the code column already holds this
        value, SnippetNotFoundError when the snippet vanished before the insert.
        """
        stmt = insert(share_codes).values(
            code=code,
            snippet_id=snippet_id,
            created_at=created_at,
            expires_at=expires_at,
        )
        async with self._db.session() as session:
            try:
                result = await session.execute(stmt)
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                taken = await session.execute(
                    select(share_codes.c.id).where(share_codes.c.code == code)
                )
                if taken.first() is not None:
                    raise DuplicateCodeError(code) from e
                raise SnippetNotFoundError(snippet_id) from e

        return ShareCodeRecord(
            id=result.inserted_primary_key[0],
            code=code,
            snippet_id=snippet_id,
            created_at=created_at,
            expires_at=expires_at,
        )

    async def delete_by_id(self, share_code_id: int) -> None:
        """Remove a row; deleting a missing row is a no-op."""
        async with self._db.session() as session:
            await session.execute(delete(share_codes).where(share_codes.c.id == share_code_id))
            await session.commit()

    async def delete_expired_before(self, now: datetime) -> int:
        """Bulk-delete rows with expires_at < now and return how many went."""
        async with self._db.session() as session:
            result = await session.execute(delete(share_codes).where(share_codes.c.expires_at < now))
            await session.commit()
            return result.rowcount or 0

    async def find_active_for_snippet(self, snippet_id: str, now: datetime) -> ShareCodeRecord | None:
        """Most recently created non-expired code for a snippet."""
        stmt = (
            select(share_codes)
            .where(share_codes.c.snippet_id == snippet_id)
            .where(share_codes.c.expires_at > now)
            .order_by(share_codes.c.created_at.desc(), share_codes.c.id.desc())
            .limit(1)
        )
        async with self._db.session() as session:
            result = await session.execute(stmt)
            row = result.mappings().first()
            return ShareCodeRecord.from_row(row) if row else None

    async def count(self) -> int:
        async with self._db.session() as session:
            result = await session.execute(select(func.count()).select_from(share_codes))
            return result.scalar_one()
