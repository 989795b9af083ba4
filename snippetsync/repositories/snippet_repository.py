# snippetsync/repositories/snippet_repository.py
# Thin snippet persistence: just enough for share codes to point at something

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from sqlalchemy import delete, func, insert, select, update

from snippetsync.db.base import Database
from snippetsync.exceptions import SnippetNotFoundError
from snippetsync.models.snippet_table import snippets


@dataclass(frozen=True)
class SnippetRecord:
    id: str
    title: str
    description: Optional[str]
    language: str
    code: str
    visibility: str
    author_id: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "SnippetRecord":
        return cls(**{name: row[name] for name in cls.__dataclass_fields__})

    @property
    def is_private(self) -> bool:
        return self.visibility == "PRIVATE"


class SnippetRepository:
    """Data access for the snippets table."""

    def __init__(self, database: Database):
        self._db = database

    async def exists(self, snippet_id: str) -> bool:
        stmt = select(snippets.c.id).where(snippets.c.id == snippet_id)
        async with self._db.session() as session:
            result = await session.execute(stmt)
            return result.first() is not None

    async def get_by_id(self, snippet_id: str) -> SnippetRecord:
        """Return the snippet or raise SnippetNotFoundError."""
        stmt = select(snippets).where(snippets.c.id == snippet_id)
        async with self._db.session() as session:
            result = await session.execute(stmt)
            row = result.mappings().first()
        if row is None:
            raise SnippetNotFoundError(snippet_id)
        return SnippetRecord.from_row(row)

    async def create(
        self,
        *,
        title: str,
        language: str,
        code: str,
        author_id: str,
        now: datetime,
        description: Optional[str] = None,
        visibility: str = "PUBLIC",
    ) -> SnippetRecord:
        record = SnippetRecord(
            id=str(uuid.uuid4()),
            title=title,
            description=description,
            language=language,
            code=code,
            visibility=visibility,
            author_id=author_id,
            created_at=now,
            updated_at=now,
        )
        async with self._db.session() as session:
            await session.execute(insert(snippets).values(**asdict(record)))
            await session.commit()
        return record

    async def delete(self, snippet_id: str) -> bool:
        """Delete a snippet; its share codes go with it via ON DELETE CASCADE."""
        async with self._db.session() as session:
            result = await session.execute(delete(snippets).where(snippets.c.id == snippet_id))
            await session.commit()
            return bool(result.rowcount)

    async def update(self, snippet_id: str, changes: Mapping[str, Any], now: datetime) -> SnippetRecord:
        """Apply column changes, bump updated_at and return the new row."""
        stmt = (
            update(snippets)
            .where(snippets.c.id == snippet_id)
            .values(**changes, updated_at=now)
        )
        async with self._db.session() as session:
            result = await session.execute(stmt)
            await session.commit()
        if not result.rowcount:
            raise SnippetNotFoundError(snippet_id)
        return await self.get_by_id(snippet_id)

    async def count(self) -> int:
        async with self._db.session() as session:
            result = await session.execute(select(func.count()).select_from(snippets))
            return result.scalar_one()
