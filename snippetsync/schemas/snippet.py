# snippetsync/schemas/snippet.py

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serializes with the camelCase keys the web client and extension expect."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class SnippetIn(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    language: str = Field(..., min_length=1, max_length=50)
    code: str = Field(..., min_length=1)
    visibility: Literal["PUBLIC", "PRIVATE"] = "PUBLIC"


class SnippetUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    language: Optional[str] = Field(None, min_length=1, max_length=50)
    code: Optional[str] = Field(None, min_length=1)
    visibility: Optional[Literal["PUBLIC", "PRIVATE"]] = None


class SnippetOut(CamelModel):
    id: str
    title: str
    description: Optional[str] = None
    language: str
    code: str
    visibility: str
    author_id: str
    created_at: datetime
    updated_at: datetime


class ShareCodeOut(CamelModel):
    code: str
    expires_at: datetime


class SnippetCreatedOut(SnippetOut):
    share_code: str
    expires_at: datetime


class StatusResponse(BaseModel):
    success: bool
    message: str
