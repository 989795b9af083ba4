# snippetsync/routers/snippets.py
# FastAPI router for snippets and their temporary share codes

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status

from snippetsync.dependencies import (
    get_optional_user_id,
    get_share_code_service,
    get_snippet_service,
    get_user_id,
)
from snippetsync.exceptions import CodeNotFoundError
from snippetsync.schemas.snippet import ShareCodeOut, SnippetCreatedOut, SnippetIn, SnippetOut, SnippetUpdate, StatusResponse
from snippetsync.services.share_code_service import ShareCodeService
from snippetsync.services.snippet_service import SnippetService


router = APIRouter(prefix="/snippets", tags=["Snippets"])


@router.get("/import/{code}", response_model=SnippetOut)
async def import_snippet(
    code: str,
    service: ShareCodeService = Depends(get_share_code_service),
) -> SnippetOut:
    """Redeem a share code (editor extension import). 404 unknown, 410 expired."""
    snippet = await service.resolve_code(code)
    return SnippetOut.model_validate(snippet)


@router.post("", response_model=SnippetCreatedOut, status_code=status.HTTP_201_CREATED)
async def create_snippet(
    payload: SnippetIn,
    user_id: str = Depends(get_user_id),
    service: SnippetService = Depends(get_snippet_service),
) -> SnippetCreatedOut:
    snippet, issued = await service.create_snippet(
        author_id=user_id,
        title=payload.title,
        description=payload.description,
        language=payload.language,
        code=payload.code,
        visibility=payload.visibility,
    )
    return SnippetCreatedOut(
        **SnippetOut.model_validate(snippet).model_dump(),
        share_code=issued.code,
        expires_at=issued.expires_at,
    )


@router.get("/{snippet_id}", response_model=SnippetOut)
async def get_snippet(
    snippet_id: str,
    user_id: Optional[str] = Depends(get_optional_user_id),
    service: SnippetService = Depends(get_snippet_service),
) -> SnippetOut:
    snippet = await service.get_snippet(snippet_id, requester_id=user_id)
    return SnippetOut.model_validate(snippet)


@router.put("/{snippet_id}", response_model=SnippetOut)
async def update_snippet(
    snippet_id: str,
    payload: SnippetUpdate,
    user_id: str = Depends(get_user_id),
    service: SnippetService = Depends(get_snippet_service),
) -> SnippetOut:
    """Author-only partial update; omitted fields are left as they are."""
    snippet = await service.update_snippet(
        snippet_id,
        requester_id=user_id,
        **payload.model_dump(exclude_unset=True),
    )
    return SnippetOut.model_validate(snippet)


@router.delete("/{snippet_id}", response_model=StatusResponse)
async def delete_snippet(
    snippet_id: str,
    user_id: str = Depends(get_user_id),
    service: SnippetService = Depends(get_snippet_service),
) -> StatusResponse:
    await service.delete_snippet(snippet_id, requester_id=user_id)
    return StatusResponse(success=True, message="deleted")


@router.post(
    "/{snippet_id}/generate-code",
    response_model=ShareCodeOut,
    status_code=status.HTTP_201_CREATED,
)
async def generate_share_code(
    snippet_id: str,
    service: ShareCodeService = Depends(get_share_code_service),
) -> ShareCodeOut:
    """Mint a new 5-minute code. Open to any caller for any existing snippet."""
    issued = await service.issue_code_for(snippet_id)
    return ShareCodeOut(code=issued.code, expires_at=issued.expires_at)


@router.get("/{snippet_id}/share-code", response_model=ShareCodeOut)
async def get_active_share_code(
    snippet_id: str,
    service: ShareCodeService = Depends(get_share_code_service),
) -> ShareCodeOut:
    """Newest still-valid code for the snippet, if there is one."""
    record = await service.active_code_for(snippet_id)
    if record is None:
        raise CodeNotFoundError(snippet_id=snippet_id)
    return ShareCodeOut(code=record.code, expires_at=record.expires_at)
