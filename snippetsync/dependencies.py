# snippetsync/dependencies.py
# FastAPI dependency providers; services are built once in the lifespan and kept on app.state

from typing import Optional

from fastapi import Header, Request

from snippetsync.exceptions import UnauthorizedError
from snippetsync.services.share_code_service import ShareCodeService
from snippetsync.services.snippet_service import SnippetService


def get_share_code_service(request: Request) -> ShareCodeService:
    return request.app.state.share_code_service


def get_snippet_service(request: Request) -> SnippetService:
    return request.app.state.snippet_service


def get_optional_user_id(x_user_id: Optional[str] = Header(None)) -> Optional[str]:
    """Caller identity as forwarded by the auth gateway, if any."""
    return x_user_id or None


def get_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    if not x_user_id:
        raise UnauthorizedError()
    return x_user_id
