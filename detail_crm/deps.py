"""Request dependencies: resolve the signed-in user from the session cookie."""

from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from .config import settings
from .database import get_db
from .models.user import User
from .security import decode_session_token
from .services import user_svc


class LoginRequired(Exception):
    """Raised by page dependencies; the app turns it into a redirect to /login."""

    def __init__(self, next_path: str = "/dashboard"):
        super().__init__(next_path)
        self.next_path = next_path


def session_token(request: Request) -> str:
    cookie_token = request.cookies.get(settings.auth_cookie_name, "")
    if cookie_token:
        return cookie_token

    auth = request.headers.get("authorization", "")
    if auth.lower().startswith("bearer "):
        return auth[7:].strip()
    return ""


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """The active user for this request, or None. No query runs without a valid token."""
    claims = decode_session_token(settings.auth_secret, session_token(request))
    if claims is None:
        return None
    return await user_svc.get_active_user(db, claims.user_id)


async def require_user(
    request: Request,
    user: User | None = Depends(get_current_user),
) -> User:
    if user is None:
        path_with_query = request.url.path
        if request.url.query:
            path_with_query = f"{path_with_query}?{request.url.query}"
        raise LoginRequired(path_with_query)
    return user
