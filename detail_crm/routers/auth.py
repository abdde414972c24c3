"""Login / logout routes with CSRF protection and attempt throttling."""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..deps import get_current_user
from ..models.user import User
from ..security import (
    AttemptLimiter,
    SessionClaims,
    csrf_matches,
    issue_session_token,
    new_csrf_token,
    sanitize_next_path,
)
from ..services import event_svc, user_svc
from ..templating import templates

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])
limiter = AttemptLimiter()

HOME_PATH = "/dashboard"


def _csrf_cookie_name() -> str:
    return f"{settings.auth_cookie_name}_csrf"


def _ensure_csrf_token(request: Request) -> str:
    token = (request.cookies.get(_csrf_cookie_name(), "") or "").strip()
    return token or new_csrf_token()


def _set_cookie(response, key: str, value: str):
    response.set_cookie(
        key=key,
        value=value,
        max_age=max(60, settings.auth_session_ttl_seconds),
        httponly=True,
        secure=settings.auth_cookie_secure,
        samesite="lax",
        path="/",
    )


def _client_addr(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "").split(",", 1)[0].strip()
    if forwarded:
        return forwarded
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def _login_key(request: Request, email: str) -> str:
    return f"login:{(email or '').strip().lower()}:{_client_addr(request)}"


def _render_login(
    request: Request,
    next_path: str,
    error: str | None = None,
    status_code: int = 200,
):
    csrf_token = _ensure_csrf_token(request)
    response = templates.TemplateResponse(
        request,
        "login.html",
        {"next": next_path, "csrf_token": csrf_token, "error": error},
        status_code=status_code,
    )
    _set_cookie(response, _csrf_cookie_name(), csrf_token)
    return response


@router.get("/login")
async def login_page(
    request: Request,
    next: str = HOME_PATH,  # noqa: A002
    user: User | None = Depends(get_current_user),
):
    safe_next = sanitize_next_path(next, HOME_PATH)
    if user is not None:
        return RedirectResponse(safe_next, status_code=303)
    if not settings.auth_secret:
        return HTMLResponse("Authentication is misconfigured", status_code=503)
    return _render_login(request, safe_next)


@router.post("/login")
async def login_submit(request: Request, db: AsyncSession = Depends(get_db)):
    if not settings.auth_secret:
        return HTMLResponse("Authentication is misconfigured", status_code=503)

    form = await request.form()
    email = str(form.get("email", "")).strip()
    password = str(form.get("password", ""))
    next_path = sanitize_next_path(str(form.get("next", HOME_PATH)), HOME_PATH)
    csrf_token = str(form.get("csrf_token", ""))
    user_agent = request.headers.get("user-agent")

    if not csrf_matches(request.cookies.get(_csrf_cookie_name(), ""), csrf_token):
        return _render_login(request, next_path, error="Invalid request", status_code=400)

    login_key = _login_key(request, email)
    now = time.time()
    if limiter.is_blocked(login_key, now):
        return _render_login(
            request, next_path, error="Too many login attempts. Try again later.", status_code=429
        )

    user = await user_svc.authenticate(db, email, password)
    if user is None:
        blocked = limiter.add_failure(
            key=login_key,
            now=now,
            window_seconds=settings.auth_rate_limit_window_seconds,
            max_attempts=settings.auth_rate_limit_max_attempts,
            block_seconds=settings.auth_rate_limit_block_seconds,
        )
        await event_svc.track_event(
            db,
            "login_failed",
            "user_action",
            event_data={"email": email.lower(), "blocked": blocked},
            page_path="/login",
            user_agent=user_agent,
            success=False,
            error_message="Invalid credentials",
        )
        if blocked:
            return _render_login(
                request, next_path, error="Too many login attempts. Try again later.", status_code=429
            )
        return _render_login(request, next_path, error="Invalid credentials")

    limiter.clear(login_key)
    # read before tracking: a failed insert rolls the session back and expires the row
    user_id, user_email = user.id, user.email
    await event_svc.track_event(
        db,
        "login_success",
        "user_action",
        user_id=user_id,
        page_path="/login",
        user_agent=user_agent,
    )
    logger.info("User %s signed in", user_email)

    token = issue_session_token(
        settings.auth_secret,
        SessionClaims(user_id=str(user_id), email=user_email),
        settings.auth_session_ttl_seconds,
    )
    response = RedirectResponse(next_path, status_code=303)
    _set_cookie(response, settings.auth_cookie_name, token)
    return response


def _logout_response() -> RedirectResponse:
    response = RedirectResponse("/login", status_code=303)
    response.delete_cookie(settings.auth_cookie_name, path="/")
    response.delete_cookie(_csrf_cookie_name(), path="/")
    return response


@router.post("/logout")
async def logout_post():
    return _logout_response()


@router.get("/logout")
async def logout_get():
    return _logout_response()
