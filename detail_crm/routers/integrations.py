"""Gmail, Google Business Profile and Outlook integration API."""

from __future__ import annotations

import json
import logging
from typing import Awaitable, Callable

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..deps import get_current_user
from ..integrations import google, microsoft
from ..integrations.oauth import OAuthProvider
from ..models.user import User
from ..services import integration_svc
from .google_auth import settings_redirect

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/integrations", tags=["integrations"])

NOT_AUTHENTICATED = {"error": "Not authenticated"}


def _auth_url_response(
    user: User | None,
    build_client: Callable[..., OAuthProvider],
    failure_message: str,
    use_error_message: bool = False,
):
    if user is None:
        return JSONResponse(NOT_AUTHENTICATED, status_code=401)
    try:
        auth_url = build_client(settings).get_authorization_url(state=str(user.id))
    except Exception as exc:
        logger.exception(failure_message)
        message = (str(exc) or failure_message) if use_error_message else failure_message
        return JSONResponse({"error": message}, status_code=500)
    return {"authUrl": auth_url}


async def _requested_integration_id(request: Request) -> str | None:
    """Optional ``integrationId`` from a JSON body; an empty body means all."""
    raw = await request.body()
    if not raw.strip():
        return None
    payload = json.loads(raw)
    if not isinstance(payload, dict):
        return None
    value = payload.get("integrationId")
    return str(value) if value else None


async def _disconnect_mailbox(
    request: Request,
    user: User | None,
    db: AsyncSession,
    delete_fn: Callable[..., Awaitable[int]],
    label: str,
):
    if user is None:
        return JSONResponse(NOT_AUTHENTICATED, status_code=401)
    try:
        integration_id = await _requested_integration_id(request)
    except ValueError:
        logger.exception("Invalid %s disconnect request", label)
        return JSONResponse({"error": "Internal server error"}, status_code=500)

    try:
        removed = await delete_fn(db, user.id, integration_id)
    except Exception:
        logger.exception("Error disconnecting %s", label)
        return JSONResponse({"error": f"Failed to disconnect {label}"}, status_code=500)
    logger.info("Removed %d %s integration(s) for %s", removed, label, user.email)
    return {"success": True}


async def _mailbox_callback(
    user: User | None,
    db: AsyncSession,
    build_client: Callable[..., OAuthProvider],
    provider: str,
    code: str | None,
    state: str | None,
    error: str | None,
) -> RedirectResponse:
    if error:
        logger.warning("%s OAuth error: %s", provider, error)
        return settings_redirect(error=f"{provider}_auth_failed")
    if not code:
        return settings_redirect(error="no_code")
    if user is None:
        return RedirectResponse("/login?error=not_authenticated", status_code=303)
    if state != str(user.id):
        return settings_redirect(error="unauthorized")

    try:
        client = build_client(settings)
        tokens = await client.exchange_code(code)
        profile = await client.fetch_profile(tokens.access_token)
    except Exception:
        logger.exception("Error in %s OAuth callback", provider)
        return settings_redirect(error="callback_failed")

    try:
        await integration_svc.upsert_email_integration(
            db,
            user.id,
            provider=provider,
            email_address=profile.email,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            token_expires_at=tokens.expires_at,
            display_name=profile.name,
            provider_user_id=profile.provider_user_id,
        )
    except Exception:
        logger.exception("Error saving %s integration", provider)
        return settings_redirect(error="save_failed")
    return settings_redirect(success=f"{provider}_connected")


# ── Gmail ──────────────────────────────────────────────────────────────────

@router.get("/gmail/auth")
async def gmail_auth(user: User | None = Depends(get_current_user)):
    return _auth_url_response(user, google.gmail_client, "Failed to initiate Gmail authentication")


@router.post("/gmail/disconnect")
async def gmail_disconnect(
    request: Request,
    user: User | None = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await _disconnect_mailbox(
        request, user, db, integration_svc.delete_gmail_integrations, "Gmail"
    )


@router.get("/gmail/callback")
async def gmail_callback(
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    user: User | None = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await _mailbox_callback(user, db, google.gmail_client, "gmail", code, state, error)


# ── Google Business Profile ────────────────────────────────────────────────

@router.get("/gmb/auth")
async def gmb_auth(user: User | None = Depends(get_current_user)):
    return _auth_url_response(
        user, google.gmb_client, "Failed to generate authorization URL", use_error_message=True
    )


@router.get("/gmb/callback")
async def gmb_callback(
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    user: User | None = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if error:
        logger.warning("GMB OAuth error: %s", error)
        return settings_redirect(error=error)
    if not code:
        return settings_redirect(error="no_code")
    if user is None:
        return RedirectResponse("/login?error=unauthorized", status_code=303)
    if state != str(user.id):
        return settings_redirect(error="unauthorized")

    try:
        client = google.gmb_client(settings)
        tokens = await client.exchange_code(code)
        accounts = await client.list_accounts(tokens.access_token)
        if not accounts:
            return settings_redirect(error="no_gmb_account")

        # First account and location; the user can switch later.
        account_id = google.resource_id(accounts[0].get("name", ""))
        locations = await client.list_locations(tokens.access_token, account_id)
        if not locations:
            return settings_redirect(error="no_gmb_locations")
        location = locations[0]

        await integration_svc.upsert_gmb_integration(
            db,
            user.id,
            account_id=account_id,
            location_id=google.resource_id(location.get("name", "")),
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            token_expires_at=tokens.expires_at,
            business_name=location.get("title") or location.get("locationName"),
        )
    except Exception as exc:
        logger.exception("Error in GMB callback")
        return settings_redirect(error=str(exc) or "callback_error")
    return settings_redirect(success="gmb_connected")


# ── Outlook / Office 365 ───────────────────────────────────────────────────

@router.get("/outlook/auth")
async def outlook_auth(user: User | None = Depends(get_current_user)):
    return _auth_url_response(
        user, microsoft.outlook_client, "Failed to initiate Outlook authentication"
    )


@router.post("/outlook/disconnect")
async def outlook_disconnect(
    request: Request,
    user: User | None = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await _disconnect_mailbox(
        request, user, db, integration_svc.delete_outlook_integrations, "Outlook"
    )


@router.get("/outlook/callback")
async def outlook_callback(
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    user: User | None = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await _mailbox_callback(
        user, db, microsoft.outlook_client, "outlook", code, state, error
    )
