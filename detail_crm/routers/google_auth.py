"""Google Calendar connect / disconnect API."""

from __future__ import annotations

import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..deps import get_current_user
from ..integrations import google
from ..models.user import User
from ..services import integration_svc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth/google", tags=["integrations"])


def settings_redirect(**params: str) -> RedirectResponse:
    query = urlencode({"tab": "integrations", **params})
    return RedirectResponse(f"/settings?{query}", status_code=303)


@router.get("/initiate")
async def initiate(user: User | None = Depends(get_current_user)):
    if user is None:
        return JSONResponse({"error": "Unauthorized"}, status_code=401)
    try:
        client = google.google_calendar_client(settings)
        auth_url = client.get_authorization_url(state=str(user.id))
    except Exception as exc:
        logger.exception("Error initiating Google OAuth")
        return JSONResponse(
            {"error": str(exc) or "Failed to initiate Google OAuth"}, status_code=500
        )
    return {"authUrl": auth_url}


@router.post("/disconnect")
async def disconnect(
    user: User | None = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if user is None:
        return JSONResponse({"error": "Unauthorized"}, status_code=401)
    try:
        removed = await integration_svc.delete_google_calendar_integrations(db, user.id)
    except Exception as exc:
        logger.exception("Error disconnecting Google Calendar")
        return JSONResponse({"error": str(exc) or "Failed to disconnect"}, status_code=500)
    logger.info("Removed %d Google Calendar integration(s) for %s", removed, user.email)
    return {"success": True}


@router.get("/callback")
async def callback(
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    user: User | None = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if error:
        logger.warning("Google OAuth denied: %s", error)
        return settings_redirect(error="google_auth_denied")
    if not code or not state:
        return settings_redirect(error="invalid_callback")
    # state carries the id of the user who started the flow
    if user is None or str(user.id) != state:
        return settings_redirect(error="unauthorized")

    try:
        client = google.google_calendar_client(settings)
        tokens = await client.exchange_code(code)
        profile = await client.fetch_profile(tokens.access_token)
        await integration_svc.upsert_google_calendar_integration(
            db,
            user.id,
            email=profile.email,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            token_expiry=tokens.expires_at,
        )
    except Exception as exc:
        logger.exception("Error in Google OAuth callback")
        return settings_redirect(error=str(exc) or "oauth_failed")
    return settings_redirect(success="google_connected")
