"""Persist and remove third-party integration credentials."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.integration import (
    OUTLOOK_PROVIDERS,
    EmailIntegration,
    GmbIntegration,
    GoogleCalendarIntegration,
)


def _as_uuid(value: str | uuid.UUID) -> uuid.UUID:
    return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))


# ── Disconnect ─────────────────────────────────────────────────────────────

async def delete_google_calendar_integrations(db: AsyncSession, user_id: uuid.UUID) -> int:
    """Remove every Google Calendar connection the user owns."""
    stmt = delete(GoogleCalendarIntegration).where(GoogleCalendarIntegration.user_id == user_id)
    result = await db.execute(stmt)
    await db.commit()
    return result.rowcount or 0


async def delete_email_integrations(
    db: AsyncSession,
    user_id: uuid.UUID,
    providers: tuple[str, ...],
    integration_id: str | uuid.UUID | None = None,
) -> int:
    """Remove the user's mailbox rows for the given providers.

    With ``integration_id`` only that row is removed, and only if it also
    matches the user and provider filter.
    """
    stmt = delete(EmailIntegration).where(
        EmailIntegration.user_id == user_id,
        EmailIntegration.provider.in_(providers),
    )
    if integration_id:
        stmt = stmt.where(EmailIntegration.id == _as_uuid(integration_id))
    result = await db.execute(stmt)
    await db.commit()
    return result.rowcount or 0


async def delete_gmail_integrations(
    db: AsyncSession, user_id: uuid.UUID, integration_id: str | uuid.UUID | None = None
) -> int:
    return await delete_email_integrations(db, user_id, ("gmail",), integration_id)


async def delete_outlook_integrations(
    db: AsyncSession, user_id: uuid.UUID, integration_id: str | uuid.UUID | None = None
) -> int:
    return await delete_email_integrations(db, user_id, OUTLOOK_PROVIDERS, integration_id)


# ── Connect (OAuth callbacks) ──────────────────────────────────────────────

async def upsert_google_calendar_integration(
    db: AsyncSession,
    user_id: uuid.UUID,
    email: str,
    access_token: str,
    refresh_token: str | None,
    token_expiry: datetime | None,
) -> GoogleCalendarIntegration:
    stmt = select(GoogleCalendarIntegration).where(
        GoogleCalendarIntegration.user_id == user_id,
        GoogleCalendarIntegration.email == email,
    )
    integration = (await db.execute(stmt)).scalar_one_or_none()
    if integration is None:
        integration = GoogleCalendarIntegration(user_id=user_id, email=email)
        db.add(integration)

    integration.access_token = access_token
    # Google omits the refresh token on re-consent; keep the stored one.
    if refresh_token:
        integration.refresh_token = refresh_token
    integration.token_expiry = token_expiry
    integration.calendar_id = "primary"
    integration.sync_enabled = True
    await db.commit()
    await db.refresh(integration)
    return integration


async def upsert_email_integration(
    db: AsyncSession,
    user_id: uuid.UUID,
    provider: str,
    email_address: str,
    access_token: str,
    refresh_token: str | None,
    token_expires_at: datetime | None,
    display_name: str | None = None,
    provider_user_id: str | None = None,
) -> EmailIntegration:
    stmt = select(EmailIntegration).where(
        EmailIntegration.user_id == user_id,
        EmailIntegration.provider == provider,
        EmailIntegration.email_address == email_address,
    )
    integration = (await db.execute(stmt)).scalar_one_or_none()
    if integration is None:
        integration = EmailIntegration(
            user_id=user_id, provider=provider, email_address=email_address
        )
        db.add(integration)

    integration.display_name = display_name
    integration.provider_user_id = provider_user_id
    integration.access_token = access_token
    if refresh_token:
        integration.refresh_token = refresh_token
    integration.token_expires_at = token_expires_at
    integration.is_active = True
    integration.sync_enabled = True
    await db.commit()
    await db.refresh(integration)
    return integration


async def upsert_gmb_integration(
    db: AsyncSession,
    user_id: uuid.UUID,
    account_id: str,
    location_id: str,
    access_token: str,
    refresh_token: str | None,
    token_expires_at: datetime | None,
    business_name: str | None = None,
) -> GmbIntegration:
    stmt = select(GmbIntegration).where(
        GmbIntegration.user_id == user_id,
        GmbIntegration.account_id == account_id,
        GmbIntegration.location_id == location_id,
    )
    integration = (await db.execute(stmt)).scalar_one_or_none()
    if integration is None:
        integration = GmbIntegration(
            user_id=user_id, account_id=account_id, location_id=location_id
        )
        db.add(integration)

    integration.business_name = business_name
    integration.access_token = access_token
    if refresh_token:
        integration.refresh_token = refresh_token
    integration.token_expires_at = token_expires_at
    integration.is_active = True
    await db.commit()
    await db.refresh(integration)
    return integration
