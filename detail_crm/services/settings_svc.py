"""Settings page data: stages, opening hours, services and integrations."""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.calendar_settings import CalendarSettings
from ..models.catalog import Service
from ..models.integration import EmailIntegration, GmbIntegration, GoogleCalendarIntegration
from ..models.pipeline import PipelineStage
from .reads import fetch_all, fetch_one


async def load_settings(db: AsyncSession, user_id: uuid.UUID) -> dict:
    stages = await fetch_all(
        db,
        select(PipelineStage).order_by(PipelineStage.display_order),
        "pipeline stages",
    )
    calendar_settings = await fetch_one(db, select(CalendarSettings), "calendar settings")
    services = await fetch_all(
        db,
        select(Service).order_by(Service.display_order),
        "services",
    )
    email_integrations = await fetch_all(
        db,
        select(EmailIntegration)
        .where(EmailIntegration.user_id == user_id)
        .order_by(EmailIntegration.created_at.desc()),
        "email integrations",
    )
    google_calendars = await fetch_all(
        db,
        select(GoogleCalendarIntegration).where(GoogleCalendarIntegration.user_id == user_id),
        "Google Calendar integrations",
    )
    gmb_integration = await fetch_one(
        db,
        select(GmbIntegration).where(
            GmbIntegration.user_id == user_id,
            GmbIntegration.is_active.is_(True),
        ),
        "GMB integration",
    )
    return {
        "stages": stages,
        "calendar_settings": calendar_settings,
        "services": services,
        "email_integrations": email_integrations,
        "google_calendars": google_calendars,
        "gmb_integration": gmb_integration,
    }
