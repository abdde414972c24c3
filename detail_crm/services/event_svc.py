"""Event tracking (login outcomes, errors, timings)."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.event import EVENT_CATEGORIES, Event

logger = logging.getLogger(__name__)


async def track_event(
    db: AsyncSession,
    event_type: str,
    event_category: str = "user_action",
    *,
    user_id: uuid.UUID | None = None,
    event_data: dict[str, Any] | None = None,
    duration_ms: int | None = None,
    page_path: str | None = None,
    user_agent: str | None = None,
    success: bool = True,
    error_message: str | None = None,
) -> Event | None:
    """Record an event. Tracking failures are logged and never raised."""
    if event_category not in EVENT_CATEGORIES:
        event_category = "system_event"
    event = Event(
        user_id=user_id,
        event_type=event_type,
        event_category=event_category,
        event_data=event_data,
        duration_ms=duration_ms,
        page_path=page_path,
        user_agent=(user_agent or None) and user_agent[:512],
        success=success,
        error_message=error_message,
    )
    try:
        db.add(event)
        await db.commit()
    except SQLAlchemyError:
        logger.exception("Failed to track event %s", event_type)
        await db.rollback()
        return None
    return event
