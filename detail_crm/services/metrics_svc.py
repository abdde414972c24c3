"""Usage metrics from the events table."""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.event import EVENT_CATEGORIES, Event
from .reads import fetch_all


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def summarize_events(events: list[Event]) -> dict:
    by_category = {cat: 0 for cat in EVENT_CATEGORIES}
    by_type: Counter[str] = Counter()
    failures = 0
    durations: list[int] = []

    for event in events:
        by_category[event.event_category] = by_category.get(event.event_category, 0) + 1
        by_type[event.event_type] += 1
        if not event.success:
            failures += 1
        if event.duration_ms is not None:
            durations.append(event.duration_ms)

    avg_duration = round(sum(durations) / len(durations)) if durations else None
    return {
        "total": len(events),
        "by_category": by_category,
        "top_types": by_type.most_common(10),
        "failures": failures,
        "avg_duration_ms": avg_duration,
    }


async def load_metrics(db: AsyncSession, window_days: int = 30, now: datetime | None = None) -> dict:
    since = (now or _utcnow()) - timedelta(days=window_days)
    events = await fetch_all(
        db,
        select(Event).where(Event.created_at >= since).order_by(Event.created_at.desc()),
        "events",
    )
    return {
        "events": events,
        "since": since,
        "window_days": window_days,
        "summary": summarize_events(events),
    }
