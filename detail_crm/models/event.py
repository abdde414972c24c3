"""Usage/telemetry events shown on the metrics page."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UUIDMixin

EVENT_CATEGORIES = ("user_action", "system_event", "error", "performance")


class Event(UUIDMixin, Base):
    __tablename__ = "events"

    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), default=None, index=True
    )
    event_type: Mapped[str] = mapped_column(String(100), index=True)
    event_category: Mapped[str] = mapped_column(String(50), default="user_action")
    event_data: Mapped[dict | None] = mapped_column(JSON, default=None)
    duration_ms: Mapped[int | None] = mapped_column(Integer, default=None)
    page_path: Mapped[str | None] = mapped_column(String(500), default=None)
    user_agent: Mapped[str | None] = mapped_column(String(512), default=None)
    success: Mapped[bool] = mapped_column(Boolean, default=True)
    error_message: Mapped[str | None] = mapped_column(Text, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), index=True
    )

    def __repr__(self) -> str:
        return f"<Event {self.event_type!r} ({self.event_category})>"
