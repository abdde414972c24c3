"""Business opening hours used by the booking calendar."""

from __future__ import annotations

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, OwnerMixin, TimestampMixin, UUIDMixin

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class CalendarSettings(UUIDMixin, TimestampMixin, OwnerMixin, Base):
    __tablename__ = "calendar_settings"

    # Times are "HH:MM" strings; None means closed all day.
    monday_open: Mapped[str | None] = mapped_column(String(5), default="09:00")
    monday_close: Mapped[str | None] = mapped_column(String(5), default="17:00")
    monday_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    tuesday_open: Mapped[str | None] = mapped_column(String(5), default="09:00")
    tuesday_close: Mapped[str | None] = mapped_column(String(5), default="17:00")
    tuesday_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    wednesday_open: Mapped[str | None] = mapped_column(String(5), default="09:00")
    wednesday_close: Mapped[str | None] = mapped_column(String(5), default="17:00")
    wednesday_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    thursday_open: Mapped[str | None] = mapped_column(String(5), default="09:00")
    thursday_close: Mapped[str | None] = mapped_column(String(5), default="17:00")
    thursday_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    friday_open: Mapped[str | None] = mapped_column(String(5), default="09:00")
    friday_close: Mapped[str | None] = mapped_column(String(5), default="17:00")
    friday_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    saturday_open: Mapped[str | None] = mapped_column(String(5), default=None)
    saturday_close: Mapped[str | None] = mapped_column(String(5), default=None)
    saturday_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    sunday_open: Mapped[str | None] = mapped_column(String(5), default=None)
    sunday_close: Mapped[str | None] = mapped_column(String(5), default=None)
    sunday_enabled: Mapped[bool] = mapped_column(Boolean, default=False)
    buffer_minutes: Mapped[int] = mapped_column(Integer, default=30)

    def opening_hours(self) -> list[dict]:
        """Per-weekday rows for display: day, enabled, open, close."""
        return [
            {
                "day": day,
                "enabled": getattr(self, f"{day}_enabled"),
                "open": getattr(self, f"{day}_open"),
                "close": getattr(self, f"{day}_close"),
            }
            for day in WEEKDAYS
        ]
