"""Third-party integration credentials and synced Google reviews."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, OwnerMixin, TimestampMixin, UUIDMixin

OUTLOOK_PROVIDERS = ("outlook", "office365")


class GoogleCalendarIntegration(UUIDMixin, TimestampMixin, OwnerMixin, Base):
    __tablename__ = "google_calendar_integrations"
    __table_args__ = (
        UniqueConstraint("user_id", "email", name="uq_google_calendar_user_email"),
    )

    email: Mapped[str] = mapped_column(String(255))
    access_token: Mapped[str] = mapped_column(Text)
    refresh_token: Mapped[str | None] = mapped_column(Text, default=None)
    token_expiry: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
    calendar_id: Mapped[str] = mapped_column(String(255), default="primary")
    sync_enabled: Mapped[bool] = mapped_column(Boolean, default=True)

    def __repr__(self) -> str:
        return f"<GoogleCalendarIntegration {self.email!r}>"


class EmailIntegration(UUIDMixin, TimestampMixin, OwnerMixin, Base):
    """Connected mailbox (Gmail, Outlook or Office 365)."""

    __tablename__ = "email_integrations"
    __table_args__ = (
        UniqueConstraint(
            "user_id", "provider", "email_address", name="uq_email_integration_user_provider_email"
        ),
    )

    provider: Mapped[str] = mapped_column(String(20), index=True)
    email_address: Mapped[str] = mapped_column(String(255))
    display_name: Mapped[str | None] = mapped_column(String(200), default=None)
    provider_user_id: Mapped[str | None] = mapped_column(String(255), default=None)
    access_token: Mapped[str] = mapped_column(Text)
    refresh_token: Mapped[str | None] = mapped_column(Text, default=None)
    token_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=None
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    sync_enabled: Mapped[bool] = mapped_column(Boolean, default=True)

    def __repr__(self) -> str:
        return f"<EmailIntegration {self.provider}:{self.email_address!r}>"


class GmbIntegration(UUIDMixin, TimestampMixin, OwnerMixin, Base):
    """Google Business Profile location connected for reviews."""

    __tablename__ = "gmb_integrations"

    account_id: Mapped[str] = mapped_column(String(100))
    location_id: Mapped[str] = mapped_column(String(100))
    business_name: Mapped[str | None] = mapped_column(String(200), default=None)
    access_token: Mapped[str] = mapped_column(Text)
    refresh_token: Mapped[str | None] = mapped_column(Text, default=None)
    token_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=None
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    reviews: Mapped[list["GmbReview"]] = relationship(back_populates="integration")

    def __repr__(self) -> str:
        return f"<GmbIntegration {self.business_name or self.location_id!r}>"


class GmbReview(UUIDMixin, TimestampMixin, OwnerMixin, Base):
    __tablename__ = "gmb_reviews"
    __table_args__ = (UniqueConstraint("integration_id", "review_id", name="uq_gmb_review"),)

    integration_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("gmb_integrations.id", ondelete="CASCADE"), index=True
    )
    review_id: Mapped[str] = mapped_column(String(255))
    reviewer_name: Mapped[str | None] = mapped_column(String(200), default=None)
    star_rating: Mapped[int] = mapped_column(Integer, default=0)
    comment: Mapped[str | None] = mapped_column(Text, default=None)
    review_reply: Mapped[str | None] = mapped_column(Text, default=None)
    review_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=None, index=True
    )
    customer_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("customers.id", ondelete="SET NULL"), default=None
    )
    job_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("jobs.id", ondelete="SET NULL"), default=None
    )

    integration: Mapped["GmbIntegration"] = relationship(back_populates="reviews")
    customer: Mapped["Customer | None"] = relationship()  # noqa: F821
    job: Mapped["Job | None"] = relationship()  # noqa: F821

    def __repr__(self) -> str:
        return f"<GmbReview {self.review_id!r} ({self.star_rating})>"
