"""Job (booking) and JobAddOn models."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UUIDMixin


class Job(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "jobs"

    customer_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("customers.id", ondelete="SET NULL"), default=None, index=True
    )
    car_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("cars.id", ondelete="SET NULL"), default=None
    )
    service_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("services.id", ondelete="SET NULL"), default=None, index=True
    )
    pipeline_stage_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("pipeline_stages.id", ondelete="SET NULL"), default=None, index=True
    )
    booking_datetime: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), default=None, index=True
    )
    duration_minutes: Mapped[int | None] = mapped_column(Integer, default=None)
    status: Mapped[str] = mapped_column(String(20), default="pending")
    total_price: Mapped[int | None] = mapped_column(Integer, default=None)
    notes: Mapped[str | None] = mapped_column(Text, default=None)

    customer: Mapped["Customer | None"] = relationship(back_populates="jobs")  # noqa: F821
    car: Mapped["Car | None"] = relationship()  # noqa: F821
    service: Mapped["Service | None"] = relationship()  # noqa: F821
    pipeline_stage: Mapped["PipelineStage | None"] = relationship(  # noqa: F821
        back_populates="jobs"
    )
    job_add_ons: Mapped[list["JobAddOn"]] = relationship(
        back_populates="job", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Job {self.id} ({self.status})>"


class JobAddOn(UUIDMixin, Base):
    __tablename__ = "job_add_ons"
    __table_args__ = (UniqueConstraint("job_id", "add_on_id", name="uq_job_add_on"),)

    job_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("jobs.id", ondelete="CASCADE"), index=True
    )
    add_on_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("add_ons.id", ondelete="CASCADE"), index=True
    )

    job: Mapped["Job"] = relationship(back_populates="job_add_ons")
    add_on: Mapped["AddOn"] = relationship()  # noqa: F821
