"""Job pipeline stages (kanban columns)."""

from __future__ import annotations

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UUIDMixin


class PipelineStage(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "pipeline_stages"

    name: Mapped[str] = mapped_column(String(100))
    description: Mapped[str | None] = mapped_column(Text, default=None)
    color: Mapped[str | None] = mapped_column(String(20), default=None)
    # "booking", "in_progress" or "completed"; jobs in completed stages count as done
    stage_type: Mapped[str | None] = mapped_column(String(20), default=None)
    display_order: Mapped[int] = mapped_column(Integer, default=0, index=True)
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False)

    jobs: Mapped[list["Job"]] = relationship(back_populates="pipeline_stage")  # noqa: F821

    def __repr__(self) -> str:
        return f"<PipelineStage {self.name!r}>"
