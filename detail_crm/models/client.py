"""Business clients and their projects (separate from detailing customers)."""

from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UUIDMixin

CLIENT_STAGES = ("lead", "active", "won", "lost")


class Client(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "clients"

    name: Mapped[str] = mapped_column(String(200))
    company: Mapped[str | None] = mapped_column(String(200), default=None)
    email: Mapped[str | None] = mapped_column(String(255), default=None)
    phone: Mapped[str | None] = mapped_column(String(50), default=None)
    # Free-form sales stage; not related to pipeline_stages rows.
    pipeline_stage: Mapped[str] = mapped_column(String(20), default="lead", index=True)

    projects: Mapped[list["Project"]] = relationship(
        back_populates="client", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Client {self.name!r}>"


class Project(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "projects"

    client_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("clients.id", ondelete="CASCADE"), default=None, index=True
    )
    name: Mapped[str] = mapped_column(String(200))
    status: Mapped[str] = mapped_column(String(20), default="planning")
    budget: Mapped[int | None] = mapped_column(Integer, default=None)

    client: Mapped["Client | None"] = relationship(back_populates="projects")

    def __repr__(self) -> str:
        return f"<Project {self.name!r}>"
