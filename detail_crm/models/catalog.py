"""Service catalogue: categories, services and add-ons."""

from __future__ import annotations

import uuid

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UUIDMixin

ADDON_TYPES = ("standard", "upgrade", "coating_upgrade")


class ServiceCategory(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "service_categories"

    name: Mapped[str] = mapped_column(String(100))
    description: Mapped[str | None] = mapped_column(Text, default=None)
    display_order: Mapped[int] = mapped_column(Integer, default=0)

    services: Mapped[list["Service"]] = relationship(back_populates="category")

    def __repr__(self) -> str:
        return f"<ServiceCategory {self.name!r}>"


class Service(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "services"

    category_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("service_categories.id", ondelete="SET NULL"), default=None, index=True
    )
    name: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text, default=None)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, default=None)
    duration_text: Mapped[str | None] = mapped_column(String(50), default=None)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    requires_quote: Mapped[bool] = mapped_column(Boolean, default=False)
    display_order: Mapped[int] = mapped_column(Integer, default=0)

    category: Mapped["ServiceCategory | None"] = relationship(back_populates="services")

    def __repr__(self) -> str:
        return f"<Service {self.name!r}>"


class AddOn(UUIDMixin, TimestampMixin, Base):
    """Optional extra attached to a job. Prices are stored in pence."""

    __tablename__ = "add_ons"

    name: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text, default=None)
    price_excl_vat: Mapped[int] = mapped_column(Integer, default=0)
    price_incl_vat: Mapped[int] = mapped_column(Integer, default=0)
    addon_type: Mapped[str] = mapped_column(String(20), default="standard")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    display_order: Mapped[int] = mapped_column(Integer, default=0)

    def __repr__(self) -> str:
        return f"<AddOn {self.name!r} ({self.addon_type})>"
