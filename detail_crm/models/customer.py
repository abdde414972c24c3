"""Customer and Car models."""

from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, UUIDMixin


class Customer(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "customers"

    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), default=None, index=True
    )
    name: Mapped[str] = mapped_column(String(200))
    first_name: Mapped[str | None] = mapped_column(String(100), default=None)
    last_name: Mapped[str | None] = mapped_column(String(100), default=None)
    phone: Mapped[str | None] = mapped_column(String(50), default=None)
    email: Mapped[str | None] = mapped_column(String(255), default=None)
    address: Mapped[str | None] = mapped_column(Text, default=None)
    business_name: Mapped[str | None] = mapped_column(String(200), default=None)
    notes: Mapped[str | None] = mapped_column(Text, default=None)

    cars: Mapped[list["Car"]] = relationship(
        back_populates="customer", cascade="all, delete-orphan", order_by="Car.make"
    )
    jobs: Mapped[list["Job"]] = relationship(back_populates="customer")  # noqa: F821

    def __repr__(self) -> str:
        return f"<Customer {self.name!r}>"


class Car(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "cars"

    customer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("customers.id", ondelete="CASCADE"), index=True
    )
    make: Mapped[str] = mapped_column(String(100))
    model: Mapped[str] = mapped_column(String(100))
    year: Mapped[int | None] = mapped_column(Integer, default=None)
    color: Mapped[str | None] = mapped_column(String(50), default=None)
    registration_plate: Mapped[str | None] = mapped_column(String(20), default=None)
    size_category: Mapped[str | None] = mapped_column(String(20), default=None)
    notes: Mapped[str | None] = mapped_column(Text, default=None)

    customer: Mapped["Customer"] = relationship(back_populates="cars")

    @property
    def label(self) -> str:
        parts = [str(self.year)] if self.year else []
        parts.extend(p for p in (self.make, self.model) if p)
        return " ".join(parts)

    def __repr__(self) -> str:
        return f"<Car {self.label!r}>"
