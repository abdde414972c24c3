"""File storage bucket registry."""

from __future__ import annotations

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, UUIDMixin


class StorageBucket(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "storage_buckets"

    name: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    public: Mapped[bool] = mapped_column(Boolean, default=False)
    file_size_limit: Mapped[int | None] = mapped_column(Integer, default=None)

    def __repr__(self) -> str:
        return f"<StorageBucket {self.name!r}>"
