"""Read helpers for page loaders.

A failed read never fails the page: the error is logged, the session is
rolled back so later queries on it still work, and an empty value is
returned in place of the rows.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import Select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


async def _recover(db: AsyncSession, label: str) -> None:
    logger.exception("Error fetching %s", label)
    # Rows already loaded for the page must stay readable after the rollback.
    db.expunge_all()
    try:
        await db.rollback()
    except SQLAlchemyError:
        logger.warning("Rollback after failed read of %s also failed", label)


async def fetch_all(db: AsyncSession, stmt: Select, label: str) -> list[Any]:
    try:
        result = await db.execute(stmt)
        return list(result.scalars().unique().all())
    except SQLAlchemyError:
        await _recover(db, label)
        return []


async def fetch_one(db: AsyncSession, stmt: Select, label: str) -> Any | None:
    try:
        result = await db.execute(stmt)
        return result.scalars().first()
    except SQLAlchemyError:
        await _recover(db, label)
        return None


async def fetch_count(db: AsyncSession, stmt: Select, label: str) -> int:
    try:
        result = await db.execute(stmt)
        return int(result.scalar() or 0)
    except SQLAlchemyError:
        await _recover(db, label)
        return 0
