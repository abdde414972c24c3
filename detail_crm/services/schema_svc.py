"""Schema migrations (alembic) and one-shot data fixes run from the admin CLI."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from ..database import make_engine
from ..models import Base
from ..models.customer import Customer

logger = logging.getLogger(__name__)

ALEMBIC_INI = Path(__file__).resolve().parents[1] / "alembic.ini"
NAME_COLUMNS = ("first_name", "last_name")
NAME_COLUMNS_REVISION = "002_customer_name_columns"


@dataclass
class NameMigrationResult:
    total: int = 0
    updated: int = 0
    skipped: int = 0


async def create_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def alembic_config(database_url: str) -> Config:
    cfg = Config(str(ALEMBIC_INI))
    # ConfigParser interpolates "%", which URL-encoded passwords contain
    cfg.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    return cfg


def upgrade(database_url: str, revision: str = "head") -> None:
    """Apply migrations up to ``revision``. Must not run inside an event loop."""
    command.upgrade(alembic_config(database_url), revision)
    logger.info("Database upgraded to %s", revision)


async def table_columns(database_url: str, table_name: str) -> set[str]:
    """Column names of ``table_name``; empty when the table does not exist."""

    def _columns(sync_conn) -> set[str]:
        inspector = inspect(sync_conn)
        if not inspector.has_table(table_name):
            return set()
        return {col["name"] for col in inspector.get_columns(table_name)}

    engine = make_engine(database_url)
    try:
        async with engine.connect() as conn:
            return await conn.run_sync(_columns)
    finally:
        await engine.dispose()


def add_name_columns(database_url: str) -> list[str]:
    """Upgrade through the customer name revision. Returns the columns it added."""
    before = asyncio.run(table_columns(database_url, "customers"))
    upgrade(database_url, NAME_COLUMNS_REVISION)
    after = asyncio.run(table_columns(database_url, "customers"))
    return [column for column in NAME_COLUMNS if column in after and column not in before]


def split_name(name: str) -> tuple[str, str] | None:
    """Split a full name into (first, last).

    A single word is used for both parts. Blank names return None.
    """
    parts = (name or "").split()
    if not parts:
        return None
    first = parts[0]
    last = " ".join(parts[1:]) or first
    return first, last


async def migrate_customer_names(db: AsyncSession) -> NameMigrationResult:
    """Populate first/last name from the legacy single name column."""
    result = NameMigrationResult()
    customers = (await db.execute(select(Customer))).scalars().all()
    for customer in customers:
        result.total += 1
        if customer.first_name and customer.last_name:
            result.skipped += 1
            continue
        parts = split_name(customer.name)
        if parts is None:
            result.skipped += 1
            continue
        customer.first_name, customer.last_name = parts
        result.updated += 1
    await db.commit()
    logger.info(
        "Customer name migration: %d updated, %d skipped of %d",
        result.updated, result.skipped, result.total,
    )
    return result
