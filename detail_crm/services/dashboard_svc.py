"""Dashboard headline counts."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.client import Client, Project
from .reads import fetch_count


async def load_dashboard(db: AsyncSession) -> dict:
    client_count = await fetch_count(db, select(func.count()).select_from(Client), "clients")
    project_count = await fetch_count(db, select(func.count()).select_from(Project), "projects")
    return {"client_count": client_count, "project_count": project_count}
