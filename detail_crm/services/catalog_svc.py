"""Service catalogue page: categories, services and add-ons."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models.catalog import AddOn, Service, ServiceCategory
from .reads import fetch_all


def group_by_category(
    categories: list[ServiceCategory], services: list[Service]
) -> tuple[list[dict], list[Service]]:
    """One section per category in category order; services without one go last."""
    sections = [{"category": category, "services": []} for category in categories]
    by_id = {section["category"].id: section for section in sections}
    uncategorized: list[Service] = []
    for service in services:
        section = by_id.get(service.category_id)
        if section is None:
            uncategorized.append(service)
        else:
            section["services"].append(service)
    return sections, uncategorized


async def load_catalog(db: AsyncSession) -> dict:
    categories = await fetch_all(
        db,
        select(ServiceCategory).order_by(ServiceCategory.display_order),
        "service categories",
    )
    all_services = await fetch_all(
        db,
        select(Service).options(selectinload(Service.category)).order_by(Service.display_order),
        "services",
    )
    add_ons = await fetch_all(
        db,
        select(AddOn).where(AddOn.is_active.is_(True)).order_by(AddOn.name),
        "add-ons",
    )
    active = [service for service in all_services if service.is_active]
    sections, uncategorized = group_by_category(categories, active)
    return {
        "categories": categories,
        "sections": sections,
        "uncategorized": uncategorized,
        "all_services": all_services,
        "add_ons": add_ons,
    }
