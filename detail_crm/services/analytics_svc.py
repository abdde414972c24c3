"""Service and add-on popularity analytics."""

from __future__ import annotations

from collections import Counter

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models.catalog import ServiceCategory
from ..models.job import Job, JobAddOn
from .reads import fetch_all


def summarize_jobs(jobs: list[Job], categories: list[ServiceCategory]) -> dict:
    """Aggregate job rows into counts and add-on revenue (pence)."""
    service_counts: Counter[str] = Counter()
    category_counts: Counter = Counter()
    addon_counts: Counter[str] = Counter()
    addon_revenue: Counter[str] = Counter()
    total_revenue = 0

    for job in jobs:
        total_revenue += job.total_price or 0
        if job.service is not None:
            service_counts[job.service.name] += 1
            if job.service.category_id is not None:
                category_counts[job.service.category_id] += 1
        for link in job.job_add_ons:
            if link.add_on is None:
                continue
            addon_counts[link.add_on.name] += 1
            addon_revenue[link.add_on.name] += link.add_on.price_incl_vat or 0

    by_category = [
        {"category": cat, "jobs": category_counts.get(cat.id, 0)} for cat in categories
    ]
    return {
        "job_count": len(jobs),
        "total_revenue": total_revenue,
        "top_services": service_counts.most_common(),
        "top_add_ons": addon_counts.most_common(),
        "add_on_revenue": dict(addon_revenue),
        "by_category": by_category,
    }


async def load_analytics(db: AsyncSession) -> dict:
    jobs = await fetch_all(
        db,
        select(Job)
        .options(
            selectinload(Job.service),
            selectinload(Job.job_add_ons).selectinload(JobAddOn.add_on),
        )
        .order_by(Job.booking_datetime.desc()),
        "jobs",
    )
    categories = await fetch_all(
        db,
        select(ServiceCategory).order_by(ServiceCategory.display_order),
        "service categories",
    )
    return {"jobs": jobs, "categories": categories, "summary": summarize_jobs(jobs, categories)}
