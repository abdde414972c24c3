"""Google Business Profile reviews page data."""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models.integration import GmbIntegration, GmbReview
from ..models.job import Job
from .reads import fetch_all, fetch_one


def rating_summary(reviews: list[GmbReview]) -> dict:
    counts = {star: 0 for star in range(5, 0, -1)}
    rated = [r.star_rating for r in reviews if r.star_rating]
    for star in rated:
        if star in counts:
            counts[star] += 1
    average = round(sum(rated) / len(rated), 1) if rated else None
    return {
        "count": len(reviews),
        "average": average,
        "by_star": counts,
        "unreplied": sum(1 for r in reviews if not r.review_reply),
    }


async def load_reviews(db: AsyncSession, user_id: uuid.UUID) -> dict:
    integration = await fetch_one(
        db,
        select(GmbIntegration).where(
            GmbIntegration.user_id == user_id,
            GmbIntegration.is_active.is_(True),
        ),
        "GMB integration",
    )
    reviews = await fetch_all(
        db,
        select(GmbReview)
        .where(GmbReview.user_id == user_id)
        .options(
            selectinload(GmbReview.customer),
            selectinload(GmbReview.job).selectinload(Job.service),
        )
        .order_by(GmbReview.review_date.desc()),
        "reviews",
    )
    return {"integration": integration, "reviews": reviews, "summary": rating_summary(reviews)}
