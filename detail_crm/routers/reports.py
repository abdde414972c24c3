"""Analytics, usage metrics and reviews pages."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import get_db
from ..deps import require_user
from ..models.user import User
from ..services import analytics_svc, metrics_svc, reviews_svc
from ..templating import templates

router = APIRouter(tags=["reports"])


@router.get("/analytics")
async def analytics(
    request: Request,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    data = await analytics_svc.load_analytics(db)
    return templates.TemplateResponse(request, "analytics.html", {"user": user, **data})


@router.get("/metrics")
async def metrics(
    request: Request,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    data = await metrics_svc.load_metrics(db, window_days=settings.metrics_window_days)
    return templates.TemplateResponse(request, "metrics.html", {"user": user, **data})


@router.get("/reviews")
async def reviews(
    request: Request,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    data = await reviews_svc.load_reviews(db, user.id)
    return templates.TemplateResponse(request, "reviews.html", {"user": user, **data})
