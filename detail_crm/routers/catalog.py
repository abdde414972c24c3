"""Service catalogue page."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..deps import require_user
from ..models.user import User
from ..services import catalog_svc
from ..templating import templates

router = APIRouter(tags=["catalog"])


@router.get("/services")
async def services(
    request: Request,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    data = await catalog_svc.load_catalog(db)
    return templates.TemplateResponse(request, "services.html", {"user": user, **data})
