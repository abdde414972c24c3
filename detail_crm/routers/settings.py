"""Settings page (stages, opening hours, services, integrations tab)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..deps import require_user
from ..models.user import User
from ..services import settings_svc
from ..templating import templates

router = APIRouter(tags=["settings"])

TABS = ("pipeline", "calendar", "services", "integrations")


@router.get("/settings")
async def settings_page(
    request: Request,
    tab: str = "pipeline",
    success: str | None = None,
    error: str | None = None,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    data = await settings_svc.load_settings(db, user.id)
    return templates.TemplateResponse(
        request,
        "settings.html",
        {
            "user": user,
            "tab": tab if tab in TABS else "pipeline",
            "tabs": TABS,
            "success": success,
            "error": error,
            **data,
        },
    )
