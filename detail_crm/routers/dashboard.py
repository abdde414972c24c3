"""Dashboard route - greeting + client/project counts."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..deps import require_user
from ..models.user import User
from ..services import dashboard_svc
from ..templating import templates

router = APIRouter(tags=["dashboard"])


@router.get("/")
async def index():
    return RedirectResponse("/dashboard", status_code=303)


@router.get("/dashboard")
async def dashboard(
    request: Request,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    stats = await dashboard_svc.load_dashboard(db)
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {"user": user, "display_name": user.display_name, **stats},
    )
