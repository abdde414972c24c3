"""Kanban board and booking calendar pages."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..deps import require_user
from ..models.user import User
from ..services import job_svc
from ..templating import templates

router = APIRouter(tags=["jobs"])


@router.get("/board")
async def board(
    request: Request,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    data = await job_svc.load_board(db)
    return templates.TemplateResponse(request, "board.html", {"user": user, **data})


@router.get("/calendar")
async def calendar(
    request: Request,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    data = await job_svc.load_calendar(db)
    return templates.TemplateResponse(request, "calendar.html", {"user": user, **data})
