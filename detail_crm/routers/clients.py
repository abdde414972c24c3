"""Clients, projects and customers list pages."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db
from ..deps import require_user
from ..models.user import User
from ..services import client_svc
from ..templating import templates

router = APIRouter(tags=["clients"])


@router.get("/clients")
async def clients(
    request: Request,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    data = await client_svc.load_clients(db)
    return templates.TemplateResponse(request, "clients.html", {"user": user, **data})


@router.get("/projects")
async def projects(
    request: Request,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    data = await client_svc.load_projects(db)
    return templates.TemplateResponse(request, "projects.html", {"user": user, **data})


@router.get("/customers")
async def customers(
    request: Request,
    user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    data = await client_svc.load_customers(db)
    return templates.TemplateResponse(request, "customers.html", {"user": user, **data})
