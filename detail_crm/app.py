"""FastAPI application for the Detail Dynamics CRM."""

from __future__ import annotations

from contextlib import asynccontextmanager
from urllib.parse import quote

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse

from .config import settings
from .deps import LoginRequired


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Auto-create tables for SQLite (local dev); PostgreSQL schemas are managed with the admin CLI
    if "sqlite" in settings.database_url:
        from .database import engine
        from .services.schema_svc import create_tables
        await create_tables(engine)
    yield


app = FastAPI(title=settings.app_title, lifespan=lifespan)


@app.exception_handler(LoginRequired)
async def login_required_handler(request: Request, exc: LoginRequired):
    target = quote(exc.next_path, safe="/")
    return RedirectResponse(f"/login?next={target}", status_code=303)


# Import and register routers
from .routers import (  # noqa: E402
    auth, dashboard, board, reports, settings as settings_router, clients, catalog,
    google_auth, integrations, health,
)

app.include_router(auth.router)
app.include_router(dashboard.router)
app.include_router(board.router)
app.include_router(reports.router)
app.include_router(settings_router.router)
app.include_router(clients.router)
app.include_router(catalog.router)
app.include_router(google_auth.router)
app.include_router(integrations.router)
app.include_router(health.router)
