"""Shared Jinja2 environment for page routers."""

from __future__ import annotations

from datetime import datetime

from fastapi.templating import Jinja2Templates

from .config import settings

templates = Jinja2Templates(directory=str(settings.templates_dir))


def money(pence: int | None) -> str:
    """Format an integer amount of pence as pounds."""
    if pence is None:
        return "-"
    return f"£{pence / 100:,.2f}"


def when(value: datetime | None, fmt: str = "%d %b %Y %H:%M") -> str:
    if value is None:
        return "-"
    return value.strftime(fmt)


templates.env.filters["money"] = money
templates.env.filters["when"] = when
templates.env.globals["app_title"] = settings.app_title
