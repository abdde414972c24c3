"""Login account service."""

from __future__ import annotations

import asyncio
import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user import User
from ..security import hash_password, verify_password


class UserExistsError(Exception):
    pass


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    stmt = select(User).where(User.email == _normalize_email(email))
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_active_user(db: AsyncSession, user_id: str | uuid.UUID) -> User | None:
    try:
        uid = user_id if isinstance(user_id, uuid.UUID) else uuid.UUID(str(user_id))
    except ValueError:
        return None
    user = await db.get(User, uid)
    if user is None or not user.is_active:
        return None
    return user


async def list_users(db: AsyncSession) -> list[User]:
    result = await db.execute(select(User).order_by(User.created_at))
    return list(result.scalars().all())


async def create_user(
    db: AsyncSession,
    email: str,
    password: str,
    first_name: str | None = None,
    full_name: str | None = None,
    confirmed: bool = True,
) -> User:
    """Create an account; the email is marked confirmed unless told otherwise."""
    email_norm = _normalize_email(email)
    if not email_norm or "@" not in email_norm:
        raise ValueError("A valid email is required")
    if await get_user_by_email(db, email_norm):
        raise UserExistsError(f"User {email_norm} already exists")

    password_hash = await asyncio.to_thread(hash_password, password)
    user = User(
        email=email_norm,
        password_hash=password_hash,
        first_name=first_name or None,
        full_name=full_name or None,
        email_confirmed_at=_utcnow() if confirmed else None,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User | None:
    user = await get_user_by_email(db, email)
    if user is None or not user.is_active:
        return None
    if not await asyncio.to_thread(verify_password, password, user.password_hash):
        return None
    user.last_login_at = _utcnow()
    await db.commit()
    return user
