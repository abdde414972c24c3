"""File storage buckets.

Each bucket is a row in ``storage_buckets`` plus a directory under the
configured storage root:

  data/storage/<bucket-name>/
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.storage import StorageBucket

logger = logging.getLogger(__name__)

DEFAULT_BUCKET = "customer-files"
DEFAULT_FILE_SIZE_LIMIT = 52_428_800  # 50 MB

_BUCKET_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9._-]{1,62}$")


class StorageError(Exception):
    pass


def _normalize_bucket_name(name: str) -> str:
    value = (name or "").strip().lower()
    if not _BUCKET_NAME_RE.match(value) or ".." in value:
        raise StorageError(
            f"Invalid bucket name {name!r}: use 2-63 lowercase letters, digits, '.', '_' or '-'"
        )
    return value


def bucket_path(root_dir: str | Path, name: str) -> Path:
    return Path(root_dir) / _normalize_bucket_name(name)


async def list_buckets(db: AsyncSession) -> list[StorageBucket]:
    result = await db.execute(select(StorageBucket).order_by(StorageBucket.name))
    return list(result.scalars().all())


async def get_bucket(db: AsyncSession, name: str) -> StorageBucket | None:
    stmt = select(StorageBucket).where(StorageBucket.name == _normalize_bucket_name(name))
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def ensure_bucket(
    db: AsyncSession,
    name: str,
    root_dir: str | Path,
    public: bool = False,
    file_size_limit: int | None = DEFAULT_FILE_SIZE_LIMIT,
) -> tuple[StorageBucket, bool]:
    """Create the bucket if missing. Returns (bucket, created).

    An existing bucket keeps its settings; only its directory is (re)created.
    """
    bucket_name = _normalize_bucket_name(name)
    if file_size_limit is not None and file_size_limit <= 0:
        raise StorageError("file_size_limit must be positive")

    path = bucket_path(root_dir, bucket_name)
    path.mkdir(parents=True, exist_ok=True)

    bucket = await get_bucket(db, bucket_name)
    if bucket is not None:
        return bucket, False

    bucket = StorageBucket(name=bucket_name, public=public, file_size_limit=file_size_limit)
    db.add(bucket)
    await db.commit()
    await db.refresh(bucket)
    logger.info("Created storage bucket %s at %s", bucket_name, path)
    return bucket, True
