"""Job queries for the pipeline board and booking calendar."""

from __future__ import annotations

from collections import OrderedDict
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models.job import Job, JobAddOn
from ..models.pipeline import PipelineStage
from .reads import fetch_all


def _job_options():
    return (
        selectinload(Job.customer),
        selectinload(Job.car),
        selectinload(Job.service),
        selectinload(Job.pipeline_stage),
    )


# ── Board ──────────────────────────────────────────────────────────────────

def group_by_stage(stages: list[PipelineStage], jobs: list[Job]) -> tuple[list[dict], list[Job]]:
    """Split jobs into one column per stage; jobs with no known stage go last."""
    columns = [{"stage": stage, "jobs": []} for stage in stages]
    by_id = {col["stage"].id: col for col in columns}
    unassigned: list[Job] = []
    for job in jobs:
        col = by_id.get(job.pipeline_stage_id)
        if col is None:
            unassigned.append(job)
        else:
            col["jobs"].append(job)
    return columns, unassigned


async def load_board(db: AsyncSession) -> dict:
    stages = await fetch_all(
        db,
        select(PipelineStage).order_by(PipelineStage.display_order),
        "pipeline stages",
    )
    jobs = await fetch_all(
        db,
        select(Job)
        .options(*_job_options(), selectinload(Job.job_add_ons).selectinload(JobAddOn.add_on))
        .order_by(Job.booking_datetime.asc()),
        "jobs",
    )
    columns, unassigned = group_by_stage(stages, jobs)
    return {"stages": stages, "jobs": jobs, "columns": columns, "unassigned": unassigned}


# ── Calendar ───────────────────────────────────────────────────────────────

def group_by_day(jobs: list[Job]) -> "OrderedDict[date | None, list[Job]]":
    days: OrderedDict[date | None, list[Job]] = OrderedDict()
    for job in jobs:
        key = job.booking_datetime.date() if job.booking_datetime else None
        days.setdefault(key, []).append(job)
    return days


async def load_calendar(db: AsyncSession) -> dict:
    jobs = await fetch_all(
        db,
        select(Job).options(*_job_options()).order_by(Job.booking_datetime.asc()),
        "jobs",
    )
    stages = await fetch_all(
        db,
        select(PipelineStage)
        .where(PipelineStage.is_archived.is_(False))
        .order_by(PipelineStage.display_order),
        "pipeline stages",
    )
    return {"jobs": jobs, "stages": stages, "days": group_by_day(jobs)}
