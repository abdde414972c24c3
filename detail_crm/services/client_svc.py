"""Clients, projects and detailing customers list views."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models.client import Client, Project
from ..models.customer import Customer
from ..models.job import Job
from ..models.pipeline import PipelineStage
from .reads import fetch_all

# Stages a client must be in before projects can be opened for them.
PROJECT_CLIENT_STAGES = ("active", "won")
COMPLETED_STAGE_TYPE = "completed"


async def load_clients(db: AsyncSession) -> dict:
    clients = await fetch_all(
        db, select(Client).order_by(Client.created_at.desc()), "clients"
    )
    return {"clients": clients}


async def load_projects(db: AsyncSession) -> dict:
    projects = await fetch_all(
        db,
        select(Project).options(selectinload(Project.client)).order_by(Project.created_at.desc()),
        "projects",
    )
    clients = await fetch_all(
        db,
        select(Client)
        .where(Client.pipeline_stage.in_(PROJECT_CLIENT_STAGES))
        .order_by(Client.name),
        "clients",
    )
    return {"projects": projects, "clients": clients}


def job_counts(jobs: list[Job], completed_stage_ids: set) -> tuple[int, int]:
    """(completed, current) for one customer.

    A job is current when it has a booking and its stage is not a completed one.
    """
    completed = sum(1 for job in jobs if job.pipeline_stage_id in completed_stage_ids)
    current = sum(
        1
        for job in jobs
        if job.pipeline_stage_id not in completed_stage_ids and job.booking_datetime
    )
    return completed, current


async def load_customers(db: AsyncSession) -> dict:
    customers = await fetch_all(
        db,
        select(Customer)
        .options(selectinload(Customer.cars), selectinload(Customer.jobs))
        .order_by(Customer.created_at.desc()),
        "customers",
    )
    stages = await fetch_all(db, select(PipelineStage), "pipeline stages")
    completed_ids = {s.id for s in stages if s.stage_type == COMPLETED_STAGE_TYPE}

    rows = []
    for customer in customers:
        completed, current = job_counts(customer.jobs, completed_ids)
        rows.append({"customer": customer, "completed_jobs": completed, "current_jobs": current})
    return {"customers": rows}
