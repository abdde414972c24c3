"""Async test fixtures for CRM tests using SQLite."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from detail_crm.config import settings
from detail_crm.database import get_db, make_engine
from detail_crm.models import (
    AddOn,
    Car,
    Customer,
    Job,
    JobAddOn,
    PipelineStage,
    Service,
    ServiceCategory,
)
from detail_crm.models.base import Base
from detail_crm.routers import auth as auth_router
from detail_crm.security import AttemptLimiter, SessionClaims, issue_session_token
from detail_crm.services import user_svc

TEST_PASSWORD = "detailing-pass-123"


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def app_settings(monkeypatch: pytest.MonkeyPatch):
    """Pin settings so tests never depend on the caller's environment."""
    monkeypatch.setattr(settings, "auth_secret", "test-secret")
    monkeypatch.setattr(settings, "environment", "development")
    monkeypatch.setattr(settings, "app_url", "http://localhost:3000")
    monkeypatch.setattr(settings, "google_client_id", None)
    monkeypatch.setattr(settings, "google_client_secret", None)
    monkeypatch.setattr(settings, "google_redirect_uri", None)
    monkeypatch.setattr(settings, "microsoft_client_id", None)
    monkeypatch.setattr(settings, "microsoft_client_secret", None)
    monkeypatch.setattr(auth_router, "limiter", AttemptLimiter())
    return settings


@pytest.fixture
def oauth_configured(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "google_client_id", "google-client-id")
    monkeypatch.setattr(settings, "google_client_secret", "google-secret")
    monkeypatch.setattr(settings, "microsoft_client_id", "ms-client-id")
    monkeypatch.setattr(settings, "microsoft_client_secret", "ms-secret")
    return settings


@pytest_asyncio.fixture
async def engine():
    eng = make_engine("sqlite+aiosqlite:///:memory:")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine):
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def user(db: AsyncSession):
    return await user_svc.create_user(
        db, "owner@example.com", TEST_PASSWORD, first_name="Sam", full_name="Sam Polish"
    )


@pytest_asyncio.fixture
async def other_user(db: AsyncSession):
    return await user_svc.create_user(db, "other@example.com", TEST_PASSWORD)


@pytest_asyncio.fixture
async def client(engine):
    """HTTPX async test client against the CRM app."""
    from detail_crm.app import app

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


def sign_in(client: AsyncClient, user) -> None:
    """Attach a valid session cookie for ``user`` to the client."""
    token = issue_session_token(
        settings.auth_secret, SessionClaims(user_id=str(user.id), email=user.email), 3600
    )
    client.cookies.set(settings.auth_cookie_name, token)


@pytest_asyncio.fixture
async def signed_in(client: AsyncClient, user):
    sign_in(client, user)
    return client


@pytest_asyncio.fixture
async def catalog(db: AsyncSession):
    """Stages, a customer with a car, services and add-ons, and three jobs."""
    new = PipelineStage(name="New Booking", color="#3b82f6", display_order=1, is_default=True)
    done = PipelineStage(
        name="Completed", color="#22c55e", display_order=3, stage_type="completed"
    )
    progress = PipelineStage(name="In Progress", color="#f59e0b", display_order=2)
    archived = PipelineStage(name="Old", display_order=4, is_archived=True)

    exterior = ServiceCategory(name="Exterior", display_order=1)
    interior = ServiceCategory(name="Interior", display_order=2)
    db.add_all([new, done, progress, archived, exterior, interior])
    await db.flush()

    wash = Service(name="Full Valet", category_id=exterior.id, duration_minutes=180, display_order=1)
    ceramic = Service(name="Ceramic Coating", category_id=exterior.id, display_order=2)
    shampoo = Service(name="Seat Shampoo", category_id=interior.id, display_order=3)
    wax = AddOn(name="Wax", price_excl_vat=2000, price_incl_vat=2400)
    pet = AddOn(name="Pet Hair Removal", price_excl_vat=1500, price_incl_vat=1800)

    customer = Customer(name="Jane Doe", phone="07700 900000", email="jane@example.com")
    db.add_all([wash, ceramic, shampoo, wax, pet, customer])
    await db.flush()

    car = Car(customer_id=customer.id, make="Audi", model="A4", year=2019, registration_plate="AB19 CDE")
    db.add(car)
    await db.flush()

    late = Job(
        customer_id=customer.id, car_id=car.id, service_id=wash.id, pipeline_stage_id=new.id,
        booking_datetime=datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc), total_price=12000,
    )
    early = Job(
        customer_id=customer.id, car_id=car.id, service_id=wash.id, pipeline_stage_id=done.id,
        booking_datetime=datetime(2026, 3, 1, 14, 0, tzinfo=timezone.utc), total_price=9000,
        status="completed",
    )
    middle = Job(
        customer_id=customer.id, car_id=car.id, service_id=shampoo.id, pipeline_stage_id=None,
        booking_datetime=datetime(2026, 3, 5, 11, 30, tzinfo=timezone.utc), total_price=6000,
    )
    db.add_all([late, early, middle])
    await db.flush()
    db.add_all([
        JobAddOn(job_id=late.id, add_on_id=wax.id),
        JobAddOn(job_id=late.id, add_on_id=pet.id),
        JobAddOn(job_id=early.id, add_on_id=wax.id),
    ])
    await db.commit()

    return {
        "stages": {"new": new, "progress": progress, "done": done, "archived": archived},
        "categories": {"exterior": exterior, "interior": interior},
        "services": {"wash": wash, "ceramic": ceramic, "shampoo": shampoo},
        "add_ons": {"wax": wax, "pet": pet},
        "customer": customer,
        "car": car,
        "jobs": {"early": early, "middle": middle, "late": late},
    }
