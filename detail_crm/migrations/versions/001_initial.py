"""Initial CRM schema.

Revision ID: 001_initial
Revises:
Create Date: 2026-03-01

Customers start with the single legacy ``name`` column; first/last name
arrive in 002. Tables that already exist are left alone so databases
created before migrations were introduced can be upgraded in place.
"""

from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "001_initial"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TABLES = (
    "users",
    "customers",
    "cars",
    "service_categories",
    "services",
    "add_ons",
    "pipeline_stages",
    "jobs",
    "job_add_ons",
    "clients",
    "projects",
    "google_calendar_integrations",
    "email_integrations",
    "gmb_integrations",
    "gmb_reviews",
    "calendar_settings",
    "events",
    "storage_buckets",
)


def _has_table(bind, name: str) -> bool:
    return sa.inspect(bind).has_table(name)


def _id() -> sa.Column:
    return sa.Column("id", sa.Uuid(), primary_key=True)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def _fk(column: str, target: str, ondelete: str, nullable: bool = True) -> sa.Column:
    return sa.Column(column, sa.Uuid(), sa.ForeignKey(target, ondelete=ondelete), nullable=nullable)


def _create(name: str, *columns, indexes: Sequence[str] = (), unique: Sequence[str] = ()) -> None:
    bind = op.get_bind()
    if _has_table(bind, name):
        return
    op.create_table(name, *columns)
    for column in indexes:
        op.create_index(f"ix_{name}_{column}", name, [column], unique=column in unique)


def upgrade() -> None:
    _create(
        "users",
        _id(),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(100)),
        sa.Column("full_name", sa.String(200)),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("email_confirmed_at", sa.DateTime(timezone=True)),
        sa.Column("last_login_at", sa.DateTime(timezone=True)),
        *_timestamps(),
        indexes=("email",),
        unique=("email",),
    )

    _create(
        "customers",
        _id(),
        _fk("user_id", "users.id", "SET NULL"),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("phone", sa.String(50)),
        sa.Column("email", sa.String(255)),
        sa.Column("address", sa.Text()),
        sa.Column("business_name", sa.String(200)),
        sa.Column("notes", sa.Text()),
        *_timestamps(),
        indexes=("user_id",),
    )

    _create(
        "cars",
        _id(),
        _fk("customer_id", "customers.id", "CASCADE", nullable=False),
        sa.Column("make", sa.String(100), nullable=False),
        sa.Column("model", sa.String(100), nullable=False),
        sa.Column("year", sa.Integer()),
        sa.Column("color", sa.String(50)),
        sa.Column("registration_plate", sa.String(20)),
        sa.Column("size_category", sa.String(20)),
        sa.Column("notes", sa.Text()),
        *_timestamps(),
        indexes=("customer_id",),
    )

    # Service catalogue
    _create(
        "service_categories",
        _id(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("display_order", sa.Integer(), nullable=False),
        *_timestamps(),
    )
    _create(
        "services",
        _id(),
        _fk("category_id", "service_categories.id", "SET NULL"),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("duration_minutes", sa.Integer()),
        sa.Column("duration_text", sa.String(50)),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("requires_quote", sa.Boolean(), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False),
        *_timestamps(),
        indexes=("category_id",),
    )
    _create(
        "add_ons",
        _id(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("price_excl_vat", sa.Integer(), nullable=False),
        sa.Column("price_incl_vat", sa.Integer(), nullable=False),
        sa.Column("addon_type", sa.String(20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False),
        *_timestamps(),
    )

    # Jobs and the board
    _create(
        "pipeline_stages",
        _id(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("color", sa.String(20)),
        sa.Column("stage_type", sa.String(20)),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.Column("is_archived", sa.Boolean(), nullable=False),
        sa.Column("is_default", sa.Boolean(), nullable=False),
        *_timestamps(),
        indexes=("display_order",),
    )
    _create(
        "jobs",
        _id(),
        _fk("customer_id", "customers.id", "SET NULL"),
        _fk("car_id", "cars.id", "SET NULL"),
        _fk("service_id", "services.id", "SET NULL"),
        _fk("pipeline_stage_id", "pipeline_stages.id", "SET NULL"),
        sa.Column("booking_datetime", sa.DateTime(timezone=True)),
        sa.Column("duration_minutes", sa.Integer()),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("total_price", sa.Integer()),
        sa.Column("notes", sa.Text()),
        *_timestamps(),
        indexes=("customer_id", "service_id", "pipeline_stage_id", "booking_datetime"),
    )
    _create(
        "job_add_ons",
        _id(),
        _fk("job_id", "jobs.id", "CASCADE", nullable=False),
        _fk("add_on_id", "add_ons.id", "CASCADE", nullable=False),
        sa.UniqueConstraint("job_id", "add_on_id", name="uq_job_add_on"),
        indexes=("job_id", "add_on_id"),
    )

    # Business clients
    _create(
        "clients",
        _id(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("company", sa.String(200)),
        sa.Column("email", sa.String(255)),
        sa.Column("phone", sa.String(50)),
        sa.Column("pipeline_stage", sa.String(20), nullable=False),
        *_timestamps(),
        indexes=("pipeline_stage",),
    )
    _create(
        "projects",
        _id(),
        _fk("client_id", "clients.id", "CASCADE"),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("budget", sa.Integer()),
        *_timestamps(),
        indexes=("client_id",),
    )

    # Integrations
    _create(
        "google_calendar_integrations",
        _id(),
        _fk("user_id", "users.id", "CASCADE", nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("access_token", sa.Text(), nullable=False),
        sa.Column("refresh_token", sa.Text()),
        sa.Column("token_expiry", sa.DateTime(timezone=True)),
        sa.Column("calendar_id", sa.String(255), nullable=False),
        sa.Column("sync_enabled", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "email", name="uq_google_calendar_user_email"),
        indexes=("user_id",),
    )
    _create(
        "email_integrations",
        _id(),
        _fk("user_id", "users.id", "CASCADE", nullable=False),
        sa.Column("provider", sa.String(20), nullable=False),
        sa.Column("email_address", sa.String(255), nullable=False),
        sa.Column("display_name", sa.String(200)),
        sa.Column("provider_user_id", sa.String(255)),
        sa.Column("access_token", sa.Text(), nullable=False),
        sa.Column("refresh_token", sa.Text()),
        sa.Column("token_expires_at", sa.DateTime(timezone=True)),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("sync_enabled", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint(
            "user_id", "provider", "email_address", name="uq_email_integration_user_provider_email"
        ),
        indexes=("user_id", "provider"),
    )
    _create(
        "gmb_integrations",
        _id(),
        _fk("user_id", "users.id", "CASCADE", nullable=False),
        sa.Column("account_id", sa.String(100), nullable=False),
        sa.Column("location_id", sa.String(100), nullable=False),
        sa.Column("business_name", sa.String(200)),
        sa.Column("access_token", sa.Text(), nullable=False),
        sa.Column("refresh_token", sa.Text()),
        sa.Column("token_expires_at", sa.DateTime(timezone=True)),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        indexes=("user_id",),
    )
    _create(
        "gmb_reviews",
        _id(),
        _fk("user_id", "users.id", "CASCADE", nullable=False),
        _fk("integration_id", "gmb_integrations.id", "CASCADE", nullable=False),
        sa.Column("review_id", sa.String(255), nullable=False),
        sa.Column("reviewer_name", sa.String(200)),
        sa.Column("star_rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text()),
        sa.Column("review_reply", sa.Text()),
        sa.Column("review_date", sa.DateTime(timezone=True)),
        _fk("customer_id", "customers.id", "SET NULL"),
        _fk("job_id", "jobs.id", "SET NULL"),
        *_timestamps(),
        sa.UniqueConstraint("integration_id", "review_id", name="uq_gmb_review"),
        indexes=("user_id", "integration_id", "review_date"),
    )

    hours = []
    for day in ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"):
        hours += [
            sa.Column(f"{day}_open", sa.String(5)),
            sa.Column(f"{day}_close", sa.String(5)),
            sa.Column(f"{day}_enabled", sa.Boolean(), nullable=False),
        ]
    _create(
        "calendar_settings",
        _id(),
        _fk("user_id", "users.id", "CASCADE", nullable=False),
        *hours,
        sa.Column("buffer_minutes", sa.Integer(), nullable=False),
        *_timestamps(),
        indexes=("user_id",),
    )

    _create(
        "events",
        _id(),
        _fk("user_id", "users.id", "SET NULL"),
        sa.Column("event_type", sa.String(100), nullable=False),
        sa.Column("event_category", sa.String(50), nullable=False),
        sa.Column("event_data", sa.JSON()),
        sa.Column("duration_ms", sa.Integer()),
        sa.Column("page_path", sa.String(500)),
        sa.Column("user_agent", sa.String(512)),
        sa.Column("success", sa.Boolean(), nullable=False),
        sa.Column("error_message", sa.Text()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        indexes=("user_id", "event_type", "created_at"),
    )

    _create(
        "storage_buckets",
        _id(),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("public", sa.Boolean(), nullable=False),
        sa.Column("file_size_limit", sa.Integer()),
        *_timestamps(),
        indexes=("name",),
        unique=("name",),
    )


def downgrade() -> None:
    bind = op.get_bind()
    for name in reversed(TABLES):
        if _has_table(bind, name):
            op.drop_table(name)
