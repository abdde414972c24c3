"""CRM models - re-exports all models and Base.metadata."""

from .base import Base, UUIDMixin, TimestampMixin, OwnerMixin
from .user import User
from .pipeline import PipelineStage
from .customer import Customer, Car
from .catalog import ServiceCategory, Service, AddOn
from .job import Job, JobAddOn
from .client import Client, Project
from .calendar_settings import CalendarSettings
from .integration import GoogleCalendarIntegration, EmailIntegration, GmbIntegration, GmbReview
from .event import Event
from .storage import StorageBucket

__all__ = [
    "Base",
    "UUIDMixin",
    "TimestampMixin",
    "OwnerMixin",
    "User",
    "PipelineStage",
    "Customer",
    "Car",
    "ServiceCategory",
    "Service",
    "AddOn",
    "Job",
    "JobAddOn",
    "Client",
    "Project",
    "CalendarSettings",
    "GoogleCalendarIntegration",
    "EmailIntegration",
    "GmbIntegration",
    "GmbReview",
    "Event",
    "StorageBucket",
]
