"""Pydantic schemas for startup calls."""

from datetime import datetime

from pydantic import Field

from budgetdesk.models.startup_call import StartupCallStatus
from budgetdesk.schemas.base import CamelModel


class StartupCallCreate(CamelModel):
    """Payload for POST /api/startup-calls."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    status: StartupCallStatus = StartupCallStatus.DRAFT


class StartupCallResponse(CamelModel):
    """Startup call as returned by the API."""

    id: int
    title: str
    description: str | None = None
    status: StartupCallStatus
    created_at: datetime
