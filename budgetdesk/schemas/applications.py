"""Pydantic schemas for application status updates."""

from pydantic import Field

from budgetdesk.models.application import ApplicationStatus
from budgetdesk.schemas.base import CamelModel


class ApplicationStatusUpdate(CamelModel):
    """Payload for PUT /api/admin/applications/update-status."""

    application_id: int
    status: str = Field(..., description="SUBMITTED, UNDER_REVIEW, APPROVED, REJECTED or WITHDRAWN")
    feedback_message: str | None = None


class ApplicationResponse(CamelModel):
    id: int
    startup_call_id: int
    user_id: int
    startup_name: str
    status: ApplicationStatus


class ApplicationStatusResponse(CamelModel):
    message: str
    application: ApplicationResponse
