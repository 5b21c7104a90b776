"""Admin application review routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from budgetdesk.api.dependencies import require_admin
from budgetdesk.database import get_db
from budgetdesk.errors import AppError
from budgetdesk.models.user import User
from budgetdesk.schemas.applications import (
    ApplicationResponse,
    ApplicationStatusResponse,
    ApplicationStatusUpdate,
)
from budgetdesk.services.application_service import ApplicationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/applications", tags=["admin"])


@router.put("/update-status", response_model=ApplicationStatusResponse)
async def update_application_status(
    payload: ApplicationStatusUpdate,
    db: Session = Depends(get_db),  # noqa: B008
    admin: User = Depends(require_admin),  # noqa: B008
) -> ApplicationStatusResponse:
    """
    Set an application's status and notify the applicant.

    Returns:
        200: {message, application}
        400: Unknown status
        404: Application not found
    """
    try:
        application = ApplicationService(db).update_status(
            payload.application_id,
            payload.status,
            feedback_message=payload.feedback_message,
            actor_id=admin.id,
        )
        return ApplicationStatusResponse(
            message="Application status updated successfully",
            application=ApplicationResponse.model_validate(application),
        )
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error updating application {payload.application_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update application status",
        )
