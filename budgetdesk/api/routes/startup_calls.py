"""Startup call API routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from budgetdesk.api.dependencies import get_current_user, require_admin
from budgetdesk.database import get_db
from budgetdesk.errors import AppError
from budgetdesk.models.user import User
from budgetdesk.schemas.startup_calls import StartupCallCreate, StartupCallResponse
from budgetdesk.services.startup_call_service import StartupCallService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/startup-calls", tags=["startup-calls"])


@router.get("", response_model=list[StartupCallResponse])
async def list_startup_calls(
    db: Session = Depends(get_db),  # noqa: B008
    user: User = Depends(get_current_user),  # noqa: B008
) -> list[StartupCallResponse]:
    """List startup calls, newest first."""
    try:
        calls = StartupCallService(db).list_calls()
        return [StartupCallResponse.model_validate(c) for c in calls]
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error listing startup calls: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list startup calls",
        )


@router.post("", response_model=StartupCallResponse, status_code=status.HTTP_201_CREATED)
async def create_startup_call(
    payload: StartupCallCreate,
    db: Session = Depends(get_db),  # noqa: B008
    admin: User = Depends(require_admin),  # noqa: B008
) -> StartupCallResponse:
    """Create a startup call (ADMIN)."""
    try:
        call = StartupCallService(db).create(
            title=payload.title, description=payload.description, status=payload.status
        )
        return StartupCallResponse.model_validate(call)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error creating startup call: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create startup call",
        )
