"""Notification routes for the signed-in user."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from budgetdesk.api.dependencies import get_current_user
from budgetdesk.database import get_db
from budgetdesk.errors import AppError, NotFoundError
from budgetdesk.models.user import User
from budgetdesk.schemas.notifications import NotificationResponse
from budgetdesk.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    unread_only: bool = Query(False, alias="unreadOnly"),
    db: Session = Depends(get_db),  # noqa: B008
    user: User = Depends(get_current_user),  # noqa: B008
) -> list[NotificationResponse]:
    """Notifications of the current user, newest first."""
    try:
        notifications = NotificationService(db).list_for_user(user.id, unread_only=unread_only)
        return [NotificationResponse.model_validate(n) for n in notifications]
    except Exception as e:
        logger.error(f"Error listing notifications for user {user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch notifications",
        )


@router.patch("/{notification_id}", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: int,
    db: Session = Depends(get_db),  # noqa: B008
    user: User = Depends(get_current_user),  # noqa: B008
) -> NotificationResponse:
    try:
        notification = NotificationService(db).mark_read(user.id, notification_id)
        if notification is None:
            raise NotFoundError("Notification not found")
        return NotificationResponse.model_validate(notification)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error marking notification {notification_id} read: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update notification",
        )
