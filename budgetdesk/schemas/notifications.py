"""Pydantic schemas for in-app notifications."""

from datetime import datetime

from budgetdesk.models.notification import NotificationType
from budgetdesk.schemas.base import CamelModel


class NotificationResponse(CamelModel):
    id: int
    title: str
    message: str
    type: NotificationType
    link: str | None = None
    read: bool
    created_at: datetime
