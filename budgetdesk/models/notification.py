"""In-app notification model."""

from enum import Enum

from sqlalchemy import Boolean, ForeignKey, String, Text, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from budgetdesk.database import Base
from budgetdesk.models.base import BaseModel


class NotificationType(str, Enum):
    """Notification display type."""

    INFO = "INFO"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
    APPLICATION_STATUS = "APPLICATION_STATUS"


class Notification(Base, BaseModel):
    """Message shown to a user on their dashboard."""

    __tablename__ = "notifications"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text(), nullable=False)
    type: Mapped[NotificationType] = mapped_column(
        SQLEnum(NotificationType), nullable=False, default=NotificationType.INFO
    )
    link: Mapped[str | None] = mapped_column(String(512), nullable=True)
    read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, user_id={self.user_id}, title={self.title})>"


__all__ = ["Notification", "NotificationType"]
