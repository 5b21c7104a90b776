"""Startup call application model."""

from enum import Enum

from sqlalchemy import ForeignKey, String, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from budgetdesk.database import Base
from budgetdesk.models.base import BaseModel


class ApplicationStatus(str, Enum):
    """Application review status."""

    SUBMITTED = "SUBMITTED"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"


class Application(Base, BaseModel):
    """A startup's application to a startup call."""

    __tablename__ = "applications"

    startup_call_id: Mapped[int] = mapped_column(
        ForeignKey("startup_calls.id"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    startup_name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[ApplicationStatus] = mapped_column(
        SQLEnum(ApplicationStatus), nullable=False, default=ApplicationStatus.SUBMITTED
    )

    startup_call: Mapped["StartupCall"] = relationship("StartupCall")  # noqa: F821
    user: Mapped["User"] = relationship("User")  # noqa: F821

    def __repr__(self) -> str:
        return f"<Application(id={self.id}, startup={self.startup_name}, status={self.status.value})>"


__all__ = ["Application", "ApplicationStatus"]
