"""Startup call model - the funding programme that budgets belong to."""

from enum import Enum

from sqlalchemy import String, Text, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from budgetdesk.database import Base
from budgetdesk.models.base import BaseModel


class StartupCallStatus(str, Enum):
    """Publication status of a startup call."""

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    CLOSED = "CLOSED"


class StartupCall(Base, BaseModel):
    """Startup call owning one or more budgets."""

    __tablename__ = "startup_calls"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text(), nullable=True)
    status: Mapped[StartupCallStatus] = mapped_column(
        SQLEnum(StartupCallStatus), nullable=False, default=StartupCallStatus.DRAFT
    )

    budgets: Mapped[list["Budget"]] = relationship(  # noqa: F821
        "Budget", back_populates="startup_call", order_by="Budget.created_at.desc()"
    )

    def __repr__(self) -> str:
        return f"<StartupCall(id={self.id}, title={self.title}, status={self.status.value})>"


__all__ = ["StartupCall", "StartupCallStatus"]
