"""User ORM model with a single platform role."""

from enum import Enum

from sqlalchemy import Boolean, String, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from budgetdesk.database import Base
from budgetdesk.models.base import BaseModel


class UserRole(str, Enum):
    """Platform role; drives which dashboards and write paths a user may use."""

    ADMIN = "ADMIN"
    ENTREPRENEUR = "ENTREPRENEUR"
    SPONSOR = "SPONSOR"
    REVIEWER = "REVIEWER"
    USER = "USER"


class User(Base, BaseModel):
    """Person using the platform."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole), nullable=False, default=UserRole.USER
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role.value})>"


__all__ = ["User", "UserRole"]
