"""Audit log model for tracking budget and expense lifecycle events."""

from typing import Any

from sqlalchemy import JSON, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from budgetdesk.database import Base
from budgetdesk.models.base import BaseModel


class AuditLog(Base, BaseModel):
    """Audit log entry for tracking changes to key entities.

    Records who (actor_id) did what (action) to which entity (entity_type, entity_id)
    and optional field snapshots (changes).
    """

    __tablename__ = "audit_logs"

    entity_type: Mapped[str] = mapped_column(String(50))
    """Entity type being audited: "budget", "expense", "application"."""

    entity_id: Mapped[int] = mapped_column()
    """Primary key of the entity being audited."""

    action: Mapped[str] = mapped_column(String(50))
    """Action performed: "create", "update", "delete", "status_change"."""

    actor_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    """User who performed the action. None for system actions."""

    changes: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    """Optional JSON snapshot of changed fields: {"from": "PENDING", "to": "APPROVED"}."""

    def __repr__(self) -> str:
        return (
            f"<AuditLog(id={self.id}, entity_type={self.entity_type}, entity_id={self.entity_id}, "
            f"action={self.action}, actor_id={self.actor_id})>"
        )


__all__ = ["AuditLog"]
