"""Audit trail for budget, expense and application changes."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from budgetdesk.models.audit_log import AuditLog


class AuditService:
    """Writes and reads audit rows.

    ``log`` only adds the row to the session; it is committed (or rolled
    back) together with the change it records.
    """

    @staticmethod
    def log(
        db: Session,
        entity_type: str,
        entity_id: int,
        action: str,
        actor_id: int | None = None,
        changes: dict[str, Any] | None = None,
    ) -> AuditLog:
        """Record ``action`` on ``entity_type`` #``entity_id``.

        ``changes`` holds JSON-safe values only (money and dates as strings),
        e.g. ``{"from": "PENDING", "to": "APPROVED", "cap": {...}}``.
        """
        entry = AuditLog(
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            actor_id=actor_id,
            changes=changes,
        )
        db.add(entry)
        return entry

    @staticmethod
    def history(
        db: Session, entity_type: str, entity_id: int, action: str | None = None
    ) -> list[AuditLog]:
        """Audit rows of one entity, oldest first, optionally for one action."""
        query = select(AuditLog).where(
            AuditLog.entity_type == entity_type, AuditLog.entity_id == entity_id
        )
        if action is not None:
            query = query.where(AuditLog.action == action)
        return list(db.scalars(query.order_by(AuditLog.id)))


__all__ = ["AuditService"]
