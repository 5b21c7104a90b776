"""Startup call service."""

import logging

from sqlalchemy.orm import Session

from budgetdesk.models.startup_call import StartupCall, StartupCallStatus

logger = logging.getLogger(__name__)


class StartupCallService:
    """Create and look up startup calls."""

    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        title: str,
        description: str | None = None,
        status: StartupCallStatus = StartupCallStatus.DRAFT,
    ) -> StartupCall:
        call = StartupCall(title=title, description=description, status=status)
        try:
            self.db.add(call)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating startup call: {e}")
            raise
        self.db.refresh(call)
        logger.info(f"Created startup call {call.id} ({title})")
        return call

    def list_calls(self) -> list[StartupCall]:
        """All startup calls, newest first."""
        return self.db.query(StartupCall).order_by(StartupCall.id.desc()).all()
