"""Startup call application status updates."""

import logging

from sqlalchemy.orm import Session

from budgetdesk.errors import NotFoundError, ValidationError
from budgetdesk.models.application import Application, ApplicationStatus
from budgetdesk.services.audit_service import AuditService
from budgetdesk.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


def parse_application_status(value: str) -> ApplicationStatus:
    try:
        return ApplicationStatus(str(value).strip().upper())
    except ValueError:
        raise ValidationError("Invalid status") from None


class ApplicationService:
    """Admin review of startup call applications."""

    def __init__(self, db: Session):
        self.db = db
        self.notifications = NotificationService(db)

    def get_application(self, application_id: int) -> Application:
        application = self.db.get(Application, application_id)
        if application is None:
            raise NotFoundError("Application not found")
        return application

    def update_status(
        self,
        application_id: int,
        status: str,
        feedback_message: str | None = None,
        actor_id: int | None = None,
    ) -> Application:
        """Set an application's status and notify the applicant.

        Any of the five statuses may be set from any other.

        Raises:
            ValidationError: Unknown status
            NotFoundError: Application not found
        """
        target = parse_application_status(status)
        application = self.get_application(application_id)
        previous = application.status

        try:
            application.status = target
            AuditService.log(
                self.db,
                entity_type="application",
                entity_id=application.id,
                action="status_change",
                actor_id=actor_id,
                changes={"from": previous.value, "to": target.value},
            )
            self.notifications.notify_application_status(
                application, application.startup_call.title, feedback_message
            )
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating application {application_id}: {e}")
            raise

        self.db.refresh(application)
        logger.info(f"Application {application_id} {previous.value} -> {target.value}")
        return application
