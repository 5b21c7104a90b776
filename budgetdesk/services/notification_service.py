"""In-app notifications for expense and application decisions."""

import logging

from sqlalchemy.orm import Session

from budgetdesk.models.application import Application, ApplicationStatus
from budgetdesk.models.expense import Expense, ExpenseStatus
from budgetdesk.models.notification import Notification, NotificationType

logger = logging.getLogger(__name__)

_EXPENSE_NOTIFICATION_TYPES = {
    ExpenseStatus.APPROVED: NotificationType.SUCCESS,
    ExpenseStatus.REJECTED: NotificationType.ERROR,
    ExpenseStatus.PENDING: NotificationType.INFO,
}


class NotificationService:
    """Writes notification rows into the caller's session (no commit)."""

    def __init__(self, db: Session):
        self.db = db

    def notify(
        self,
        user_id: int,
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO,
        link: str | None = None,
    ) -> Notification:
        notification = Notification(
            user_id=user_id, title=title, message=message, type=type, link=link
        )
        self.db.add(notification)
        logger.debug(f"Queued notification for user {user_id}: {title}")
        return notification

    def notify_expense_status(self, expense: Expense, feedback: str | None = None) -> Notification | None:
        """Tell the submitter their expense changed status.

        Returns None when the expense has no submitter.
        """
        if expense.submitted_by_id is None:
            return None

        status_word = expense.status.value.lower()
        message = f'Your expense "{expense.title}" has been {status_word}'
        if feedback:
            message += f" with comment: {feedback}"
        return self.notify(
            user_id=expense.submitted_by_id,
            title=f"Expense {status_word.capitalize()}",
            message=f"{message}.",
            type=_EXPENSE_NOTIFICATION_TYPES[expense.status],
        )

    def notify_application_status(
        self, application: Application, call_title: str, feedback: str | None = None
    ) -> Notification:
        """Tell the applicant their application changed status."""
        title = "Application Status Update"
        message = (
            f'Your application "{application.startup_name}" for "{call_title}" '
            f"has been updated to {application.status.value.lower()}."
        )
        if application.status == ApplicationStatus.APPROVED:
            title = "Application Approved!"
            message = (
                f'Congratulations! Your application "{application.startup_name}" '
                f'for "{call_title}" has been approved.'
            )
        elif application.status == ApplicationStatus.REJECTED:
            title = "Application Not Selected"
            message = (
                f'We regret to inform you that your application "{application.startup_name}" '
                f'for "{call_title}" has not been selected.'
            )

        if feedback and application.status in (ApplicationStatus.APPROVED, ApplicationStatus.REJECTED):
            message += f" Feedback: {feedback}"

        return self.notify(
            user_id=application.user_id,
            title=title,
            message=message,
            type=NotificationType.APPLICATION_STATUS,
            link=f"/applications/{application.id}",
        )

    def list_for_user(self, user_id: int, unread_only: bool = False) -> list[Notification]:
        """Notifications for a user, newest first."""
        query = self.db.query(Notification).filter_by(user_id=user_id)
        if unread_only:
            query = query.filter_by(read=False)
        return query.order_by(Notification.id.desc()).all()

    def mark_read(self, user_id: int, notification_id: int) -> Notification | None:
        notification = (
            self.db.query(Notification).filter_by(id=notification_id, user_id=user_id).first()
        )
        if notification is None:
            return None
        notification.read = True
        self.db.commit()
        self.db.refresh(notification)
        return notification
