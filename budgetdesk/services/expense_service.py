"""Expense submission, review and the status machine entry point."""

import logging
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import Select, case, select
from sqlalchemy.orm import Session

from budgetdesk.errors import AppError, ConflictError, ForbiddenError, NotFoundError, ValidationError
from budgetdesk.models.audit_log import AuditLog
from budgetdesk.models.budget import Budget, BudgetCategory, BudgetStatus
from budgetdesk.models.expense import Expense, ExpenseStatus
from budgetdesk.models.user import User, UserRole
from budgetdesk.services.approval_guard import ApprovalGuard
from budgetdesk.services.audit_service import AuditService
from budgetdesk.services.expense_status import ensure_transition, parse_status
from budgetdesk.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "description", "amount", "currency", "date", "category_id", "receipt")
REQUIRED_FIELDS = ("title", "amount", "currency", "date")


def expense_for_update(expense_id: int) -> Select:
    """SELECT of an expense row holding a row lock until commit."""
    return select(Expense).where(Expense.id == expense_id).with_for_update()


def _audit_value(value: Any) -> Any:
    if value is None or isinstance(value, (int, str)):
        return value
    return str(value)


class ExpenseService:
    """Expense operations shared by the entrepreneur and admin surfaces."""

    def __init__(self, db: Session, guard: ApprovalGuard | None = None):
        """Initialize expense service.

        Args:
            db: SQLAlchemy database session
            guard: Approval guard; defaults to one bound to ``db``
        """
        self.db = db
        self.guard = guard or ApprovalGuard(db)
        self.notifications = NotificationService(db)

    def get_expense(self, expense_id: int) -> Expense:
        """Get expense by ID.

        Raises:
            NotFoundError: If the expense does not exist
        """
        expense = self.db.get(Expense, expense_id)
        if expense is None:
            raise NotFoundError("Expense not found")
        return expense

    def get_budget_expense(
        self, expense_id: int, budget_id: int, startup_call_id: int, user: User | None = None
    ) -> Expense:
        """Get an expense addressed through its budget and startup call.

        Raises:
            NotFoundError: Expense not found
            ValidationError: Expense not in that budget, or budget not in that call
            ForbiddenError: Entrepreneur reading someone else's expense
        """
        expense = self.get_expense(expense_id)
        self._check_scope(expense, budget_id, startup_call_id)
        self._ensure_visible(expense, user)
        return expense

    def list_expenses(
        self,
        status: str | ExpenseStatus | None = None,
        startup_call_id: int | None = None,
        budget_id: int | None = None,
        category_id: int | None = None,
        submitted_by_id: int | None = None,
    ) -> list[Expense]:
        """List expenses, PENDING first, then most recent date first.

        Raises:
            ValidationError: Unknown status filter
        """
        query = select(Expense)
        if status:
            query = query.where(Expense.status == parse_status(status))
        if startup_call_id is not None:
            query = query.join(Budget, Expense.budget_id == Budget.id).where(
                Budget.startup_call_id == startup_call_id
            )
        if budget_id is not None:
            query = query.where(Expense.budget_id == budget_id)
        if category_id is not None:
            query = query.where(Expense.category_id == category_id)
        if submitted_by_id is not None:
            query = query.where(Expense.submitted_by_id == submitted_by_id)

        pending_first = case((Expense.status == ExpenseStatus.PENDING, 0), else_=1)
        query = query.order_by(pending_first, Expense.date.desc(), Expense.id.desc())
        return list(self.db.scalars(query))

    def create_expense(
        self,
        budget_id: int,
        title: str,
        amount: Decimal,
        date: date,
        currency: str = "USD",
        category_id: int | None = None,
        description: str | None = None,
        receipt: str | None = None,
        submitted_by_id: int | None = None,
        startup_call_id: int | None = None,
    ) -> Expense:
        """Submit an expense; it always starts PENDING.

        Raises:
            NotFoundError: Budget not found (or not in ``startup_call_id``)
            ValidationError: Non-positive amount, closed budget, or a category
                that does not belong to the budget
        """
        budget = self.db.get(Budget, budget_id)
        if budget is None or (
            startup_call_id is not None and budget.startup_call_id != startup_call_id
        ):
            raise NotFoundError("Budget not found")
        if Decimal(amount) <= 0:
            raise ValidationError("Expense amount must be positive")
        if budget.status == BudgetStatus.CLOSED:
            raise ValidationError("Budget is closed and does not accept new expenses")

        if category_id is not None:
            category = self.db.get(BudgetCategory, category_id)
            if category is None or category.budget_id != budget.id:
                raise ValidationError("Category not found or does not belong to this budget")

        expense = Expense(
            budget_id=budget.id,
            category_id=category_id,
            title=title,
            description=description,
            amount=amount,
            currency=currency.upper(),
            date=date,
            status=ExpenseStatus.PENDING,
            receipt=receipt,
            submitted_by_id=submitted_by_id,
        )
        try:
            self.db.add(expense)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating expense in budget {budget_id}: {e}")
            raise

        self.db.refresh(expense)
        logger.info(
            f"Expense {expense.id} submitted to budget {budget_id} "
            f"(amount={amount}, category={category_id}, user={submitted_by_id})"
        )
        return expense

    def update_expense_status(
        self,
        expense_id: int,
        new_status: str | ExpenseStatus,
        actor_id: int | None = None,
        feedback: str | None = None,
    ) -> Expense:
        """Move an expense through the status machine.

        The expense row is locked, the transition validated, and for APPROVED
        the approval guard runs; the status write, audit entry and submitter
        notification are committed together. On any failure the transaction
        is rolled back and the expense keeps its previous status.

        Args:
            expense_id: Expense to update
            new_status: Target status (case-insensitive string or enum)
            actor_id: Admin performing the change
            feedback: Comment stored on the expense and sent to the submitter;
                a transition without one clears the previous comment

        Returns:
            Updated Expense

        Raises:
            ValidationError: Unknown status
            NotFoundError: Expense not found
            InvalidStatusTransitionError: Transition not allowed
            CategoryCapExceededError: Approval would exceed the category cap
            UncategorizedApprovalError: Uncategorized approvals disabled
        """
        target = parse_status(new_status)

        try:
            expense = self.db.execute(expense_for_update(expense_id)).scalar_one_or_none()
            if expense is None:
                raise NotFoundError("Expense not found")

            previous = expense.status
            ensure_transition(previous, target)

            cap = self.guard.check(expense) if target == ExpenseStatus.APPROVED else None

            expense.status = target
            expense.feedback = feedback or None

            changes: dict = {"from": previous.value, "to": target.value}
            if feedback:
                changes["feedback"] = feedback
            if cap is not None:
                changes["cap"] = cap.as_details()
            AuditService.log(
                self.db,
                entity_type="expense",
                entity_id=expense.id,
                action="status_change",
                actor_id=actor_id,
                changes=changes,
            )
            self.notifications.notify_expense_status(expense, feedback)
            self.db.commit()
        except AppError:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating status of expense {expense_id}: {e}")
            raise

        self.db.refresh(expense)
        logger.info(
            f"Expense {expense_id} {previous.value} -> {target.value} by user {actor_id}"
        )
        return expense

    def update_expense(
        self,
        expense_id: int,
        changes: dict[str, Any],
        actor: User | None = None,
        budget_id: int | None = None,
        startup_call_id: int | None = None,
    ) -> Expense:
        """Edit an expense's fields; its status is left alone.

        A new category must belong to the expense's budget. When an APPROVED
        expense changes amount or category the approval guard runs again, so
        an edit cannot push a category past its allocation.

        Args:
            expense_id: Expense to edit
            changes: Field values keyed by attribute name; ``None`` clears an
                optional field
            actor: User making the edit; entrepreneurs are limited to their
                own PENDING expenses
            budget_id: Budget the expense must belong to
            startup_call_id: Startup call the budget must belong to

        Raises:
            NotFoundError: Expense not found
            ValidationError: Unknown or emptied fields, non-positive amount,
                foreign category, or expense outside the given budget/call
            ForbiddenError: Entrepreneur editing someone else's expense
            ConflictError: Entrepreneur editing a decided expense
            CategoryCapExceededError: Edit would exceed the category cap
        """
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown expense fields: {', '.join(sorted(unknown))}")
        emptied = [f for f in REQUIRED_FIELDS if f in changes and changes[f] is None]
        if emptied:
            raise ValidationError(f"Fields cannot be empty: {', '.join(emptied)}")
        if changes.get("amount") is not None and Decimal(changes["amount"]) <= 0:
            raise ValidationError("Expense amount must be positive")

        actor_id = actor.id if actor else None
        try:
            expense = self.db.execute(expense_for_update(expense_id)).scalar_one_or_none()
            if expense is None:
                raise NotFoundError("Expense not found")
            self._check_scope(expense, budget_id, startup_call_id)
            self._ensure_modifiable(expense, actor)

            if changes.get("category_id") is not None:
                category = self.db.get(BudgetCategory, changes["category_id"])
                if category is None or category.budget_id != expense.budget_id:
                    raise ValidationError("Category not found or does not belong to this budget")

            diff: dict[str, dict] = {}
            for field, value in changes.items():
                if field == "currency":
                    value = value.upper()
                current = getattr(expense, field)
                if current != value:
                    diff[field] = {"from": _audit_value(current), "to": _audit_value(value)}
                    setattr(expense, field, value)

            cap = None
            if expense.status == ExpenseStatus.APPROVED and {"amount", "category_id"} & diff.keys():
                cap = self.guard.check(expense)

            audit_changes: dict = {"fields": diff}
            if cap is not None:
                audit_changes["cap"] = cap.as_details()
            AuditService.log(
                self.db,
                entity_type="expense",
                entity_id=expense.id,
                action="update",
                actor_id=actor_id,
                changes=audit_changes,
            )
            self.db.commit()
        except AppError:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating expense {expense_id}: {e}")
            raise

        self.db.refresh(expense)
        logger.info(f"Expense {expense_id} edited by user {actor_id}: {', '.join(sorted(diff)) or 'no changes'}")
        return expense

    def delete_expense(
        self,
        expense_id: int,
        actor: User | None = None,
        budget_id: int | None = None,
        startup_call_id: int | None = None,
    ) -> None:
        """Delete an expense. Budget totals are not rechecked.

        Raises:
            NotFoundError: Expense not found
            ValidationError: Expense outside the given budget/call
            ForbiddenError: Entrepreneur deleting someone else's expense
            ConflictError: Entrepreneur withdrawing a decided expense
        """
        expense = self.get_expense(expense_id)
        self._check_scope(expense, budget_id, startup_call_id)
        self._ensure_modifiable(expense, actor)

        actor_id = actor.id if actor else None
        try:
            self.db.delete(expense)
            AuditService.log(
                self.db,
                entity_type="expense",
                entity_id=expense_id,
                action="delete",
                actor_id=actor_id,
                changes={"status": expense.status.value, "amount": str(expense.amount)},
            )
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error deleting expense {expense_id}: {e}")
            raise
        logger.info(f"Deleted expense {expense_id} (user {actor_id})")

    def history(self, expense_id: int) -> list[AuditLog]:
        """Audit trail of an expense, oldest entry first.

        Raises:
            NotFoundError: Expense not found
        """
        return AuditService.history(self.db, "expense", self.get_expense(expense_id).id)

    # ------------------------------------------------------------------
    # Access rules
    # ------------------------------------------------------------------

    @staticmethod
    def _check_scope(expense: Expense, budget_id: int | None, startup_call_id: int | None) -> None:
        if budget_id is not None and expense.budget_id != budget_id:
            raise ValidationError("Expense does not belong to the specified budget")
        if startup_call_id is not None and expense.budget.startup_call_id != startup_call_id:
            raise ValidationError("Budget does not belong to the specified startup call")

    @staticmethod
    def _ensure_visible(expense: Expense, user: User | None) -> None:
        if user is not None and user.role == UserRole.ENTREPRENEUR and expense.submitted_by_id != user.id:
            raise ForbiddenError("You can only access your own expenses")

    @classmethod
    def _ensure_modifiable(cls, expense: Expense, user: User | None) -> None:
        """Entrepreneurs may only change or withdraw their own PENDING expenses."""
        cls._ensure_visible(expense, user)
        if user is not None and user.role == UserRole.ENTREPRENEUR and expense.status != ExpenseStatus.PENDING:
            raise ConflictError(
                f"Only pending expenses can be changed (status is {expense.status.value})",
                details={"currentStatus": expense.status.value},
            )
