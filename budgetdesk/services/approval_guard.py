"""Category cap enforcement for expense approval."""

import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from budgetdesk.config import settings
from budgetdesk.errors import CategoryCapExceededError, UncategorizedApprovalError
from budgetdesk.models.budget import BudgetCategory
from budgetdesk.models.expense import Expense, ExpenseStatus

logger = logging.getLogger(__name__)


def _money(value: Decimal) -> str:
    return str(Decimal(value).quantize(Decimal("0.01")))


def approved_total(
    db: Session, budget_id: int, category_id: int | None, exclude_expense_id: int | None = None
) -> Decimal:
    """Sum of APPROVED expense amounts for a (budget, category) pair.

    ``category_id=None`` sums the uncategorized approved expenses.
    """
    query = select(Expense.amount).where(
        Expense.budget_id == budget_id,
        Expense.status == ExpenseStatus.APPROVED,
    )
    if category_id is None:
        query = query.where(Expense.category_id.is_(None))
    else:
        query = query.where(Expense.category_id == category_id)
    if exclude_expense_id is not None:
        query = query.where(Expense.id != exclude_expense_id)
    return sum((Decimal(a) for a in db.scalars(query)), Decimal("0"))


def category_for_update(budget_id: int, category_id: int) -> Select:
    """SELECT of a budget's category row holding a row lock until commit."""
    return (
        select(BudgetCategory)
        .where(BudgetCategory.id == category_id, BudgetCategory.budget_id == budget_id)
        .with_for_update()
    )


@dataclass
class CapCheck:
    """Cap position of a category at the moment an expense is approved."""

    category_id: int
    category_name: str
    allocated: Decimal
    spent: Decimal
    expense_amount: Decimal

    @property
    def remaining(self) -> Decimal:
        return self.allocated - self.spent

    def as_details(self) -> dict[str, str]:
        return {
            "categoryName": self.category_name,
            "allocated": _money(self.allocated),
            "spent": _money(self.spent),
            "remaining": _money(self.remaining),
            "expenseAmount": _money(self.expense_amount),
        }


class ApprovalGuard:
    """Checks that approving an expense keeps its category within the allocation.

    Must run inside the transaction that writes the new status: the category
    row is locked (SELECT ... FOR UPDATE) so two approvals against the same
    category cannot both pass the check before either commits.
    """

    def __init__(self, db: Session, allow_uncategorized: bool | None = None):
        """Initialize guard.

        Args:
            db: Database session (the caller's open transaction)
            allow_uncategorized: Approve expenses without a category unchecked;
                defaults to the ALLOW_UNCATEGORIZED_APPROVAL setting
        """
        self.db = db
        if allow_uncategorized is None:
            allow_uncategorized = settings.allow_uncategorized_approval
        self.allow_uncategorized = allow_uncategorized

    def check(self, expense: Expense) -> CapCheck | None:
        """Verify ``expense`` may become APPROVED.

        Returns:
            CapCheck for categorized expenses, None when the check was skipped
            (uncategorized expense or missing category row)

        Raises:
            CategoryCapExceededError: spent + expense.amount > allocation
            UncategorizedApprovalError: uncategorized approvals are disabled
        """
        if expense.category_id is None:
            if not self.allow_uncategorized:
                logger.warning(f"Refused approval of uncategorized expense {expense.id}")
                raise UncategorizedApprovalError()
            logger.info(f"Expense {expense.id} is uncategorized, cap check skipped")
            return None

        category = self.db.execute(
            category_for_update(expense.budget_id, expense.category_id)
        ).scalar_one_or_none()

        if category is None:
            if not self.allow_uncategorized:
                raise UncategorizedApprovalError(
                    f"Category {expense.category_id} not found in budget {expense.budget_id}"
                )
            logger.warning(
                f"Category {expense.category_id} missing for expense {expense.id}, cap check skipped"
            )
            return None

        spent = approved_total(self.db, expense.budget_id, category.id, exclude_expense_id=expense.id)
        result = CapCheck(
            category_id=category.id,
            category_name=category.name,
            allocated=Decimal(category.allocated_amount),
            spent=spent,
            expense_amount=Decimal(expense.amount),
        )

        if spent + result.expense_amount > result.allocated:
            logger.warning(
                f"Approval of expense {expense.id} refused: {category.name} "
                f"spent={spent} + {expense.amount} > allocated={category.allocated_amount}"
            )
            raise CategoryCapExceededError(result.as_details())

        return result
