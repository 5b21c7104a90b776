"""Budget allocator: budgets, their categories and allocation arithmetic.

Category allocations are the caps enforced at approval time, so every change
here keeps two rules:
- the sum of allocations never exceeds the budget total
- a category is never shrunk below what has already been approved against it
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from budgetdesk.errors import ConflictError, NotFoundError, ValidationError
from budgetdesk.models.budget import Budget, BudgetCategory, BudgetStatus
from budgetdesk.models.expense import Expense, ExpenseStatus
from budgetdesk.models.startup_call import StartupCall
from budgetdesk.services.approval_guard import approved_total
from budgetdesk.services.audit_service import AuditService

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

BUDGET_FIELDS = ("title", "description", "total_amount", "currency", "fiscal_year", "status")


def calculate_allocation_percentage(allocated: Decimal | float, total: Decimal | float) -> int:
    """Share of ``total`` taken by ``allocated``, as a whole percentage.

    Rounds half up; returns 0 when total is 0.
    """
    total = Decimal(str(total))
    if total == 0:
        return 0
    ratio = Decimal(str(allocated)) / total * 100
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def calculate_utilization_percentage(spent: Decimal, total: Decimal) -> Decimal:
    """Spent share of ``total`` with two decimals; 0.00 when total is 0."""
    total = Decimal(str(total))
    if total == 0:
        return Decimal("0.00")
    return (Decimal(str(spent)) / total * 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _check_allocations(total_amount: Decimal, allocations: Iterable[Decimal]) -> None:
    allocated = sum((Decimal(a) for a in allocations), ZERO)
    if allocated > Decimal(total_amount):
        raise ValidationError(
            "Category allocations exceed budget total",
            details={
                "totalAmount": str(total_amount),
                "allocated": str(allocated),
                "overBy": str(allocated - Decimal(total_amount)),
            },
        )


def _check_unique_names(names: Iterable[str]) -> None:
    seen: set[str] = set()
    for name in names:
        key = name.strip().lower()
        if key in seen:
            raise ValidationError(f"Duplicate category name: {name}")
        seen.add(key)


class BudgetService:
    """Budget and category CRUD."""

    def __init__(self, db: Session):
        """Initialize budget service.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_budget(self, budget_id: int, startup_call_id: int | None = None) -> Budget:
        """Get a budget, optionally checking it belongs to a startup call.

        Raises:
            NotFoundError: Budget missing or owned by another startup call
        """
        budget = self.db.get(Budget, budget_id)
        if budget is None or (
            startup_call_id is not None and budget.startup_call_id != startup_call_id
        ):
            raise NotFoundError("Budget not found")
        return budget

    def list_budgets(self, startup_call_id: int) -> list[Budget]:
        """Budgets of a startup call, newest first.

        Raises:
            NotFoundError: If the startup call does not exist
        """
        if self.db.get(StartupCall, startup_call_id) is None:
            raise NotFoundError("Startup call not found")
        return (
            self.db.query(Budget)
            .filter_by(startup_call_id=startup_call_id)
            .order_by(Budget.id.desc())
            .all()
        )

    def get_category(self, budget_id: int, category_id: int) -> BudgetCategory:
        category = self.db.get(BudgetCategory, category_id)
        if category is None or category.budget_id != budget_id:
            raise NotFoundError("Category not found")
        return category

    def list_categories(self, budget_id: int, startup_call_id: int | None = None) -> list[BudgetCategory]:
        return list(self.get_budget(budget_id, startup_call_id).categories)

    def _expense_count(self, category_id: int) -> int:
        return self.db.scalar(
            select(func.count(Expense.id)).where(Expense.category_id == category_id)
        )

    # ------------------------------------------------------------------
    # Budgets
    # ------------------------------------------------------------------

    def create_budget(
        self,
        startup_call_id: int,
        title: str,
        total_amount: Decimal,
        currency: str,
        fiscal_year: str,
        categories: list[dict[str, Any]] | None = None,
        description: str | None = None,
        status: BudgetStatus = BudgetStatus.DRAFT,
        actor_id: int | None = None,
    ) -> Budget:
        """Create a budget and its categories in one transaction.

        Args:
            startup_call_id: Owning startup call
            title: Budget title
            total_amount: Envelope size
            currency: ISO currency code
            fiscal_year: Fiscal year label
            categories: Dicts with name, allocated_amount and optional description
            description: Optional notes
            status: Initial status (default draft)
            actor_id: Admin performing the action, for the audit log

        Returns:
            Created Budget with categories loaded

        Raises:
            NotFoundError: If the startup call does not exist
            ValidationError: Duplicate category names or allocations above total
        """
        if self.db.get(StartupCall, startup_call_id) is None:
            raise NotFoundError("Startup call not found")

        categories = categories or []
        _check_unique_names(c["name"] for c in categories)
        _check_allocations(total_amount, (c["allocated_amount"] for c in categories))

        budget = Budget(
            startup_call_id=startup_call_id,
            title=title,
            description=description,
            total_amount=total_amount,
            currency=currency.upper(),
            fiscal_year=fiscal_year,
            status=status,
        )
        for item in categories:
            budget.categories.append(
                BudgetCategory(
                    name=item["name"],
                    description=item.get("description"),
                    allocated_amount=item["allocated_amount"],
                )
            )

        try:
            self.db.add(budget)
            self.db.flush()
            AuditService.log(
                self.db,
                entity_type="budget",
                entity_id=budget.id,
                action="create",
                actor_id=actor_id,
                changes={"totalAmount": str(total_amount), "categories": len(categories)},
            )
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating budget for startup call {startup_call_id}: {e}")
            raise

        self.db.refresh(budget)
        logger.info(
            f"Created budget {budget.id} '{title}' for startup call {startup_call_id} "
            f"(total={total_amount}, categories={len(categories)})"
        )
        return budget

    def update_budget(
        self,
        budget_id: int,
        changes: dict[str, Any],
        categories: list[dict[str, Any]] | None = None,
        startup_call_id: int | None = None,
        actor_id: int | None = None,
    ) -> Budget:
        """Update budget fields and, optionally, replace its category set.

        When ``categories`` is given, entries whose ``id`` matches an existing
        category update it, entries without a known id are created, and
        existing categories missing from the list are deleted.

        Raises:
            NotFoundError: Budget not found
            ValidationError: Duplicate names or allocations above total
            ConflictError: Deleting a category that has expenses, or shrinking
                one below its approved spend
        """
        budget = self.get_budget(budget_id, startup_call_id)
        unknown = set(changes) - set(BUDGET_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown budget fields: {', '.join(sorted(unknown))}")

        try:
            for field, value in changes.items():
                if field == "currency" and value:
                    value = value.upper()
                setattr(budget, field, value)

            if categories is not None:
                self._replace_categories(budget, categories)

            _check_allocations(budget.total_amount, (c.allocated_amount for c in budget.categories))

            AuditService.log(
                self.db,
                entity_type="budget",
                entity_id=budget.id,
                action="update",
                actor_id=actor_id,
                changes={
                    "fields": sorted(changes),
                    "categoriesReplaced": categories is not None,
                },
            )
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Category name clash while updating budget {budget_id}: {e}")
            raise ConflictError("Category names must be unique within a budget") from e
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating budget {budget_id}: {e}")
            raise

        self.db.refresh(budget)
        logger.info(f"Updated budget {budget_id}")
        return budget

    def _replace_categories(self, budget: Budget, categories: list[dict[str, Any]]) -> None:
        _check_unique_names(c["name"] for c in categories)
        existing = {c.id: c for c in budget.categories}
        updates = {item["id"]: item for item in categories if item.get("id") in existing}
        additions = [item for item in categories if item.get("id") not in existing]
        dropped = [c for category_id, c in existing.items() if category_id not in updates]

        for category in dropped:
            self._ensure_category_unused(category)
        for category_id, item in updates.items():
            self._ensure_allocation_covers_spend(existing[category_id], Decimal(item["allocated_amount"]))

        # The flush writes updates and inserts before deletes, and renames may
        # swap names between rows: free every name on (budget_id, name) first.
        for category in dropped:
            budget.categories.remove(category)
        for category_id, item in updates.items():
            if existing[category_id].name != item["name"]:
                existing[category_id].name = f"__renaming_{category_id}"
        self.db.flush()

        for category_id, item in updates.items():
            category = existing[category_id]
            category.name = item["name"]
            category.description = item.get("description")
            category.allocated_amount = item["allocated_amount"]
        for item in additions:
            budget.categories.append(
                BudgetCategory(
                    name=item["name"],
                    description=item.get("description"),
                    allocated_amount=item["allocated_amount"],
                )
            )

    def delete_budget(
        self, budget_id: int, startup_call_id: int | None = None, actor_id: int | None = None
    ) -> None:
        """Delete a budget together with its categories and expenses.

        Deletion is refused while any expense of the budget is APPROVED;
        pending and rejected expenses are removed with the budget so no
        expense is left referencing a missing budget.

        Raises:
            NotFoundError: Budget not found
            ConflictError: Budget has approved expenses
        """
        budget = self.get_budget(budget_id, startup_call_id)

        approved = self.db.scalar(
            select(func.count(Expense.id)).where(
                Expense.budget_id == budget.id, Expense.status == ExpenseStatus.APPROVED
            )
        )
        if approved:
            logger.warning(f"Refused to delete budget {budget_id}: {approved} approved expenses")
            raise ConflictError(
                "Budget has approved expenses and cannot be deleted",
                details={"approvedExpenses": approved},
            )

        try:
            removed = self.db.execute(delete(Expense).where(Expense.budget_id == budget.id)).rowcount
            self.db.expire(budget)
            self.db.delete(budget)
            AuditService.log(
                self.db,
                entity_type="budget",
                entity_id=budget_id,
                action="delete",
                actor_id=actor_id,
                changes={"expensesRemoved": removed},
            )
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error deleting budget {budget_id}: {e}")
            raise

        logger.info(f"Deleted budget {budget_id} ({removed} unapproved expenses removed)")

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def _ensure_allocation_covers_spend(self, category: BudgetCategory, allocated_amount: Decimal) -> None:
        spent = approved_total(self.db, category.budget_id, category.id)
        if allocated_amount < spent:
            raise ConflictError(
                f"Allocation for {category.name} is below its approved spend",
                details={
                    "categoryName": category.name,
                    "allocated": str(allocated_amount),
                    "spent": str(spent),
                },
            )

    def _ensure_category_unused(self, category: BudgetCategory) -> None:
        count = self._expense_count(category.id)
        if count:
            raise ConflictError(
                f"Category {category.name} has expenses and cannot be deleted",
                details={"categoryName": category.name, "expenses": count},
            )

    def create_category(
        self,
        budget_id: int,
        name: str,
        allocated_amount: Decimal,
        description: str | None = None,
        startup_call_id: int | None = None,
    ) -> BudgetCategory:
        """Add a category to an existing budget.

        Raises:
            NotFoundError: Budget not found
            ConflictError: Name already used in this budget
            ValidationError: Allocations would exceed the budget total
        """
        budget = self.get_budget(budget_id, startup_call_id)
        if any(c.name.strip().lower() == name.strip().lower() for c in budget.categories):
            raise ConflictError(f"Category {name} already exists in this budget")
        _check_allocations(
            budget.total_amount,
            [c.allocated_amount for c in budget.categories] + [allocated_amount],
        )

        category = BudgetCategory(
            budget_id=budget.id,
            name=name,
            description=description,
            allocated_amount=allocated_amount,
        )
        try:
            self.db.add(category)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error creating category {name} in budget {budget_id}: {e}")
            raise
        self.db.refresh(category)
        logger.info(f"Created category {category.id} '{name}' in budget {budget_id}")
        return category

    def update_category(
        self,
        budget_id: int,
        category_id: int,
        name: str | None = None,
        description: str | None = None,
        allocated_amount: Decimal | None = None,
        startup_call_id: int | None = None,
    ) -> BudgetCategory:
        """Rename, describe or re-allocate a category.

        Raises:
            NotFoundError: Budget or category not found
            ConflictError: Name clash, or allocation below approved spend
            ValidationError: Allocations would exceed the budget total
        """
        budget = self.get_budget(budget_id, startup_call_id)
        category = self.get_category(budget.id, category_id)

        if name is not None and any(
            c.id != category.id and c.name.strip().lower() == name.strip().lower()
            for c in budget.categories
        ):
            raise ConflictError(f"Category {name} already exists in this budget")

        if allocated_amount is not None:
            self._ensure_allocation_covers_spend(category, allocated_amount)
            _check_allocations(
                budget.total_amount,
                [c.allocated_amount for c in budget.categories if c.id != category.id]
                + [allocated_amount],
            )

        try:
            if name is not None:
                category.name = name
            if description is not None:
                category.description = description
            if allocated_amount is not None:
                category.allocated_amount = allocated_amount
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error updating category {category_id}: {e}")
            raise
        self.db.refresh(category)
        logger.info(f"Updated category {category_id} in budget {budget_id}")
        return category

    def delete_category(
        self, budget_id: int, category_id: int, startup_call_id: int | None = None
    ) -> None:
        """Delete a category that no expense references.

        Raises:
            NotFoundError: Budget or category not found
            ConflictError: Category has expenses
        """
        budget = self.get_budget(budget_id, startup_call_id)
        category = self.get_category(budget.id, category_id)
        self._ensure_category_unused(category)
        try:
            budget.categories.remove(category)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error deleting category {category_id}: {e}")
            raise
        logger.info(f"Deleted category {category_id} from budget {budget_id}")
