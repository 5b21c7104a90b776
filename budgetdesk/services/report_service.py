"""Spend aggregation for dashboards and budget reports."""

import logging
from collections import defaultdict
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from budgetdesk.errors import NotFoundError
from budgetdesk.models.budget import Budget
from budgetdesk.models.expense import UNCATEGORIZED, Expense, ExpenseStatus
from budgetdesk.models.startup_call import StartupCall
from budgetdesk.services.budget_service import (
    ZERO,
    calculate_allocation_percentage,
    calculate_utilization_percentage,
)

logger = logging.getLogger(__name__)


class ReportService:
    """Read-only spend positions: spent = APPROVED, pending = PENDING.

    Rejected expenses never count towards either figure.
    """

    def __init__(self, db: Session):
        self.db = db

    def _expense_rows(
        self, budget_id: int, date_from: date | None = None, date_to: date | None = None
    ) -> list[tuple[int | None, ExpenseStatus, Decimal]]:
        query = select(Expense.category_id, Expense.status, Expense.amount).where(
            Expense.budget_id == budget_id
        )
        if date_from is not None:
            query = query.where(Expense.date >= date_from)
        if date_to is not None:
            query = query.where(Expense.date <= date_to)
        return [tuple(row) for row in self.db.execute(query).all()]

    def budget_summary(self, budget: Budget) -> dict[str, Any]:
        """Per-category allocated / spent / pending / remaining for one budget."""
        spent: dict[int | None, Decimal] = defaultdict(lambda: ZERO)
        pending: dict[int | None, Decimal] = defaultdict(lambda: ZERO)
        for category_id, status, amount in self._expense_rows(budget.id):
            if status == ExpenseStatus.APPROVED:
                spent[category_id] += Decimal(amount)
            elif status == ExpenseStatus.PENDING:
                pending[category_id] += Decimal(amount)

        categories = []
        for category in budget.categories:
            allocated = Decimal(category.allocated_amount)
            categories.append(
                {
                    "category_id": category.id,
                    "name": category.name,
                    "allocated": allocated,
                    "spent": spent[category.id],
                    "pending": pending[category.id],
                    "remaining": allocated - spent[category.id],
                    "allocation_percentage": calculate_allocation_percentage(
                        allocated, budget.total_amount
                    ),
                    "utilization_percentage": calculate_utilization_percentage(
                        spent[category.id], allocated
                    ),
                }
            )

        if spent[None] or pending[None]:
            categories.append(
                {
                    "category_id": None,
                    "name": UNCATEGORIZED,
                    "allocated": None,
                    "spent": spent[None],
                    "pending": pending[None],
                    "remaining": None,
                    "allocation_percentage": 0,
                    "utilization_percentage": None,
                }
            )

        total = Decimal(budget.total_amount)
        allocated_total = budget.allocated_amount
        spent_total = sum(spent.values(), ZERO)
        return {
            "budget_id": budget.id,
            "title": budget.title,
            "currency": budget.currency,
            "total_amount": total,
            "allocated": allocated_total,
            "unallocated": total - allocated_total,
            "spent": spent_total,
            "pending": sum(pending.values(), ZERO),
            "remaining": total - spent_total,
            "utilization_percentage": calculate_utilization_percentage(spent_total, total),
            "categories": categories,
        }

    def budget_report(
        self,
        startup_call_id: int,
        budget_id: int | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> dict[str, Any]:
        """Startup-call wide report, optionally limited to one budget and a date range.

        Raises:
            NotFoundError: Startup call (or the requested budget) not found
        """
        call = self.db.get(StartupCall, startup_call_id)
        if call is None:
            raise NotFoundError("Startup call not found")

        query = self.db.query(Budget).filter_by(startup_call_id=startup_call_id)
        if budget_id is not None:
            query = query.filter_by(id=budget_id)
        budgets = query.order_by(Budget.id).all()
        if budget_id is not None and not budgets:
            raise NotFoundError("Budget not found")

        entries = []
        for budget in budgets:
            rows = self._expense_rows(budget.id, date_from, date_to)
            spent = sum((Decimal(a) for _, s, a in rows if s == ExpenseStatus.APPROVED), ZERO)
            pending = sum((Decimal(a) for _, s, a in rows if s == ExpenseStatus.PENDING), ZERO)
            total = Decimal(budget.total_amount)
            entries.append(
                {
                    "budget_id": budget.id,
                    "title": budget.title,
                    "currency": budget.currency,
                    "fiscal_year": budget.fiscal_year,
                    "status": budget.status,
                    "total_amount": total,
                    "spent": spent,
                    "pending": pending,
                    "remaining": total - spent,
                    "utilization_percentage": calculate_utilization_percentage(spent, total),
                    "expense_count": len(rows),
                }
            )

        total_budget = sum((e["total_amount"] for e in entries), ZERO)
        total_spent = sum((e["spent"] for e in entries), ZERO)
        logger.info(
            f"Built budget report for startup call {startup_call_id}: "
            f"{len(entries)} budgets, spent={total_spent}"
        )
        return {
            "startup_call_id": call.id,
            "startup_call_title": call.title,
            "date_from": date_from,
            "date_to": date_to,
            "generated_at": datetime.now(timezone.utc),
            "total_budget": total_budget,
            "total_spent": total_spent,
            "total_pending": sum((e["pending"] for e in entries), ZERO),
            "remaining": total_budget - total_spent,
            "utilization_percentage": calculate_utilization_percentage(total_spent, total_budget),
            "budgets": entries,
        }
