"""Unit tests for category cap enforcement."""

from decimal import Decimal

import pytest
from sqlalchemy.dialects import postgresql

from budgetdesk.errors import CategoryCapExceededError, UncategorizedApprovalError
from budgetdesk.models.expense import ExpenseStatus
from budgetdesk.services import approval_guard, expense_service
from budgetdesk.services.approval_guard import ApprovalGuard, approved_total, category_for_update
from budgetdesk.services.expense_service import ExpenseService, expense_for_update


class TestApprovedTotal:
    """Sum of approved amounts for a (budget, category) pair."""

    def test_counts_only_approved(self, test_db_session, budget, travel, make_expense):
        make_expense("50.00", travel, ExpenseStatus.APPROVED)
        make_expense("30.00", travel, ExpenseStatus.PENDING)
        make_expense("20.00", travel, ExpenseStatus.REJECTED)

        assert approved_total(test_db_session, budget.id, travel.id) == Decimal("50.00")

    def test_excludes_given_expense(self, test_db_session, budget, travel, make_expense):
        first = make_expense("50.00", travel, ExpenseStatus.APPROVED)
        make_expense("70.00", travel, ExpenseStatus.APPROVED)

        total = approved_total(test_db_session, budget.id, travel.id, exclude_expense_id=first.id)

        assert total == Decimal("70.00")

    def test_none_category_sums_uncategorized(self, test_db_session, budget, travel, make_expense):
        make_expense("40.00", None, ExpenseStatus.APPROVED)
        make_expense("60.00", travel, ExpenseStatus.APPROVED)

        assert approved_total(test_db_session, budget.id, None) == Decimal("40.00")


class TestApprovalGuard:
    """ApprovalGuard.check before an expense becomes APPROVED."""

    def test_within_cap_returns_position(self, test_db_session, travel, make_expense):
        make_expense("150.00", travel, ExpenseStatus.APPROVED)
        candidate = make_expense("50.00", travel)

        result = ApprovalGuard(test_db_session).check(candidate)

        assert result is not None
        assert result.category_name == "Travel"
        assert result.spent == Decimal("150.00")
        assert result.remaining == Decimal("50.00")

    def test_exactly_at_cap_is_allowed(self, test_db_session, travel, make_expense):
        candidate = make_expense("200.00", travel)

        assert ApprovalGuard(test_db_session).check(candidate) is not None

    def test_over_cap_raises_with_details(self, test_db_session, travel, make_expense):
        make_expense("150.00", travel, ExpenseStatus.APPROVED)
        candidate = make_expense("100.00", travel)

        with pytest.raises(CategoryCapExceededError) as exc_info:
            ApprovalGuard(test_db_session).check(candidate)

        error = exc_info.value
        assert error.http_status == 400
        assert error.message == "Approval would exceed category budget"
        assert error.details == {
            "categoryName": "Travel",
            "allocated": "200.00",
            "spent": "150.00",
            "remaining": "50.00",
            "expenseAmount": "100.00",
        }

    def test_reapproval_does_not_count_itself(self, test_db_session, travel, make_expense):
        """An expense already counted as approved is excluded from its own check."""
        expense = make_expense("200.00", travel, ExpenseStatus.APPROVED)

        assert ApprovalGuard(test_db_session).check(expense) is not None

    def test_other_categories_do_not_count(self, test_db_session, travel, equipment, make_expense):
        make_expense("500.00", equipment, ExpenseStatus.APPROVED)
        candidate = make_expense("200.00", travel)

        assert ApprovalGuard(test_db_session).check(candidate) is not None

    def test_uncategorized_skips_check_by_default(self, test_db_session, make_expense):
        candidate = make_expense("5000.00", None)

        assert ApprovalGuard(test_db_session, allow_uncategorized=True).check(candidate) is None

    def test_uncategorized_refused_when_disabled(self, test_db_session, make_expense):
        candidate = make_expense("10.00", None)

        with pytest.raises(UncategorizedApprovalError):
            ApprovalGuard(test_db_session, allow_uncategorized=False).check(candidate)

    def test_guard_reads_setting_by_default(self, test_db_session, monkeypatch):
        from budgetdesk.config import settings

        monkeypatch.setattr(settings, "allow_uncategorized_approval", False)

        assert ApprovalGuard(test_db_session).allow_uncategorized is False


def _postgres_sql(statement) -> str:
    return str(statement.compile(dialect=postgresql.dialect()))


class TestRowLocks:
    """Approval reads the expense and category rows with SELECT ... FOR UPDATE.

    SQLite drops the lock clause, so the statements are compiled for PostgreSQL.
    """

    def test_category_select_locks_row(self):
        sql = _postgres_sql(category_for_update(budget_id=1, category_id=2))

        assert "FROM budget_categories" in sql
        assert sql.rstrip().endswith("FOR UPDATE")

    def test_expense_select_locks_row(self):
        sql = _postgres_sql(expense_for_update(7))

        assert "FROM expenses" in sql
        assert sql.rstrip().endswith("FOR UPDATE")

    def test_guard_reads_category_through_locking_select(
        self, test_db_session, travel, make_expense, monkeypatch
    ):
        issued = []

        def recording(budget_id, category_id):
            issued.append(category_for_update(budget_id, category_id))
            return issued[-1]

        monkeypatch.setattr(approval_guard, "category_for_update", recording)

        ApprovalGuard(test_db_session).check(make_expense("10.00", travel))

        assert len(issued) == 1
        assert "FOR UPDATE" in _postgres_sql(issued[0])

    def test_status_update_reads_expense_through_locking_select(
        self, test_db_session, travel, make_expense, monkeypatch
    ):
        issued = []

        def recording(expense_id):
            issued.append(expense_for_update(expense_id))
            return issued[-1]

        monkeypatch.setattr(expense_service, "expense_for_update", recording)
        expense = make_expense("10.00", travel)

        ExpenseService(test_db_session).update_expense_status(expense.id, "APPROVED")

        assert len(issued) == 1
        assert "FOR UPDATE" in _postgres_sql(issued[0])
