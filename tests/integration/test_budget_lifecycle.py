"""Integration tests for budget creation, editing, reporting and deletion."""

from decimal import Decimal

from fastapi.testclient import TestClient

from budgetdesk.models import AuditLog, Budget, BudgetCategory, Expense
from budgetdesk.models.expense import ExpenseStatus


class TestBudgetLifecycle:
    """Admin manages a budget end to end."""

    def test_create_edit_report_delete(self, client: TestClient, test_db_session, startup_call, admin_headers):
        base = f"/api/startup-calls/{startup_call.id}/budgets"

        # Step 1: create budget with categories in one request
        response = client.post(
            base,
            json={
                "title": "Accelerator",
                "totalAmount": "5000.00",
                "currency": "usd",
                "fiscalYear": "2025",
                "categories": [
                    {"name": "Travel", "allocatedAmount": "1000.00"},
                    {"name": "Hardware", "allocatedAmount": "2500.00"},
                ],
            },
            headers=admin_headers,
        )
        assert response.status_code == 201, response.text
        created = response.json()
        budget_id = created["id"]
        assert created["currency"] == "USD"
        assert [c["name"] for c in created["categories"]] == ["Travel", "Hardware"]
        travel_id = created["categories"][0]["id"]

        # Step 2: replace categories: keep Travel (raised), drop Hardware, add Legal
        response = client.put(
            f"{base}/{budget_id}",
            json={
                "title": "Accelerator 2025",
                "categories": [
                    {"id": travel_id, "name": "Travel", "allocatedAmount": "1500.00"},
                    {"name": "Legal", "allocatedAmount": "500.00"},
                ],
            },
            headers=admin_headers,
        )
        assert response.status_code == 200, response.text
        updated = response.json()
        assert updated["title"] == "Accelerator 2025"
        assert {c["name"] for c in updated["categories"]} == {"Travel", "Legal"}
        assert test_db_session.query(BudgetCategory).filter_by(name="Hardware").count() == 0

        # Step 3: summary reflects allocations
        summary = client.get(f"{base}/{budget_id}/summary", headers=admin_headers).json()
        assert Decimal(summary["allocated"]) == Decimal("2000")
        assert Decimal(summary["unallocated"]) == Decimal("3000")
        assert summary["categories"][0]["allocationPercentage"] == 30

        # Step 4: report across the call
        report = client.get(f"{base}/report", params={"budgetId": budget_id}, headers=admin_headers)
        assert report.status_code == 200
        assert Decimal(report.json()["totalBudget"]) == Decimal("5000")
        assert report.json()["budgets"][0]["expenseCount"] == 0

        # Step 5: delete
        response = client.delete(f"{base}/{budget_id}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == {"message": "Budget deleted successfully"}
        assert test_db_session.query(Budget).count() == 0

        actions = [a.action for a in test_db_session.query(AuditLog).order_by(AuditLog.id)]
        assert actions == ["create", "update", "delete"]

    def test_delete_with_approved_expense_is_blocked(
        self, client: TestClient, test_db_session, startup_call, budget, travel, make_expense, admin_headers
    ):
        make_expense("50.00", travel, ExpenseStatus.APPROVED)
        make_expense("10.00", travel, ExpenseStatus.PENDING)

        response = client.delete(
            f"/api/startup-calls/{startup_call.id}/budgets/{budget.id}", headers=admin_headers
        )

        assert response.status_code == 409
        assert response.json()["details"] == {"approvedExpenses": 1}
        assert test_db_session.query(Expense).count() == 2

    def test_delete_never_orphans_expenses(
        self, client: TestClient, test_db_session, startup_call, budget, travel, make_expense, admin_headers
    ):
        make_expense("10.00", travel, ExpenseStatus.PENDING)
        make_expense("20.00", None, ExpenseStatus.REJECTED)

        response = client.delete(
            f"/api/startup-calls/{startup_call.id}/budgets/{budget.id}", headers=admin_headers
        )

        assert response.status_code == 200
        assert test_db_session.query(Expense).count() == 0
        listing = client.get("/api/admin/expenses", headers=admin_headers)
        assert listing.json() == []

    def test_put_recreates_category_under_same_name(
        self, client: TestClient, test_db_session, startup_call, budget, travel, equipment, admin_headers
    ):
        response = client.put(
            f"/api/startup-calls/{startup_call.id}/budgets/{budget.id}",
            json={
                "categories": [
                    {"id": equipment.id, "name": "Equipment", "allocatedAmount": "500.00"},
                    {"name": "Travel", "allocatedAmount": "250.00"},
                ]
            },
            headers=admin_headers,
        )

        assert response.status_code == 200, response.text
        categories = {c["name"]: Decimal(c["allocatedAmount"]) for c in response.json()["categories"]}
        assert categories == {"Equipment": Decimal("500.00"), "Travel": Decimal("250.00")}
        assert test_db_session.query(BudgetCategory).count() == 2
