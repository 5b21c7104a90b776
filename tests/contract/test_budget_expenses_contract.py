"""Contract tests for budget-scoped expense submission, listing, edits and withdrawal."""

from decimal import Decimal

from fastapi.testclient import TestClient

from budgetdesk.models import Expense
from budgetdesk.models.expense import ExpenseStatus


class TestSubmitExpense:
    def _url(self, startup_call, budget):
        return f"/api/startup-calls/{startup_call.id}/budgets/{budget.id}/expenses"

    def test_entrepreneur_submits(self, client: TestClient, startup_call, budget, travel, entrepreneur_headers):
        response = client.post(
            self._url(startup_call, budget),
            json={"title": "Taxi", "amount": "42.50", "date": "2025-04-01", "categoryId": travel.id},
            headers=entrepreneur_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "PENDING"
        assert Decimal(body["amount"]) == Decimal("42.50")
        assert body["submittedByName"] == "Fay Founder"

    def test_reviewer_cannot_submit(self, client: TestClient, startup_call, budget, reviewer, headers_for):
        response = client.post(
            self._url(startup_call, budget),
            json={"title": "Taxi", "amount": "1", "date": "2025-04-01"},
            headers=headers_for(reviewer),
        )
        assert response.status_code == 403

    def test_zero_amount_is_422(self, client: TestClient, startup_call, budget, entrepreneur_headers):
        response = client.post(
            self._url(startup_call, budget),
            json={"title": "Free", "amount": "0", "date": "2025-04-01"},
            headers=entrepreneur_headers,
        )
        assert response.status_code == 422

    def test_foreign_category_is_400(self, client: TestClient, startup_call, budget, entrepreneur_headers):
        response = client.post(
            self._url(startup_call, budget),
            json={"title": "Taxi", "amount": "1", "date": "2025-04-01", "categoryId": 999},
            headers=entrepreneur_headers,
        )
        assert response.status_code == 400

    def test_budget_of_other_call_is_404(self, client: TestClient, startup_call, budget, entrepreneur_headers):
        response = client.post(
            f"/api/startup-calls/{startup_call.id + 1}/budgets/{budget.id}/expenses",
            json={"title": "Taxi", "amount": "1", "date": "2025-04-01"},
            headers=entrepreneur_headers,
        )
        assert response.status_code == 404


class TestListBudgetExpenses:
    def test_entrepreneur_sees_only_own(
        self,
        client: TestClient,
        startup_call,
        budget,
        travel,
        make_expense,
        other_entrepreneur,
        headers_for,
        admin_headers,
    ):
        make_expense("10.00", travel, title="Fay's")
        url = f"/api/startup-calls/{startup_call.id}/budgets/{budget.id}/expenses"

        assert client.get(url, headers=headers_for(other_entrepreneur)).json() == []
        assert [e["title"] for e in client.get(url, headers=admin_headers).json()] == ["Fay's"]


class TestSingleBudgetExpense:
    def _url(self, startup_call, budget, expense_id):
        return f"/api/startup-calls/{startup_call.id}/budgets/{budget.id}/expenses/{expense_id}"

    def test_get_own_expense(self, client: TestClient, startup_call, budget, travel, make_expense, entrepreneur_headers):
        expense = make_expense("10.00", travel, title="Taxi")

        response = client.get(self._url(startup_call, budget, expense.id), headers=entrepreneur_headers)

        assert response.status_code == 200
        assert response.json()["title"] == "Taxi"
        assert response.json()["categoryName"] == "Travel"

    def test_get_others_expense_is_403(
        self, client: TestClient, startup_call, budget, travel, make_expense, other_entrepreneur, headers_for
    ):
        expense = make_expense("10.00", travel)

        response = client.get(self._url(startup_call, budget, expense.id), headers=headers_for(other_entrepreneur))

        assert response.status_code == 403

    def test_get_missing_is_404(self, client: TestClient, startup_call, budget, admin_headers):
        assert client.get(self._url(startup_call, budget, 999), headers=admin_headers).status_code == 404

    def test_expense_of_other_call_is_400(self, client: TestClient, startup_call, budget, travel, make_expense, admin_headers):
        expense = make_expense("10.00", travel)

        response = client.get(
            f"/api/startup-calls/{startup_call.id + 1}/budgets/{budget.id}/expenses/{expense.id}",
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Budget does not belong to the specified startup call"

    def test_put_edits_pending_expense(
        self, client: TestClient, startup_call, budget, travel, equipment, make_expense, entrepreneur_headers
    ):
        expense = make_expense("10.00", travel)

        response = client.put(
            self._url(startup_call, budget, expense.id),
            json={"amount": "12.40", "categoryId": equipment.id, "receipt": "/uploads/taxi.pdf"},
            headers=entrepreneur_headers,
        )

        assert response.status_code == 200, response.text
        body = response.json()
        assert Decimal(body["amount"]) == Decimal("12.40")
        assert body["categoryName"] == "Equipment"
        assert body["receipt"] == "/uploads/taxi.pdf"
        assert body["status"] == "PENDING"

    def test_put_null_category_makes_expense_uncategorized(
        self, client: TestClient, startup_call, budget, travel, make_expense, entrepreneur_headers
    ):
        expense = make_expense("10.00", travel)

        response = client.put(
            self._url(startup_call, budget, expense.id), json={"categoryId": None}, headers=entrepreneur_headers
        )

        assert response.status_code == 200
        assert response.json()["categoryName"] == "Uncategorized"

    def test_put_decided_expense_is_409(
        self, client: TestClient, startup_call, budget, travel, make_expense, entrepreneur_headers
    ):
        expense = make_expense("10.00", travel, ExpenseStatus.REJECTED)

        response = client.put(
            self._url(startup_call, budget, expense.id), json={"title": "Retry"}, headers=entrepreneur_headers
        )

        assert response.status_code == 409
        assert response.json()["code"] == "conflict"

    def test_put_foreign_category_is_400(
        self, client: TestClient, startup_call, budget, travel, make_expense, entrepreneur_headers
    ):
        expense = make_expense("10.00", travel)

        response = client.put(
            self._url(startup_call, budget, expense.id), json={"categoryId": 999}, headers=entrepreneur_headers
        )

        assert response.status_code == 400

    def test_put_over_cap_on_approved_expense_is_400(
        self, client: TestClient, startup_call, budget, travel, make_expense, admin_headers
    ):
        expense = make_expense("150.00", travel, ExpenseStatus.APPROVED)

        response = client.put(
            self._url(startup_call, budget, expense.id), json={"amount": "250.00"}, headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()["code"] == "category_cap_exceeded"

    def test_reviewer_cannot_edit(
        self, client: TestClient, startup_call, budget, travel, make_expense, reviewer, headers_for
    ):
        expense = make_expense("10.00", travel)

        response = client.put(
            self._url(startup_call, budget, expense.id), json={"title": "x"}, headers=headers_for(reviewer)
        )

        assert response.status_code == 403

    def test_delete_withdraws_pending_expense(
        self, client: TestClient, test_db_session, startup_call, budget, travel, make_expense, entrepreneur_headers
    ):
        expense = make_expense("10.00", travel)

        response = client.delete(self._url(startup_call, budget, expense.id), headers=entrepreneur_headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Expense deleted successfully"}
        assert test_db_session.query(Expense).count() == 0

    def test_delete_approved_by_entrepreneur_is_409(
        self, client: TestClient, startup_call, budget, travel, make_expense, entrepreneur_headers
    ):
        expense = make_expense("10.00", travel, ExpenseStatus.APPROVED)

        response = client.delete(self._url(startup_call, budget, expense.id), headers=entrepreneur_headers)

        assert response.status_code == 409
