"""Contract tests for /api/admin/expenses."""

from fastapi.testclient import TestClient

from budgetdesk.models import Expense
from budgetdesk.models.expense import ExpenseStatus
from budgetdesk.services.auth_service import sign_session


class TestAdminExpensesAuth:
    """Every admin route requires an ADMIN session."""

    def test_missing_session_is_401(self, client: TestClient, travel, make_expense):
        expense = make_expense("10.00", travel)

        response = client.patch(f"/api/admin/expenses/{expense.id}", json={"status": "APPROVED"})

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized", "code": "unauthorized"}

    def test_bad_signature_is_401(self, client: TestClient, admin_user):
        response = client.get(
            "/api/admin/expenses", headers={"Authorization": f"Bearer {admin_user.id}.forged"}
        )
        assert response.status_code == 401

    def test_non_admin_is_403(self, client: TestClient, entrepreneur_headers):
        response = client.get("/api/admin/expenses", headers=entrepreneur_headers)

        assert response.status_code == 403
        assert response.json()["error"] == "Forbidden: Admin access required"

    def test_session_cookie_is_accepted(self, client: TestClient, admin_user):
        client.cookies.set("session", sign_session(admin_user.id))

        response = client.get("/api/admin/expenses")

        assert response.status_code == 200


class TestAdminExpensesList:
    def test_lists_pending_first_with_names(self, client: TestClient, travel, make_expense, admin_headers):
        make_expense("10.00", travel, ExpenseStatus.APPROVED, title="Approved one")
        make_expense("20.00", None, ExpenseStatus.PENDING, title="Pending one")

        response = client.get("/api/admin/expenses", headers=admin_headers)

        assert response.status_code == 200
        body = response.json()
        assert [e["title"] for e in body] == ["Pending one", "Approved one"]
        assert body[0]["categoryName"] == "Uncategorized"
        assert body[0]["budgetTitle"] == "Pilot budget"
        assert body[0]["startupCallTitle"] == "Green Energy 2025"
        assert body[0]["submittedByName"] == "Fay Founder"

    def test_status_and_call_filters(self, client: TestClient, startup_call, travel, make_expense, admin_headers):
        make_expense("10.00", travel, ExpenseStatus.APPROVED)
        make_expense("20.00", travel, ExpenseStatus.PENDING)

        approved = client.get(
            "/api/admin/expenses", params={"status": "APPROVED"}, headers=admin_headers
        ).json()
        other_call = client.get(
            "/api/admin/expenses", params={"startupCallId": startup_call.id + 1}, headers=admin_headers
        ).json()

        assert [e["status"] for e in approved] == ["APPROVED"]
        assert other_call == []

    def test_unknown_status_filter_is_400(self, client: TestClient, admin_headers):
        response = client.get("/api/admin/expenses", params={"status": "PAID"}, headers=admin_headers)
        assert response.status_code == 400


class TestAdminExpenseStatus:
    def test_unknown_expense_is_404(self, client: TestClient, admin_headers):
        response = client.patch("/api/admin/expenses/999", json={"status": "APPROVED"}, headers=admin_headers)

        assert response.status_code == 404
        assert response.json()["error"] == "Expense not found"

    def test_invalid_status_is_400(self, client: TestClient, travel, make_expense, admin_headers):
        expense = make_expense("10.00", travel)

        response = client.patch(
            f"/api/admin/expenses/{expense.id}", json={"status": "PAID"}, headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()["code"] == "validation_error"

    def test_same_state_is_409(self, client: TestClient, travel, make_expense, admin_headers):
        expense = make_expense("10.00", travel, ExpenseStatus.APPROVED)

        response = client.patch(
            f"/api/admin/expenses/{expense.id}", json={"status": "APPROVED"}, headers=admin_headers
        )

        assert response.status_code == 409
        assert response.json()["code"] == "invalid_status_transition"

    def test_missing_status_is_422(self, client: TestClient, travel, make_expense, admin_headers):
        expense = make_expense("10.00", travel)

        response = client.patch(f"/api/admin/expenses/{expense.id}", json={}, headers=admin_headers)

        assert response.status_code == 422


class TestAdminExpenseDelete:
    def test_delete(self, client: TestClient, test_db_session, travel, make_expense, admin_headers):
        expense = make_expense("10.00", travel, ExpenseStatus.APPROVED)

        response = client.delete(f"/api/admin/expenses/{expense.id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"message": "Expense deleted successfully"}
        assert test_db_session.query(Expense).count() == 0

    def test_delete_unknown_is_404(self, client: TestClient, admin_headers):
        assert client.delete("/api/admin/expenses/999", headers=admin_headers).status_code == 404


class TestAdminExpenseHistory:
    def test_history_records_decisions_in_order(self, client: TestClient, travel, make_expense, admin_headers):
        expense = make_expense("10.00", travel)
        client.patch(
            f"/api/admin/expenses/{expense.id}",
            json={"status": "REJECTED", "feedback": "No receipt"},
            headers=admin_headers,
        )
        reset = client.patch(f"/api/admin/expenses/{expense.id}", json={"status": "PENDING"}, headers=admin_headers)
        assert reset.json()["feedback"] is None

        response = client.get(f"/api/admin/expenses/{expense.id}/history", headers=admin_headers)

        assert response.status_code == 200
        entries = response.json()
        assert [(e["changes"]["from"], e["changes"]["to"]) for e in entries] == [
            ("PENDING", "REJECTED"),
            ("REJECTED", "PENDING"),
        ]
        assert entries[0]["changes"]["feedback"] == "No receipt"
        assert entries[0]["action"] == "status_change"

    def test_history_of_unknown_expense_is_404(self, client: TestClient, admin_headers):
        assert client.get("/api/admin/expenses/999/history", headers=admin_headers).status_code == 404

    def test_history_requires_admin(self, client: TestClient, travel, make_expense, entrepreneur_headers):
        expense = make_expense("10.00", travel)

        response = client.get(f"/api/admin/expenses/{expense.id}/history", headers=entrepreneur_headers)

        assert response.status_code == 403
