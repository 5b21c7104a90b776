"""Pytest configuration and shared fixtures."""

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Create test engine BEFORE importing app
test_engine = create_engine(
    "sqlite:///:memory:",
    poolclass=StaticPool,
    connect_args={"check_same_thread": False},
)

# Patch database module before importing app
import budgetdesk.database as db_module  # noqa: E402

db_module.engine = test_engine

from budgetdesk.database import Base, get_db  # noqa: E402
from budgetdesk.main import app  # noqa: E402
from budgetdesk.models import (  # noqa: E402
    Application,
    Budget,
    BudgetCategory,
    BudgetStatus,
    Expense,
    ExpenseStatus,
    StartupCall,
    StartupCallStatus,
    User,
    UserRole,
)
from budgetdesk.services.auth_service import sign_session  # noqa: E402


@pytest.fixture(scope="function")
def test_db_session():
    """Provide a test database session with all tables created."""
    Base.metadata.create_all(bind=test_engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestingSessionLocal()

    def override_get_db():
        """Override get_db to use test session."""
        try:
            yield session
        finally:
            pass  # Don't close, let fixture handle cleanup

    app.dependency_overrides[get_db] = override_get_db

    yield session

    session.close()
    app.dependency_overrides.clear()

    # Clean up tables after each test
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client(test_db_session):
    """Provide a FastAPI test client with test database."""
    return TestClient(app)


def _make_user(session, email: str, name: str, role: UserRole) -> User:
    user = User(email=email, name=name, role=role, is_active=True)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def auth_headers(user: User) -> dict[str, str]:
    """Bearer header carrying a valid session token for ``user``."""
    return {"Authorization": f"Bearer {sign_session(user.id)}"}


@pytest.fixture
def admin_user(test_db_session) -> User:
    return _make_user(test_db_session, "admin@example.com", "Ada Admin", UserRole.ADMIN)


@pytest.fixture
def entrepreneur(test_db_session) -> User:
    return _make_user(test_db_session, "founder@example.com", "Fay Founder", UserRole.ENTREPRENEUR)


@pytest.fixture
def other_entrepreneur(test_db_session) -> User:
    return _make_user(test_db_session, "other@example.com", "Otto Other", UserRole.ENTREPRENEUR)


@pytest.fixture
def reviewer(test_db_session) -> User:
    return _make_user(test_db_session, "reviewer@example.com", "Rita Reviewer", UserRole.REVIEWER)


@pytest.fixture
def headers_for():
    """Build auth headers for an arbitrary user."""
    return auth_headers


@pytest.fixture
def admin_headers(admin_user) -> dict[str, str]:
    return auth_headers(admin_user)


@pytest.fixture
def entrepreneur_headers(entrepreneur) -> dict[str, str]:
    return auth_headers(entrepreneur)


@pytest.fixture
def startup_call(test_db_session) -> StartupCall:
    call = StartupCall(title="Green Energy 2025", status=StartupCallStatus.PUBLISHED)
    test_db_session.add(call)
    test_db_session.commit()
    test_db_session.refresh(call)
    return call


@pytest.fixture
def budget(test_db_session, startup_call) -> Budget:
    """Budget of 1000 with Travel (200) and Equipment (500) categories."""
    budget = Budget(
        startup_call_id=startup_call.id,
        title="Pilot budget",
        total_amount=Decimal("1000.00"),
        currency="USD",
        fiscal_year="2025",
        status=BudgetStatus.ACTIVE,
    )
    budget.categories.append(BudgetCategory(name="Travel", allocated_amount=Decimal("200.00")))
    budget.categories.append(BudgetCategory(name="Equipment", allocated_amount=Decimal("500.00")))
    test_db_session.add(budget)
    test_db_session.commit()
    test_db_session.refresh(budget)
    return budget


@pytest.fixture
def travel(budget) -> BudgetCategory:
    return next(c for c in budget.categories if c.name == "Travel")


@pytest.fixture
def equipment(budget) -> BudgetCategory:
    return next(c for c in budget.categories if c.name == "Equipment")


@pytest.fixture
def make_expense(test_db_session, budget, entrepreneur):
    """Factory inserting an expense row directly."""

    def _make(
        amount: str,
        category: BudgetCategory | None = None,
        status: ExpenseStatus = ExpenseStatus.PENDING,
        title: str = "Expense",
        expense_date: date = date(2025, 3, 1),
    ) -> Expense:
        expense = Expense(
            budget_id=budget.id,
            category_id=category.id if category else None,
            title=title,
            amount=Decimal(amount),
            currency="USD",
            date=expense_date,
            status=status,
            submitted_by_id=entrepreneur.id,
        )
        test_db_session.add(expense)
        test_db_session.commit()
        test_db_session.refresh(expense)
        return expense

    return _make


@pytest.fixture
def application(test_db_session, startup_call, entrepreneur) -> Application:
    row = Application(
        startup_call_id=startup_call.id, user_id=entrepreneur.id, startup_name="SunCell"
    )
    test_db_session.add(row)
    test_db_session.commit()
    test_db_session.refresh(row)
    return row
