"""Pydantic schemas for budgets, categories and budget reporting."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import Field

from budgetdesk.models.budget import BudgetStatus
from budgetdesk.schemas.base import CamelModel


class CategoryCreate(CamelModel):
    """Category payload used when creating a budget or a standalone category."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    allocated_amount: Decimal = Field(..., ge=0, decimal_places=2)


class CategoryUpsert(CategoryCreate):
    """Category entry in a budget update; known ids are updated, others created."""

    id: int | None = None


class CategoryUpdate(CamelModel):
    """Payload for PUT .../categories/{category_id}."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    allocated_amount: Decimal | None = Field(None, ge=0, decimal_places=2)


class CategoryResponse(CamelModel):
    id: int
    budget_id: int
    name: str
    description: str | None = None
    allocated_amount: Decimal


class BudgetCreate(CamelModel):
    """Payload for POST /api/startup-calls/{id}/budgets."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    total_amount: Decimal = Field(..., ge=0, decimal_places=2)
    currency: str = Field("USD", min_length=3, max_length=3)
    fiscal_year: str = Field(..., min_length=1, max_length=20)
    status: BudgetStatus = BudgetStatus.DRAFT
    categories: list[CategoryCreate] = Field(default_factory=list)


class BudgetUpdate(CamelModel):
    """Payload for PUT /api/startup-calls/{id}/budgets/{budget_id}.

    Omitted fields are left unchanged. When ``categories`` is given it replaces
    the category set.
    """

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    total_amount: Decimal | None = Field(None, ge=0, decimal_places=2)
    currency: str | None = Field(None, min_length=3, max_length=3)
    fiscal_year: str | None = Field(None, min_length=1, max_length=20)
    status: BudgetStatus | None = None
    categories: list[CategoryUpsert] | None = None


class BudgetResponse(CamelModel):
    id: int
    startup_call_id: int
    title: str
    description: str | None = None
    total_amount: Decimal
    currency: str
    fiscal_year: str
    status: BudgetStatus
    created_at: datetime
    updated_at: datetime
    categories: list[CategoryResponse] = []


class CategorySummary(CamelModel):
    """Spend position of one category."""

    category_id: int | None
    name: str
    allocated: Decimal | None
    spent: Decimal
    pending: Decimal
    remaining: Decimal | None
    allocation_percentage: int
    utilization_percentage: Decimal | None


class BudgetSummary(CamelModel):
    """Aggregate spend position of a budget, consumed by dashboards."""

    budget_id: int
    title: str
    currency: str
    total_amount: Decimal
    allocated: Decimal
    unallocated: Decimal
    spent: Decimal
    pending: Decimal
    remaining: Decimal
    utilization_percentage: Decimal
    categories: list[CategorySummary]


class BudgetReportEntry(CamelModel):
    budget_id: int
    title: str
    currency: str
    fiscal_year: str
    status: BudgetStatus
    total_amount: Decimal
    spent: Decimal
    pending: Decimal
    remaining: Decimal
    utilization_percentage: Decimal
    expense_count: int


class BudgetReport(CamelModel):
    """Startup-call wide budget report."""

    startup_call_id: int
    startup_call_title: str
    date_from: date | None = None
    date_to: date | None = None
    generated_at: datetime
    total_budget: Decimal
    total_spent: Decimal
    total_pending: Decimal
    remaining: Decimal
    utilization_percentage: Decimal
    budgets: list[BudgetReportEntry]
