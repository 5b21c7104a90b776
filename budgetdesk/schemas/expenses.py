"""Pydantic schemas for expense submission and review."""

from datetime import date as date_type, datetime
from decimal import Decimal
from typing import Any

from pydantic import Field

from budgetdesk.models.expense import ExpenseStatus
from budgetdesk.schemas.base import CamelModel


class ExpenseCreate(CamelModel):
    """Payload for POST .../budgets/{budget_id}/expenses."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    amount: Decimal = Field(..., gt=0, decimal_places=2)
    currency: str = Field("USD", min_length=3, max_length=3)
    date: date_type
    category_id: int | None = None
    receipt: str | None = Field(None, max_length=1024)


class ExpenseUpdate(CamelModel):
    """Payload for PUT .../budgets/{budget_id}/expenses/{expense_id}.

    Only the fields present in the body are changed; an explicit ``null``
    clears ``description``, ``categoryId`` or ``receipt``.
    """

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    amount: Decimal | None = Field(None, gt=0, decimal_places=2)
    currency: str | None = Field(None, min_length=3, max_length=3)
    date: date_type | None = None
    category_id: int | None = None
    receipt: str | None = Field(None, max_length=1024)


class ExpenseStatusUpdate(CamelModel):
    """Payload for PATCH /api/admin/expenses/{id}.

    ``status`` is kept as a plain string so unknown values produce the
    service's 400 response instead of a schema error.
    """

    status: str
    feedback: str | None = None


class ExpenseResponse(CamelModel):
    """Expense denormalized with budget, call, category and submitter names."""

    id: int
    budget_id: int
    budget_title: str
    startup_call_id: int
    startup_call_title: str
    category_id: int | None = None
    category_name: str
    title: str
    description: str | None = None
    amount: Decimal
    currency: str
    date: date_type
    status: ExpenseStatus
    receipt: str | None = None
    submitted_by_id: int | None = None
    submitted_by_name: str | None = None
    feedback: str | None = None
    created_at: datetime
    updated_at: datetime


class AuditEntryResponse(CamelModel):
    """One row of an expense's audit trail."""

    id: int
    action: str
    actor_id: int | None = None
    changes: dict[str, Any] | None = None
    created_at: datetime
