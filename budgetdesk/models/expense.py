"""Expense model - spend requests submitted against a budget."""

from datetime import date as date_type
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, ForeignKey, Numeric, String, Text, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from budgetdesk.database import Base
from budgetdesk.models.base import BaseModel

UNCATEGORIZED = "Uncategorized"


class ExpenseStatus(str, Enum):
    """Expense approval status."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Expense(Base, BaseModel):
    """Spend request against a budget and, optionally, one of its categories.

    Attributes:
        budget_id: Owning budget
        category_id: Category whose cap applies (None = uncategorized)
        title: Short label
        amount: Requested amount, always positive
        date: Date the spend happened
        status: PENDING, APPROVED or REJECTED
        receipt: Optional receipt URI
        submitted_by_id: User who submitted the expense
        feedback: Admin comment from the latest status change, if any
    """

    __tablename__ = "expenses"

    budget_id: Mapped[int] = mapped_column(ForeignKey("budgets.id"), nullable=False, index=True)
    category_id: Mapped[int | None] = mapped_column(
        ForeignKey("budget_categories.id"), nullable=True, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text(), nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    date: Mapped[date_type] = mapped_column(Date(), nullable=False)
    status: Mapped[ExpenseStatus] = mapped_column(
        SQLEnum(ExpenseStatus), nullable=False, default=ExpenseStatus.PENDING, index=True
    )
    receipt: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    submitted_by_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    feedback: Mapped[str | None] = mapped_column(Text(), nullable=True)

    # Relationships
    budget: Mapped["Budget"] = relationship("Budget", back_populates="expenses")  # noqa: F821
    category: Mapped["BudgetCategory | None"] = relationship(  # noqa: F821
        "BudgetCategory", back_populates="expenses"
    )
    submitted_by: Mapped["User | None"] = relationship("User")  # noqa: F821

    @property
    def category_name(self) -> str:
        return self.category.name if self.category else UNCATEGORIZED

    @property
    def budget_title(self) -> str:
        return self.budget.title

    @property
    def startup_call_id(self) -> int:
        return self.budget.startup_call_id

    @property
    def startup_call_title(self) -> str:
        return self.budget.startup_call.title

    @property
    def submitted_by_name(self) -> str | None:
        return self.submitted_by.name if self.submitted_by else None

    def __repr__(self) -> str:
        return f"<Expense(id={self.id}, amount={self.amount}, status={self.status.value})>"


__all__ = ["Expense", "ExpenseStatus", "UNCATEGORIZED"]
