"""Budget and budget category models."""

from decimal import Decimal
from enum import Enum

from sqlalchemy import ForeignKey, Numeric, String, Text, UniqueConstraint, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from budgetdesk.database import Base
from budgetdesk.models.base import BaseModel


class BudgetStatus(str, Enum):
    """Budget lifecycle status."""

    DRAFT = "draft"
    ACTIVE = "active"
    CLOSED = "closed"  # No new expenses accepted


class Budget(Base, BaseModel):
    """Monetary envelope tied to a startup call, divided into categories.

    Attributes:
        startup_call_id: Owning startup call
        title: Display title
        total_amount: Envelope size; category allocations must not exceed it
        currency: ISO currency code
        fiscal_year: Free-form fiscal year label (e.g. "2025")
        status: draft, active or closed
    """

    __tablename__ = "budgets"

    startup_call_id: Mapped[int] = mapped_column(
        ForeignKey("startup_calls.id"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text(), nullable=True)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(precision=12, scale=2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    fiscal_year: Mapped[str] = mapped_column(String(20), nullable=False)
    status: Mapped[BudgetStatus] = mapped_column(
        SQLEnum(BudgetStatus), nullable=False, default=BudgetStatus.DRAFT
    )

    # Relationships
    startup_call: Mapped["StartupCall"] = relationship(  # noqa: F821
        "StartupCall", back_populates="budgets"
    )
    categories: Mapped[list["BudgetCategory"]] = relationship(
        "BudgetCategory",
        back_populates="budget",
        order_by="BudgetCategory.id",
        cascade="all, delete-orphan",
    )
    expenses: Mapped[list["Expense"]] = relationship(  # noqa: F821
        "Expense", back_populates="budget", cascade="all, delete-orphan"
    )

    @property
    def allocated_amount(self) -> Decimal:
        """Sum of category allocations."""
        return sum((c.allocated_amount for c in self.categories), Decimal("0"))

    def __repr__(self) -> str:
        return f"<Budget(id={self.id}, title={self.title}, total={self.total_amount})>"


class BudgetCategory(Base, BaseModel):
    """Named sub-allocation of a budget; its allocation is the approval cap."""

    __tablename__ = "budget_categories"

    budget_id: Mapped[int] = mapped_column(ForeignKey("budgets.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text(), nullable=True)
    allocated_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2), nullable=False, default=Decimal("0")
    )

    __table_args__ = (UniqueConstraint("budget_id", "name", name="uq_budget_category_name"),)

    budget: Mapped["Budget"] = relationship("Budget", back_populates="categories")
    expenses: Mapped[list["Expense"]] = relationship(  # noqa: F821
        "Expense", back_populates="category"
    )

    def __repr__(self) -> str:
        return f"<BudgetCategory(id={self.id}, name={self.name}, allocated={self.allocated_amount})>"


__all__ = ["Budget", "BudgetCategory", "BudgetStatus"]
