"""Budget-scoped expense routes used by entrepreneurs and admins."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from budgetdesk.api.dependencies import get_current_user, require_roles
from budgetdesk.database import get_db
from budgetdesk.errors import AppError
from budgetdesk.models.user import User, UserRole
from budgetdesk.schemas.base import MessageResponse
from budgetdesk.schemas.expenses import ExpenseCreate, ExpenseResponse, ExpenseUpdate
from budgetdesk.services.budget_service import BudgetService
from budgetdesk.services.expense_service import ExpenseService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/startup-calls/{startup_call_id}/budgets/{budget_id}/expenses",
    tags=["expenses"],
)


@router.get("", response_model=list[ExpenseResponse])
async def list_budget_expenses(
    startup_call_id: int,
    budget_id: int,
    status_filter: str | None = Query(None, alias="status"),
    category_id: int | None = Query(None, alias="categoryId"),
    db: Session = Depends(get_db),  # noqa: B008
    user: User = Depends(get_current_user),  # noqa: B008
) -> list[ExpenseResponse]:
    """
    List expenses of a budget.

    Entrepreneurs only see the expenses they submitted.
    """
    try:
        BudgetService(db).get_budget(budget_id, startup_call_id)
        submitted_by_id = user.id if user.role == UserRole.ENTREPRENEUR else None
        expenses = ExpenseService(db).list_expenses(
            status=status_filter,
            budget_id=budget_id,
            category_id=category_id,
            submitted_by_id=submitted_by_id,
        )
        return [ExpenseResponse.model_validate(e) for e in expenses]
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error listing expenses of budget {budget_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch expenses",
        )


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def submit_expense(
    startup_call_id: int,
    budget_id: int,
    payload: ExpenseCreate,
    db: Session = Depends(get_db),  # noqa: B008
    user: User = Depends(require_roles(UserRole.ENTREPRENEUR, UserRole.ADMIN)),  # noqa: B008
) -> ExpenseResponse:
    """
    Submit an expense; it starts PENDING.

    Returns:
        201: Created expense
        400: Category not in this budget, or budget closed
        403: Caller is neither entrepreneur nor admin
        404: Budget not found
    """
    try:
        expense = ExpenseService(db).create_expense(
            budget_id=budget_id,
            title=payload.title,
            description=payload.description,
            amount=payload.amount,
            currency=payload.currency,
            date=payload.date,
            category_id=payload.category_id,
            receipt=payload.receipt,
            submitted_by_id=user.id,
            startup_call_id=startup_call_id,
        )
        return ExpenseResponse.model_validate(expense)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error submitting expense to budget {budget_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create expense",
        )


@router.get("/{expense_id}", response_model=ExpenseResponse)
async def get_budget_expense(
    startup_call_id: int,
    budget_id: int,
    expense_id: int,
    db: Session = Depends(get_db),  # noqa: B008
    user: User = Depends(get_current_user),  # noqa: B008
) -> ExpenseResponse:
    """
    Get one expense of a budget.

    Returns:
        200: Expense
        400: Expense not in this budget, or budget not in this startup call
        403: Entrepreneur asking for someone else's expense
        404: Expense not found
    """
    try:
        expense = ExpenseService(db).get_budget_expense(
            expense_id, budget_id, startup_call_id, user=user
        )
        return ExpenseResponse.model_validate(expense)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error fetching expense {expense_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch expense",
        )


@router.put("/{expense_id}", response_model=ExpenseResponse)
async def edit_expense(
    startup_call_id: int,
    budget_id: int,
    expense_id: int,
    payload: ExpenseUpdate,
    db: Session = Depends(get_db),  # noqa: B008
    user: User = Depends(require_roles(UserRole.ENTREPRENEUR, UserRole.ADMIN)),  # noqa: B008
) -> ExpenseResponse:
    """
    Edit an expense's details or receipt. Status is changed through the admin route.

    Entrepreneurs may only edit their own PENDING expenses.

    Returns:
        200: Updated expense
        400: Category not in this budget, emptied required field, cap exceeded,
            or expense outside this budget/startup call
        403: Not the submitter
        404: Expense not found
        409: Expense already decided
    """
    try:
        expense = ExpenseService(db).update_expense(
            expense_id,
            payload.model_dump(exclude_unset=True),
            actor=user,
            budget_id=budget_id,
            startup_call_id=startup_call_id,
        )
        return ExpenseResponse.model_validate(expense)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error editing expense {expense_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update expense",
        )


@router.delete("/{expense_id}", response_model=MessageResponse)
async def withdraw_expense(
    startup_call_id: int,
    budget_id: int,
    expense_id: int,
    db: Session = Depends(get_db),  # noqa: B008
    user: User = Depends(require_roles(UserRole.ENTREPRENEUR, UserRole.ADMIN)),  # noqa: B008
) -> MessageResponse:
    """Delete an expense; entrepreneurs may only withdraw their own PENDING ones."""
    try:
        ExpenseService(db).delete_expense(
            expense_id, actor=user, budget_id=budget_id, startup_call_id=startup_call_id
        )
        return MessageResponse(message="Expense deleted successfully")
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error deleting expense {expense_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete expense",
        )
