"""Admin expense review routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from budgetdesk.api.dependencies import require_admin
from budgetdesk.database import get_db
from budgetdesk.errors import AppError
from budgetdesk.models.user import User
from budgetdesk.schemas.base import MessageResponse
from budgetdesk.schemas.expenses import AuditEntryResponse, ExpenseResponse, ExpenseStatusUpdate
from budgetdesk.services.expense_service import ExpenseService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/expenses", tags=["admin"])


@router.get("", response_model=list[ExpenseResponse])
async def list_expenses(
    status_filter: str | None = Query(None, alias="status"),
    startup_call_id: int | None = Query(None, alias="startupCallId"),
    budget_id: int | None = Query(None, alias="budgetId"),
    category_id: int | None = Query(None, alias="categoryId"),
    db: Session = Depends(get_db),  # noqa: B008
    admin: User = Depends(require_admin),  # noqa: B008
) -> list[ExpenseResponse]:
    """
    List expenses across startup calls, PENDING first.

    Returns:
        200: Expenses with category, budget and startup call names
        400: Unknown status filter
    """
    try:
        expenses = ExpenseService(db).list_expenses(
            status=status_filter,
            startup_call_id=startup_call_id,
            budget_id=budget_id,
            category_id=category_id,
        )
        logger.info(f"Admin {admin.id} listed {len(expenses)} expenses")
        return [ExpenseResponse.model_validate(e) for e in expenses]
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error listing expenses: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch expenses",
        )


@router.patch("/{expense_id}", response_model=ExpenseResponse)
async def update_expense_status(
    expense_id: int,
    payload: ExpenseStatusUpdate,
    db: Session = Depends(get_db),  # noqa: B008
    admin: User = Depends(require_admin),  # noqa: B008
) -> ExpenseResponse:
    """
    Approve, reject or reset an expense.

    Returns:
        200: Updated expense
        400: Unknown status, category cap exceeded, or uncategorized approval refused
        404: Expense not found
        409: Transition not allowed from the current status
    """
    try:
        expense = ExpenseService(db).update_expense_status(
            expense_id, payload.status, actor_id=admin.id, feedback=payload.feedback
        )
        return ExpenseResponse.model_validate(expense)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error updating expense {expense_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update expense",
        )


@router.delete("/{expense_id}", response_model=MessageResponse)
async def delete_expense(
    expense_id: int,
    db: Session = Depends(get_db),  # noqa: B008
    admin: User = Depends(require_admin),  # noqa: B008
) -> MessageResponse:
    try:
        ExpenseService(db).delete_expense(expense_id, actor=admin)
        return MessageResponse(message="Expense deleted successfully")
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error deleting expense {expense_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete expense",
        )


@router.get("/{expense_id}/history", response_model=list[AuditEntryResponse])
async def expense_history(
    expense_id: int,
    db: Session = Depends(get_db),  # noqa: B008
    admin: User = Depends(require_admin),  # noqa: B008
) -> list[AuditEntryResponse]:
    """
    Audit trail of an expense: edits and status changes, oldest first.

    Returns:
        200: Audit entries with the recorded changes
        404: Expense not found
    """
    try:
        return [AuditEntryResponse.model_validate(a) for a in ExpenseService(db).history(expense_id)]
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error fetching history of expense {expense_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch expense history",
        )
