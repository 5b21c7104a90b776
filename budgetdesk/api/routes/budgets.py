"""Budget API routes, including the dashboard summary and call-wide report."""

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from budgetdesk.api.dependencies import get_current_user, require_admin
from budgetdesk.database import get_db
from budgetdesk.errors import AppError
from budgetdesk.models.user import User
from budgetdesk.schemas.base import MessageResponse
from budgetdesk.schemas.budgets import (
    BudgetCreate,
    BudgetReport,
    BudgetResponse,
    BudgetSummary,
    BudgetUpdate,
)
from budgetdesk.services.budget_service import BudgetService
from budgetdesk.services.report_service import ReportService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/startup-calls/{startup_call_id}/budgets", tags=["budgets"])


@router.get("", response_model=list[BudgetResponse])
async def list_budgets(
    startup_call_id: int,
    db: Session = Depends(get_db),  # noqa: B008
    user: User = Depends(get_current_user),  # noqa: B008
) -> list[BudgetResponse]:
    """
    List budgets of a startup call with their categories.

    Returns:
        200: Budgets, newest first
        404: Startup call not found
    """
    try:
        budgets = BudgetService(db).list_budgets(startup_call_id)
        return [BudgetResponse.model_validate(b) for b in budgets]
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error listing budgets for startup call {startup_call_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch budgets",
        )


@router.post("", response_model=BudgetResponse, status_code=status.HTTP_201_CREATED)
async def create_budget(
    startup_call_id: int,
    payload: BudgetCreate,
    db: Session = Depends(get_db),  # noqa: B008
    admin: User = Depends(require_admin),  # noqa: B008
) -> BudgetResponse:
    """
    Create a budget and its categories in one transaction (ADMIN).

    Returns:
        201: Created budget
        400: Allocations exceed total or duplicate category names
        404: Startup call not found
    """
    try:
        budget = BudgetService(db).create_budget(
            startup_call_id=startup_call_id,
            title=payload.title,
            description=payload.description,
            total_amount=payload.total_amount,
            currency=payload.currency,
            fiscal_year=payload.fiscal_year,
            status=payload.status,
            categories=[c.model_dump() for c in payload.categories],
            actor_id=admin.id,
        )
        return BudgetResponse.model_validate(budget)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error creating budget for startup call {startup_call_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create budget",
        )


@router.get("/report", response_model=BudgetReport)
async def budget_report(
    startup_call_id: int,
    budget_id: int | None = Query(None, alias="budgetId"),
    date_from: date | None = Query(None, alias="dateFrom"),
    date_to: date | None = Query(None, alias="dateTo"),
    db: Session = Depends(get_db),  # noqa: B008
    user: User = Depends(get_current_user),  # noqa: B008
) -> BudgetReport:
    """Spend report across the budgets of a startup call."""
    try:
        report = ReportService(db).budget_report(
            startup_call_id, budget_id=budget_id, date_from=date_from, date_to=date_to
        )
        return BudgetReport.model_validate(report)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error building report for startup call {startup_call_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate budget report",
        )


@router.get("/{budget_id}", response_model=BudgetResponse)
async def get_budget(
    startup_call_id: int,
    budget_id: int,
    db: Session = Depends(get_db),  # noqa: B008
    user: User = Depends(get_current_user),  # noqa: B008
) -> BudgetResponse:
    try:
        budget = BudgetService(db).get_budget(budget_id, startup_call_id)
        return BudgetResponse.model_validate(budget)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error fetching budget {budget_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch budget",
        )


@router.put("/{budget_id}", response_model=BudgetResponse)
async def update_budget(
    startup_call_id: int,
    budget_id: int,
    payload: BudgetUpdate,
    db: Session = Depends(get_db),  # noqa: B008
    admin: User = Depends(require_admin),  # noqa: B008
) -> BudgetResponse:
    """
    Update budget fields; a ``categories`` list replaces the category set (ADMIN).

    Returns:
        200: Updated budget
        400: Allocations exceed total or duplicate category names
        404: Budget not found
        409: A removed category has expenses, or a cap drops below approved spend
    """
    changes = {
        field: value
        for field, value in payload.model_dump(exclude_unset=True, exclude={"categories"}).items()
        if value is not None or field == "description"
    }
    categories = (
        [c.model_dump() for c in payload.categories] if payload.categories is not None else None
    )
    try:
        budget = BudgetService(db).update_budget(
            budget_id,
            changes,
            categories=categories,
            startup_call_id=startup_call_id,
            actor_id=admin.id,
        )
        return BudgetResponse.model_validate(budget)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error updating budget {budget_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update budget",
        )


@router.delete("/{budget_id}", response_model=MessageResponse)
async def delete_budget(
    startup_call_id: int,
    budget_id: int,
    db: Session = Depends(get_db),  # noqa: B008
    admin: User = Depends(require_admin),  # noqa: B008
) -> MessageResponse:
    """
    Delete a budget with its categories and unapproved expenses (ADMIN).

    Returns:
        200: Deleted
        404: Budget not found
        409: Budget has approved expenses
    """
    try:
        BudgetService(db).delete_budget(budget_id, startup_call_id, actor_id=admin.id)
        return MessageResponse(message="Budget deleted successfully")
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error deleting budget {budget_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete budget",
        )


@router.get("/{budget_id}/summary", response_model=BudgetSummary)
async def budget_summary(
    startup_call_id: int,
    budget_id: int,
    db: Session = Depends(get_db),  # noqa: B008
    user: User = Depends(get_current_user),  # noqa: B008
) -> BudgetSummary:
    """Per-category allocated, spent, pending and remaining amounts."""
    try:
        budget = BudgetService(db).get_budget(budget_id, startup_call_id)
        return BudgetSummary.model_validate(ReportService(db).budget_summary(budget))
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error building summary for budget {budget_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch budget summary",
        )
