"""Budget category API routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from budgetdesk.api.dependencies import get_current_user, require_admin
from budgetdesk.database import get_db
from budgetdesk.errors import AppError
from budgetdesk.models.user import User
from budgetdesk.schemas.base import MessageResponse
from budgetdesk.schemas.budgets import CategoryCreate, CategoryResponse, CategoryUpdate
from budgetdesk.services.budget_service import BudgetService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/startup-calls/{startup_call_id}/budgets/{budget_id}/categories",
    tags=["categories"],
)


@router.get("", response_model=list[CategoryResponse])
async def list_categories(
    startup_call_id: int,
    budget_id: int,
    db: Session = Depends(get_db),  # noqa: B008
    user: User = Depends(get_current_user),  # noqa: B008
) -> list[CategoryResponse]:
    try:
        categories = BudgetService(db).list_categories(budget_id, startup_call_id)
        return [CategoryResponse.model_validate(c) for c in categories]
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error listing categories of budget {budget_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch categories",
        )


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    startup_call_id: int,
    budget_id: int,
    payload: CategoryCreate,
    db: Session = Depends(get_db),  # noqa: B008
    admin: User = Depends(require_admin),  # noqa: B008
) -> CategoryResponse:
    """
    Add a category to a budget (ADMIN).

    Returns:
        201: Created category
        400: Allocations would exceed the budget total
        404: Budget not found
        409: Name already used in this budget
    """
    try:
        category = BudgetService(db).create_category(
            budget_id,
            name=payload.name,
            description=payload.description,
            allocated_amount=payload.allocated_amount,
            startup_call_id=startup_call_id,
        )
        return CategoryResponse.model_validate(category)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error creating category in budget {budget_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create category",
        )


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    startup_call_id: int,
    budget_id: int,
    category_id: int,
    payload: CategoryUpdate,
    db: Session = Depends(get_db),  # noqa: B008
    admin: User = Depends(require_admin),  # noqa: B008
) -> CategoryResponse:
    try:
        category = BudgetService(db).update_category(
            budget_id,
            category_id,
            name=payload.name,
            description=payload.description,
            allocated_amount=payload.allocated_amount,
            startup_call_id=startup_call_id,
        )
        return CategoryResponse.model_validate(category)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error updating category {category_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update category",
        )


@router.delete("/{category_id}", response_model=MessageResponse)
async def delete_category(
    startup_call_id: int,
    budget_id: int,
    category_id: int,
    db: Session = Depends(get_db),  # noqa: B008
    admin: User = Depends(require_admin),  # noqa: B008
) -> MessageResponse:
    """Delete a category no expense references (ADMIN); 409 otherwise."""
    try:
        BudgetService(db).delete_category(budget_id, category_id, startup_call_id)
        return MessageResponse(message="Category deleted successfully")
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error deleting category {category_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete category",
        )
