"""Application errors and response helpers."""

from typing import Any, Dict

from fastapi import status


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        message: str,
        code: str,
        http_status: int = 400,
        details: Dict[str, Any] | None = None,
    ):
        """Initialize error."""
        self.message = message
        self.code = code
        self.http_status = http_status
        self.details = details
        super().__init__(message)


class NotFoundError(AppError):
    """Requested entity does not exist."""

    def __init__(self, message: str = "Not found"):
        super().__init__(message, "not_found", status.HTTP_404_NOT_FOUND)


class ValidationError(AppError):
    """Input failed a domain rule."""

    def __init__(self, message: str, details: Dict[str, Any] | None = None):
        super().__init__(message, "validation_error", status.HTTP_400_BAD_REQUEST, details)


class ConflictError(AppError):
    """Operation conflicts with the current state of stored data."""

    def __init__(self, message: str, details: Dict[str, Any] | None = None):
        super().__init__(message, "conflict", status.HTTP_409_CONFLICT, details)


class InvalidStatusTransitionError(AppError):
    """Requested status change is not in the transition table."""

    def __init__(self, current: str, requested: str):
        super().__init__(
            f"Cannot change status from {current} to {requested}",
            "invalid_status_transition",
            status.HTTP_409_CONFLICT,
            {"currentStatus": current, "requestedStatus": requested},
        )


class CategoryCapExceededError(AppError):
    """Approving an expense would push its category past the allocation."""

    def __init__(self, details: Dict[str, Any]):
        super().__init__(
            "Approval would exceed category budget",
            "category_cap_exceeded",
            status.HTTP_400_BAD_REQUEST,
            details,
        )


class UncategorizedApprovalError(AppError):
    """Uncategorized expenses cannot be approved under the current settings."""

    def __init__(self, message: str = "Expense must be assigned to a category before approval"):
        super().__init__(message, "uncategorized_approval", status.HTTP_400_BAD_REQUEST)


class AuthenticationError(AppError):
    """Missing or invalid session."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, "unauthorized", status.HTTP_401_UNAUTHORIZED)


class ForbiddenError(AppError):
    """Authenticated user lacks the required role."""

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, "forbidden", status.HTTP_403_FORBIDDEN)


def error_response(error: AppError) -> Dict[str, Any]:
    """Create a standardized error response."""
    body: Dict[str, Any] = {"error": error.message, "code": error.code}
    if error.details is not None:
        body["details"] = error.details
    return body
