"""Expense status machine.

Every surface that changes an expense's status goes through this table:

    PENDING  -> APPROVED, REJECTED
    APPROVED -> PENDING   (reset)
    REJECTED -> PENDING   (reset)

Cap enforcement on the way into APPROVED lives in the approval guard, not here.
"""

from budgetdesk.errors import InvalidStatusTransitionError, ValidationError
from budgetdesk.models.expense import ExpenseStatus

ALLOWED_TRANSITIONS: dict[ExpenseStatus, frozenset[ExpenseStatus]] = {
    ExpenseStatus.PENDING: frozenset({ExpenseStatus.APPROVED, ExpenseStatus.REJECTED}),
    ExpenseStatus.APPROVED: frozenset({ExpenseStatus.PENDING}),
    ExpenseStatus.REJECTED: frozenset({ExpenseStatus.PENDING}),
}


def parse_status(value: str | ExpenseStatus) -> ExpenseStatus:
    """Parse a status string case-insensitively.

    Raises:
        ValidationError: If the value is not a known status
    """
    if isinstance(value, ExpenseStatus):
        return value
    try:
        return ExpenseStatus(str(value).strip().upper())
    except ValueError:
        allowed = ", ".join(s.value for s in ExpenseStatus)
        raise ValidationError(f"Invalid status. Must be one of: {allowed}") from None


def allowed_targets(current: ExpenseStatus) -> frozenset[ExpenseStatus]:
    """Statuses reachable from ``current`` in one step."""
    return ALLOWED_TRANSITIONS.get(current, frozenset())


def can_transition(current: ExpenseStatus, target: ExpenseStatus) -> bool:
    return target in allowed_targets(current)


def ensure_transition(current: ExpenseStatus, target: ExpenseStatus) -> None:
    """Raise InvalidStatusTransitionError unless ``current -> target`` is allowed."""
    if not can_transition(current, target):
        raise InvalidStatusTransitionError(current.value, target.value)
