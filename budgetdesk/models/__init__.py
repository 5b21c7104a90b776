"""ORM models.

Exports:
  - User: platform user with a single role
  - StartupCall: funding programme owning budgets
  - Budget / BudgetCategory: envelope and its capped sub-allocations
  - Expense: spend request moving through PENDING/APPROVED/REJECTED
  - Application: startup application to a call
  - Notification: in-app messages
  - AuditLog: lifecycle audit trail
"""

from budgetdesk.database import Base
from budgetdesk.models.base import BaseModel
from budgetdesk.models.application import Application, ApplicationStatus
from budgetdesk.models.audit_log import AuditLog
from budgetdesk.models.budget import Budget, BudgetCategory, BudgetStatus
from budgetdesk.models.expense import UNCATEGORIZED, Expense, ExpenseStatus
from budgetdesk.models.notification import Notification, NotificationType
from budgetdesk.models.startup_call import StartupCall, StartupCallStatus
from budgetdesk.models.user import User, UserRole

__all__ = [
    "Base",
    "BaseModel",
    "Application",
    "ApplicationStatus",
    "AuditLog",
    "Budget",
    "BudgetCategory",
    "BudgetStatus",
    "Expense",
    "ExpenseStatus",
    "Notification",
    "NotificationType",
    "StartupCall",
    "StartupCallStatus",
    "UNCATEGORIZED",
    "User",
    "UserRole",
]
