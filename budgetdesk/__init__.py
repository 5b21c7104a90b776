"""budgetdesk - startup-call budget allocation and expense approval API."""

__version__ = "0.1.0"
