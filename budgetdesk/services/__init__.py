"""Domain services for budgets, expenses and approvals."""
