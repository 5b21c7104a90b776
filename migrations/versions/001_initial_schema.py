"""Initial schema: users, startup calls, budgets, categories, expenses.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

# Enum columns store member names
USER_ROLE = sa.Enum("ADMIN", "ENTREPRENEUR", "SPONSOR", "REVIEWER", "USER", name="userrole")
STARTUP_CALL_STATUS = sa.Enum("DRAFT", "PUBLISHED", "CLOSED", name="startupcallstatus")
BUDGET_STATUS = sa.Enum("DRAFT", "ACTIVE", "CLOSED", name="budgetstatus")
EXPENSE_STATUS = sa.Enum("PENDING", "APPROVED", "REJECTED", name="expensestatus")
APPLICATION_STATUS = sa.Enum(
    "SUBMITTED", "UNDER_REVIEW", "APPROVED", "REJECTED", "WITHDRAWN", name="applicationstatus"
)
NOTIFICATION_TYPE = sa.Enum(
    "INFO", "SUCCESS", "ERROR", "APPLICATION_STATUS", name="notificationtype"
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("role", USER_ROLE, nullable=False, server_default="USER"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "startup_calls",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", STARTUP_CALL_STATUS, nullable=False, server_default="DRAFT"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "budgets",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("startup_call_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("total_amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="USD"),
        sa.Column("fiscal_year", sa.String(length=20), nullable=False),
        sa.Column("status", BUDGET_STATUS, nullable=False, server_default="DRAFT"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["startup_call_id"], ["startup_calls.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_budgets_startup_call_id", "budgets", ["startup_call_id"])

    op.create_table(
        "budget_categories",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("budget_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "allocated_amount",
            sa.Numeric(precision=12, scale=2),
            nullable=False,
            server_default="0",
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(["budget_id"], ["budgets.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("budget_id", "name", name="uq_budget_category_name"),
    )
    op.create_index("ix_budget_categories_budget_id", "budget_categories", ["budget_id"])

    op.create_table(
        "expenses",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("budget_id", sa.Integer(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="USD"),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("status", EXPENSE_STATUS, nullable=False, server_default="PENDING"),
        sa.Column("receipt", sa.String(length=1024), nullable=True),
        sa.Column("submitted_by_id", sa.Integer(), nullable=True),
        sa.Column("feedback", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["budget_id"], ["budgets.id"]),
        sa.ForeignKeyConstraint(["category_id"], ["budget_categories.id"]),
        sa.ForeignKeyConstraint(["submitted_by_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_expenses_budget_id", "expenses", ["budget_id"])
    op.create_index("ix_expenses_category_id", "expenses", ["category_id"])
    op.create_index("ix_expenses_status", "expenses", ["status"])

    op.create_table(
        "applications",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("startup_call_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("startup_name", sa.String(length=255), nullable=False),
        sa.Column("status", APPLICATION_STATUS, nullable=False, server_default="SUBMITTED"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["startup_call_id"], ["startup_calls.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_applications_startup_call_id", "applications", ["startup_call_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", NOTIFICATION_TYPE, nullable=False, server_default="INFO"),
        sa.Column("link", sa.String(length=512), nullable=True),
        sa.Column("read", sa.Boolean(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("actor_id", sa.Integer(), nullable=True),
        sa.Column("changes", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["actor_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_index("ix_notifications_user_id", table_name="notifications")
    op.drop_table("notifications")
    op.drop_index("ix_applications_startup_call_id", table_name="applications")
    op.drop_table("applications")
    op.drop_index("ix_expenses_status", table_name="expenses")
    op.drop_index("ix_expenses_category_id", table_name="expenses")
    op.drop_index("ix_expenses_budget_id", table_name="expenses")
    op.drop_table("expenses")
    op.drop_index("ix_budget_categories_budget_id", table_name="budget_categories")
    op.drop_table("budget_categories")
    op.drop_index("ix_budgets_startup_call_id", table_name="budgets")
    op.drop_table("budgets")
    op.drop_table("startup_calls")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    for enum in (
        NOTIFICATION_TYPE,
        APPLICATION_STATUS,
        EXPENSE_STATUS,
        BUDGET_STATUS,
        STARTUP_CALL_STATUS,
        USER_ROLE,
    ):
        enum.drop(op.get_bind(), checkfirst=True)
