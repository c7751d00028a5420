"""Initial schema: centers, members, payment ledger, notifications, reports.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    # Create centers table
    op.create_table(
        "centers",
        *_timestamps(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("address", sa.String(length=300), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("manager_name", sa.String(length=100), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("monthly_dues", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.CheckConstraint("monthly_dues >= 0", name="ck_center_monthly_dues_non_negative"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_centers_name", "centers", ["name"])

    # Create members table
    op.create_table(
        "members",
        *_timestamps(),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("address", sa.String(length=300), nullable=False),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("external_id", sa.String(length=20), nullable=True),
        sa.Column("center_id", sa.Integer(), nullable=False),
        sa.Column("status", sa.Enum("ACTIVE", "INACTIVE", name="memberstatus"), nullable=False),
        sa.Column("registered_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("last_payment_date", sa.Date(), nullable=True),
        sa.Column("emergency_contact_name", sa.String(length=100), nullable=True),
        sa.Column("emergency_contact_phone", sa.String(length=20), nullable=True),
        sa.Column("emergency_contact_relation", sa.String(length=100), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("registered_by", sa.String(length=255), nullable=True),
        sa.ForeignKeyConstraint(["center_id"], ["centers.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
        sa.UniqueConstraint("external_id"),
    )
    op.create_index("ix_members_name", "members", ["name"])
    op.create_index("ix_members_center_id", "members", ["center_id"])
    op.create_index("idx_member_center_status", "members", ["center_id", "status"])

    # Create payments table
    op.create_table(
        "payments",
        *_timestamps(),
        sa.Column("member_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("payment_date", sa.Date(), nullable=True),
        sa.Column(
            "method",
            sa.Enum("PIX", "CREDIT_CARD", "DEBIT_CARD", "CASH", "BANK_TRANSFER", name="paymentmethod"),
            nullable=True,
        ),
        sa.Column("kind", sa.Enum("DUES", "FEE", "FINE", "OTHER", name="paymentkind"), nullable=False),
        sa.Column(
            "status",
            sa.Enum("PENDING", "PAID", "OVERDUE", "CANCELLED", name="paymentstatus"),
            nullable=False,
        ),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("reference", sa.String(length=100), nullable=False),
        sa.Column("paid_by", sa.String(length=100), nullable=True),
        sa.Column("recorded_by", sa.String(length=255), nullable=True),
        sa.Column("reference_month", sa.Integer(), nullable=False),
        sa.Column("reference_year", sa.Integer(), nullable=False),
        sa.CheckConstraint("amount >= 0", name="ck_payment_amount_non_negative"),
        sa.CheckConstraint(
            "reference_month >= 1 AND reference_month <= 12", name="ck_payment_reference_month"
        ),
        sa.ForeignKeyConstraint(["member_id"], ["members.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_payments_member_id", "payments", ["member_id"])
    op.create_index("ix_payments_due_date", "payments", ["due_date"])
    op.create_index("ix_payments_payment_date", "payments", ["payment_date"])
    op.create_index("ix_payments_status", "payments", ["status"])
    op.create_index("idx_payment_member_date", "payments", ["member_id", "payment_date"])
    op.create_index(
        "idx_payment_member_period", "payments", ["member_id", "reference_year", "reference_month"]
    )
    op.create_index("idx_payment_reference", "payments", ["reference"])

    # Create notifications table
    op.create_table(
        "notifications",
        *_timestamps(),
        sa.Column("type", sa.Enum("EMAIL", "SMS", name="notificationtype"), nullable=False),
        sa.Column("recipient", sa.String(length=255), nullable=False),
        sa.Column("subject", sa.String(length=200), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column(
            "status", sa.Enum("PENDING", "SENT", "FAILED", name="notificationstatus"), nullable=False
        ),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("retry_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("error_message", sa.String(length=1000), nullable=True),
        sa.Column("member_id", sa.Integer(), nullable=True),
        sa.Column("payment_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["member_id"], ["members.id"]),
        sa.ForeignKeyConstraint(["payment_id"], ["payments.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notifications_member_id", "notifications", ["member_id"])
    op.create_index("ix_notifications_payment_id", "notifications", ["payment_id"])

    # Create reports table
    op.create_table(
        "reports",
        *_timestamps(),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column(
            "type",
            sa.Enum(
                "MEMBERS_BY_CENTER",
                "PAYMENTS_BY_PERIOD",
                "DELINQUENCY",
                "MONTHLY_FINANCIAL",
                name="reporttype",
            ),
            nullable=False,
        ),
        sa.Column("parameters", sa.JSON(), nullable=False),
        sa.Column("result", sa.JSON(), nullable=False),
        sa.Column("generated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("generated_by", sa.String(length=255), nullable=True),
        sa.Column("status", sa.Enum("GENERATED", name="reportstatus"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_reports_type", "reports", ["type"])
    op.create_index("ix_reports_generated_at", "reports", ["generated_at"])

    # Create audit_logs table
    op.create_table(
        "audit_logs",
        *_timestamps(),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("actor", sa.String(length=255), nullable=True),
        sa.Column("changes", sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("audit_logs")
    op.drop_table("reports")
    op.drop_table("notifications")
    op.drop_table("payments")
    op.drop_table("members")
    op.drop_table("centers")
