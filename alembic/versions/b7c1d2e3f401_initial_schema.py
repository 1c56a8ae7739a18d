"""initial_schema

Revision ID: b7c1d2e3f401
Revises:
Create Date: 2026-10-16 09:00:00.000000
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "b7c1d2e3f401"
down_revision = None
branch_labels = None
depends_on = None


JSON_TYPE = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")

ENUMS = {
    "role_enum": ("admin", "coach", "client"),
    "cohort_status_enum": ("active", "completed", "archived"),
    "membership_status_enum": ("active", "paused", "inactive"),
    "credit_transaction_kind_enum": (
        "admin_allocation",
        "admin_deduction",
        "bootcamp_registration",
        "bootcamp_refund",
    ),
}


def _enum(name: str) -> sa.Enum:
    return sa.Enum(*ENUMS[name], name=name)


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("role", _enum("role_enum"), nullable=False),
        sa.Column("credits", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("check_in_frequency_days", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("credits >= 0", name=op.f("ck_users_credits_non_negative")),
        sa.CheckConstraint(
            "check_in_frequency_days IS NULL OR "
            "(check_in_frequency_days >= 1 AND check_in_frequency_days <= 90)",
            name=op.f("ck_users_check_in_frequency_range"),
        ),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])

    op.create_table(
        "cohorts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", _enum("cohort_status_enum"), nullable=False),
        sa.Column("check_in_frequency_days", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "check_in_frequency_days IS NULL OR "
            "(check_in_frequency_days >= 1 AND check_in_frequency_days <= 90)",
            name=op.f("ck_cohorts_check_in_frequency_range"),
        ),
    )

    op.create_table(
        "cohort_memberships",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "cohort_id",
            sa.Integer(),
            sa.ForeignKey("cohorts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("status", _enum("membership_status_enum"), nullable=False),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("left_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint(
            "cohort_id", "user_id", name="uq_cohort_memberships_cohort_user"
        ),
    )
    op.create_index(
        "ix_cohort_memberships_user_id", "cohort_memberships", ["user_id"]
    )
    # At most one ACTIVE membership per user
    op.create_index(
        "uq_cohort_memberships_one_active",
        "cohort_memberships",
        ["user_id"],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
        sqlite_where=sa.text("status = 'active'"),
    )

    op.create_table(
        "system_settings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("key", sa.String(), nullable=False),
        sa.Column("value", JSON_TYPE, nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_system_settings_key", "system_settings", ["key"], unique=True)

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("action", sa.String(), nullable=False),
        sa.Column("actor_id", sa.Integer(), nullable=True),
        sa.Column("target_type", sa.String(), nullable=True),
        sa.Column("target_id", sa.Integer(), nullable=True),
        sa.Column("target", sa.String(), nullable=True),
        sa.Column("details", JSON_TYPE, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"])
    op.create_index("ix_audit_logs_actor_id", "audit_logs", ["actor_id"])
    op.create_index("ix_audit_logs_target", "audit_logs", ["target"])
    op.create_index("ix_audit_logs_created_at", "audit_logs", ["created_at"])

    op.create_table(
        "credit_transactions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("kind", _enum("credit_transaction_kind_enum"), nullable=False),
        sa.Column("reason", sa.String(200), nullable=False),
        sa.Column("balance_after", sa.Integer(), nullable=False),
        sa.Column("reference_type", sa.String(), nullable=True),
        sa.Column("reference_id", sa.Integer(), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("amount <> 0", name=op.f("ck_credit_transactions_amount_non_zero")),
        sa.CheckConstraint(
            "balance_after >= 0",
            name=op.f("ck_credit_transactions_balance_after_non_negative"),
        ),
    )
    op.create_index(
        "ix_credit_transactions_user_created",
        "credit_transactions",
        ["user_id", "created_at"],
    )

    op.create_table(
        "bootcamps",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("end_time > start_time", name=op.f("ck_bootcamps_time_range")),
        sa.CheckConstraint(
            "capacity IS NULL OR capacity > 0", name=op.f("ck_bootcamps_capacity_positive")
        ),
    )
    op.create_index("ix_bootcamps_start_time", "bootcamps", ["start_time"])

    op.create_table(
        "bootcamp_attendees",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "bootcamp_id",
            sa.Integer(),
            sa.ForeignKey("bootcamps.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "bootcamp_id", "user_id", name="uq_bootcamp_attendees_bootcamp_user"
        ),
    )
    op.create_index(
        "ix_bootcamp_attendees_user_id", "bootcamp_attendees", ["user_id"]
    )


def downgrade() -> None:
    op.drop_table("bootcamp_attendees")
    op.drop_table("bootcamps")
    op.drop_table("credit_transactions")
    op.drop_table("audit_logs")
    op.drop_table("system_settings")
    op.drop_table("cohort_memberships")
    op.drop_table("cohorts")
    op.drop_table("users")

    bind = op.get_bind()
    for name in ENUMS:
        sa.Enum(name=name).drop(bind, checkfirst=True)
