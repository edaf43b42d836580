# This project was developed with assistance from AI tools.
"""create users and audit_log

Revision ID: 3f1c2a9b7d10
Revises:
Create Date: 2026-02-16 10:12:41.318204

"""

import sqlalchemy as sa
from alembic import op

revision = "3f1c2a9b7d10"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="loan_officer"),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("sf_field", sa.String(255), nullable=True),
        sa.Column("sf_value", sa.String(255), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False,
        ),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", "role", name="users_email_role_unique"),
        sa.CheckConstraint("role IN ('admin', 'loan_officer', 'agent')", name="users_role_check"),
        sa.CheckConstraint("status IN ('active', 'disabled')", name="users_status_check"),
    )
    op.create_index("users_role_idx", "users", ["role"])

    op.create_table(
        "audit_log",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=True),
        sa.Column("sf_record_id", sa.String(18), nullable=True),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("before_json", sa.JSON(), nullable=True),
        sa.Column("after_json", sa.JSON(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False,
        ),
        sa.Column("ip", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_log_user_id", "audit_log", ["user_id"])
    op.create_index("ix_audit_log_sf_record_id", "audit_log", ["sf_record_id"])


def downgrade() -> None:
    op.drop_index("ix_audit_log_sf_record_id", table_name="audit_log")
    op.drop_index("ix_audit_log_user_id", table_name="audit_log")
    op.drop_table("audit_log")
    op.drop_index("users_role_idx", table_name="users")
    op.drop_table("users")
