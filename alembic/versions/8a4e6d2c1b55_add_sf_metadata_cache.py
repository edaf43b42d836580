# This project was developed with assistance from AI tools.
"""add sf_metadata_cache

Picklist values fetched from the CRM describe call, cached per field.

Revision ID: 8a4e6d2c1b55
Revises: 3f1c2a9b7d10
Create Date: 2026-02-18
"""

import sqlalchemy as sa
from alembic import op

revision = "8a4e6d2c1b55"
down_revision = "3f1c2a9b7d10"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "sf_metadata_cache",
        sa.Column("object_name", sa.String(100), nullable=False),
        sa.Column("field_name", sa.String(100), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=False),
        sa.Column(
            "cached_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False,
        ),
        sa.PrimaryKeyConstraint("object_name", "field_name"),
    )


def downgrade() -> None:
    op.drop_table("sf_metadata_cache")
