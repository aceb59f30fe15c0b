"""001_saved_routes

Saved-route storage: route payloads kept on explicit caller request,
with owner and usage tracking.

Revision ID: 0001
Revises: (none)
Create Date: 2026-10-17
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "saved_routes",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("owner", sa.String(length=100), nullable=False),
        sa.Column("payload", postgresql.JSONB(), nullable=False),
        sa.Column("usage_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_saved_routes"),
    )
    op.create_index("ix_saved_routes_name", "saved_routes", ["name"])
    op.create_index("ix_saved_routes_owner", "saved_routes", ["owner"])


def downgrade() -> None:
    op.drop_index("ix_saved_routes_owner", table_name="saved_routes")
    op.drop_index("ix_saved_routes_name", table_name="saved_routes")
    op.drop_table("saved_routes")
