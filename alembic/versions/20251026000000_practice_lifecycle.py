"""Add quote and progress columns for the practice request lifecycle.

Revision ID: 20251026000000
Revises: 20251019000000
Create Date: 2025-10-26

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "20251026000000"
down_revision: Union[str, None] = "20251019000000"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    with op.batch_alter_table("practice_requests") as batch_op:
        batch_op.add_column(sa.Column("quote_amount", sa.Float(), nullable=True))
        batch_op.add_column(
            sa.Column("quote_valid_until", sa.DateTime(timezone=True), nullable=True)
        )
        batch_op.add_column(sa.Column("quote_notes", sa.Text(), nullable=True))
        batch_op.add_column(
            sa.Column("progress_percent", sa.Integer(), nullable=False, server_default="0")
        )
        batch_op.add_column(sa.Column("progress_notes", sa.Text(), nullable=True))
        batch_op.add_column(
            sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True)
        )
    op.execute("UPDATE practice_requests SET status = 'QUOTE_SENT' WHERE status = 'QUOTED'")


def downgrade() -> None:
    op.execute(
        "UPDATE practice_requests SET status = 'QUOTED' WHERE status IN ('QUOTE_SENT', 'ACCEPTED')"
    )
    with op.batch_alter_table("practice_requests") as batch_op:
        batch_op.drop_column("completed_at")
        batch_op.drop_column("progress_notes")
        batch_op.drop_column("progress_percent")
        batch_op.drop_column("quote_notes")
        batch_op.drop_column("quote_valid_until")
        batch_op.drop_column("quote_amount")
