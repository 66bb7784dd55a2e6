"""add weekday recurrence, next eligible date and archive fields"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0002_add_schedule"
down_revision = "0001_create_tasks"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("tasks") as batch:
        batch.add_column(sa.Column("recurs_on_days", sa.String(length=20), nullable=True))
        batch.add_column(sa.Column("next_eligible_date", sa.Date(), nullable=True))
        batch.add_column(sa.Column("archived_at", sa.DateTime(), nullable=True))
    op.create_index("ix_tasks_next_eligible_date", "tasks", ["next_eligible_date"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_tasks_next_eligible_date", table_name="tasks")
    with op.batch_alter_table("tasks") as batch:
        batch.drop_column("archived_at")
        batch.drop_column("next_eligible_date")
        batch.drop_column("recurs_on_days")
