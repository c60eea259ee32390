"""metric lookup indexes and active natural-key uniqueness

Revision ID: 0002
Revises: 0001
Create Date: 2025-07-27 12:00:00.000000

The unique index covers (user_id, metric_type, date_recorded) for rows
that are not soft-deleted; unit is not part of the key.
"""
from alembic import op
import sqlalchemy as sa

revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None

ACTIVE_ONLY = sa.text("deleted_at IS NULL")


def upgrade() -> None:
    op.create_index("ix_metrics_user_type_date", "metrics", ["user_id", "metric_type", "date_recorded"])
    op.create_index("ix_metrics_user_date", "metrics", ["user_id", "date_recorded"])
    op.create_index("ix_metrics_date_recorded", "metrics", ["date_recorded"])
    op.create_index("ix_metrics_user_type", "metrics", ["user_id", "metric_type"])
    op.create_index(
        "uq_metrics_user_type_date_active",
        "metrics",
        ["user_id", "metric_type", "date_recorded"],
        unique=True,
        postgresql_where=ACTIVE_ONLY,
        sqlite_where=ACTIVE_ONLY,
    )


def downgrade() -> None:
    op.drop_index("uq_metrics_user_type_date_active", table_name="metrics")
    op.drop_index("ix_metrics_user_type", table_name="metrics")
    op.drop_index("ix_metrics_date_recorded", table_name="metrics")
    op.drop_index("ix_metrics_user_date", table_name="metrics")
    op.drop_index("ix_metrics_user_type_date", table_name="metrics")
