"""
MetricRecord: one measurement for one user, metric type and calendar day.

Natural key among active rows: (user_id, metric_type, date_recorded).
The unit is deliberately not part of it; a second submission for the same
day replaces value and unit in place. Soft-deleted rows (deleted_at set)
are kept for audit and excluded from every read.
"""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tracking_metrics.db.base import Base
from tracking_metrics.units import MetricType

if TYPE_CHECKING:
    from tracking_metrics.models.user import UserRecord

ACTIVE_ONLY = text("deleted_at IS NULL")


class MetricRecord(Base):
    __tablename__ = "metrics"
    __table_args__ = (
        Index(
            "uq_metrics_user_type_date_active",
            "user_id", "metric_type", "date_recorded",
            unique=True,
            postgresql_where=ACTIVE_ONLY,
            sqlite_where=ACTIVE_ONLY,
        ),
        Index("ix_metrics_user_type_date", "user_id", "metric_type", "date_recorded"),
        Index("ix_metrics_user_date", "user_id", "date_recorded"),
        Index("ix_metrics_date_recorded", "date_recorded"),
        Index("ix_metrics_user_type", "user_id", "metric_type"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    metric_type: Mapped[MetricType] = mapped_column(
        Enum(MetricType, name="metric_type_enum"), nullable=False
    )
    value: Mapped[Decimal] = mapped_column(Numeric(10, 4), nullable=False)
    unit: Mapped[str] = mapped_column(String(10), nullable=False)
    date_recorded: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    user: Mapped["UserRecord"] = relationship(back_populates="metrics")
