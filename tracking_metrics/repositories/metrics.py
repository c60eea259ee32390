"""
Metric store: natural-key upsert, paginated listing and the chart range read.

Public API
----------
upsert(db, user_id, metric_type, value, unit, date_recorded)   → MetricRecord
list_by_type(db, user_id, metric_type, page, page_size)        → (records, total)
chart_range(db, user_id, metric_type, months_back, today)      → list[ChartRow]
soft_delete_for_user(db, user_id)                               → int

Every read excludes soft-deleted rows. Storage errors are not caught here
except the unique-index race inside `upsert`.
"""
from __future__ import annotations

import calendar
import logging
import time
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import NamedTuple, Optional, Union

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tracking_metrics.core.config import settings
from tracking_metrics.core.errors import StoreUnavailableError
from tracking_metrics.models.metric import MetricRecord
from tracking_metrics.units import MetricType

logger = logging.getLogger(__name__)


class ChartRow(NamedTuple):
    date_recorded: date
    value: Decimal
    unit: str
    created_at: datetime


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def _today() -> date:
    return _now().date()


def months_before(day: date, months: int) -> date:
    """Same day-of-month `months` earlier, clamped to the end of a shorter month."""
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def _as_date(value: Union[date, str]) -> date:
    return date.fromisoformat(value) if isinstance(value, str) else value


def _active(user_id: int, metric_type: MetricType | str):
    return (
        MetricRecord.user_id == user_id,
        MetricRecord.metric_type == metric_type,
        MetricRecord.deleted_at.is_(None),
    )


def _find_active(
    db: Session,
    user_id: int,
    metric_type: MetricType | str,
    date_recorded: date,
) -> Optional[MetricRecord]:
    return (
        db.query(MetricRecord)
        .filter(*_active(user_id, metric_type), MetricRecord.date_recorded == date_recorded)
        .first()
    )


def _overwrite(db: Session, record: MetricRecord, value, unit: str) -> MetricRecord:
    record.value = value
    record.unit = unit
    record.updated_at = _now()
    db.commit()
    db.refresh(record)
    return record


def _log_if_slow(started: float, threshold_ms: int, label: str, user_id: int, metric_type) -> None:
    elapsed_ms = (time.perf_counter() - started) * 1000
    if elapsed_ms > threshold_ms:
        logger.warning(
            "Slow %s query: %.0fms for user %s, type %s",
            label, elapsed_ms, user_id, metric_type,
        )


# ---------------------------------------------------------------------------
# Write
# ---------------------------------------------------------------------------

def upsert(
    db: Session,
    user_id: int,
    metric_type: MetricType | str,
    value: Union[float, Decimal],
    unit: str,
    date_recorded: Union[date, str],
) -> MetricRecord:
    """
    Insert or overwrite the active record for (user, type, date).

    The insert runs inside a savepoint. If a concurrent request inserted the
    same key first, the unique index rejects ours and the winner's row is
    overwritten instead, so the key never ends up with two active rows.
    """
    day = _as_date(date_recorded)

    existing = _find_active(db, user_id, metric_type, day)
    if existing is not None:
        return _overwrite(db, existing, value, unit)

    record = MetricRecord(
        user_id=user_id,
        metric_type=metric_type,
        value=value,
        unit=unit,
        date_recorded=day,
    )
    savepoint = db.begin_nested()
    try:
        db.add(record)
        db.flush()
        savepoint.commit()
    except IntegrityError as exc:
        savepoint.rollback()
        logger.info(
            "Concurrent insert for user %s, type %s, day %s; overwriting instead",
            user_id, metric_type, day,
        )
        winner = _find_active(db, user_id, metric_type, day)
        if winner is None:
            db.rollback()
            raise StoreUnavailableError(
                message="Conflicting write for metric could not be resolved; retry the request.",
                details={
                    "user_id": user_id,
                    "metric_type": getattr(metric_type, "value", metric_type),
                    "date_recorded": str(day),
                },
            ) from exc
        return _overwrite(db, winner, value, unit)

    db.commit()
    db.refresh(record)
    return record


def soft_delete_for_user(db: Session, user_id: int) -> int:
    """Mark every active metric of a user deleted. Flushes; the caller commits."""
    deleted = (
        db.query(MetricRecord)
        .filter(MetricRecord.user_id == user_id, MetricRecord.deleted_at.is_(None))
        .update({MetricRecord.deleted_at: _now()}, synchronize_session=False)
    )
    db.flush()
    return deleted


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------

def list_by_type(
    db: Session,
    user_id: int,
    metric_type: MetricType | str,
    page: int = 1,
    page_size: int = 10,
) -> tuple[list[MetricRecord], int]:
    """Active records newest day first; same-day rows newest write first."""
    started = time.perf_counter()
    query = db.query(MetricRecord).filter(*_active(user_id, metric_type))

    total: int = query.count()
    records = (
        query.order_by(
            MetricRecord.date_recorded.desc(),
            MetricRecord.created_at.desc(),
            MetricRecord.id.desc(),
        )
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )

    _log_if_slow(started, settings.SLOW_LIST_QUERY_MS, "list", user_id, metric_type)
    return records, total


def chart_range(
    db: Session,
    user_id: int,
    metric_type: MetricType | str,
    months_back: int,
    today: Optional[date] = None,
) -> list[ChartRow]:
    """
    Latest active value per calendar day in [today - months_back months, today].

    Days that still hold several active rows (data written before the unique
    index existed) resolve to the row with the greatest created_at, then id.
    Ordered oldest day first.
    """
    started = time.perf_counter()
    end = today or _today()
    start = months_before(end, months_back)

    ranked = (
        db.query(
            MetricRecord.date_recorded.label("date_recorded"),
            MetricRecord.value.label("value"),
            MetricRecord.unit.label("unit"),
            MetricRecord.created_at.label("created_at"),
            func.row_number()
            .over(
                partition_by=MetricRecord.date_recorded,
                order_by=(MetricRecord.created_at.desc(), MetricRecord.id.desc()),
            )
            .label("rank"),
        )
        .filter(
            *_active(user_id, metric_type),
            MetricRecord.date_recorded.between(start, end),
        )
        .subquery()
    )
    rows = (
        db.query(ranked.c.date_recorded, ranked.c.value, ranked.c.unit, ranked.c.created_at)
        .filter(ranked.c.rank == 1)
        .order_by(ranked.c.date_recorded.asc())
        .all()
    )

    _log_if_slow(started, settings.SLOW_CHART_QUERY_MS, "chart", user_id, metric_type)
    return [ChartRow(*row) for row in rows]
