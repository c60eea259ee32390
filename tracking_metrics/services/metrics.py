"""
Metrics service: the only layer that rejects a request.

Public API
----------
create_metric(db, user_id, metric_type, value, unit, date_recorded)        → dict
list_metrics(db, user_id, metric_type, page, page_size)                     → dict
get_chart_data(db, user_id, metric_type, months_back, target_unit)          → dict

Units are checked against the registry before anything touches the store.
Store errors pass through unchanged.
"""
from __future__ import annotations

import logging
import math
from datetime import date
from decimal import Decimal
from typing import Any, Optional, Union

from sqlalchemy.orm import Session

from tracking_metrics.core.errors import InvalidUnitError
from tracking_metrics.models.metric import MetricRecord
from tracking_metrics.repositories import metrics as store
from tracking_metrics.repositories.metrics import ChartRow
from tracking_metrics.services.conversion import convert
from tracking_metrics.units import UNIT_REGISTRY, MetricType, UnitRegistry

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _ev(v) -> str:
    return v.value if hasattr(v, "value") else str(v)


def _number(value: Union[Decimal, float, int]) -> float:
    return float(value)


def validate_unit(
    metric_type: MetricType | str,
    unit: str,
    registry: UnitRegistry = UNIT_REGISTRY,
) -> None:
    if not registry.is_valid(metric_type, unit):
        logger.info("Rejected unit %r for metric type %s", unit, _ev(metric_type))
        raise InvalidUnitError(
            provided_unit=unit,
            metric_type=_ev(metric_type),
            valid_units=registry.valid_units(metric_type),
        )


# --- projections ---

def metric_to_dict(m: MetricRecord) -> dict:
    """Scalar fields and the four date fields; never the owning user."""
    return {
        "id": m.id,
        "user_id": m.user_id,
        "metric_type": _ev(m.metric_type),
        "value": _number(m.value),
        "unit": m.unit,
        "date_recorded": str(m.date_recorded),
        "created_at": m.created_at,
        "updated_at": m.updated_at,
        "deleted_at": m.deleted_at,
    }


def chart_point(
    row: ChartRow,
    metric_type: MetricType | str,
    target_unit: Optional[str],
    registry: UnitRegistry = UNIT_REGISTRY,
) -> dict:
    point: dict[str, Any] = {
        "date": str(row.date_recorded),
        "value": _number(row.value),
        "original_unit": row.unit,
    }
    if target_unit and target_unit != row.unit:
        point["value"] = _number(
            convert(point["value"], row.unit, target_unit, metric_type, registry)
        )
        point["original_value"] = _number(row.value)
        point["converted_unit"] = target_unit
    return point


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------

def create_metric(
    db: Session,
    user_id: int,
    metric_type: MetricType | str,
    value: Union[float, Decimal],
    unit: str,
    date_recorded: Union[date, str],
    registry: UnitRegistry = UNIT_REGISTRY,
) -> dict:
    """Validate the unit, then insert or overwrite the day's record."""
    validate_unit(metric_type, unit, registry)
    record = store.upsert(
        db,
        user_id=user_id,
        metric_type=metric_type,
        value=value,
        unit=unit,
        date_recorded=date_recorded,
    )
    return metric_to_dict(record)


def list_metrics(
    db: Session,
    user_id: int,
    metric_type: MetricType | str,
    page: int = 1,
    page_size: int = 10,
) -> dict:
    """One page of active metrics. A non-positive page_size yields an empty page."""
    records, total = store.list_by_type(db, user_id, metric_type, page, page_size)
    return {
        "data": [metric_to_dict(m) for m in records],
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": math.ceil(total / page_size) if page_size > 0 else 0,
    }


def get_chart_data(
    db: Session,
    user_id: int,
    metric_type: MetricType | str,
    months_back: int,
    target_unit: Optional[str] = None,
    registry: UnitRegistry = UNIT_REGISTRY,
    today: Optional[date] = None,
) -> dict:
    """
    Latest value per day over the last `months_back` months.

    An empty or missing `target_unit` skips validation and conversion.
    Points already stored in `target_unit` are returned without the
    original_value / converted_unit fields.
    """
    if target_unit:
        validate_unit(metric_type, target_unit, registry)

    rows = store.chart_range(db, user_id, metric_type, months_back, today=today)
    data = [chart_point(r, metric_type, target_unit, registry) for r in rows]
    return {
        "data": data,
        "metric_type": _ev(metric_type),
        "months_back": months_back,
        "target_unit": target_unit,
        "total_points": len(data),
    }
