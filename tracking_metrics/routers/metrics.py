"""
Metrics router.

POST /metrics         — record a metric (upsert by user, type and day)
GET  /metrics         — paginated list for one user and metric type
GET  /metrics/chart   — latest value per day, optionally unit-converted
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from tracking_metrics.core.config import settings
from tracking_metrics.db.base import get_db
from tracking_metrics.schemas.common import ErrorResponse
from tracking_metrics.schemas.metrics import (
    ChartDataResponse,
    CreateMetricRequest,
    MetricListResponse,
    MetricOut,
    MONTHS_BACK_CHOICES,
)
from tracking_metrics.services import metrics as metrics_service
from tracking_metrics.units import MetricType

router = APIRouter(prefix="/metrics", tags=["metrics"])


# ---------------------------------------------------------------------------
# POST /metrics
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=MetricOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create new metric",
    responses={
        400: {"model": ErrorResponse, "description": "Unit not valid for the metric type."},
        422: {"model": ErrorResponse, "description": "Validation error."},
    },
)
def create_metric(payload: CreateMetricRequest, db: Session = Depends(get_db)):
    """
    Add a metric record with date, value and unit.

    A second submission for the same user, metric type and `date_recorded`
    replaces the stored value and unit instead of creating a new row.
    """
    return metrics_service.create_metric(
        db,
        user_id=payload.user_id,
        metric_type=payload.metric_type,
        value=payload.value,
        unit=payload.unit,
        date_recorded=payload.date_recorded,
    )


# ---------------------------------------------------------------------------
# GET /metrics
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=MetricListResponse,
    summary="Get metrics by type",
)
def list_metrics(
    user_id: int = Query(description="User ID.", examples=[1]),
    metric_type: MetricType = Query(description="Type of metric to filter by."),
    page: int = Query(default=1, ge=1, description="Page number, starting at 1."),
    page_size: int = Query(
        default=settings.DEFAULT_PAGE_SIZE,
        ge=1,
        le=settings.MAX_PAGE_SIZE,
        description="Items per page.",
    ),
    db: Session = Depends(get_db),
):
    """Active metrics for one user and type, newest day first."""
    result = metrics_service.list_metrics(
        db, user_id=user_id, metric_type=metric_type, page=page, page_size=page_size
    )
    return MetricListResponse(**result)


# ---------------------------------------------------------------------------
# GET /metrics/chart
# ---------------------------------------------------------------------------

@router.get(
    "/chart",
    response_model=ChartDataResponse,
    response_model_exclude_none=True,
    summary="Chart data: latest value per day",
    responses={
        400: {"model": ErrorResponse, "description": "target_unit not valid for the metric type."},
    },
)
def chart_data(
    user_id: int = Query(description="User ID.", examples=[1]),
    metric_type: MetricType = Query(description="Type of metric."),
    months_back: int = Query(
        ge=min(MONTHS_BACK_CHOICES),
        le=max(MONTHS_BACK_CHOICES),
        description="Window length in months (1 or 2).",
    ),
    target_unit: Optional[str] = Query(
        default=None,
        description="Unit to convert values into. Omit to keep stored units.",
        examples=["centimeter"],
    ),
    db: Session = Depends(get_db),
):
    """
    One point per calendar day in the window ending today, oldest first.

    When `target_unit` differs from a point's stored unit the point carries
    `value` (converted), `originalValue` and `convertedUnit`.
    """
    result = metrics_service.get_chart_data(
        db,
        user_id=user_id,
        metric_type=metric_type,
        months_back=months_back,
        target_unit=target_unit,
    )
    return ChartDataResponse(**result)
