"""
Metric schemas.

POST /metrics         → CreateMetricRequest → MetricOut
GET  /metrics         → MetricListResponse
GET  /metrics/chart   → ChartDataResponse
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from tracking_metrics.schemas.common import CamelModel
from tracking_metrics.units import MetricType

MONTHS_BACK_CHOICES = (1, 2)


class CreateMetricRequest(BaseModel):
    """A single measurement for one user and day."""
    model_config = ConfigDict(use_enum_values=True)

    user_id: int = Field(description="Owning user ID.", examples=[1])
    metric_type: MetricType = Field(description="Type of metric.", examples=["distance"])
    value: float = Field(description="Measured value.", examples=[100.5])
    unit: str = Field(
        min_length=1,
        description="Unit of measurement; must belong to metric_type.",
        examples=["meter", "°C"],
    )
    date_recorded: date = Field(
        description="Calendar day the measurement belongs to.",
        examples=["2024-01-15"],
    )


class MetricOut(BaseModel):
    """A stored metric record. The owning user relation is never included."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    metric_type: str
    value: float
    unit: str
    date_recorded: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None


class MetricListResponse(CamelModel):
    """One page of metrics, newest day first."""
    data: list[MetricOut]
    total: int = Field(description="Total matching records.")
    page: int
    page_size: int
    total_pages: int


class ChartPointOut(CamelModel):
    """Latest value for one calendar day."""
    date: str = Field(examples=["2024-01-15"])
    value: float = Field(description="Converted value when a conversion was applied.")
    original_unit: str
    original_value: Optional[float] = Field(
        default=None, description="Stored value; present only when converted."
    )
    converted_unit: Optional[str] = Field(
        default=None, description="Target unit; present only when converted."
    )


class ChartDataResponse(CamelModel):
    data: list[ChartPointOut]
    metric_type: str
    months_back: int
    target_unit: Optional[str] = None
    total_points: int
