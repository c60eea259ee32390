"""
Metrics service: unit validation, response shaping and chart conversion
(no HTTP layer).
"""
from __future__ import annotations

import pytest
from datetime import date

from tracking_metrics.core.errors import InvalidUnitError
from tracking_metrics.models.metric import MetricRecord
from tracking_metrics.repositories.metrics import ChartRow
from tracking_metrics.services import metrics as service
from tracking_metrics.units import UNIT_REGISTRY, MetricType

DISTANCE_UNITS = list(UNIT_REGISTRY.valid_units(MetricType.distance))
TEMPERATURE_UNITS = list(UNIT_REGISTRY.valid_units(MetricType.temperature))
OTHER_TYPE = {
    MetricType.distance: (MetricType.temperature, TEMPERATURE_UNITS),
    MetricType.temperature: (MetricType.distance, DISTANCE_UNITS),
}


def _count_rows(db, user_id):
    return db.query(MetricRecord).filter(MetricRecord.user_id == user_id).count()


class TestCreateMetric:
    USER = 2001

    def test_scenario_distance_meter(self, db):
        out = service.create_metric(db, self.USER, MetricType.distance, 100.5, "meter", "2024-01-15")
        assert out["value"] == 100.5
        assert out["unit"] == "meter"
        assert out["metric_type"] == "distance"
        assert out["date_recorded"] == "2024-01-15"
        assert out["user_id"] == self.USER
        assert "user" not in out
        assert set(out) == {
            "id", "user_id", "metric_type", "value", "unit",
            "date_recorded", "created_at", "updated_at", "deleted_at",
        }

    def test_resubmission_keeps_single_row(self, db):
        user = self.USER + 1
        first = service.create_metric(db, user, MetricType.distance, 5, "meter", date(2024, 1, 16))
        second = service.create_metric(db, user, MetricType.distance, 6, "feet", date(2024, 1, 16))
        assert first["id"] == second["id"]
        assert second["value"] == 6.0
        assert second["unit"] == "feet"
        assert _count_rows(db, user) == 1

    @pytest.mark.parametrize("metric_type", [MetricType.distance, MetricType.temperature])
    def test_every_registered_unit_accepted(self, db, metric_type):
        user = self.USER + 10 + list(MetricType).index(metric_type)
        for i, unit in enumerate(UNIT_REGISTRY.valid_units(metric_type)):
            out = service.create_metric(db, user, metric_type, 1, unit, date(2024, 1, 1 + i))
            assert out["unit"] == unit

    @pytest.mark.parametrize("metric_type", [MetricType.distance, MetricType.temperature])
    def test_other_type_units_rejected_with_full_list(self, db, metric_type):
        user = self.USER + 20 + list(MetricType).index(metric_type)
        _, foreign_units = OTHER_TYPE[metric_type]
        for unit in foreign_units:
            with pytest.raises(InvalidUnitError) as exc_info:
                service.create_metric(db, user, metric_type, 1, unit, date(2024, 1, 1))
            err = exc_info.value
            assert err.provided_unit == unit
            assert err.metric_type == metric_type.value
            assert err.valid_units == list(UNIT_REGISTRY.valid_units(metric_type))
        assert _count_rows(db, user) == 0

    def test_scenario_invalid_unit_writes_nothing(self, db):
        user = self.USER + 30
        with pytest.raises(InvalidUnitError) as exc_info:
            service.create_metric(db, user, MetricType.distance, 1, "invalid_unit", "2024-01-15")
        assert exc_info.value.details["valid_units"] == [
            "meter", "centimeter", "inch", "feet", "yard", "mile",
        ]
        assert exc_info.value.message == "Invalid unit 'invalid_unit' for metric type 'distance'"
        assert _count_rows(db, user) == 0


class TestListMetrics:
    USER = 2101

    def test_envelope_and_total_pages(self, db):
        for i in range(1, 24):
            service.create_metric(db, self.USER, MetricType.temperature, 36 + i / 10, "°C", date(2024, 2, i))

        out = service.list_metrics(db, self.USER, MetricType.temperature, page=2, page_size=10)
        assert out["total"] == 23
        assert out["page"] == 2
        assert out["page_size"] == 10
        assert out["total_pages"] == 3
        assert len(out["data"]) == 10
        assert out["data"][0]["date_recorded"] == "2024-02-13"

    def test_empty(self, db):
        out = service.list_metrics(db, 999_998, MetricType.distance)
        assert out == {"data": [], "total": 0, "page": 1, "page_size": 10, "total_pages": 0}

    def test_no_unit_validation(self, db):
        # metric_type is the only filter; nothing to reject
        out = service.list_metrics(db, self.USER, MetricType.distance)
        assert out["total"] == 0

    def test_zero_page_size_returns_empty_page(self, db):
        user = self.USER + 1
        service.create_metric(db, user, MetricType.distance, 3, "meter", date(2024, 2, 1))

        out = service.list_metrics(db, user, MetricType.distance, page=1, page_size=0)
        assert out["data"] == []
        assert out["total"] == 1
        assert out["total_pages"] == 0


class TestChartPoint:
    ROW = ChartRow(date_recorded=date(2024, 1, 15), value=1.5, unit="meter", created_at=None)

    def test_without_target(self):
        assert service.chart_point(self.ROW, MetricType.distance, None) == {
            "date": "2024-01-15", "value": 1.5, "original_unit": "meter",
        }

    def test_same_unit_has_no_conversion_fields(self):
        assert service.chart_point(self.ROW, MetricType.distance, "meter") == {
            "date": "2024-01-15", "value": 1.5, "original_unit": "meter",
        }

    def test_converted(self):
        assert service.chart_point(self.ROW, MetricType.distance, "centimeter") == {
            "date": "2024-01-15",
            "value": 150.0,
            "original_unit": "meter",
            "original_value": 1.5,
            "converted_unit": "centimeter",
        }


class TestGetChartData:
    USER = 2201
    TODAY = date(2024, 1, 31)

    def test_scenario_meter_to_centimeter(self, db):
        service.create_metric(db, self.USER, MetricType.distance, 1.5, "meter", "2024-01-15")
        out = service.get_chart_data(
            db, self.USER, MetricType.distance, 1, target_unit="centimeter", today=self.TODAY
        )
        assert out == {
            "data": [{
                "date": "2024-01-15",
                "value": 150.0,
                "original_unit": "meter",
                "original_value": 1.5,
                "converted_unit": "centimeter",
            }],
            "metric_type": "distance",
            "months_back": 1,
            "target_unit": "centimeter",
            "total_points": 1,
        }

    def test_scenario_no_rows(self, db):
        out = service.get_chart_data(db, 999_997, MetricType.temperature, 2, today=self.TODAY)
        assert out["data"] == []
        assert out["total_points"] == 0

    def test_mixed_units_only_differing_points_converted(self, db):
        user = self.USER + 1
        service.create_metric(db, user, MetricType.temperature, 25, "°C", "2024-01-10")
        service.create_metric(db, user, MetricType.temperature, 77, "°F", "2024-01-11")

        out = service.get_chart_data(db, user, MetricType.temperature, 1, "°F", today=self.TODAY)
        first, second = out["data"]
        assert first == {
            "date": "2024-01-10", "value": 77.0, "original_unit": "°C",
            "original_value": 25.0, "converted_unit": "°F",
        }
        assert second == {"date": "2024-01-11", "value": 77.0, "original_unit": "°F"}

    def test_empty_target_unit_skips_validation(self, db):
        out = service.get_chart_data(db, self.USER, MetricType.distance, 1, "", today=self.TODAY)
        assert out["target_unit"] == ""
        assert all("converted_unit" not in p for p in out["data"])

    def test_cross_type_target_rejected(self, db):
        with pytest.raises(InvalidUnitError) as exc_info:
            service.get_chart_data(db, self.USER, MetricType.distance, 1, "°C", today=self.TODAY)
        assert exc_info.value.message == "Invalid unit '°C' for metric type 'distance'"

        with pytest.raises(InvalidUnitError) as exc_info:
            service.get_chart_data(db, self.USER, MetricType.temperature, 1, "meter", today=self.TODAY)
        assert exc_info.value.message == "Invalid unit 'meter' for metric type 'temperature'"

    def test_latest_submission_wins(self, db):
        user = self.USER + 2
        service.create_metric(db, user, MetricType.distance, 1, "meter", "2024-01-20")
        service.create_metric(db, user, MetricType.distance, 2, "yard", "2024-01-20")

        out = service.get_chart_data(db, user, MetricType.distance, 1, "meter", today=self.TODAY)
        assert out["total_points"] == 1
        assert out["data"][0]["value"] == 1.8288
        assert out["data"][0]["original_unit"] == "yard"
