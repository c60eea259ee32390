"""
Unit registry: valid units per metric type and cross-type rejection.
"""
import pytest
from types import MappingProxyType

from tracking_metrics.units import (
    UNIT_REGISTRY,
    DistanceUnit,
    MetricType,
    TemperatureUnit,
    build_registry,
)

DISTANCE = ["meter", "centimeter", "inch", "feet", "yard", "mile"]
TEMPERATURE = ["°C", "°F", "°K"]


class TestValidUnits:
    def test_distance_units_in_order(self):
        assert list(UNIT_REGISTRY.valid_units(MetricType.distance)) == DISTANCE

    def test_temperature_units_in_order(self):
        assert list(UNIT_REGISTRY.valid_units(MetricType.temperature)) == TEMPERATURE

    def test_accepts_plain_string_type(self):
        assert UNIT_REGISTRY.valid_units("distance") == UNIT_REGISTRY.valid_units(MetricType.distance)

    def test_unknown_type_has_no_units(self):
        assert UNIT_REGISTRY.valid_units("weight") == ()


class TestIsValid:
    @pytest.mark.parametrize("unit", DISTANCE)
    def test_distance_units_not_valid_for_temperature(self, unit):
        assert UNIT_REGISTRY.is_valid(MetricType.distance, unit)
        assert not UNIT_REGISTRY.is_valid(MetricType.temperature, unit)

    @pytest.mark.parametrize("unit", TEMPERATURE)
    def test_temperature_units_not_valid_for_distance(self, unit):
        assert UNIT_REGISTRY.is_valid(MetricType.temperature, unit)
        assert not UNIT_REGISTRY.is_valid(MetricType.distance, unit)

    @pytest.mark.parametrize("unit", ["celsius", "°c", "Meter", "meters", "", "km"])
    def test_near_misses_rejected(self, unit):
        assert not UNIT_REGISTRY.is_valid(MetricType.distance, unit)
        assert not UNIT_REGISTRY.is_valid(MetricType.temperature, unit)


class TestTables:
    def test_distance_factors(self):
        assert UNIT_REGISTRY.distance_factor(DistanceUnit.meter.value) == 1
        assert UNIT_REGISTRY.distance_factor(DistanceUnit.centimeter.value) == 0.01
        assert UNIT_REGISTRY.distance_factor(DistanceUnit.mile.value) == 1609.34

    def test_every_temperature_pair_has_a_converter(self):
        for src in TemperatureUnit:
            for dst in TemperatureUnit:
                UNIT_REGISTRY.temperature_converter(src.value, dst.value)

    def test_identity_converters(self):
        for unit in TEMPERATURE:
            assert UNIT_REGISTRY.temperature_converter(unit, unit)(21.5) == 21.5

    def test_registry_is_read_only(self):
        with pytest.raises(TypeError):
            UNIT_REGISTRY.units["distance"] = ("parsec",)
        assert isinstance(UNIT_REGISTRY.distance_factors, MappingProxyType)

    def test_build_registry_is_equivalent(self):
        fresh = build_registry()
        assert fresh.valid_units("distance") == UNIT_REGISTRY.valid_units("distance")
