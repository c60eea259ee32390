"""
Unit conversion engine.

Public API
----------
convert(value, from_unit, to_unit, metric_type, registry)  -> number

Units are not re-validated here; the metrics service checks them first.
An unregistered unit surfaces as a KeyError from the registry tables.
"""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from tracking_metrics.units import UNIT_REGISTRY, MetricType, UnitRegistry

Number = Union[int, float, Decimal]

DISTANCE_PLACES = Decimal("0.0001")
TEMPERATURE_PLACES = Decimal("0.01")


def _round_half_up(value: float, places: Decimal) -> float:
    # str() first so binary noise (150.00000000000003) does not leak into the quantize
    return float(Decimal(str(value)).quantize(places, rounding=ROUND_HALF_UP))


def convert_distance(
    value: Number,
    from_unit: str,
    to_unit: str,
    registry: UnitRegistry = UNIT_REGISTRY,
) -> Number:
    if from_unit == to_unit:
        return value
    meters = float(value) * registry.distance_factor(from_unit)
    return _round_half_up(meters / registry.distance_factor(to_unit), DISTANCE_PLACES)


def convert_temperature(
    value: Number,
    from_unit: str,
    to_unit: str,
    registry: UnitRegistry = UNIT_REGISTRY,
) -> Number:
    if from_unit == to_unit:
        return value
    converter = registry.temperature_converter(from_unit, to_unit)
    return _round_half_up(converter(float(value)), TEMPERATURE_PLACES)


def convert(
    value: Number,
    from_unit: str,
    to_unit: str,
    metric_type: MetricType | str,
    registry: UnitRegistry = UNIT_REGISTRY,
) -> Number:
    """
    Convert `value` between two units of the same metric type.

    Same unit → the value is returned untouched (no rounding).
    Distance rounds to 4 decimal places, temperature to 2, both half-up.
    Any other metric type passes the value through.
    """
    if metric_type == MetricType.distance:
        return convert_distance(value, from_unit, to_unit, registry)
    if metric_type == MetricType.temperature:
        return convert_temperature(value, from_unit, to_unit, registry)
    return value
