"""
Unit registry: valid units per metric type and the conversion tables.

Built once at import time (`UNIT_REGISTRY`) and never mutated afterwards.
The conversion engine and the metrics service take the registry as a
parameter so tests can hand in their own.

Distance
--------
Scalar factor to meters per unit. Conversion goes through meters.

Temperature
-----------
Not scalar: every (from, to) pair has its own function, including the
identity pairs.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping


class MetricType(str, enum.Enum):
    distance = "distance"
    temperature = "temperature"


class DistanceUnit(str, enum.Enum):
    meter = "meter"
    centimeter = "centimeter"
    inch = "inch"
    feet = "feet"
    yard = "yard"
    mile = "mile"


class TemperatureUnit(str, enum.Enum):
    celsius = "°C"
    fahrenheit = "°F"
    kelvin = "°K"


TemperatureFn = Callable[[float], float]

_C = TemperatureUnit.celsius.value
_F = TemperatureUnit.fahrenheit.value
_K = TemperatureUnit.kelvin.value


DISTANCE_FACTORS: Mapping[str, float] = MappingProxyType({
    DistanceUnit.meter.value: 1,
    DistanceUnit.centimeter.value: 0.01,
    DistanceUnit.inch.value: 0.0254,
    DistanceUnit.feet.value: 0.3048,
    DistanceUnit.yard.value: 0.9144,
    DistanceUnit.mile.value: 1609.34,
})

TEMPERATURE_CONVERTERS: Mapping[tuple[str, str], TemperatureFn] = MappingProxyType({
    (_C, _C): lambda t: t,
    (_C, _F): lambda t: t * 9 / 5 + 32,
    (_C, _K): lambda t: t + 273.15,
    (_F, _C): lambda t: (t - 32) * 5 / 9,
    (_F, _F): lambda t: t,
    (_F, _K): lambda t: (t - 32) * 5 / 9 + 273.15,
    (_K, _C): lambda t: t - 273.15,
    (_K, _F): lambda t: (t - 273.15) * 9 / 5 + 32,
    (_K, _K): lambda t: t,
})


def _ev(v) -> str:
    return v.value if hasattr(v, "value") else str(v)


@dataclass(frozen=True)
class UnitRegistry:
    units: Mapping[str, tuple[str, ...]]
    distance_factors: Mapping[str, float]
    temperature_converters: Mapping[tuple[str, str], TemperatureFn]

    def valid_units(self, metric_type: MetricType | str) -> tuple[str, ...]:
        """Ordered unit tags for a metric type; empty for an unknown type."""
        return self.units.get(_ev(metric_type), ())

    def is_valid(self, metric_type: MetricType | str, unit: str) -> bool:
        return unit in self.valid_units(metric_type)

    def distance_factor(self, unit: str) -> float:
        return self.distance_factors[unit]

    def temperature_converter(self, from_unit: str, to_unit: str) -> TemperatureFn:
        return self.temperature_converters[(from_unit, to_unit)]


def build_registry() -> UnitRegistry:
    return UnitRegistry(
        units=MappingProxyType({
            MetricType.distance.value: tuple(u.value for u in DistanceUnit),
            MetricType.temperature.value: tuple(u.value for u in TemperatureUnit),
        }),
        distance_factors=DISTANCE_FACTORS,
        temperature_converters=TEMPERATURE_CONVERTERS,
    )


UNIT_REGISTRY = build_registry()
