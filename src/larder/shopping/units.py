"""Measurement unit families, base-unit conversion and display rendering."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Protocol

from larder.models.recipe import MeasurementUnit


class UnitType(str, Enum):
    VOLUME = "volume"
    WEIGHT = "weight"
    COUNT = "count"


# Volume factors are in teaspoons, weight factors in ounces.
VOLUME_CONVERSIONS: dict[MeasurementUnit, float] = {
    MeasurementUnit.TSP: 1,
    MeasurementUnit.TBSP: 3,
    MeasurementUnit.CUP: 48,
    MeasurementUnit.FL_OZ: 6,
    MeasurementUnit.ML: 0.202884,
    MeasurementUnit.LITER: 202.884,
}

WEIGHT_CONVERSIONS: dict[MeasurementUnit, float] = {
    MeasurementUnit.OZ: 1,
    MeasurementUnit.LB: 16,
    MeasurementUnit.GRAM: 0.035274,
    MeasurementUnit.KG: 35.274,
}

COUNT_UNITS: frozenset[MeasurementUnit] = frozenset(
    {
        MeasurementUnit.UNIT,
        MeasurementUnit.PIECE,
        MeasurementUnit.SLICE,
        MeasurementUnit.CLOVE,
        MeasurementUnit.HEAD,
        MeasurementUnit.BUNCH,
        MeasurementUnit.CAN,
        MeasurementUnit.BOTTLE,
        MeasurementUnit.PACKAGE,
        MeasurementUnit.BAG,
        MeasurementUnit.BOX,
    }
)

TSP_PER_CUP = 48
TSP_PER_TBSP = 3
OZ_PER_LB = 16


@dataclass(frozen=True)
class BaseQuantity:
    value: float
    type: UnitType


@dataclass(frozen=True)
class DisplayQuantity:
    quantity: float
    unit: MeasurementUnit


class QuantityLike(Protocol):
    quantity: Optional[float]
    unit: Optional[MeasurementUnit]


@dataclass(frozen=True)
class Measure:
    """Plain quantity/unit pair accepted by :func:`aggregate_quantities`."""

    quantity: Optional[float]
    unit: Optional[MeasurementUnit]


def round_half_up(value: float, places: int = 2) -> float:
    """Round to ``places`` decimals, halves away from zero.

    Matches how amounts are displayed; ``round`` would send 0.125 to 0.12.
    """

    factor = 10**places
    scaled = abs(value) * factor
    # Absorb float noise such as 1.0049999999 that really is 1.005.
    rounded = math.floor(scaled + 0.5 + 1e-9) / factor
    return math.copysign(rounded, value) if value else 0.0


def is_volume_unit(unit: Optional[MeasurementUnit]) -> bool:
    return unit is not None and unit in VOLUME_CONVERSIONS


def is_weight_unit(unit: Optional[MeasurementUnit]) -> bool:
    return unit is not None and unit in WEIGHT_CONVERSIONS


def is_count_unit(unit: Optional[MeasurementUnit]) -> bool:
    return unit is None or unit in COUNT_UNITS


def unit_type(unit: Optional[MeasurementUnit]) -> UnitType:
    if is_volume_unit(unit):
        return UnitType.VOLUME
    if is_weight_unit(unit):
        return UnitType.WEIGHT
    return UnitType.COUNT


def are_units_compatible(first: Optional[MeasurementUnit], second: Optional[MeasurementUnit]) -> bool:
    """True when both units belong to the same family (no density conversion)."""

    return unit_type(first) is unit_type(second)


def to_base(quantity: float, unit: Optional[MeasurementUnit]) -> BaseQuantity:
    """Express ``quantity`` in teaspoons, ounces, or raw count."""

    if is_volume_unit(unit):
        return BaseQuantity(quantity * VOLUME_CONVERSIONS[unit], UnitType.VOLUME)  # type: ignore[index]
    if is_weight_unit(unit):
        return BaseQuantity(quantity * WEIGHT_CONVERSIONS[unit], UnitType.WEIGHT)  # type: ignore[index]
    return BaseQuantity(quantity, UnitType.COUNT)


def to_display(value: float, type_: UnitType) -> DisplayQuantity:
    """Render a base amount in the largest natural unit of its family."""

    if type_ is UnitType.VOLUME:
        if value >= TSP_PER_CUP:
            return DisplayQuantity(round_half_up(value / TSP_PER_CUP), MeasurementUnit.CUP)
        if value >= TSP_PER_TBSP:
            return DisplayQuantity(round_half_up(value / TSP_PER_TBSP), MeasurementUnit.TBSP)
        return DisplayQuantity(round_half_up(value), MeasurementUnit.TSP)

    if type_ is UnitType.WEIGHT:
        if value >= OZ_PER_LB:
            return DisplayQuantity(round_half_up(value / OZ_PER_LB), MeasurementUnit.LB)
        return DisplayQuantity(round_half_up(value), MeasurementUnit.OZ)

    return DisplayQuantity(round_half_up(value), MeasurementUnit.UNIT)


def convert_unit(
    quantity: float,
    from_unit: Optional[MeasurementUnit],
    to_unit: MeasurementUnit,
) -> Optional[float]:
    """Convert within a family; ``None`` when the conversion is undefined."""

    if from_unit is None:
        return None

    family = unit_type(from_unit)
    if family is not unit_type(to_unit):
        return None

    if is_count_unit(from_unit):
        return quantity

    factors = VOLUME_CONVERSIONS if family is UnitType.VOLUME else WEIGHT_CONVERSIONS
    base = to_base(quantity, from_unit)
    return round_half_up(base.value / factors[to_unit])


def _format_number(quantity: float) -> str:
    if float(quantity).is_integer():
        return str(int(quantity))
    return f"{quantity:.2f}".rstrip("0").rstrip(".")


def format_quantity(quantity: Optional[float], unit: Optional[MeasurementUnit]) -> str:
    if quantity is None:
        return f"({unit.value})" if unit is not None else ""

    formatted = _format_number(quantity)
    if unit is None:
        return formatted
    return f"{formatted} {unit.value}"


def aggregate_quantities(quantities: Iterable[QuantityLike]) -> Optional[DisplayQuantity]:
    """Sum same-family amounts and render them; ``None`` if nothing can be summed.

    Entries without a positive quantity are ignored. Mixed families are never
    summed together.
    """

    valid = [entry for entry in quantities if entry.quantity is not None and entry.quantity > 0]
    if not valid:
        return None

    family = unit_type(valid[0].unit)
    if any(unit_type(entry.unit) is not family for entry in valid):
        return None

    total = sum(to_base(entry.quantity, entry.unit).value for entry in valid)  # type: ignore[arg-type]
    return to_display(total, family)


__all__ = [
    "UnitType",
    "VOLUME_CONVERSIONS",
    "WEIGHT_CONVERSIONS",
    "COUNT_UNITS",
    "BaseQuantity",
    "DisplayQuantity",
    "Measure",
    "round_half_up",
    "unit_type",
    "is_volume_unit",
    "is_weight_unit",
    "is_count_unit",
    "are_units_compatible",
    "to_base",
    "to_display",
    "convert_unit",
    "format_quantity",
    "aggregate_quantities",
]
