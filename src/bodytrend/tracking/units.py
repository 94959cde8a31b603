"""Kilogram / pound conversion and display formatting.

Weights are stored in kilograms. Conversion happens only when reading user
input and when displaying values.
"""

from __future__ import annotations

from bodytrend.tracking.models import MassUnit

KG_TO_LB = 2.20462


def kg_to_lb(kg: float) -> float:
    return kg * KG_TO_LB


def lb_to_kg(lb: float) -> float:
    return lb / KG_TO_LB


def to_display(kg: float, unit: MassUnit) -> float:
    """Convert a stored kg value to the display unit."""
    return kg_to_lb(kg) if unit is MassUnit.LB else kg


def from_display(value: float, unit: MassUnit) -> float:
    """Convert a value entered in the display unit to kg."""
    return lb_to_kg(value) if unit is MassUnit.LB else value


def format_weight(kg: float, unit: MassUnit) -> str:
    """Format a weight in the display unit, e.g. '70.0 kg' or '154.3 lb'."""
    return f"{to_display(kg, unit):.1f} {unit.value}"


def format_slope(kg_per_day: float, unit: MassUnit) -> str:
    """Format a trend slope, e.g. '-0.10 kg/day'."""
    return f"{to_display(kg_per_day, unit):.2f} {unit.value}/day"


def format_energy(kcal_per_day: float) -> str:
    """Format an energy delta with an explicit sign when positive."""
    rounded = round(kcal_per_day)
    sign = "+" if rounded > 0 else ""
    return f"{sign}{rounded} kcal/day"
