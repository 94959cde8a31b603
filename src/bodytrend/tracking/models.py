"""Data models for weigh-ins, trend points and tracking settings."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Optional


# Defaults used when the settings document does not exist yet
DEFAULT_SMOOTHING = 0.1
DEFAULT_ENERGY_PER_KG = 7700.0  # approx. kcal in one kg of adipose tissue


class BodyTrendError(Exception):
    """Base exception for bodytrend errors."""

    pass


class InvalidSettingsError(BodyTrendError, ValueError):
    """Raised when a tracking setting is out of range."""

    pass


class InvalidObservationError(BodyTrendError, ValueError):
    """Raised when a weigh-in has an unusable weight."""

    pass


class MassUnit(Enum):
    """Display unit for body mass. Weights are always stored in kg."""

    KG = "kg"
    LB = "lb"

    @property
    def other(self) -> "MassUnit":
        return MassUnit.LB if self is MassUnit.KG else MassUnit.KG


class EnergyBalance(Enum):
    """Classification of a daily energy delta."""

    DEFICIT = "deficit"
    MAINTENANCE = "maintenance"
    SURPLUS = "surplus"

    @property
    def description(self) -> str:
        return {
            EnergyBalance.DEFICIT: "Deficit (losing weight)",
            EnergyBalance.MAINTENANCE: "Maintenance",
            EnergyBalance.SURPLUS: "Surplus (gaining weight)",
        }[self]


@dataclass(frozen=True)
class Observation:
    """A single weigh-in. One per calendar day."""

    date: date
    weight_kg: float
    notes: Optional[str] = None

    def __post_init__(self) -> None:
        if not math.isfinite(self.weight_kg) or self.weight_kg <= 0:
            raise InvalidObservationError(
                f"weight must be a positive number, got {self.weight_kg!r}"
            )


@dataclass(frozen=True)
class TrendPoint:
    """Raw and smoothed weight for one day.

    slope_kg_per_day and energy_delta are batch-level values: either None on
    every point of a series or identical on every point.
    """

    date: date
    raw_kg: float
    trend_kg: float
    slope_kg_per_day: Optional[float] = None
    energy_delta: Optional[float] = None  # kcal/day, negative = deficit

    def with_summary(self, slope: float, energy_delta: float) -> "TrendPoint":
        """Return a copy carrying the batch slope and energy delta."""
        return replace(self, slope_kg_per_day=slope, energy_delta=energy_delta)


@dataclass(frozen=True)
class TrendSummary:
    """Batch-level result of the slope window."""

    slope_kg_per_day: float
    energy_delta: float
    balance: EnergyBalance
    window_size: int


@dataclass(frozen=True)
class TrendAnalysis:
    """A trend series together with its batch summary."""

    series: list[TrendPoint]
    summary: TrendSummary

    @property
    def latest(self) -> Optional[TrendPoint]:
        """Most recent point, or None for an empty series."""
        return self.series[-1] if self.series else None

    def broadcast(self) -> list[TrendPoint]:
        """Flatten the summary onto every point (no-op below two points)."""
        if len(self.series) < 2:
            return list(self.series)
        return [
            p.with_summary(self.summary.slope_kg_per_day, self.summary.energy_delta)
            for p in self.series
        ]


@dataclass
class TrendSettings:
    """Tracking parameters stored alongside the weigh-ins."""

    smoothing_factor: float = DEFAULT_SMOOTHING
    energy_per_kg: float = DEFAULT_ENERGY_PER_KG
    display_unit: MassUnit = MassUnit.KG

    def __post_init__(self) -> None:
        if isinstance(self.display_unit, str):
            try:
                self.display_unit = MassUnit(self.display_unit)
            except ValueError:
                raise InvalidSettingsError(
                    f"display_unit must be one of {[u.value for u in MassUnit]}, "
                    f"got '{self.display_unit}'"
                ) from None
        if not (0 < self.smoothing_factor <= 1):
            raise InvalidSettingsError(
                f"smoothing_factor must be in (0, 1], got {self.smoothing_factor}"
            )
        if not math.isfinite(self.energy_per_kg) or self.energy_per_kg <= 0:
            raise InvalidSettingsError(
                f"energy_per_kg must be positive, got {self.energy_per_kg}"
            )
