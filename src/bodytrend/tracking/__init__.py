"""Weight trend tracking.

This module implements an exponentially weighted moving average (EWMA) of
daily weigh-ins, a one-week least-squares slope of that trend, and the
conversion of the slope into an estimated daily energy balance.

Key components:
- EWMA trend calculation (default α = 0.1, ~10 day time constant)
- 7-day slope and kcal/day surplus or deficit (7700 kcal/kg)
- Weigh-in store interface with in-memory and SQLite implementations
"""

from __future__ import annotations

from bodytrend.tracking.ewma import (
    analyze_trend,
    classify_energy_balance,
    compute_trend,
    convert_to_energy,
    enrich,
    estimate_slope,
    update_trend,
)
from bodytrend.tracking.models import (
    BodyTrendError,
    EnergyBalance,
    InvalidObservationError,
    InvalidSettingsError,
    MassUnit,
    Observation,
    TrendAnalysis,
    TrendPoint,
    TrendSettings,
    TrendSummary,
)
from bodytrend.tracking.store import InMemoryObservationStore, ObservationStore

__all__ = [
    "BodyTrendError",
    "EnergyBalance",
    "InMemoryObservationStore",
    "InvalidObservationError",
    "InvalidSettingsError",
    "MassUnit",
    "Observation",
    "ObservationStore",
    "TrendAnalysis",
    "TrendPoint",
    "TrendSettings",
    "TrendSummary",
    "analyze_trend",
    "classify_energy_balance",
    "compute_trend",
    "convert_to_energy",
    "enrich",
    "estimate_slope",
    "update_trend",
]
