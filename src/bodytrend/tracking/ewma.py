"""Exponentially weighted moving average trend and energy balance.

The trend is the classic EWMA:
    T_0 = W_0
    T_n = α × W_n + (1 - α) × T_{n-1}

With α=0.1 the trend has roughly a 10-day time constant, which damps the
day-to-day noise of water retention, meal timing and scale error while still
following the underlying change in body mass.

The rate of change is the least-squares slope of the trend over the most
recent week of weigh-ins, and is converted to a daily energy balance with an
energy-per-kg constant (7700 kcal/kg by default).

Sign convention: a falling trend gives a negative slope and a negative energy
delta, which is reported as a deficit. A rising trend is a surplus.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Optional

from bodytrend.tracking.models import (
    DEFAULT_ENERGY_PER_KG,
    EnergyBalance,
    InvalidSettingsError,
    Observation,
    TrendAnalysis,
    TrendPoint,
    TrendSettings,
    TrendSummary,
)

logger = logging.getLogger(__name__)

# Number of most recent trend points used for the slope
SLOPE_WINDOW_DAYS = 7

# Energy deltas within ±100 kcal/day are reported as maintenance
MAINTENANCE_BAND_KCAL = 100.0


def _check_alpha(alpha: float) -> None:
    if not (0 < alpha <= 1):
        raise InvalidSettingsError(f"smoothing factor must be in (0, 1], got {alpha}")


def update_trend(prev_trend: float, weight_kg: float, alpha: float) -> float:
    """
    Advance the trend by one weigh-in.

    Args:
        prev_trend: Previous trend value (T_{n-1})
        weight_kg: Today's scale weight (W_n)
        alpha: Smoothing factor in (0, 1]. Higher values follow the scale
               more closely, lower values smooth more.

    Returns:
        Today's trend value (T_n)

    Example:
        >>> update_trend(80.0, 78.0, 0.5)
        79.0
    """
    return alpha * weight_kg + (1 - alpha) * prev_trend


def compute_trend(observations: Sequence[Observation], alpha: float) -> list[TrendPoint]:
    """
    Calculate trend points for a series of weigh-ins.

    The first weight seeds the trend, so the first trend value equals the
    first raw weight exactly. Observations must already be sorted ascending
    by date.

    Args:
        observations: Weigh-ins in chronological order
        alpha: Smoothing factor in (0, 1]

    Returns:
        One TrendPoint per observation (no slope or energy fields)

    Raises:
        InvalidSettingsError: If alpha is outside (0, 1]
    """
    _check_alpha(alpha)
    if not observations:
        return []

    points: list[TrendPoint] = []
    trend = observations[0].weight_kg
    for i, obs in enumerate(observations):
        if i > 0:
            trend = update_trend(trend, obs.weight_kg, alpha)
        points.append(TrendPoint(date=obs.date, raw_kg=obs.weight_kg, trend_kg=trend))

    return points


def estimate_slope(points: Sequence[TrendPoint]) -> float:
    """
    Least-squares slope of the trend over the last week, in kg/day.

    The window is the last min(7, N) points. x is the number of calendar days
    since the first date in the window, so missing days stretch the x axis
    rather than being skipped.

    Returns 0.0 when there are fewer than two points, or when every point in
    the window falls on the same date.
    """
    if len(points) < 2:
        return 0.0

    window = points[-SLOPE_WINDOW_DAYS:]
    n = len(window)
    first = window[0].date

    xs = [float((p.date - first).days) for p in window]
    ys = [p.trend_kg for p in window]

    sum_x = sum(xs)
    sum_y = sum(ys)
    sum_xy = sum(x * y for x, y in zip(xs, ys))
    sum_x2 = sum(x * x for x in xs)

    denominator = n * sum_x2 - sum_x * sum_x
    if denominator == 0:
        logger.debug("Slope window of %d points spans a single date; slope set to 0", n)
        return 0.0

    return (n * sum_xy - sum_x * sum_y) / denominator


def convert_to_energy(slope_kg_per_day: float, energy_per_kg: float = DEFAULT_ENERGY_PER_KG) -> float:
    """
    Convert a trend slope to a daily energy balance.

    Args:
        slope_kg_per_day: Trend slope (negative = losing)
        energy_per_kg: kcal per kg of body mass change

    Returns:
        kcal/day (negative = deficit, positive = surplus)
    """
    return slope_kg_per_day * energy_per_kg


def classify_energy_balance(energy_delta: float) -> EnergyBalance:
    """Label an energy delta as deficit, maintenance or surplus."""
    if energy_delta < -MAINTENANCE_BAND_KCAL:
        return EnergyBalance.DEFICIT
    if energy_delta > MAINTENANCE_BAND_KCAL:
        return EnergyBalance.SURPLUS
    return EnergyBalance.MAINTENANCE


def summarize(
    points: Sequence[TrendPoint], energy_per_kg: float = DEFAULT_ENERGY_PER_KG
) -> TrendSummary:
    """Slope, energy delta and balance for a trend series."""
    slope = estimate_slope(points)
    energy = convert_to_energy(slope, energy_per_kg)
    return TrendSummary(
        slope_kg_per_day=slope,
        energy_delta=energy,
        balance=classify_energy_balance(energy),
        window_size=min(len(points), SLOPE_WINDOW_DAYS),
    )


def enrich(
    points: Sequence[TrendPoint], energy_per_kg: float = DEFAULT_ENERGY_PER_KG
) -> list[TrendPoint]:
    """
    Add slope and energy delta to every trend point.

    The same values are set on all points. With fewer than two points the
    series is returned unchanged, without slope or energy fields.
    """
    if len(points) < 2:
        return list(points)

    slope = estimate_slope(points)
    energy = convert_to_energy(slope, energy_per_kg)
    return [p.with_summary(slope, energy) for p in points]


def analyze_trend(
    observations: Sequence[Observation],
    settings: Optional[TrendSettings] = None,
) -> TrendAnalysis:
    """Run the full pipeline: trend series plus its batch summary."""
    if settings is None:
        settings = TrendSettings()

    series = compute_trend(observations, settings.smoothing_factor)
    summary = summarize(series, settings.energy_per_kg)
    logger.debug(
        "Analyzed %d weigh-ins: slope=%.4f kg/day, energy=%.0f kcal/day (%s)",
        len(series),
        summary.slope_kg_per_day,
        summary.energy_delta,
        summary.balance.value,
    )
    return TrendAnalysis(series=series, summary=summary)
