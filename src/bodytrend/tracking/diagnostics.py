"""Current-status report for the weight trend."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from typing import Optional

from bodytrend.tracking.ewma import SLOPE_WINDOW_DAYS, analyze_trend
from bodytrend.tracking.models import (
    EnergyBalance,
    MassUnit,
    Observation,
    TrendPoint,
    TrendSettings,
)
from bodytrend.tracking.units import (
    format_energy,
    format_slope,
    format_weight,
    to_display,
)


@dataclass
class TrendReport:
    """Summary of where the trend stands today."""

    latest_date: date
    current_weight_kg: float
    current_trend_kg: float
    slope_kg_per_day: float
    energy_delta: float  # kcal/day, negative = deficit
    balance: EnergyBalance
    window_size: int
    weigh_in_count: int
    smoothing_factor: float
    display_unit: MassUnit
    recent: list[TrendPoint]  # chart series, oldest first

    @property
    def has_slope(self) -> bool:
        """False when there were too few weigh-ins to estimate a slope."""
        return self.weigh_in_count >= 2


def generate_trend_report(
    observations: Sequence[Observation],
    settings: TrendSettings,
    recent: int = 30,
) -> Optional[TrendReport]:
    """Generate a trend report, or None if there are no weigh-ins."""
    analysis = analyze_trend(observations, settings)
    latest = analysis.latest
    if latest is None:
        return None

    summary = analysis.summary
    return TrendReport(
        latest_date=latest.date,
        current_weight_kg=latest.raw_kg,
        current_trend_kg=latest.trend_kg,
        slope_kg_per_day=summary.slope_kg_per_day,
        energy_delta=summary.energy_delta,
        balance=summary.balance,
        window_size=summary.window_size,
        weigh_in_count=len(analysis.series),
        smoothing_factor=settings.smoothing_factor,
        display_unit=settings.display_unit,
        recent=analysis.broadcast()[-recent:] if recent > 0 else [],
    )


def format_trend_report(report: TrendReport) -> str:
    """Format trend report as text."""
    unit = report.display_unit
    lines = [
        f"Weight Trend ({report.latest_date.isoformat()})",
        "=" * 45,
        f"Current weight: {format_weight(report.current_weight_kg, unit)}",
        f"Current trend:  {format_weight(report.current_trend_kg, unit)} (EWMA)",
    ]

    if report.has_slope:
        lines.append(
            f"{SLOPE_WINDOW_DAYS}-day slope:    {format_slope(report.slope_kg_per_day, unit)}"
        )
        lines.append(
            f"Energy delta:   {format_energy(report.energy_delta)} "
            f"({report.balance.description})"
        )
    else:
        lines.append("Slope:          not enough data (need 2 weigh-ins)")

    lines.append(
        f"EWMA alpha = {report.smoothing_factor} | {report.weigh_in_count} weigh-ins recorded"
    )
    return "\n".join(lines)


def trend_in_display_unit(point: TrendPoint, unit: MassUnit) -> tuple[float, float]:
    """(raw, trend) for a point, converted to the display unit."""
    return to_display(point.raw_kg, unit), to_display(point.trend_kg, unit)
