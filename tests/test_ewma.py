"""Tests for EWMA trend, 7-day slope and energy balance."""

from __future__ import annotations

import math
from datetime import date, timedelta

import pytest

from bodytrend.tracking.ewma import (
    MAINTENANCE_BAND_KCAL,
    SLOPE_WINDOW_DAYS,
    analyze_trend,
    classify_energy_balance,
    compute_trend,
    convert_to_energy,
    enrich,
    estimate_slope,
    update_trend,
)
from bodytrend.tracking.models import (
    EnergyBalance,
    InvalidSettingsError,
    Observation,
    TrendPoint,
    TrendSettings,
)


def _observations(weights: list[float], start: date = date(2025, 1, 1)) -> list[Observation]:
    return [Observation(date=start + timedelta(days=i), weight_kg=w) for i, w in enumerate(weights)]


def _points(trends: list[float], start: date = date(2025, 1, 1)) -> list[TrendPoint]:
    return [
        TrendPoint(date=start + timedelta(days=i), raw_kg=t, trend_kg=t)
        for i, t in enumerate(trends)
    ]


class TestUpdateTrend:
    """Tests for update_trend function."""

    def test_single_step(self) -> None:
        """One step is α × weight + (1 - α) × previous trend."""
        assert update_trend(80.0, 78.0, 0.5) == pytest.approx(79.0)

    def test_alpha_one_follows_scale(self) -> None:
        """With α = 1 the trend equals the latest weight."""
        assert update_trend(80.0, 78.3, 1.0) == 78.3


class TestComputeTrend:
    """Tests for compute_trend function."""

    def test_empty(self) -> None:
        """Empty input gives empty output."""
        assert compute_trend([], 0.1) == []

    def test_single_observation(self) -> None:
        """A single weigh-in is its own trend."""
        points = compute_trend(_observations([82.3]), 0.1)

        assert len(points) == 1
        assert points[0].trend_kg == 82.3
        assert points[0].raw_kg == 82.3
        assert points[0].slope_kg_per_day is None

    def test_seed_is_first_weight(self) -> None:
        """The first trend value equals the first raw weight exactly."""
        points = compute_trend(_observations([91.7, 90.2, 92.4]), 0.3)
        assert points[0].trend_kg == 91.7

    def test_recursion(self) -> None:
        """Each trend value follows the EWMA recursion."""
        alpha = 0.1
        weights = [172.5, 171.5, 172.0, 171.5, 170.9, 171.2]
        points = compute_trend(_observations(weights), alpha)

        assert len(points) == len(weights)
        for i in range(1, len(points)):
            expected = alpha * weights[i] + (1 - alpha) * points[i - 1].trend_kg
            assert points[i].trend_kg == pytest.approx(expected)

    def test_constant_weight_is_fixed_point(self) -> None:
        """If every weight is c, every trend value is c."""
        points = compute_trend(_observations([75.0] * 10), 0.25)
        assert all(p.trend_kg == 75.0 for p in points)

    def test_trend_depends_on_whole_prefix(self) -> None:
        """Changing an early weigh-in changes a later trend value."""
        base = compute_trend(_observations([80.0] + [79.0] * 9), 0.1)
        changed = compute_trend(_observations([85.0] + [79.0] * 9), 0.1)
        assert changed[-1].trend_kg != base[-1].trend_kg

    def test_dates_preserved(self) -> None:
        """Trend points keep the observation dates in order."""
        observations = _observations([70.0, 70.5, 71.0])
        points = compute_trend(observations, 0.1)
        assert [p.date for p in points] == [o.date for o in observations]

    def test_idempotent(self) -> None:
        """Calling twice on the same input gives identical output."""
        observations = _observations([80.0, 79.4, 79.9, 79.1])
        assert compute_trend(observations, 0.2) == compute_trend(observations, 0.2)

    @pytest.mark.parametrize("alpha", [0.0, -0.1, 1.5])
    def test_invalid_alpha_rejected(self, alpha: float) -> None:
        """Smoothing factors outside (0, 1] are rejected."""
        with pytest.raises(InvalidSettingsError):
            compute_trend(_observations([80.0]), alpha)


class TestEstimateSlope:
    """Tests for estimate_slope function."""

    def test_empty_and_single_point(self) -> None:
        """Fewer than two points gives exactly 0."""
        assert estimate_slope([]) == 0.0
        assert estimate_slope(_points([80.0])) == 0.0

    def test_two_points(self) -> None:
        """Two points one day apart give their difference."""
        assert estimate_slope(_points([80.0, 79.5])) == pytest.approx(-0.5)

    def test_linear_series(self) -> None:
        """A perfectly linear trend recovers its slope."""
        trends = [100.0 + 0.2 * i for i in range(5)]
        assert estimate_slope(_points(trends)) == pytest.approx(0.2)

    def test_window_uses_last_seven(self) -> None:
        """Slope of a 10-point series equals the slope of its last 7 points."""
        trends = [80.0, 81.0, 79.0, 78.8, 78.5, 78.6, 78.1, 77.9, 78.0, 77.6]
        points = _points(trends)

        assert estimate_slope(points) == estimate_slope(points[-SLOPE_WINDOW_DAYS:])

    def test_early_history_ignored(self) -> None:
        """Points outside the window do not affect the slope."""
        tail = [78.5, 78.6, 78.1, 77.9, 78.0, 77.6, 77.4]
        a = _points([60.0, 95.0, 70.0] + tail)
        b = _points([80.0, 80.0, 80.0] + tail)
        assert estimate_slope(a) == estimate_slope(b)

    def test_calendar_gaps_use_day_distance(self) -> None:
        """Missing days stretch the x axis instead of using point index."""
        start = date(2025, 1, 1)
        offsets = [0, 2, 5, 6]
        points = [
            TrendPoint(date=start + timedelta(days=d), raw_kg=0.0, trend_kg=90.0 - 0.5 * d)
            for d in offsets
        ]
        assert estimate_slope(points) == pytest.approx(-0.5)

    def test_all_same_date_is_zero(self) -> None:
        """A window where every point shares a date yields 0, not NaN."""
        day = date(2025, 1, 1)
        points = [TrendPoint(date=day, raw_kg=t, trend_kg=t) for t in (80.0, 79.0, 81.0)]

        slope = estimate_slope(points)
        assert slope == 0.0
        assert math.isfinite(slope)


class TestEnergyConversion:
    """Tests for convert_to_energy and classify_energy_balance."""

    def test_default_energy_per_kg(self) -> None:
        """Default is 7700 kcal per kg."""
        assert convert_to_energy(-0.1) == pytest.approx(-770.0)

    def test_losing_is_negative(self) -> None:
        """A falling trend is a negative energy delta (deficit)."""
        assert convert_to_energy(-0.05, 7700) < 0

    def test_custom_energy_per_kg(self) -> None:
        assert convert_to_energy(0.02, 3500) == pytest.approx(70.0)

    def test_zero_slope(self) -> None:
        assert convert_to_energy(0.0) == 0.0

    @pytest.mark.parametrize(
        "delta,expected",
        [
            (-500.0, EnergyBalance.DEFICIT),
            (-100.5, EnergyBalance.DEFICIT),
            (-MAINTENANCE_BAND_KCAL, EnergyBalance.MAINTENANCE),
            (0.0, EnergyBalance.MAINTENANCE),
            (MAINTENANCE_BAND_KCAL, EnergyBalance.MAINTENANCE),
            (100.5, EnergyBalance.SURPLUS),
            (450.0, EnergyBalance.SURPLUS),
        ],
    )
    def test_classification_bands(self, delta: float, expected: EnergyBalance) -> None:
        """±100 kcal/day is maintenance, beyond that deficit or surplus."""
        assert classify_energy_balance(delta) is expected


class TestEnrich:
    """Tests for enrich function."""

    def test_fewer_than_two_points_unchanged(self) -> None:
        """Single point is returned without slope or energy."""
        points = _points([82.3])
        enriched = enrich(points)

        assert enriched == points
        assert enriched[0].slope_kg_per_day is None
        assert enriched[0].energy_delta is None

    def test_same_values_on_every_point(self) -> None:
        """Slope and energy are broadcast identically onto all points."""
        points = _points([80.0, 79.8, 79.7, 79.5])
        enriched = enrich(points, 7700)

        assert len(enriched) == len(points)
        slopes = {p.slope_kg_per_day for p in enriched}
        energies = {p.energy_delta for p in enriched}
        assert len(slopes) == 1
        assert len(energies) == 1
        assert energies.pop() == pytest.approx(slopes.pop() * 7700)

    def test_does_not_mutate_input(self) -> None:
        """Original points keep their empty slope field."""
        points = _points([80.0, 79.0])
        enrich(points)
        assert points[0].slope_kg_per_day is None


class TestScenarios:
    """End-to-end scenarios through analyze_trend."""

    def test_flat_weights_are_maintenance(self, flat_three_days) -> None:
        """Three days at 70.0 kg: flat trend, zero slope, maintenance."""
        analysis = analyze_trend(flat_three_days, TrendSettings(smoothing_factor=0.1))

        assert [p.trend_kg for p in analysis.series] == [70.0, 70.0, 70.0]
        assert analysis.summary.slope_kg_per_day == 0.0
        assert analysis.summary.energy_delta == 0.0
        assert analysis.summary.balance is EnergyBalance.MAINTENANCE

    def test_losing_week_is_deficit(self, losing_week) -> None:
        """Dropping 0.1 kg/day with α = 0.5 gives ≈ -0.1 kg/day and a deficit."""
        analysis = analyze_trend(losing_week, TrendSettings(smoothing_factor=0.5))
        trends = [p.trend_kg for p in analysis.series]

        assert all(b < a for a, b in zip(trends, trends[1:]))
        assert analysis.summary.slope_kg_per_day == pytest.approx(-0.1, abs=0.01)
        assert analysis.summary.energy_delta < -MAINTENANCE_BAND_KCAL
        assert analysis.summary.balance is EnergyBalance.DEFICIT
        assert analysis.summary.window_size == SLOPE_WINDOW_DAYS

    def test_single_weigh_in(self) -> None:
        """One weigh-in: trend equals weight, no slope, maintenance."""
        analysis = analyze_trend(_observations([82.3]))

        assert [p.trend_kg for p in analysis.series] == [82.3]
        assert analysis.summary.slope_kg_per_day == 0.0
        assert analysis.summary.energy_delta == 0.0
        assert analysis.summary.balance is EnergyBalance.MAINTENANCE
        assert analysis.broadcast()[0].energy_delta is None

    def test_empty_history(self) -> None:
        """No weigh-ins: no latest point, zero slope and energy, maintenance."""
        analysis = analyze_trend([])

        assert analysis.series == []
        assert analysis.latest is None
        assert analysis.summary.slope_kg_per_day == 0.0
        assert analysis.summary.energy_delta == 0.0
        assert analysis.summary.balance is EnergyBalance.MAINTENANCE

    def test_broadcast_matches_enrich(self, losing_week) -> None:
        """The flattened analysis equals enrich() over the same series."""
        settings = TrendSettings(smoothing_factor=0.5)
        analysis = analyze_trend(losing_week, settings)

        assert analysis.broadcast() == enrich(analysis.series, settings.energy_per_kg)
