"""Output formatters for trend reports."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from bodytrend.tracking.diagnostics import (
    TrendReport,
    format_trend_report,
    trend_in_display_unit,
)
from bodytrend.tracking.ewma import SLOPE_WINDOW_DAYS
from bodytrend.tracking.models import EnergyBalance
from bodytrend.tracking.units import format_energy, format_slope, format_weight

# Rich colors for each balance band
BALANCE_COLORS = {
    EnergyBalance.DEFICIT: "green",
    EnergyBalance.MAINTENANCE: "yellow",
    EnergyBalance.SURPLUS: "red",
}


class TableFormatter:
    """Format reports as Rich panels and tables for terminal display."""

    def __init__(self, console: Optional[Console] = None):
        """Initialize the formatter.

        Args:
            console: Rich console for output. If None, creates a new one.
        """
        self.console = console or Console()

    def format(self, report: TrendReport) -> None:
        """Print the current status panel and the recent series table."""
        unit = report.display_unit
        color = BALANCE_COLORS[report.balance]

        stats = [
            f"[bold]Current trend:[/bold] [cyan]{format_weight(report.current_trend_kg, unit)}[/cyan]",
            f"Actual weight: {format_weight(report.current_weight_kg, unit)} "
            f"[dim]({report.latest_date.isoformat()})[/dim]",
        ]
        if report.has_slope:
            stats.append(
                f"{SLOPE_WINDOW_DAYS}-day slope: {format_slope(report.slope_kg_per_day, unit)}"
            )
            stats.append(
                f"Energy delta: [{color}]{format_energy(report.energy_delta)}[/{color}] "
                f"- {report.balance.description}"
            )
        else:
            stats.append("[dim]Log at least 2 weigh-ins to estimate a slope[/dim]")

        self.console.print(Panel("\n".join(stats), title="Current Stats"))

        table = Table(title=f"Trend (last {len(report.recent)} weigh-ins)")
        table.add_column("Date", style="cyan")
        table.add_column("Actual", justify="right")
        table.add_column("Trend", justify="right", style="blue")

        for point in reversed(report.recent):
            table.add_row(
                point.date.isoformat(),
                format_weight(point.raw_kg, unit),
                format_weight(point.trend_kg, unit),
            )

        self.console.print(table)
        self.console.print(
            f"[dim]EWMA alpha = {report.smoothing_factor} | "
            f"{report.weigh_in_count} weigh-ins recorded[/dim]"
        )


class JSONFormatter:
    """Format reports as JSON for programmatic use."""

    def format(self, report: TrendReport) -> str:
        """Return JSON string. Weights are reported in kg."""
        data = {
            "timestamp": datetime.now().isoformat(),
            "latest_date": report.latest_date.isoformat(),
            "current_weight_kg": round(report.current_weight_kg, 2),
            "current_trend_kg": round(report.current_trend_kg, 2),
            "slope_kg_per_day": round(report.slope_kg_per_day, 4) if report.has_slope else None,
            "energy_delta_kcal": round(report.energy_delta) if report.has_slope else None,
            "balance": report.balance.value,
            "window_size": report.window_size,
            "weigh_in_count": report.weigh_in_count,
            "smoothing_factor": report.smoothing_factor,
            "display_unit": report.display_unit.value,
            "series": [
                {
                    "date": p.date.isoformat(),
                    "weight_kg": round(p.raw_kg, 2),
                    "trend_kg": round(p.trend_kg, 2),
                }
                for p in report.recent
            ],
        }
        return json.dumps(data, indent=2)


class MarkdownFormatter:
    """Format reports as Markdown."""

    def format(self, report: TrendReport) -> str:
        """Return Markdown string."""
        unit = report.display_unit
        lines = [
            "# Weight Trend",
            "",
            f"**As of:** {report.latest_date.isoformat()}",
            f"**Current trend:** {format_weight(report.current_trend_kg, unit)}",
            f"**Actual weight:** {format_weight(report.current_weight_kg, unit)}",
        ]

        if report.has_slope:
            lines.append(
                f"**{SLOPE_WINDOW_DAYS}-day slope:** {format_slope(report.slope_kg_per_day, unit)}"
            )
            lines.append(
                f"**Energy delta:** {format_energy(report.energy_delta)} "
                f"({report.balance.description})"
            )

        lines.extend(["", "| Date | Actual | Trend |", "|------|--------|-------|"])
        for point in report.recent:
            lines.append(
                f"| {point.date.isoformat()} | {format_weight(point.raw_kg, unit)} "
                f"| {format_weight(point.trend_kg, unit)} |"
            )

        return "\n".join(lines)


def format_report(
    report: TrendReport,
    output_format: str = "table",
    console: Optional[Console] = None,
) -> Optional[str]:
    """Format a trend report in the specified format.

    Args:
        report: Trend report to format
        output_format: One of 'table', 'json', 'markdown', 'text'
        console: Rich console (for table format)

    Returns:
        Formatted string for json/markdown/text, None for table (prints directly)
    """
    if output_format == "table":
        TableFormatter(console).format(report)
        return None
    elif output_format == "json":
        return JSONFormatter().format(report)
    elif output_format == "markdown":
        return MarkdownFormatter().format(report)
    elif output_format == "text":
        return format_trend_report(report)
    else:
        raise ValueError(f"Unknown output format: {output_format}")


def series_to_dataframe(report: TrendReport) -> pd.DataFrame:
    """Chart series as a DataFrame in the report's display unit."""
    unit = report.display_unit.value
    rows = []
    for point in report.recent:
        raw, trend = trend_in_display_unit(point, report.display_unit)
        rows.append({"date": point.date.isoformat(), f"weight_{unit}": raw, f"trend_{unit}": trend})
    return pd.DataFrame(rows, columns=["date", f"weight_{unit}", f"trend_{unit}"])


def export_series_csv(report: TrendReport, path: Path) -> int:
    """Write the chart series to CSV. Returns the number of rows written."""
    df = series_to_dataframe(report).round(2)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    return len(df)
