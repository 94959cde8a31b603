"""CLI interface using Typer."""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import NoReturn, Optional

import typer
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from bodytrend.config import Settings, get_settings
from bodytrend.db import DatabaseConnection, get_db, set_db
from bodytrend.export.formatters import export_series_csv, format_report
from bodytrend.tracking.diagnostics import generate_trend_report
from bodytrend.tracking.ewma import analyze_trend
from bodytrend.tracking.models import BodyTrendError, MassUnit, Observation, TrendSettings
from bodytrend.tracking.queries import SettingsQueries, SQLiteObservationStore, WeightQueries
from bodytrend.tracking.units import format_weight, from_display, to_display

app = typer.Typer(
    help="Daily weigh-ins with EWMA weight trend and energy balance",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

settings_app = typer.Typer(help="Show and change tracking settings")
app.add_typer(settings_app, name="settings")

logger = logging.getLogger(__name__)


# ============================================================================
# Helpers
# ============================================================================


def output_json(response: dict) -> None:
    """Output JSON response to stdout."""
    print(json.dumps(response, indent=2))


def fail(command: str, message: str, json_output: bool = False) -> NoReturn:
    """Report an error and exit with status 1."""
    if json_output:
        output_json({"success": False, "command": command, "errors": [message]})
    else:
        console.print(f"[red]{message}[/red]")
    raise typer.Exit(1)


def load_app_settings(command: str) -> Settings:
    """Load the YAML app config, exiting with an error if it is malformed."""
    try:
        return get_settings()
    except (ValueError, yaml.YAMLError) as e:
        fail(command, f"Invalid config file: {e}")


def open_db(command: str) -> DatabaseConnection:
    """Get the database, creating tables on first use (idempotent)."""
    try:
        db = get_db()
    except (ValueError, yaml.YAMLError) as e:
        fail(command, f"Invalid config file: {e}")
    logger.debug("Using database %s", db.db_path)
    db.initialize_schema()
    return db


def load_tracking_settings(db: DatabaseConnection) -> TrendSettings:
    with db.get_connection() as conn:
        return SettingsQueries.get_settings(conn)


def parse_date(value: Optional[str], command: str, json_output: bool) -> date:
    """Parse YYYY-MM-DD, defaulting to today."""
    if not value:
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError:
        fail(command, f"Invalid date '{value}', expected YYYY-MM-DD", json_output)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    db_path: Optional[Path] = typer.Option(
        None, "--db", help="Database file (default: from ~/.bodytrend/config.yaml)"
    ),
) -> None:
    """Configure logging and the database location."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )
    if db_path is not None:
        set_db(DatabaseConnection(db_path.expanduser()))


# ============================================================================
# Weigh-in Commands
# ============================================================================


@app.command()
def add(
    weight: float = typer.Argument(..., help="Weight (in the display unit unless --unit is given)"),
    date_str: Optional[str] = typer.Option(
        None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"
    ),
    unit: Optional[MassUnit] = typer.Option(
        None, "--unit", "-u", help="Unit of WEIGHT (default: display unit)"
    ),
    notes: Optional[str] = typer.Option(None, "--notes", "-n", help="Optional notes"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Log a weigh-in. A second weigh-in on the same date replaces the first."""
    measured_on = parse_date(date_str, "add", json_output)

    db = open_db("add")
    tracking = load_tracking_settings(db)
    entry_unit = unit or tracking.display_unit

    try:
        observation = Observation(
            date=measured_on, weight_kg=from_display(weight, entry_unit), notes=notes
        )
    except BodyTrendError as e:
        fail("add", str(e), json_output)

    with db.get_connection() as conn:
        previous = WeightQueries.get_weight(conn, measured_on)

    store = SQLiteObservationStore(db)
    store.upsert(observation)

    analysis = analyze_trend(store.list_ordered(), tracking)
    point = next(p for p in analysis.series if p.date == measured_on)
    display = tracking.display_unit

    if json_output:
        output_json({
            "success": True,
            "command": "add",
            "data": {
                "date": measured_on.isoformat(),
                "weight_kg": round(observation.weight_kg, 2),
                "trend_kg": round(point.trend_kg, 2),
                "replaced": previous is not None,
            },
            "human_summary": (
                f"Logged {format_weight(observation.weight_kg, display)}, "
                f"trend: {format_weight(point.trend_kg, display)}"
            ),
        })
    else:
        console.print(
            f"[green]Logged:[/green] {format_weight(observation.weight_kg, display)} on {measured_on}"
        )
        if previous is not None:
            console.print(
                f"[yellow]Replaced:[/yellow] {format_weight(previous.weight_kg, display)}"
            )
        console.print(f"[blue]Trend:[/blue] {format_weight(point.trend_kg, display)} (EWMA)")


@app.command()
def delete(
    date_str: str = typer.Argument(..., help="Date of the weigh-in (YYYY-MM-DD)"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Delete the weigh-in for a date."""
    measured_on = parse_date(date_str, "delete", json_output)

    store = SQLiteObservationStore(open_db("delete"))
    if not store.delete(measured_on):
        fail("delete", f"No weigh-in on {measured_on}", json_output)

    if json_output:
        output_json({
            "success": True,
            "command": "delete",
            "data": {"date": measured_on.isoformat()},
        })
    else:
        console.print(f"[green]Deleted weigh-in for {measured_on}[/green]")


@app.command()
def history(
    limit: Optional[int] = typer.Option(
        None, "--limit", "-n", min=1, help="Number of weigh-ins to show (default: from config)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List weigh-ins, newest first, with trend."""
    if limit is None:
        limit = load_app_settings("history").defaults.history_limit

    db = open_db("history")
    tracking = load_tracking_settings(db)
    series = analyze_trend(SQLiteObservationStore(db).list_ordered(), tracking).series
    shown = list(reversed(series))[:limit]

    if not shown:
        if json_output:
            output_json({"success": True, "command": "history", "data": {"entries": []}})
        else:
            console.print("No weigh-ins yet. Add your first weigh-in!")
        return

    if json_output:
        output_json({
            "success": True,
            "command": "history",
            "data": {
                "entries": [
                    {
                        "date": p.date.isoformat(),
                        "weight_kg": round(p.raw_kg, 2),
                        "trend_kg": round(p.trend_kg, 2),
                    }
                    for p in shown
                ]
            },
            "human_summary": f"{len(shown)} of {len(series)} weigh-ins",
        })
        return

    unit = tracking.display_unit
    table = Table(title=f"Weigh-in History ({len(shown)} of {len(series)})")
    table.add_column("Date", style="cyan")
    table.add_column("Actual", justify="right")
    table.add_column("Trend", justify="right", style="blue")
    table.add_column("", justify="right")

    # Day-over-day trend change, computed oldest first
    deltas: dict[date, str] = {}
    for prev, curr in zip(series, series[1:]):
        deltas[curr.date] = f"{to_display(curr.trend_kg - prev.trend_kg, unit):+.2f}"

    for p in shown:
        table.add_row(
            p.date.isoformat(),
            format_weight(p.raw_kg, unit),
            format_weight(p.trend_kg, unit),
            deltas.get(p.date, ""),
        )

    console.print(table)


@app.command()
def status(
    output_format: Optional[str] = typer.Option(
        None, "--format", "-f", help="Output format: table, json, markdown, text"
    ),
    recent: Optional[int] = typer.Option(
        None, "--recent", "-r", min=0, help="Number of recent weigh-ins in the series"
    ),
) -> None:
    """Show current trend, 7-day slope and energy balance."""
    defaults = load_app_settings("status").defaults
    output_format = output_format or defaults.output_format
    if recent is None:
        recent = defaults.recent_points

    db = open_db("status")
    tracking = load_tracking_settings(db)
    report = generate_trend_report(SQLiteObservationStore(db).list_ordered(), tracking, recent)

    if report is None:
        if output_format == "json":
            output_json({"success": False, "command": "status", "errors": ["No weigh-ins recorded"]})
        else:
            console.print("[yellow]No data yet. Add your first weigh-in![/yellow]")
        raise typer.Exit(1)

    try:
        text = format_report(report, output_format, console)
    except ValueError as e:
        fail("status", str(e))

    if text is not None:
        print(text)


@app.command()
def export(
    path: Path = typer.Argument(..., help="CSV file to write"),
    recent: Optional[int] = typer.Option(
        None, "--recent", "-r", min=0, help="Number of recent weigh-ins (default: from config)"
    ),
) -> None:
    """Export the recent weight/trend series as CSV in the display unit."""
    if recent is None:
        recent = load_app_settings("export").defaults.recent_points

    db = open_db("export")
    tracking = load_tracking_settings(db)
    report = generate_trend_report(SQLiteObservationStore(db).list_ordered(), tracking, recent)

    if report is None:
        fail("export", "No weigh-ins recorded")

    rows = export_series_csv(report, path)
    console.print(f"[green]Wrote {rows} rows to {path}[/green]")


# ============================================================================
# Settings Commands
# ============================================================================


def _settings_dict(settings: TrendSettings) -> dict:
    return {
        "smoothing_factor": settings.smoothing_factor,
        "energy_per_kg": settings.energy_per_kg,
        "display_unit": settings.display_unit.value,
    }


def _print_settings(settings: TrendSettings) -> None:
    table = Table(title="Tracking Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("EWMA alpha", f"{settings.smoothing_factor}")
    table.add_row("Energy per kg", f"{settings.energy_per_kg:.0f} kcal")
    table.add_row("Display unit", settings.display_unit.value)
    console.print(table)


@settings_app.command("show")
def settings_show(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show tracking settings."""
    tracking = load_tracking_settings(open_db("settings show"))

    if json_output:
        output_json({"success": True, "command": "settings show", "data": _settings_dict(tracking)})
    else:
        _print_settings(tracking)


@settings_app.command("set")
def settings_set(
    alpha: Optional[float] = typer.Option(
        None, "--alpha", "-a", help="EWMA smoothing factor in (0, 1]"
    ),
    energy_per_kg: Optional[float] = typer.Option(
        None, "--energy-per-kg", "-e", help="kcal per kg of body mass change"
    ),
    unit: Optional[MassUnit] = typer.Option(None, "--unit", "-u", help="Display unit"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Change one or more tracking settings."""
    if alpha is None and energy_per_kg is None and unit is None:
        fail("settings set", "Nothing to change: pass --alpha, --energy-per-kg or --unit", json_output)

    db = open_db("settings set")
    try:
        with db.get_connection() as conn:
            updated = SettingsQueries.update_settings(
                conn, smoothing_factor=alpha, energy_per_kg=energy_per_kg, display_unit=unit
            )
    except BodyTrendError as e:
        fail("settings set", str(e), json_output)

    if json_output:
        output_json({"success": True, "command": "settings set", "data": _settings_dict(updated)})
    else:
        console.print("[green]Settings updated[/green]")
        _print_settings(updated)


@settings_app.command("toggle-unit")
def settings_toggle_unit(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Switch the display unit between kg and lb."""
    db = open_db("settings toggle-unit")
    with db.get_connection() as conn:
        current = SettingsQueries.get_settings(conn)
        updated = SettingsQueries.update_settings(conn, display_unit=current.display_unit.other)

    if json_output:
        output_json({
            "success": True,
            "command": "settings toggle-unit",
            "data": _settings_dict(updated),
        })
    else:
        console.print(f"Display unit is now [cyan]{updated.display_unit.value}[/cyan]")


if __name__ == "__main__":
    app()
