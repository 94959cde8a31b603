"""Database queries for weigh-ins and the tracking settings document."""

from __future__ import annotations

import logging
import sqlite3
from datetime import date
from typing import Optional

from bodytrend.db.connection import DatabaseConnection
from bodytrend.tracking.models import MassUnit, Observation, TrendSettings

logger = logging.getLogger(__name__)

SETTINGS_ID = "settings"


def _row_to_observation(row: sqlite3.Row) -> Observation:
    return Observation(
        date=date.fromisoformat(row[0]),
        weight_kg=row[1],
        notes=row[2],
    )


class WeightQueries:
    """Database queries for weigh-ins."""

    @staticmethod
    def upsert_weight(conn: sqlite3.Connection, observation: Observation) -> None:
        """Store a weigh-in. An existing entry for the same date is replaced."""
        conn.execute(
            """
            INSERT OR REPLACE INTO weigh_ins (measured_on, weight_kg, notes)
            VALUES (?, ?, ?)
            """,
            (observation.date.isoformat(), observation.weight_kg, observation.notes),
        )
        logger.debug("Stored %.2f kg for %s", observation.weight_kg, observation.date)

    @staticmethod
    def delete_weight(conn: sqlite3.Connection, on_date: date) -> bool:
        """Delete the weigh-in for a date. Returns True if a row was removed."""
        cursor = conn.execute(
            "DELETE FROM weigh_ins WHERE measured_on = ?",
            (on_date.isoformat(),),
        )
        return cursor.rowcount > 0

    @staticmethod
    def get_weight(conn: sqlite3.Connection, on_date: date) -> Optional[Observation]:
        """Get the weigh-in for a date, if any."""
        row = conn.execute(
            "SELECT measured_on, weight_kg, notes FROM weigh_ins WHERE measured_on = ?",
            (on_date.isoformat(),),
        ).fetchone()

        return _row_to_observation(row) if row else None

    @staticmethod
    def get_weight_history(
        conn: sqlite3.Connection,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Observation]:
        """
        Get weigh-ins in chronological order.

        Args:
            start_date: If set, return entries on or after this date
            end_date: If set, return entries on or before this date
        """
        query = "SELECT measured_on, weight_kg, notes FROM weigh_ins WHERE 1 = 1"
        params: list = []

        if start_date:
            query += " AND measured_on >= ?"
            params.append(start_date.isoformat())
        if end_date:
            query += " AND measured_on <= ?"
            params.append(end_date.isoformat())

        query += " ORDER BY measured_on"

        rows = conn.execute(query, params).fetchall()
        return [_row_to_observation(row) for row in rows]


class SettingsQueries:
    """Database queries for the tracking settings document."""

    @staticmethod
    def get_settings(conn: sqlite3.Connection) -> TrendSettings:
        """Get tracking settings, storing the defaults on first read."""
        row = conn.execute(
            """
            SELECT smoothing_factor, energy_per_kg, display_unit
            FROM settings WHERE settings_id = ?
            """,
            (SETTINGS_ID,),
        ).fetchone()

        if row is None:
            settings = TrendSettings()
            SettingsQueries.save_settings(conn, settings)
            logger.info("Created default tracking settings")
            return settings

        return TrendSettings(
            smoothing_factor=row[0],
            energy_per_kg=row[1],
            display_unit=MassUnit(row[2]),
        )

    @staticmethod
    def save_settings(conn: sqlite3.Connection, settings: TrendSettings) -> None:
        """Write the settings document (insert or replace)."""
        conn.execute(
            """
            INSERT OR REPLACE INTO settings
            (settings_id, smoothing_factor, energy_per_kg, display_unit, updated_at)
            VALUES (?, ?, ?, ?, CURRENT_TIMESTAMP)
            """,
            (
                SETTINGS_ID,
                settings.smoothing_factor,
                settings.energy_per_kg,
                settings.display_unit.value,
            ),
        )

    @staticmethod
    def update_settings(
        conn: sqlite3.Connection,
        smoothing_factor: Optional[float] = None,
        energy_per_kg: Optional[float] = None,
        display_unit: Optional[MassUnit | str] = None,
    ) -> TrendSettings:
        """
        Merge partial changes into the stored settings and save them.

        Raises:
            InvalidSettingsError: If the merged settings are out of range
        """
        current = SettingsQueries.get_settings(conn)
        updated = TrendSettings(
            smoothing_factor=(
                current.smoothing_factor if smoothing_factor is None else smoothing_factor
            ),
            energy_per_kg=current.energy_per_kg if energy_per_kg is None else energy_per_kg,
            display_unit=current.display_unit if display_unit is None else display_unit,
        )
        SettingsQueries.save_settings(conn, updated)
        return updated


class SQLiteObservationStore:
    """ObservationStore backed by the weigh_ins table."""

    def __init__(self, db: DatabaseConnection):
        self.db = db

    def list_ordered(self) -> list[Observation]:
        with self.db.get_connection() as conn:
            return WeightQueries.get_weight_history(conn)

    def upsert(self, observation: Observation) -> None:
        with self.db.get_connection() as conn:
            WeightQueries.upsert_weight(conn, observation)

    def delete(self, on_date: date) -> bool:
        with self.db.get_connection() as conn:
            return WeightQueries.delete_weight(conn, on_date)
