"""SQLite database schema definitions."""

SCHEMA_SQL = """
-- Weigh-ins, one per calendar day (weights stored in kg)
CREATE TABLE IF NOT EXISTS weigh_ins (
    measured_on DATE PRIMARY KEY,
    weight_kg REAL NOT NULL CHECK(weight_kg > 0),
    notes TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- Tracking settings document (single row)
CREATE TABLE IF NOT EXISTS settings (
    settings_id TEXT PRIMARY KEY CHECK(settings_id = 'settings'),
    smoothing_factor REAL NOT NULL CHECK(smoothing_factor > 0 AND smoothing_factor <= 1),
    energy_per_kg REAL NOT NULL CHECK(energy_per_kg > 0),
    display_unit TEXT NOT NULL CHECK(display_unit IN ('kg', 'lb')),
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


def get_schema_sql() -> str:
    """Return the complete schema SQL."""
    return SCHEMA_SQL
