"""Pytest fixtures for bodytrend tests."""

from __future__ import annotations

import tempfile
from datetime import date, timedelta
from pathlib import Path

import pytest

from bodytrend.db.connection import DatabaseConnection, set_db
from bodytrend.tracking.models import Observation


@pytest.fixture
def temp_db():
    """Create a temporary database with schema."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    db = DatabaseConnection(db_path)
    db.initialize_schema()

    yield db

    # Cleanup
    db_path.unlink(missing_ok=True)


@pytest.fixture
def cli_db(temp_db):
    """Point the CLI at the temporary database."""
    set_db(temp_db)
    yield temp_db
    set_db(None)


@pytest.fixture
def losing_week():
    """Eight consecutive days, dropping 0.1 kg/day from 80.0 kg."""
    start = date(2025, 3, 1)
    return [
        Observation(date=start + timedelta(days=i), weight_kg=80.0 - 0.1 * i)
        for i in range(8)
    ]


@pytest.fixture
def flat_three_days():
    """Three consecutive days at exactly 70.0 kg."""
    start = date(2025, 3, 1)
    return [Observation(date=start + timedelta(days=i), weight_kg=70.0) for i in range(3)]
