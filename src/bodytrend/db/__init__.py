"""SQLite persistence for weigh-ins and tracking settings."""

from bodytrend.db.connection import DatabaseConnection, get_db, set_db

__all__ = ["DatabaseConnection", "get_db", "set_db"]
