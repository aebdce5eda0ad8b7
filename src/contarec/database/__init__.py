"""Settings persistence layer for contarec application."""

from contarec.database.base import SettingsStore
from contarec.database.factories import create_sqlite_store

__all__ = ["SettingsStore", "create_sqlite_store"]
