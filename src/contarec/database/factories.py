"""Settings store factory functions."""

import os
from pathlib import Path
from typing import Optional

from contarec.database.sqlalchemy_store import SQLAlchemySettingsStore

DB_PATH_ENV = "CONTAREC_DB_PATH"
DEFAULT_DB_DIR = ".contarec"
DEFAULT_DB_NAME = "contarec.db"


def default_database_path() -> Path:
    """Settings file in the user's home directory; the directory is created."""
    db_dir = Path.home() / DEFAULT_DB_DIR
    db_dir.mkdir(exist_ok=True)
    return db_dir / DEFAULT_DB_NAME


def create_sqlite_store(database_path: Optional[str] = None) -> SQLAlchemySettingsStore:
    """Create the SQLite settings store.

    The path comes from the argument, then CONTAREC_DB_PATH, then
    ~/.contarec/contarec.db.
    """
    path = database_path or os.environ.get(DB_PATH_ENV) or default_database_path()
    return SQLAlchemySettingsStore(f"sqlite:///{path}")
