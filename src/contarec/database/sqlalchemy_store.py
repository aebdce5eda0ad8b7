"""SQLAlchemy settings store implementation."""

import json
import logging
from typing import Any, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from contarec.database.base import SettingsStore
from contarec.database.models import Setting, create_session_factory

logger = logging.getLogger(__name__)


class SQLAlchemySettingsStore(SettingsStore):
    """SQLAlchemy-based implementation of SettingsStore interface."""

    def __init__(self, database_url: str):
        """Initialize SQLAlchemy settings store.

        Args:
            database_url: SQLAlchemy database URL (e.g., 'sqlite:///path/to.db')
        """
        self.database_url = database_url
        self.session_factory = create_session_factory(database_url)
        self._session: Optional[Session] = None

    def _get_session(self) -> Session:
        """Get current session, creating one if needed."""
        if self._session is None:
            self._session = self.session_factory()
        return self._session

    def connect(self) -> None:
        """Connect to the store."""
        # Connection is lazy, so this is a no-op
        pass

    def disconnect(self) -> None:
        """Disconnect from the store."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def load(self) -> dict[str, Any]:
        """Load every stored setting.

        Values that are not valid JSON are skipped with a warning.
        """
        session = self._get_session()
        settings: dict[str, Any] = {}
        for row in session.query(Setting).order_by(Setting.key).all():
            try:
                settings[row.key] = json.loads(row.value)
            except json.JSONDecodeError as e:
                logger.warning("Ignoring unreadable setting %s: %s", row.key, e)
        return settings

    def save(self, settings: dict[str, Any]) -> bool:
        """Store settings, one row per key."""
        session = self._get_session()
        try:
            existing = {row.key: row for row in session.query(Setting).all()}
            for key, value in settings.items():
                encoded = json.dumps(value)
                row = existing.get(key)
                if row is None:
                    session.add(Setting(key=key, value=encoded))
                elif row.value != encoded:
                    row.value = encoded
            session.commit()
        except (SQLAlchemyError, TypeError, ValueError) as e:
            session.rollback()
            logger.error("Could not save settings to %s: %s", self.database_url, e)
            return False
        logger.debug("Saved %d setting(s)", len(settings))
        return True

    def clear(self) -> None:
        """Delete every stored setting."""
        session = self._get_session()
        session.query(Setting).delete()
        session.commit()
