"""Abstract settings store interface."""

from abc import ABC, abstractmethod
from typing import Any


class SettingsStore(ABC):
    """Abstract key/value settings store for contarec.

    Values are JSON-compatible: strings, numbers, booleans, None, lists and
    dicts of those.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the store."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the store."""
        pass

    @abstractmethod
    def load(self) -> dict[str, Any]:
        """Load every stored setting. Returns an empty dict if none are stored."""
        pass

    @abstractmethod
    def save(self, settings: dict[str, Any]) -> bool:
        """Store settings, replacing the stored value of each given key.

        Returns False if the settings could not be written.
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Delete every stored setting."""
        pass
