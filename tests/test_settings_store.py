"""Tests for the settings store."""

from contarec.database.factories import create_sqlite_store
from contarec.database.models import Setting
from contarec.domain.state import ReconciliationState


def test_empty_store(temp_store):
    """A new store has no settings."""
    assert temp_store.load() == {}


def test_save_and_load(temp_store):
    """Saved values come back as they were."""
    settings = {"ledger_accounts": ["4423", "436"], "start_date": None, "balance_tolerance": 1.5}
    assert temp_store.save(settings) is True
    assert temp_store.load() == settings


def test_save_updates_existing_keys(temp_store):
    """Saving a key again replaces its value and leaves other keys alone."""
    temp_store.save({"start_date": "01/01/2024", "end_date": "31/12/2024"})
    temp_store.save({"start_date": "01/06/2024"})
    assert temp_store.load() == {"start_date": "01/06/2024", "end_date": "31/12/2024"}


def test_settings_survive_reconnect(temp_store):
    """A new store on the same file reads what the first one wrote."""
    state = ReconciliationState()
    state.selected_external_accounts = ["2"]
    temp_store.save(state.to_settings())
    temp_store.disconnect()

    other = create_sqlite_store(database_path=temp_store.database_path)
    try:
        restored = ReconciliationState.from_settings(other.load())
    finally:
        other.disconnect()
    assert restored.selected_external_accounts == ["2"]
    assert restored.account_mappings == state.account_mappings


def test_unserializable_value(temp_store):
    """Values that cannot be stored make save return False."""
    assert temp_store.save({"bad": object()}) is False
    assert temp_store.load() == {}


def test_unreadable_value_is_skipped(temp_store):
    """Broken stored values are ignored on load."""
    session = temp_store.session_factory()
    session.add(Setting(key="broken", value="{not json"))
    session.add(Setting(key="start_date", value='"01/01/2024"'))
    session.commit()
    session.close()

    assert temp_store.load() == {"start_date": "01/01/2024"}


def test_clear(temp_store):
    temp_store.save({"start_date": "01/01/2024"})
    temp_store.clear()
    assert temp_store.load() == {}
