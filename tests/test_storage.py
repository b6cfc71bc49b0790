"""
Tests for the storage backends, audit trail and record repository.

Google Sheets is exercised against an in-process fake worksheet.
"""

import json
from decimal import Decimal

import pytest
from tenacity import wait_none

from networth.config import StorageSettings
from networth.models.audit import AuditEvent, AuditEventBuilder, AuditEventType
from networth.services.storage import (
    GoogleSheetsKeyValueStore,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueAuditStorage,
    KeyValueStore,
    PersistenceError,
)
from networth.services.storage.google_sheets import CELL_CHAR_LIMIT, STORE_COLUMNS
from networth.snapshots import take_snapshot
from networth.store import RecordRepository, RecordStore


# =============================================================================
# FAKES
# =============================================================================

class FakeWorksheet:
    """Just enough of gspread.Worksheet for the key/value store."""

    def __init__(self):
        self.rows = [list(STORE_COLUMNS)]
        self.calls = 0
        self.input_options = []

    def get_all_values(self):
        self.calls += 1
        return [list(r) for r in self.rows]

    def append_row(self, values, value_input_option=None):
        self.input_options.append(value_input_option)
        self.rows.append(list(values))

    def update(self, range_name=None, values=None, value_input_option=None):
        self.input_options.append(value_input_option)
        # Only single cells in column B are written
        row = int(range_name[1:])
        self.rows[row - 1][1] = values[0][0]

    def delete_rows(self, index):
        del self.rows[index - 1]


class FakeSheetsClient:

    def __init__(self, sheet=None, error=None):
        self.sheet = sheet or FakeWorksheet()
        self.error = error
        self.calls = 0

    def get_store_sheet(self):
        self.calls += 1
        if self.error:
            raise self.error
        return self.sheet


class BrokenKeyValueStore(KeyValueStore):
    """Backend that fails on every call."""

    def __init__(self, error=None):
        self.error = error or RuntimeError("backend down")

    def load(self, key):
        raise self.error

    def save(self, key, value):
        raise self.error

    def delete(self, key):
        raise self.error


@pytest.fixture
def no_retry_wait(monkeypatch):
    monkeypatch.setattr(GoogleSheetsKeyValueStore._fetch.retry, "wait", wait_none())
    monkeypatch.setattr(GoogleSheetsKeyValueStore._write.retry, "wait", wait_none())


# =============================================================================
# KEY-VALUE BACKENDS
# =============================================================================

class TestInMemoryStore:

    def test_load_save_delete(self):
        kv = InMemoryKeyValueStore()
        assert kv.load("k") is None

        kv.save("k", "v")
        assert kv.load("k") == "v"
        assert kv.keys() == ["k"]

        kv.delete("k")
        kv.delete("k")
        assert kv.load("k") is None

    def test_initial_values(self):
        kv = InMemoryKeyValueStore({"a": "1"})
        assert kv.load("a") == "1"


class TestJsonFileStore:

    def test_missing_file_is_empty(self, tmp_path):
        kv = JsonFileKeyValueStore(tmp_path / "data.json")
        assert kv.load("anything") is None

    def test_values_survive_reopen(self, tmp_path):
        path = tmp_path / "nested" / "data.json"
        JsonFileKeyValueStore(path).save("k", '[{"a": 1}]')

        assert JsonFileKeyValueStore(path).load("k") == '[{"a": 1}]'
        assert json.loads(path.read_text(encoding="utf-8")) == {"k": '[{"a": 1}]'}

    def test_no_temp_files_left_behind(self, tmp_path):
        kv = JsonFileKeyValueStore(tmp_path / "data.json")
        kv.save("a", "1")
        kv.save("b", "2")
        assert [p.name for p in tmp_path.iterdir()] == ["data.json"]

    def test_delete(self, tmp_path):
        kv = JsonFileKeyValueStore(tmp_path / "data.json")
        kv.save("a", "1")
        kv.save("b", "2")
        kv.delete("a")
        kv.delete("missing")
        assert kv.load("a") is None
        assert kv.load("b") == "2"

    def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(PersistenceError, match="Corrupt"):
            JsonFileKeyValueStore(path).load("k")

    def test_non_object_document_raises(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(PersistenceError):
            JsonFileKeyValueStore(path).load("k")

    def test_unwritable_location_raises(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")
        kv = JsonFileKeyValueStore(blocker / "data.json")
        with pytest.raises(PersistenceError):
            kv.save("k", "v")


class TestGoogleSheetsStore:

    def test_save_appends_then_updates(self):
        client = FakeSheetsClient()
        kv = GoogleSheetsKeyValueStore(client)

        kv.save("networth_assets", "[]")
        kv.save("networth_assets", '["x"]')

        assert client.sheet.rows == [["key", "value"], ["networth_assets", '["x"]']]
        assert kv.load("networth_assets") == '["x"]'

    def test_values_are_written_raw(self):
        """Stored JSON must never be interpreted as a formula or number."""
        client = FakeSheetsClient()
        kv = GoogleSheetsKeyValueStore(client)

        kv.save("k", "=1+1")
        kv.save("k", "00123")

        assert client.sheet.input_options == ["RAW", "RAW"]
        assert kv.load("k") == "00123"

    def test_load_missing_key(self):
        kv = GoogleSheetsKeyValueStore(FakeSheetsClient())
        assert kv.load("nothing") is None

    def test_header_row_is_not_a_key(self):
        kv = GoogleSheetsKeyValueStore(FakeSheetsClient())
        assert kv.load("key") is None

    def test_delete(self):
        client = FakeSheetsClient()
        kv = GoogleSheetsKeyValueStore(client)
        kv.save("a", "1")
        kv.save("b", "2")

        kv.delete("a")
        kv.delete("a")

        assert client.sheet.rows == [["key", "value"], ["b", "2"]]

    def test_oversized_value_fails_without_api_calls(self):
        client = FakeSheetsClient()
        kv = GoogleSheetsKeyValueStore(client)

        with pytest.raises(PersistenceError, match="at most"):
            kv.save("big", "x" * (CELL_CHAR_LIMIT + 1))
        assert client.calls == 0

    def test_api_errors_are_retried_then_wrapped(self, no_retry_wait):
        client = FakeSheetsClient(error=RuntimeError("quota exceeded"))
        kv = GoogleSheetsKeyValueStore(client)

        with pytest.raises(PersistenceError, match="quota exceeded"):
            kv.load("a")
        assert client.calls == 3


# =============================================================================
# AUDIT TRAIL
# =============================================================================

class TestKeyValueAuditStorage:

    def test_append_and_read_back(self):
        storage = KeyValueAuditStorage(InMemoryKeyValueStore())
        storage.append_event(AuditEventBuilder.record_saved("asset", "a1", "Home", True))
        storage.append_event(AuditEventBuilder.record_deleted("asset", "a1", "Home"))
        storage.append_event(AuditEventBuilder.snapshot_taken("s1", "100"))

        recent = storage.get_recent_events(limit=2)
        assert [e.event_type for e in recent] == [
            AuditEventType.SNAPSHOT_TAKEN,
            AuditEventType.ASSET_DELETED,
        ]

        history = storage.get_events_by_entity("asset", "a1")
        assert [e.event_type for e in history] == [
            AuditEventType.ASSET_CREATED,
            AuditEventType.ASSET_DELETED,
        ]

    def test_trimmed_to_max_events(self):
        storage = KeyValueAuditStorage(InMemoryKeyValueStore(), max_events=3)
        for i in range(5):
            storage.append_event(AuditEventBuilder.snapshot_taken(f"s{i}", "0"))

        ids = [e.entity_id for e in storage.get_recent_events()]
        assert ids == ["s4", "s3", "s2"]

    def test_trail_fits_in_a_sheets_cell(self):
        """The trail is trimmed so the Sheets backend keeps accepting it."""
        client = FakeSheetsClient()
        storage = KeyValueAuditStorage(GoogleSheetsKeyValueStore(client))
        for i in range(200):
            assert storage.append_event(
                AuditEventBuilder.record_saved("asset", f"a{i}", "Home", created=True)
            )

        stored = client.sheet.rows[1][1]
        assert len(stored) <= CELL_CHAR_LIMIT
        events = storage.get_recent_events(limit=500)
        assert 0 < len(events) < 200
        assert events[0].entity_id == "a199"

    def test_max_chars_drops_oldest(self):
        kv = InMemoryKeyValueStore()
        one_event = len(AuditEventBuilder.snapshot_taken("s0", "0").model_dump_json())
        storage = KeyValueAuditStorage(kv, key="audit", max_chars=one_event * 2 + 30)
        for i in range(5):
            storage.append_event(AuditEventBuilder.snapshot_taken(f"s{i}", "0"))

        assert len(kv.load("audit")) <= one_event * 2 + 30
        assert [e.entity_id for e in storage.get_recent_events()] == ["s4", "s3"]

    def test_zero_max_events_disables_trail(self):
        kv = InMemoryKeyValueStore()
        storage = KeyValueAuditStorage(kv, key="audit", max_events=0)
        assert storage.append_event(AuditEventBuilder.user_declined("delete asset"))
        assert kv.load("audit") is None

    def test_corrupt_trail_starts_fresh(self):
        kv = InMemoryKeyValueStore({"networth_audit": "not json"})
        storage = KeyValueAuditStorage(kv)

        storage.append_event(AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            description="boom",
        ))
        assert len(storage.get_recent_events()) == 1


# =============================================================================
# REPOSITORY
# =============================================================================

class TestRecordRepository:

    def test_absent_keys_load_empty(self, repository):
        store = repository.load()
        assert store.is_empty

    def test_round_trip(self, kv_store, repository, make_asset, make_liability):
        mortgage = make_liability()
        home = make_asset(associated_debt_id=mortgage.id, notes="Has, commas")
        store = RecordStore(assets=[home], liabilities=[mortgage])
        take_snapshot(store, "first")

        repository.save(store)
        restored = repository.load()

        assert restored.assets == [home]
        assert restored.liabilities == [mortgage]
        assert restored.snapshots[0].net_worth == Decimal("110000")
        assert restored.snapshots[0].notes == "first"

    def test_collections_live_under_separate_keys(self, kv_store, repository, make_asset):
        repository.save(RecordStore(assets=[make_asset()]))

        assert set(kv_store.keys()) == {
            "networth_assets",
            "networth_liabilities",
            "networth_snapshots",
        }
        assert json.loads(kv_store.load("networth_liabilities")) == []

    def test_configurable_keys(self, kv_store, make_asset):
        settings = StorageSettings(assets_key="custom_assets")
        repository = RecordRepository(kv_store, settings)
        repository.save(RecordStore(assets=[make_asset()]))

        assert kv_store.load("custom_assets") is not None
        assert kv_store.load("networth_assets") is None

    def test_corrupt_collection_raises(self, kv_store, repository):
        kv_store.save("networth_assets", '[{"name": "no id or category"}]')
        with pytest.raises(PersistenceError, match="networth_assets"):
            repository.load()

    def test_backend_errors_are_wrapped(self, storage_settings):
        repository = RecordRepository(BrokenKeyValueStore(), storage_settings)
        with pytest.raises(PersistenceError, match="backend down"):
            repository.load()
        with pytest.raises(PersistenceError):
            repository.save(RecordStore())
