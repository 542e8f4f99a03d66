"""
infrastructure/database 유닛 테스트

- KeyValueRepository: get/set/delete (SQLite 파일)
- TrackerStore: 로드 기본값, 깨진 데이터 복구, 이전 키 호환, 쓰기 실패 시 메모리 유지
"""

import json
import sqlite3

import pytest

from mhd_tracker.domain.models import AlertFlags, Item, Settings
from mhd_tracker.errors import PersistenceError
from mhd_tracker.infrastructure.database.repos import KeyValueRepository
from mhd_tracker.infrastructure.database.tracker_store import TrackerStore, dedupe_items
from mhd_tracker.settings.constants import (
    STORAGE_KEY_ITEMS,
    STORAGE_KEY_NOTIFIED,
    STORAGE_KEY_SETTINGS,
)
from tests.conftest import FailingRepository, MemoryRepository, make_item


@pytest.fixture
def kv_repo(test_db):
    return KeyValueRepository(db_path=test_db)


class TestKeyValueRepository:
    """SQLite key-value 저장소"""

    @pytest.mark.db
    def test_get_missing_returns_none(self, kv_repo):
        assert kv_repo.get("missing") is None

    @pytest.mark.db
    def test_set_then_get(self, kv_repo):
        kv_repo.set("k", "v1")
        kv_repo.set("k", "v2")
        assert kv_repo.get("k") == "v2"

    @pytest.mark.db
    def test_delete(self, kv_repo):
        kv_repo.set("k", "v")
        assert kv_repo.delete("k") is True
        assert kv_repo.delete("k") is False
        assert kv_repo.get("k") is None

    @pytest.mark.db
    def test_schema_created(self, kv_repo, test_db):
        conn = sqlite3.connect(str(test_db))
        try:
            tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
        finally:
            conn.close()
        assert {"kv_store", "schema_version"} <= tables


class TestTrackerStoreLoad:
    """로드 / 복구"""

    @pytest.mark.unit
    def test_empty_store_defaults(self):
        store = TrackerStore(MemoryRepository())
        store.load()
        assert store.items == []
        assert store.settings == Settings()
        assert store.notification_state == {}
        assert store.loaded is True

    @pytest.mark.unit
    def test_corrupt_json_falls_back_to_defaults(self):
        repo = MemoryRepository({
            STORAGE_KEY_ITEMS: "{not json",
            STORAGE_KEY_SETTINGS: "[]",
            STORAGE_KEY_NOTIFIED: "42",
        })
        store = TrackerStore(repo)
        store.load()
        assert store.items == []
        assert store.settings == Settings()
        assert store.notification_state == {}

    @pytest.mark.unit
    def test_items_without_id_or_name_skipped(self):
        repo = MemoryRepository({
            STORAGE_KEY_ITEMS: json.dumps([
                {"id": "A", "name": "우유", "expiryDate": "2026-10-25"},
                {"id": "", "name": "이름만"},
                {"id": "B", "name": "  "},
                "not-a-dict",
            ]),
        })
        store = TrackerStore(repo)
        store.load()
        assert [item.id for item in store.items] == ["A"]

    @pytest.mark.unit
    def test_legacy_keys_accepted(self):
        repo = MemoryRepository({
            STORAGE_KEY_ITEMS: json.dumps([
                {"id": "A", "name": "우유", "received": "2026-10-01", "mhd": "2026-10-25", "quantity": "0"},
            ]),
            STORAGE_KEY_SETTINGS: json.dumps({"soonDays": 0, "notifySoon": False}),
            STORAGE_KEY_NOTIFIED: json.dumps({"A": {"soon": True, "expired": False}}),
        })
        store = TrackerStore(repo)
        store.load()

        item = store.items[0]
        assert item.received_date == "2026-10-01"
        assert item.expiry_date == "2026-10-25"
        assert item.quantity == 1
        assert store.settings.soon_threshold_days == 1
        assert store.settings.notify_soon_enabled is False
        assert store.settings.notify_expired_enabled is True
        assert store.notification_state == {"A": AlertFlags(soon_alerted=True)}

    @pytest.mark.unit
    def test_infinite_numbers_fall_back_to_defaults(self):
        """1e999 (무한대)가 저장되어 있어도 로드는 실패하지 않는다"""
        repo = MemoryRepository({
            STORAGE_KEY_ITEMS: '[{"id": "A", "name": "milk", "quantity": 1e999}]',
            STORAGE_KEY_SETTINGS: '{"soonThresholdDays": 1e999}',
        })
        store = TrackerStore(repo)
        store.load()
        assert store.items[0].quantity == 1
        assert store.settings.soon_threshold_days == 1

    @pytest.mark.unit
    def test_string_flags_parsed(self):
        repo = MemoryRepository({
            STORAGE_KEY_NOTIFIED: json.dumps({"A": {"soonAlerted": "false", "expiredAlerted": "true"}}),
        })
        store = TrackerStore(repo)
        store.load()
        assert store.notification_state["A"] == AlertFlags(expired_alerted=True)

    @pytest.mark.unit
    def test_duplicate_ids_deduped(self):
        items = [make_item("A", "old", 1), make_item("B", "b", 2), make_item("A", "new", 3)]
        result = dedupe_items(items)
        assert [(item.id, item.name) for item in result] == [("A", "new"), ("B", "b")]


class TestTrackerStoreWrite:
    """저장 / 쓰기 실패"""

    @pytest.mark.db
    def test_roundtrip_through_sqlite(self, test_db):
        store = TrackerStore(KeyValueRepository(db_path=test_db))
        store.load()
        store.put(
            items=[make_item("A", "우유", 3, lot="L1")],
            settings=Settings(soon_threshold_days=3),
            state={"A": AlertFlags(expired_alerted=True)},
        )

        reloaded = TrackerStore(KeyValueRepository(db_path=test_db))
        reloaded.load()
        assert reloaded.items == store.items
        assert reloaded.settings.soon_threshold_days == 3
        assert reloaded.notification_state["A"].expired_alerted is True

    @pytest.mark.db
    def test_stored_keys_are_camel_case(self, test_db):
        repo = KeyValueRepository(db_path=test_db)
        store = TrackerStore(repo)
        store.put_items([Item(id="A", name="우유", received_date="2026-10-01", expiry_date="2026-10-25")])
        doc = json.loads(repo.get(STORAGE_KEY_ITEMS))
        assert doc[0]["receivedDate"] == "2026-10-01"
        assert doc[0]["expiryDate"] == "2026-10-25"

    @pytest.mark.unit
    def test_write_failure_keeps_memory_state(self):
        store = TrackerStore(FailingRepository())
        store.load()

        with pytest.raises(PersistenceError) as exc_info:
            store.put_items([make_item("A", "우유", 3)])

        assert exc_info.value.key == STORAGE_KEY_ITEMS
        assert [item.id for item in store.items] == ["A"]

    @pytest.mark.unit
    def test_put_applies_all_documents_before_raising(self):
        store = TrackerStore(FailingRepository())
        store.load()

        with pytest.raises(PersistenceError):
            store.put(
                items=[make_item("A", "우유", 3)],
                settings=Settings(soon_threshold_days=2),
                state={"A": AlertFlags()},
            )

        assert len(store.items) == 1
        assert store.settings.soon_threshold_days == 2
        assert "A" in store.notification_state

    @pytest.mark.unit
    def test_snapshot_is_a_copy(self):
        store = TrackerStore(MemoryRepository())
        store.put_items([make_item("A", "우유", 3)])
        items, _, state = store.snapshot()
        items.append(make_item("B", "빵", 1))
        state["X"] = AlertFlags()
        assert len(store.items) == 1
        assert store.notification_state == {}
