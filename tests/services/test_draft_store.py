# -*- coding: utf-8 -*-
"""
Tests for the Draft Store.

Tests cover:
- Debounced, coalesced writes
- Interaction and suppression gating
- Clear cancelling pending writes
- Round trip through the drafts table
- Corrupted drafts
"""

import pytest
from PyQt5.QtCore import QTimer

from repositories.draft_repository import DraftRepository
from services.translation_manager import tr
from services.wizard.draft_store import DraftStore, clean_for_storage, has_meaningful_data

DEBOUNCE_MS = 50


class InMemoryDraftRepository:
    """Draft backend that records every write."""

    def __init__(self):
        self.payloads = {}
        self.writes = []

    def get(self, storage_key):
        return self.payloads.get(storage_key)

    def set(self, storage_key, payload):
        self.writes.append(payload)
        self.payloads[storage_key] = payload

    def delete(self, storage_key):
        self.payloads.pop(storage_key, None)


class FailingDraftRepository(InMemoryDraftRepository):
    """Draft backend whose writes fail."""

    def set(self, storage_key, payload):
        raise OSError("disk full")


@pytest.fixture
def repository():
    return InMemoryDraftRepository()


@pytest.fixture
def store(qtbot, repository):
    """Create draft store with a short debounce."""
    return DraftStore(repository, storage_key="testDraft", debounce_ms=DEBOUNCE_MS)


class TestDebouncedWrites:
    """Test write coalescing."""

    def test_rapid_writes_coalesce(self, qtbot, store, repository):
        """Test several writes inside the window produce one stored draft."""
        with qtbot.waitSignal(store.draft_saved, timeout=2000):
            assert store.write({"name": "A"})
            assert store.write({"name": "Ac"})
            assert store.write({"name": "Acme"})

        assert len(repository.writes) == 1
        assert store.read() == {"name": "Acme"}

    def test_timer_reused_across_writes(self, qtbot, store, repository):
        """Test many writes share one debounce timer."""
        for i in range(200):
            store.write({"name": f"Acme {i}"})

        assert len(store.findChildren(QTimer)) == 1

        with qtbot.waitSignal(store.draft_saved, timeout=2000):
            pass
        assert repository.writes == [store._serialize({"name": "Acme 199"})]

    def test_write_is_deferred(self, store, repository):
        """Test nothing is stored before the debounce window elapses."""
        store.write({"name": "Acme"})
        assert store.has_pending_write
        assert repository.writes == []

    def test_unchanged_record_skipped(self, qtbot, store, repository):
        """Test an identical record is not written twice."""
        with qtbot.waitSignal(store.draft_saved, timeout=2000):
            store.write({"name": "Acme"})

        assert store.write({"name": "Acme"}) is False
        assert len(repository.writes) == 1

    def test_flush_writes_immediately(self, store, repository):
        """Test flush stores the pending payload without waiting."""
        store.write({"name": "Acme"})
        assert store.flush() is True
        assert not store.has_pending_write
        assert len(repository.writes) == 1


class TestGating:
    """Test interaction and suppression gating."""

    def test_no_write_before_interaction(self, qtbot, store, repository):
        """Test untouched defaults are never persisted."""
        assert store.write({"fund": "fund_i"}, has_interacted=False) is False
        qtbot.wait(DEBOUNCE_MS * 3)
        assert repository.writes == []

    def test_no_write_while_suppressed(self, qtbot, store, repository):
        """Test writes are skipped while auto-save is suppressed."""
        assert store.write({"name": "Acme"}, suppress=True) is False
        qtbot.wait(DEBOUNCE_MS * 3)
        assert repository.writes == []

    def test_meaningful_data(self):
        """Test system defaults do not count as user data."""
        assert not has_meaningful_data(None)
        assert not has_meaningful_data({"fund": "fund_i", "instrument": "safe_post",
                                        "has_pro_rata_rights": False, "status": "active"})
        assert not has_meaningful_data({"name": "  ", "founders": [{}], "investment_amount": 0})
        assert has_meaningful_data({"fund": "fund_i", "name": "Acme"})
        assert has_meaningful_data({"founders": [{"first_name": "Ada"}]})

    def test_clean_for_storage(self):
        """Test None and NaN values are not stored."""
        assert clean_for_storage({"a": None, "b": float("nan"), "c": 0}) == {"c": 0}


class TestClear:
    """Test draft deletion."""

    def test_clear_cancels_pending_write(self, qtbot, store, repository):
        """Test a debounced write never lands after clear."""
        store.write({"name": "Acme"})
        with qtbot.assertNotEmitted(store.draft_saved, wait=DEBOUNCE_MS * 3):
            store.clear()

        assert repository.writes == []
        assert store.read() is None

    def test_clear_is_idempotent(self, store):
        """Test clearing twice equals clearing once."""
        store.write({"name": "Acme"})
        store.flush()

        store.clear()
        store.clear()

        assert store.read() is None
        assert not store.has_pending_write

    def test_write_after_clear(self, qtbot, store):
        """Test the same record can be stored again after a clear."""
        store.write({"name": "Acme"})
        store.flush()
        store.clear()

        assert store.write({"name": "Acme"}) is True


class TestReadAndFailures:
    """Test reads from the drafts table and backend failures."""

    def test_round_trip(self, qtbot, test_db, valid_record):
        """Test a written record reads back unchanged."""
        store = DraftStore(DraftRepository(test_db), debounce_ms=DEBOUNCE_MS)

        with qtbot.waitSignal(store.draft_saved, timeout=2000):
            store.write(valid_record)

        reloaded = DraftStore(DraftRepository(test_db))
        assert reloaded.read() == valid_record
        assert DraftRepository(test_db).get_updated_at(store.storage_key)

    def test_corrupted_draft_is_discarded(self, test_db):
        """Test malformed JSON is deleted and reported as absent."""
        repository = DraftRepository(test_db)
        store = DraftStore(repository, storage_key="brokenDraft")
        repository.set("brokenDraft", "{not json")

        assert store.read() is None
        assert repository.get("brokenDraft") is None

    def test_non_object_draft_is_discarded(self, repository):
        """Test a JSON value that is not an object is discarded."""
        store = DraftStore(repository, storage_key="listDraft")
        repository.set("listDraft", "[1, 2]")

        assert store.read() is None
        assert repository.get("listDraft") is None

    def test_backend_failure_reported(self, qtbot):
        """Test a failing backend emits save_failed instead of raising."""
        store = DraftStore(FailingDraftRepository(), debounce_ms=DEBOUNCE_MS)

        with qtbot.waitSignal(store.save_failed, timeout=2000) as blocker:
            store.write({"name": "Acme"})

        assert blocker.args == [tr("error.draft.storage")]
        assert not store.has_pending_write
