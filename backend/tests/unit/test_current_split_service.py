"""
Unit tests for the live-split slot.

What this file proves:
  - save → load returns an equal SplitData; an empty slot loads as None.
  - The slot is independent of the history log.
  - reactivate copies an entry's data into the slot and leaves the entry as
    it was.
  - Stored splits without paymentInfo load with method None.
  - Storage failures surface as LoadError / PersistenceError.
"""

from __future__ import annotations

import json
from decimal import Decimal

import pytest

from backend.app.errors import LoadError, PersistenceError
from backend.app.models.split_data import PaymentInfo, PaymentMethod, SplitMode, TipType
from backend.app.services import current_split_service as live
from backend.app.services.history_service import HistoryStore
from backend.app.services.storage import MemoryKeyValueStore, StorageError

from .conftest import item, make_split, person


KEY = "splitright_current_split"


class _RejectingStore(MemoryKeyValueStore):

    def write(self, key: str, value: bytes) -> bool:
        return False

    def remove(self, key: str) -> None:
        raise StorageError("read-only")


def _split():
    return make_split(
        people=[person("a", "Alice"), person("b", "Bob")],
        items=[
            item("burger", "12.50", ["a"]),
            item("fries", "4", ["a", "b"], quantity=2),
        ],
        tax="2.10",
        tip_type=TipType.PERCENT,
        tip_value="18",
        mode=SplitMode.PROPORTIONAL,
        store_name="Diner",
        payment_info=PaymentInfo(method=PaymentMethod.PAYPAL, paypal_info="alice@example.com"),
    )


def test_empty_slot_loads_none():
    assert live.load_current_split(MemoryKeyValueStore()) is None


def test_save_then_load_is_equal():
    kv = MemoryKeyValueStore()
    data = _split()

    live.save_current_split(kv, data)

    loaded = live.load_current_split(kv)
    assert loaded == data
    assert loaded.items[1].price == Decimal("4")
    assert loaded.tip_type is TipType.PERCENT


def test_save_does_not_touch_history():
    kv = MemoryKeyValueStore()

    live.save_current_split(kv, _split())

    assert KEY in kv
    assert HistoryStore(kv).list_entries() == []


def test_clear_empties_slot():
    kv = MemoryKeyValueStore()
    live.save_current_split(kv, _split())

    live.clear_current_split(kv)

    assert live.load_current_split(kv) is None


def test_namespace_sets_key():
    kv = MemoryKeyValueStore()

    live.save_current_split(kv, _split(), namespace="other")

    assert "other_current_split" in kv
    assert live.load_current_split(kv) is None


def test_missing_payment_info_loads_as_no_method():
    record = {
        "currency": "EUR",
        "people": [{"id": "a", "name": "Alice"}],
        "items": [],
    }
    raw = json.dumps(record).encode()
    kv = MemoryKeyValueStore({KEY: raw})

    loaded = live.load_current_split(kv)

    assert loaded.payment_info.method is None
    assert kv.read(KEY) == raw


@pytest.mark.parametrize("raw", [b"{", b"[]", b'{"people": []}'])
def test_malformed_slot_raises_load_error(raw):
    with pytest.raises(LoadError):
        live.load_current_split(MemoryKeyValueStore({KEY: raw}))


def test_rejected_save_raises_persistence_error():
    with pytest.raises(PersistenceError):
        live.save_current_split(_RejectingStore(), _split())


def test_rejected_clear_raises_persistence_error():
    with pytest.raises(PersistenceError):
        live.clear_current_split(_RejectingStore())


class TestReactivate:

    def test_copies_entry_data_into_slot(self):
        kv = MemoryKeyValueStore()
        entry = HistoryStore(kv).commit_split(_split())

        result = live.reactivate(entry, kv)

        assert result == entry.data
        assert live.load_current_split(kv) == entry.data

    def test_editing_reactivated_split_leaves_entry_alone(self):
        kv = MemoryKeyValueStore()
        history = HistoryStore(kv)
        entry = history.commit_split(_split())

        result = live.reactivate(entry, kv)
        result.items[0].assigned_to.append("b")
        result.store_name = "Changed"

        assert entry.data.items[0].assigned_to == ["a"]
        stored = history.get_entry(entry.id)
        assert stored.data.store_name == "Diner"
        assert stored.data.items[0].assigned_to == ["a"]

    def test_replaces_previous_live_split(self):
        kv = MemoryKeyValueStore()
        live.save_current_split(kv, make_split(people=[person("z")]))
        entry = HistoryStore(kv).commit_split(_split())

        live.reactivate(entry, kv)

        assert [p.id for p in live.load_current_split(kv).people] == ["a", "b"]
