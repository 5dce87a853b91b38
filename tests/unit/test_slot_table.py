"""Unit tests for DependencySlotTable."""

import gc
import weakref

import pytest

from reactable import DependencySlotTable
from tests.utils.memory_utils import assert_collected


class Record:
    pass


class Keeper:
    pass


class UnhashableKeeper:
    __hash__ = None


@pytest.fixture
def slots():
    return DependencySlotTable()


@pytest.mark.unit
class TestEnsureTable:
    """ensure_table creates a per-object table once and returns it afterwards."""

    def test_first_call_creates_empty_table(self, slots):
        """A new table is empty"""
        raw = Record()
        table = slots.ensure_table(raw)

        assert table == {}
        assert raw in slots
        assert slots.get(raw) is table

    def test_ensure_table_is_idempotent(self, slots):
        """Later calls return the very same table"""
        raw = Record()
        table = slots.ensure_table(raw)
        table["x"] = {"subscriber"}

        assert slots.ensure_table(raw) is table
        assert slots.get(raw) == {"x": {"subscriber"}}

    def test_tables_are_per_identity(self, slots):
        """Equal objects get distinct tables"""
        keeper = Keeper()
        first = slots.ensure_table({"a": 1}, keeper=keeper)
        second = slots.ensure_table({"a": 1}, keeper=keeper)

        assert first is not second

    def test_get_returns_none_before_first_wrap(self, slots):
        """No table exists until ensure_table is called"""
        assert slots.get(Record()) is None
        assert len(slots) == 0


@pytest.mark.unit
@pytest.mark.memory
class TestTableLifetime:
    """Tables live exactly as long as they are reachable through their object."""

    def test_table_is_reclaimed_with_weak_referenceable_raw(self, slots):
        """A record's table disappears with the record"""
        raw = Record()
        slots.ensure_table(raw)
        ref = weakref.ref(raw)

        del raw
        assert_collected(ref)
        assert len(slots) == 0

    def test_dict_table_survives_while_a_keeper_lives(self, slots):
        """A dict's table is retrievable while one of its wrappers lives"""
        raw = {"a": 1}
        mutable, readonly = Keeper(), Keeper()
        table = slots.ensure_table(raw, keeper=mutable)
        assert slots.ensure_table(raw, keeper=readonly) is table

        del mutable
        gc.collect()
        assert slots.get(raw) is table

        del readonly
        gc.collect()
        assert slots.get(raw) is None

    def test_dict_table_with_subscribers_outlives_its_keepers(self, slots):
        """Subscribers placed in a dict's table are never lost while the dict lives"""
        raw = {"a": 1}
        keeper = Keeper()
        table = slots.ensure_table(raw, keeper=keeper)
        table["a"] = {"effect"}

        del keeper
        gc.collect()
        assert slots.get(raw) is table
        assert slots.ensure_table(raw, keeper=Keeper()) == {"a": {"effect"}}

    def test_table_ensured_without_keeper_stays_pinned(self, slots):
        """A keeper added later does not release a pinned table"""
        raw = [1]
        table = slots.ensure_table(raw)
        keeper = Keeper()
        slots.ensure_table(raw, keeper=keeper)

        del keeper
        gc.collect()
        assert slots.get(raw) is table

    def test_unhashable_keeper_is_accepted(self, slots):
        """Keepers are wrappers of unhashable objects"""
        keeper = UnhashableKeeper()
        raw = {"a": 1}

        assert slots.ensure_table(raw, keeper=keeper) == {}
        assert raw in slots
