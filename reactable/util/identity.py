"""
Weak Identity Containers
========================

Identity-keyed containers that never extend the lifetime of their keys.

The standard ``weakref.WeakKeyDictionary`` compares keys by equality and
refuses keys that cannot be weakly referenced, such as the builtin ``dict``
and ``list`` or ``types.SimpleNamespace``. The containers here key entries by
``id()`` instead and anchor each entry in one of three ways:

- Weak: the key supports weak references; a weakref callback removes the
  entry when the key is collected.
- Kept: the key cannot be weakly referenced, but one or more "keeper" objects
  are known to hold it. The entry holds the key and is removed when the last
  keeper is collected, unless the container's ``retain`` predicate says the
  value is still worth keeping.
- Pinned: the key cannot be weakly referenced and was inserted without a
  keeper. The entry holds the key for as long as the container lives, and
  keepers added later never release it.

An entry always holds something that keeps ``id(key)`` valid (the key itself
or a live weakref to it), so an ``id()`` match that resolves back to the same
object is an identity match.
"""

import logging
import weakref
from typing import Any, Callable, Dict, Generic, Iterator, Optional, TypeVar

V = TypeVar("V")


class _Pinned:
    """Strong stand-in for a weakref, used for keys that cannot be weakly held."""

    __slots__ = ("_obj",)

    def __init__(self, obj: Any):
        self._obj = obj

    def __call__(self) -> Any:
        return self._obj


class _Entry(Generic[V]):
    __slots__ = ("ref", "value", "keepers", "pinned")

    def __init__(self, ref: Callable[[], Any], value: V):
        self.ref = ref
        self.value = value
        # None for weak entries; id(keeper weakref) -> keeper weakref otherwise.
        # Keyed by id because a weakref hashes like its referent, and keepers
        # (proxies of dicts and lists) are unhashable.
        self.keepers: Optional[Dict[int, weakref.ref]] = None
        self.pinned = False


class WeakIdentityDict(Generic[V]):
    """
    Mapping from object identity to a value, holding keys weakly when possible.

    Args:
        retain: Optional predicate on a value. A kept entry whose value
            satisfies it survives the collection of its last keeper.

    Example:
        table = WeakIdentityDict()
        record = Record()
        table.setdefault(record, {})      # held weakly, reclaimed with record

        data = {"a": 1}
        table.setdefault(data, {}, keeper=proxy)  # reclaimed with proxy
    """

    __reactable_internal__ = True

    def __init__(self, retain: Optional[Callable[[V], bool]] = None):
        self._entries: Dict[int, _Entry[V]] = {}
        self._retain = retain

    def _lookup(self, key: Any) -> Optional[_Entry[V]]:
        entry = self._entries.get(id(key))
        if entry is not None and entry.ref() is key:
            return entry
        return None

    def __contains__(self, key: Any) -> bool:
        return self._lookup(key) is not None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Any]:
        for entry in list(self._entries.values()):
            key = entry.ref()
            if key is not None:
                yield key

    def get(self, key: Any, default: Optional[V] = None) -> Optional[V]:
        entry = self._lookup(key)
        return entry.value if entry is not None else default

    def setdefault(self, key: Any, default: V, keeper: Any = None) -> V:
        """
        Return the value stored for key, inserting default if there is none.

        Args:
            key: The object whose identity keys the entry.
            default: Value stored when the key has no entry yet.
            keeper: Optional object whose lifetime bounds the entry when key
                cannot be weakly referenced. Without one, such an entry is
                pinned. Ignored for weak entries.

        Returns:
            The stored value (existing or newly inserted).
        """
        entry = self._lookup(key)
        if entry is None:
            entry = self._insert(key, default)
        if entry.keepers is not None:
            if keeper is None:
                entry.pinned = True
            else:
                self._add_keeper(entry, keeper)
        return entry.value

    def _insert(self, key: Any, value: V) -> _Entry[V]:
        key_id = id(key)
        try:
            ref = weakref.ref(key, self._reaper(key_id))
        except TypeError:
            entry = _Entry(_Pinned(key), value)
            entry.keepers = {}
        else:
            entry = _Entry(ref, value)
        self._entries[key_id] = entry
        return entry

    def _add_keeper(self, entry: _Entry[V], keeper: Any) -> None:
        owner = weakref.ref(self)
        key_id = id(entry.ref())

        def release(keeper_ref: weakref.ref) -> None:
            entry.keepers.pop(id(keeper_ref), None)
            table = owner()
            if table is None or entry.keepers or entry.pinned:
                return
            if table._retain is not None and table._retain(entry.value):
                return
            if table._entries.get(key_id) is entry:
                del table._entries[key_id]
                logging.debug(f"Released identity entry {key_id:#x}: last keeper collected")

        keeper_ref = weakref.ref(keeper, release)
        entry.keepers[id(keeper_ref)] = keeper_ref

    def _reaper(self, key_id: int) -> Callable[[weakref.ref], None]:
        owner = weakref.ref(self)

        def reap(ref: weakref.ref) -> None:
            table = owner()
            if table is not None and table._entries.get(key_id) is not None:
                if table._entries[key_id].ref is ref:
                    del table._entries[key_id]

        return reap


class WeakIdentitySet:
    """Identity-keyed set built on WeakIdentityDict. Members are never removed."""

    __reactable_internal__ = True

    def __init__(self):
        self._members: WeakIdentityDict[bool] = WeakIdentityDict()

    def add(self, value: Any) -> None:
        self._members.setdefault(value, True)

    def __contains__(self, value: Any) -> bool:
        return value in self._members

    def __len__(self) -> int:
        return len(self._members)
