"""
Dependency slot table: {raw object -> {property key -> subscriber set}}.

Conceptually each (object, key) pair owns a "dep" that keeps its subscribers,
but the subscriber sets are stored as plain sets to keep them light. The
subscribers themselves are opaque; the tracking collaborator adds, removes
and iterates them. This module only guarantees a table exists.
"""

from typing import Any, Dict, Optional, Set

from .util.identity import WeakIdentityDict

Dep = Set[Any]
KeyToDepMap = Dict[Any, Dep]


def has_subscribers(table: KeyToDepMap) -> bool:
    return any(table.values())


class DependencySlotTable:
    """Lazily created per-object subscriber tables, keyed by object identity."""

    __reactable_internal__ = True

    def __init__(self):
        self._tables: WeakIdentityDict[KeyToDepMap] = WeakIdentityDict(
            retain=has_subscribers
        )

    def ensure_table(self, raw: Any, keeper: Any = None) -> KeyToDepMap:
        """
        Return the table for raw, creating an empty one on first call.

        Args:
            raw: The raw object.
            keeper: A wrapper of raw. For raw objects that cannot be weakly
                referenced (``dict``, ``list``, ``SimpleNamespace``) an empty
                table is dropped once no keeper is alive; a table holding
                subscribers is kept with its raw object. Without a keeper the
                table is pinned.
        """
        return self._tables.setdefault(raw, {}, keeper=keeper)

    def get(self, raw: Any) -> Optional[KeyToDepMap]:
        return self._tables.get(raw)

    def __contains__(self, raw: Any) -> bool:
        return raw in self._tables

    def __len__(self) -> int:
        return len(self._tables)
