"""
Collection Trap Handlers - dict, set, WeakSet, WeakKeyDictionary
================================================================

Collections are mostly used through their methods (``d.get``, ``s.add``), and
a bound method of the raw collection would bypass interception entirely. The
collection handlers therefore hand out instrumented methods: readers report a
read and wrap composite results, mutators unwrap their arguments, write to
the raw collection and report what changed. Read-only collection handlers
refuse every mutator.

Item access, membership, iteration, length and the non-mutating operators
behave as in BaseHandlers. In-place operators (``|=``, ``&=``, ``-=``, ``^=``)
behave like the mutator methods they correspond to.
"""

import weakref
from typing import Any, Callable, Dict, Iterator

from .handlers import BaseHandlers
from .tracking import ITERATE_KEY, TrackOp, TriggerOp, track, trigger

_MISSING = object()


def _is_mapping(target: Any) -> bool:
    return isinstance(target, (dict, weakref.WeakKeyDictionary))


class CollectionHandlers(BaseHandlers):
    """Trap handler set for map-like and set-like collections."""

    def get_attribute(self, target: Any, name: str, receiver: Any) -> Any:
        readers, mutators = (
            (_MAPPING_READERS, _MAPPING_MUTATORS)
            if _is_mapping(target)
            else (_SET_READERS, _SET_MUTATORS)
        )
        if name in mutators and hasattr(target, name):
            if self.readonly:
                self._reject(target, f"call {name}()")
            return self._bind(mutators[name], target)
        if name in readers and hasattr(target, name):
            return self._bind(readers[name], target)
        return getattr(target, name)

    def _bind(self, impl: Callable, target: Any) -> Callable:
        def method(*args, **kwargs):
            return impl(self, target, *args, **kwargs)

        method.__name__ = impl.__name__.lstrip("_")
        return method

    def iterate(self, target: Any) -> Iterator[Any]:
        track(target, TrackOp.ITERATE, ITERATE_KEY)
        # Snapshot weak containers: entries may vanish during iteration.
        items = list(target) if not isinstance(target, (dict, set)) else target
        return (self._wrap(item) for item in items)

    def inplace(self, target: Any, name: str, other: Any, receiver: Any) -> Any:
        table = _MAPPING_INPLACE if _is_mapping(target) else _SET_INPLACE
        if name not in table or not hasattr(target, name):
            return NotImplemented
        if self.readonly:
            self._reject(target, f"apply {name}")
        table[name](self, target, self._raw(other))
        return receiver


# ----------------------------------------------------------------------
# Mapping instrumentations (dict, WeakKeyDictionary)
# ----------------------------------------------------------------------


def _get(handlers: CollectionHandlers, target: Any, key: Any, default: Any = None) -> Any:
    key = handlers._raw(key)
    track(target, TrackOp.GET, key)
    return handlers._wrap(target.get(key, default))


def _keys(handlers: CollectionHandlers, target: Any):
    track(target, TrackOp.ITERATE, ITERATE_KEY)
    return target.keys()


def _values(handlers: CollectionHandlers, target: Any) -> list:
    track(target, TrackOp.ITERATE, ITERATE_KEY)
    return [handlers._wrap(value) for value in list(target.values())]


def _items(handlers: CollectionHandlers, target: Any) -> list:
    track(target, TrackOp.ITERATE, ITERATE_KEY)
    return [
        (handlers._wrap(key), handlers._wrap(value))
        for key, value in list(target.items())
    ]


def _copy(handlers: CollectionHandlers, target: Any) -> Any:
    track(target, TrackOp.ITERATE, ITERATE_KEY)
    return target.copy()


def _update(handlers: CollectionHandlers, target: Any, *args, **kwargs) -> None:
    for key, value in dict(*args, **kwargs).items():
        handlers.set_item(target, key, value)


def _pop(handlers: CollectionHandlers, target: Any, key: Any, default: Any = _MISSING) -> Any:
    key = handlers._raw(key)
    had_key = key in target
    if default is _MISSING:
        value = target.pop(key)
    else:
        value = target.pop(key, default)
    if had_key:
        trigger(target, TriggerOp.DELETE, key)
    return handlers._wrap(value)


def _popitem(handlers: CollectionHandlers, target: Any) -> tuple:
    key, value = target.popitem()
    trigger(target, TriggerOp.DELETE, key)
    return handlers._wrap(key), handlers._wrap(value)


def _setdefault(handlers: CollectionHandlers, target: Any, key: Any, default: Any = None) -> Any:
    key = handlers._raw(key)
    if key not in target:
        handlers.set_item(target, key, default)
    track(target, TrackOp.GET, key)
    return handlers._wrap(target[key])


def _clear(handlers: CollectionHandlers, target: Any) -> None:
    had_items = len(target) > 0
    target.clear()
    if had_items:
        trigger(target, TriggerOp.CLEAR, ITERATE_KEY)


_MAPPING_READERS: Dict[str, Callable] = {
    "get": _get,
    "keys": _keys,
    "values": _values,
    "items": _items,
    "copy": _copy,
}

_MAPPING_MUTATORS: Dict[str, Callable] = {
    "update": _update,
    "pop": _pop,
    "popitem": _popitem,
    "setdefault": _setdefault,
    "clear": _clear,
}


# ----------------------------------------------------------------------
# Set instrumentations (set, WeakSet)
# ----------------------------------------------------------------------


def _reader(name: str) -> Callable:
    """Whole-set read such as union() or issubset(): returns a raw result."""

    def impl(handlers: CollectionHandlers, target: Any, *others):
        track(target, TrackOp.ITERATE, ITERATE_KEY)
        return getattr(target, name)(*(handlers._raw(other) for other in others))

    impl.__name__ = name
    return impl


def _add(handlers: CollectionHandlers, target: Any, item: Any) -> None:
    item = handlers._raw(item)
    if item not in target:
        target.add(item)
        trigger(target, TriggerOp.ADD, item)


def _discard(handlers: CollectionHandlers, target: Any, item: Any) -> None:
    item = handlers._raw(item)
    if item in target:
        target.discard(item)
        trigger(target, TriggerOp.DELETE, item)


def _remove(handlers: CollectionHandlers, target: Any, item: Any) -> None:
    item = handlers._raw(item)
    target.remove(item)
    trigger(target, TriggerOp.DELETE, item)


def _set_pop(handlers: CollectionHandlers, target: Any) -> Any:
    item = target.pop()
    trigger(target, TriggerOp.DELETE, item)
    return handlers._wrap(item)


def _set_update(handlers: CollectionHandlers, target: Any, *others) -> None:
    for other in others:
        for item in handlers._raw(other):
            _add(handlers, target, item)


def _bulk_mutator(name: str) -> Callable:
    """In-place set algebra: reported as one write to the whole set."""

    def impl(handlers: CollectionHandlers, target: Any, *others) -> None:
        before = set(target)
        getattr(target, name)(*(handlers._raw(other) for other in others))
        if set(target) != before:
            trigger(target, TriggerOp.SET, ITERATE_KEY)

    impl.__name__ = name
    return impl


_set_pop.__name__ = "pop"
_set_update.__name__ = "update"

_SET_READERS: Dict[str, Callable] = {
    name: _reader(name)
    for name in (
        "copy",
        "union",
        "intersection",
        "difference",
        "symmetric_difference",
        "issubset",
        "issuperset",
        "isdisjoint",
    )
}

_SET_MUTATORS: Dict[str, Callable] = {
    "add": _add,
    "discard": _discard,
    "remove": _remove,
    "pop": _set_pop,
    "update": _set_update,
    "clear": _clear,
    "difference_update": _bulk_mutator("difference_update"),
    "intersection_update": _bulk_mutator("intersection_update"),
    "symmetric_difference_update": _bulk_mutator("symmetric_difference_update"),
}

# In-place operators and the mutator each one behaves like
_MAPPING_INPLACE: Dict[str, Callable] = {"__ior__": _update}

_SET_INPLACE: Dict[str, Callable] = {
    "__ior__": _set_update,
    "__iand__": _SET_MUTATORS["intersection_update"],
    "__isub__": _SET_MUTATORS["difference_update"],
    "__ixor__": _SET_MUTATORS["symmetric_difference_update"],
}


def mutable_collection_handlers(factory) -> CollectionHandlers:
    return CollectionHandlers(factory, readonly=False)


def readonly_collection_handlers(factory) -> CollectionHandlers:
    return CollectionHandlers(factory, readonly=True)
