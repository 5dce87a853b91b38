"""
Base Trap Handlers - records and lists
======================================

Handler sets decide what a Proxy does on each intercepted access. The base
handlers serve plain records (attribute protocol) and lists (item protocol):

- Reads go to the raw object, are reported through ``track`` and return
  composite results lazily wrapped by the factory: mutable handlers hand out
  mutable wrappers, read-only handlers hand out read-only wrappers.
- Writes unwrap the incoming value, so raw objects never contain proxies,
  then report through ``trigger``. A SET is only reported when the stored
  object actually changed.
- List mutator methods (append, pop, sort, ...) and in-place operators
  (``+=``, ``*=``) are routed through the handler so they are reported like
  item writes. Other operators (``+``, ``<``, ...) read the whole object and
  return raw results.
- Read-only handlers refuse every write with ReadonlyMutationError.

Handlers call back into the factory only at access time, never while a proxy
is being constructed.
"""

import inspect
import types
from functools import wraps
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterator

from .tracking import ITERATE_KEY, TrackOp, TriggerOp, track, trigger
from .util.introspection import is_object

if TYPE_CHECKING:
    from .reactive import ReactiveObjectFactory


class ReadonlyMutationError(TypeError):
    """Raised when a write goes through a read-only wrapper."""

    pass


# List methods that change the list, and the write they report.
LIST_MUTATORS: Dict[str, TriggerOp] = {
    "append": TriggerOp.ADD,
    "extend": TriggerOp.ADD,
    "insert": TriggerOp.ADD,
    "pop": TriggerOp.DELETE,
    "remove": TriggerOp.DELETE,
    "clear": TriggerOp.CLEAR,
    "sort": TriggerOp.SET,
    "reverse": TriggerOp.SET,
}


class BaseHandlers:
    """
    Trap handler set for plain records and lists.

    Args:
        factory: The factory used to wrap nested values and unwrap incoming ones.
        readonly: Whether this set backs read-only wrappers.
    """

    __reactable_internal__ = True

    def __init__(self, factory: "ReactiveObjectFactory", readonly: bool = False):
        self._factory = factory
        self.readonly = readonly

    @property
    def label(self) -> str:
        return "readonly" if self.readonly else "reactive"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(readonly={self.readonly})"

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _wrap(self, value: Any) -> Any:
        """Wrap a composite read result in the matching wrapper kind."""
        if not is_object(value):
            return value
        if self.readonly:
            return self._factory.to_readonly(value)
        return self._factory.to_mutable(value)

    def _raw(self, value: Any) -> Any:
        return self._factory.unwrap(value)

    def _reject(self, target: Any, action: str) -> None:
        raise ReadonlyMutationError(
            f"cannot {action}: {type(target).__name__} is behind a readonly wrapper"
        )

    @staticmethod
    def _has_key(target: Any, key: Any) -> bool:
        if isinstance(target, list):
            return -len(target) <= key < len(target)
        return key in target

    # ------------------------------------------------------------------
    # Attribute protocol
    # ------------------------------------------------------------------

    def get_attribute(self, target: Any, name: str, receiver: Any) -> Any:
        if isinstance(target, list):
            return self._get_list_method(target, name)

        value = getattr(target, name)
        track(target, TrackOp.GET, name)
        # Methods of the record run against the wrapper so their own
        # reads and writes are intercepted too.
        if inspect.ismethod(value) and value.__self__ is target:
            return types.MethodType(value.__func__, receiver)
        return self._wrap(value)

    def set_attribute(self, target: Any, name: str, value: Any) -> None:
        if self.readonly:
            self._reject(target, f"set attribute {name!r}")
        value = self._raw(value)
        had_key = hasattr(target, name)
        old_value = getattr(target, name, None)
        setattr(target, name, value)
        if not had_key:
            trigger(target, TriggerOp.ADD, name)
        elif value is not old_value:
            trigger(target, TriggerOp.SET, name)

    def delete_attribute(self, target: Any, name: str) -> None:
        if self.readonly:
            self._reject(target, f"delete attribute {name!r}")
        delattr(target, name)
        trigger(target, TriggerOp.DELETE, name)

    def _get_list_method(self, target: list, name: str) -> Any:
        method = getattr(target, name)
        if name not in LIST_MUTATORS:
            # index(), count(), copy() ... all read the whole list
            track(target, TrackOp.ITERATE, ITERATE_KEY)
            return method
        if self.readonly:
            self._reject(target, f"call {name}()")

        op = LIST_MUTATORS[name]

        @wraps(method)
        def mutator(*args, **kwargs):
            if name == "extend":
                args = ([self._raw(item) for item in args[0]],)
            else:
                args = tuple(self._raw(arg) for arg in args)
            size = len(target)
            result = method(*args, **kwargs)
            # sort() and reverse() keep the size; everything else changes it
            if op is TriggerOp.SET or len(target) != size:
                trigger(target, op, ITERATE_KEY)
            return self._wrap(result)

        return mutator

    # ------------------------------------------------------------------
    # Item protocol
    # ------------------------------------------------------------------

    def get_item(self, target: Any, key: Any) -> Any:
        if isinstance(key, slice):
            # Slicing copies; the copy is a new raw list.
            track(target, TrackOp.ITERATE, ITERATE_KEY)
            return target[key]
        key = self._raw(key)
        value = target[key]
        track(target, TrackOp.GET, key)
        return self._wrap(value)

    def set_item(self, target: Any, key: Any, value: Any) -> None:
        if self.readonly:
            self._reject(target, f"set item {key!r}")
        value = self._raw(value)
        if isinstance(key, slice):
            target[key] = [self._raw(item) for item in value]
            trigger(target, TriggerOp.SET, ITERATE_KEY)
            return

        key = self._raw(key)
        had_key = self._has_key(target, key)
        old_value = target[key] if had_key else None
        target[key] = value
        if not had_key:
            trigger(target, TriggerOp.ADD, key)
        elif value is not old_value:
            trigger(target, TriggerOp.SET, key)

    def delete_item(self, target: Any, key: Any) -> None:
        if self.readonly:
            self._reject(target, f"delete item {key!r}")
        if isinstance(target, list):
            del target[key]
            trigger(target, TriggerOp.DELETE, ITERATE_KEY)
            return
        key = self._raw(key)
        del target[key]
        trigger(target, TriggerOp.DELETE, key)

    def contains(self, target: Any, item: Any) -> bool:
        item = self._raw(item)
        if isinstance(target, list):
            track(target, TrackOp.ITERATE, ITERATE_KEY)
        else:
            track(target, TrackOp.HAS, item)
        return item in target

    def iterate(self, target: Any) -> Iterator[Any]:
        track(target, TrackOp.ITERATE, ITERATE_KEY)
        return (self._wrap(item) for item in target)

    def length(self, target: Any) -> int:
        track(target, TrackOp.ITERATE, ITERATE_KEY)
        return len(target)

    def truth(self, target: Any) -> bool:
        if hasattr(type(target), "__len__"):
            track(target, TrackOp.ITERATE, ITERATE_KEY)
        return bool(target)

    # ------------------------------------------------------------------
    # Operators
    # ------------------------------------------------------------------

    def binary(self, target: Any, op: Callable, other: Any, reflected: bool = False) -> Any:
        """Apply a binary or comparison operator to the raw object; the result is raw."""
        track(target, TrackOp.ITERATE, ITERATE_KEY)
        other = self._raw(other)
        if reflected:
            return op(other, target)
        return op(target, other)

    def inplace(self, target: Any, name: str, other: Any, receiver: Any) -> Any:
        """
        Apply an in-place operator (``+=``, ``|=``, ...) to the raw object.

        Returns the receiver so that ``view += x`` keeps the name bound to
        the wrapper, or NotImplemented when the raw object has no in-place
        form of the operator.
        """
        method = getattr(target, name, None)
        if method is None:
            return NotImplemented
        if self.readonly:
            self._reject(target, f"apply {name}")
        other = self._raw(other)
        if isinstance(target, list):
            if name == "__iadd__":
                other = [self._raw(item) for item in other]
            size = len(target)
            method(other)
            if len(target) != size:
                op = TriggerOp.ADD if len(target) > size else TriggerOp.DELETE
                trigger(target, op, ITERATE_KEY)
            return receiver
        result = method(other)
        if result is NotImplemented:
            return result
        trigger(target, TriggerOp.SET, ITERATE_KEY)
        return receiver if result is target else self._wrap(result)


def mutable_handlers(factory: "ReactiveObjectFactory") -> BaseHandlers:
    return BaseHandlers(factory, readonly=False)


def readonly_handlers(factory: "ReactiveObjectFactory") -> BaseHandlers:
    return BaseHandlers(factory, readonly=True)


__all__ = [
    "BaseHandlers",
    "LIST_MUTATORS",
    "ReadonlyMutationError",
    "mutable_handlers",
    "readonly_handlers",
]
