"""
Reactive Object Factory - identity-preserving wrapping
======================================================

Turns raw objects into interception wrappers while keeping identities stable:

- wrapping the same object twice returns the same wrapper
- wrapping a wrapper is a no-op
- the mutable and the read-only wrapper of one object are distinct, stable
  and convertible into each other
- every wrapped object gets an (initially empty) dependency slot table

Example:
    data = {"a": 1}
    m = to_mutable(data)
    r = to_readonly(data)

    assert m is to_mutable(data)
    assert m is not r
    assert unwrap(m) is data and unwrap(r) is data
    assert to_mutable(r) is r          # read-only is sticky
    assert to_readonly(m) is r

The module-level functions operate on a lazily created default factory.
Isolated factories can be built with their own registry, slot table and
policy.
"""

import logging
import threading
from typing import Any, Optional, TypeVar

from .collection_handlers import (
    mutable_collection_handlers,
    readonly_collection_handlers,
)
from .deps import DependencySlotTable, KeyToDepMap
from .handlers import mutable_handlers, readonly_handlers
from .policy import COLLECTION_TYPES, ObservabilityPolicy
from .proxy import Proxy
from .registry import IdentityRegistry, WrapperKind
from .util.identity import WeakIdentitySet
from .util.introspection import is_object, to_type_string

T = TypeVar("T")


class ReactiveObjectFactory:
    """
    Creates and tracks mutable and read-only wrappers.

    Args:
        registry: raw <-> wrapper tables (a fresh one by default)
        slots: dependency slot table (a fresh one by default)
        policy: observability policy; by default one that honours this
            factory's non-observable marks
    """

    __reactable_internal__ = True

    def __init__(
        self,
        registry: Optional[IdentityRegistry] = None,
        slots: Optional[DependencySlotTable] = None,
        policy: Optional[ObservabilityPolicy] = None,
    ):
        self.registry = registry if registry is not None else IdentityRegistry()
        self.slots = slots if slots is not None else DependencySlotTable()
        # Out-of-band marks placed before wrapping; never cleared
        self.forced_readonly = WeakIdentitySet()
        self.non_observable = WeakIdentitySet()
        self.policy = (
            policy if policy is not None else ObservabilityPolicy(self.non_observable)
        )
        self._handlers = {
            WrapperKind.MUTABLE: (
                mutable_handlers(self),
                mutable_collection_handlers(self),
            ),
            WrapperKind.READONLY: (
                readonly_handlers(self),
                readonly_collection_handlers(self),
            ),
        }

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def to_mutable(self, value: T) -> T:
        """Return the mutable wrapper for value (see module docstring for the rules)."""
        # A read-only wrapper is never downgraded through this entry point.
        if self.registry.lookup_raw(value, WrapperKind.READONLY) is not None:
            return value
        if value in self.forced_readonly:
            return self.to_readonly(value)
        return self._create_wrapper(value, WrapperKind.MUTABLE)

    def to_readonly(self, value: T) -> T:
        """Return the read-only wrapper for value, unwrapping a mutable wrapper first."""
        if self.registry.lookup_raw(value, WrapperKind.READONLY) is not None:
            return value
        raw = self.registry.lookup_raw(value, WrapperKind.MUTABLE)
        if raw is not None:
            value = raw
        return self._create_wrapper(value, WrapperKind.READONLY)

    def _create_wrapper(self, raw: Any, kind: WrapperKind) -> Any:
        if not is_object(raw):
            if __debug__:
                logging.warning(f"value cannot be made reactive: {raw!r}")
            return raw

        existing = self.registry.lookup_wrapper(raw, kind)
        if existing is not None:
            return existing

        # raw is itself a wrapper already
        if self.registry.lookup_raw(raw, kind) is not None:
            return raw

        if not self.policy.is_observable(raw):
            return raw

        base, collection = self._handlers[kind]
        handlers = collection if to_type_string(raw) in COLLECTION_TYPES else base

        proxy = Proxy(raw, handlers)
        self.registry.register(raw, proxy, kind)
        self.slots.ensure_table(raw, keeper=proxy)

        logging.debug(
            f"Created {kind.value} wrapper for {type(raw).__name__} at {id(raw):#x}"
        )
        return proxy

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_observed(self, value: Any) -> bool:
        return self.is_mutable_wrapper(value) or self.is_readonly_wrapper(value)

    def is_mutable_wrapper(self, value: Any) -> bool:
        return self.registry.lookup_raw(value, WrapperKind.MUTABLE) is not None

    def is_readonly_wrapper(self, value: Any) -> bool:
        return self.registry.lookup_raw(value, WrapperKind.READONLY) is not None

    def unwrap(self, value: T) -> T:
        for kind in WrapperKind:
            raw = self.registry.lookup_raw(value, kind)
            if raw is not None:
                return raw
        return value

    def dependency_table(self, value: Any) -> Optional[KeyToDepMap]:
        """Per-property subscriber sets of the object behind value, if it was ever wrapped."""
        return self.slots.get(self.unwrap(value))

    # ------------------------------------------------------------------
    # Marks
    # ------------------------------------------------------------------

    def mark_forced_readonly(self, value: T) -> T:
        """Make every future wrap request for value produce the read-only wrapper."""
        self.forced_readonly.add(value)
        return value

    def mark_non_observable(self, value: T) -> T:
        """Exclude value from ever being wrapped."""
        self.non_observable.add(value)
        return value


# ============================================================================
# DEFAULT FACTORY
# ============================================================================

_default_factory: Optional[ReactiveObjectFactory] = None
_default_factory_lock = threading.Lock()


def get_default_factory() -> ReactiveObjectFactory:
    """Get or create the default factory singleton."""
    global _default_factory
    if _default_factory is None:
        with _default_factory_lock:
            if _default_factory is None:
                _default_factory = ReactiveObjectFactory()
    return _default_factory


def _reset_default_factory() -> None:
    """Drop the default factory (for testing)."""
    global _default_factory
    _default_factory = None


def to_mutable(value: T) -> T:
    """Return the mutable wrapper for value."""
    return get_default_factory().to_mutable(value)


def to_readonly(value: T) -> T:
    """Return the read-only wrapper for value."""
    return get_default_factory().to_readonly(value)


def is_observed(value: Any) -> bool:
    """True if value is a wrapper of either kind."""
    return get_default_factory().is_observed(value)


def is_readonly_wrapper(value: Any) -> bool:
    """True if value is a read-only wrapper."""
    return get_default_factory().is_readonly_wrapper(value)


def unwrap(value: T) -> T:
    """Return the raw object behind a wrapper; anything else comes back unchanged."""
    return get_default_factory().unwrap(value)


def mark_forced_readonly(value: T) -> T:
    return get_default_factory().mark_forced_readonly(value)


def mark_non_observable(value: T) -> T:
    return get_default_factory().mark_non_observable(value)


def dependency_table(value: Any) -> Optional[KeyToDepMap]:
    return get_default_factory().dependency_table(value)


__all__ = [
    "ReactiveObjectFactory",
    "get_default_factory",
    "to_mutable",
    "to_readonly",
    "is_observed",
    "is_readonly_wrapper",
    "unwrap",
    "mark_forced_readonly",
    "mark_non_observable",
    "dependency_table",
]
