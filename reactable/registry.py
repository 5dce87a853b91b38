"""
Identity Registry - raw <-> wrapper correspondence
==================================================

Four identity-keyed tables, two per wrapper kind:

    raw -> mutable wrapper      mutable wrapper -> raw
    raw -> readonly wrapper     readonly wrapper -> raw

Wrappers are held through weak references, so the registry never keeps a
wrapper alive. A wrapper holds its raw object, which means a raw object's id
cannot be reused while its registry entries exist; both directions are
removed together by the wrapper's weakref callback.
"""

import logging
import weakref
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class RegistrationError(RuntimeError):
    """Raised when a (raw, kind) pair or a wrapper is registered twice."""

    pass


class WrapperKind(Enum):
    """The two disjoint wrapper kinds."""

    MUTABLE = "mutable"
    READONLY = "readonly"


class IdentityRegistry:
    """
    Bidirectional, weak-referencing raw <-> wrapper tables.

    Registration is write-once per (raw, kind): there is no overwrite and no
    merge. A second registration means the factory's fast-path checks are
    broken, so it fails fast with RegistrationError.

    Example:
        registry = IdentityRegistry()
        registry.register(raw, proxy, WrapperKind.MUTABLE)

        registry.lookup_wrapper(raw, WrapperKind.MUTABLE)   # proxy
        registry.lookup_raw(proxy, WrapperKind.MUTABLE)     # raw
        registry.lookup_raw(proxy, WrapperKind.READONLY)    # None
    """

    __reactable_internal__ = True

    def __init__(self):
        # id(raw) -> weakref(wrapper)
        self._raw_to_wrapper: Dict[WrapperKind, Dict[int, weakref.ref]] = {
            kind: {} for kind in WrapperKind
        }
        # id(wrapper) -> (weakref(wrapper), raw)
        self._wrapper_to_raw: Dict[WrapperKind, Dict[int, Tuple[weakref.ref, Any]]] = {
            kind: {} for kind in WrapperKind
        }

    def lookup_wrapper(self, raw: Any, kind: WrapperKind) -> Optional[Any]:
        """Return the wrapper of the given kind for raw, or None."""
        ref = self._raw_to_wrapper[kind].get(id(raw))
        if ref is None:
            return None
        wrapper = ref()
        if wrapper is None:
            return None
        entry = self._wrapper_to_raw[kind].get(id(wrapper))
        if entry is None or entry[1] is not raw:
            return None
        return wrapper

    def lookup_raw(self, value: Any, kind: WrapperKind) -> Optional[Any]:
        """
        Return the raw object behind value if value is a wrapper of this kind.

        Also serves as the "is this already a wrapper of this kind" test:
        anything that is not a registered wrapper yields None.
        """
        entry = self._wrapper_to_raw[kind].get(id(value))
        if entry is None or entry[0]() is not value:
            return None
        return entry[1]

    def register(self, raw: Any, wrapper: Any, kind: WrapperKind) -> None:
        """
        Record raw <-> wrapper for kind in both directions.

        Raises:
            RegistrationError: If raw already has a wrapper of this kind, or
                wrapper is already registered for this kind.
        """
        if self.lookup_wrapper(raw, kind) is not None:
            raise RegistrationError(
                f"{type(raw).__name__} object at {id(raw):#x} already has a "
                f"{kind.value} wrapper"
            )
        if self.lookup_raw(wrapper, kind) is not None:
            raise RegistrationError(
                f"wrapper at {id(wrapper):#x} is already registered as {kind.value}"
            )

        raw_id = id(raw)
        wrapper_id = id(wrapper)
        ref = weakref.ref(wrapper, self._reaper(kind, raw_id, wrapper_id))
        self._raw_to_wrapper[kind][raw_id] = ref
        self._wrapper_to_raw[kind][wrapper_id] = (ref, raw)

    def count(self, kind: WrapperKind) -> int:
        """Number of live wrappers of the given kind."""
        return len(self._wrapper_to_raw[kind])

    def _reaper(self, kind: WrapperKind, raw_id: int, wrapper_id: int):
        owner = weakref.ref(self)

        def reap(ref: weakref.ref) -> None:
            registry = owner()
            if registry is None:
                return
            if registry._raw_to_wrapper[kind].get(raw_id) is ref:
                del registry._raw_to_wrapper[kind][raw_id]
            entry = registry._wrapper_to_raw[kind].get(wrapper_id)
            if entry is not None and entry[0] is ref:
                del registry._wrapper_to_raw[kind][wrapper_id]
            logging.debug(f"Reclaimed {kind.value} wrapper entry for raw {raw_id:#x}")

        return reap
