"""
Observability policy: which values may be wrapped at all.
"""

from typing import Any, FrozenSet

from .util.identity import WeakIdentitySet
from .util.introspection import is_object, to_type_string

# Runtime kinds that can be observed. Everything else passes through untouched.
OBSERVABLE_TYPES: FrozenSet[str] = frozenset(
    {"object", "list", "set", "WeakSet", "dict", "WeakKeyDictionary"}
)

# Runtime kinds served by the collection handlers instead of the base handlers.
COLLECTION_TYPES: FrozenSet[str] = frozenset(
    {"set", "WeakSet", "dict", "WeakKeyDictionary"}
)

INTERNAL_MARKER = "__reactable_internal__"


def is_internal(value: Any) -> bool:
    """True for the package's own infrastructure objects (proxies, registries, ...)."""
    return bool(getattr(type(value), INTERNAL_MARKER, False))


class ObservabilityPolicy:
    """
    Pure predicate deciding whether a value is eligible for wrapping.

    Rules, in order:
    1. atoms (None, numbers, strings, bytes) are never observable
    2. the package's own infrastructure objects are never observable
    3. the runtime kind must be in OBSERVABLE_TYPES
    4. values explicitly marked non-observable are never observable
    """

    __reactable_internal__ = True

    def __init__(self, non_observable: WeakIdentitySet):
        self._non_observable = non_observable

    def is_observable(self, value: Any) -> bool:
        return (
            is_object(value)
            and not is_internal(value)
            and to_type_string(value) in OBSERVABLE_TYPES
            and value not in self._non_observable
        )
