"""
Type Introspection Helpers
==========================

Small predicates used to decide what kind of value the factory is looking at.

- is_object(): is the value composite (anything but an immutable atom)?
- to_type_string(): a stable runtime-kind discriminator string
- is_weakrefable(): can the value be held through a weak reference?
"""

import weakref
from typing import Any

# Immutable atoms. Everything else counts as a composite value.
ATOMIC_TYPES = (
    type(None),
    bool,
    int,
    float,
    complex,
    str,
    bytes,
    type(Ellipsis),
    type(NotImplemented),
)


def is_object(value: Any) -> bool:
    """Return True when value is a composite (non-atomic) value."""
    return not isinstance(value, ATOMIC_TYPES)


def _is_plain_record(value: Any) -> bool:
    cls = type(value)
    return (
        hasattr(value, "__dict__")
        and not callable(value)
        and cls.__module__ != "builtins"
    )


def to_type_string(value: Any) -> str:
    """
    Return the runtime kind of a value.

    The weak containers are checked first because they are not subclasses of
    the builtin containers. Instances of plain Python classes (anything with an
    instance ``__dict__`` that is not callable and not a builtin) report
    ``"object"``; everything else reports its type name.

    Examples:
        to_type_string({})                          # "dict"
        to_type_string([1, 2])                      # "list"
        to_type_string(weakref.WeakSet())           # "WeakSet"
        to_type_string(types.SimpleNamespace(a=1))  # "object"
        to_type_string(len)                         # "builtin_function_or_method"
    """
    if isinstance(value, weakref.WeakKeyDictionary):
        return "WeakKeyDictionary"
    if isinstance(value, weakref.WeakSet):
        return "WeakSet"
    if isinstance(value, dict):
        return "dict"
    if isinstance(value, list):
        return "list"
    if isinstance(value, set):
        return "set"
    if _is_plain_record(value):
        return "object"
    return type(value).__name__


def is_weakrefable(value: Any) -> bool:
    """Return True when value supports weak references."""
    try:
        weakref.ref(value)
    except TypeError:
        return False
    return True
