"""
Reactable - identity-preserving observation wrapping

Wraps plain Python objects (records, lists, dicts, sets and their weak
variants) in interception proxies so a surrounding system can observe
property reads and writes. Wrapping is idempotent, wrappers are never
double-wrapped, and the mutable and read-only wrappers of an object are
stable, distinct and convertible into each other.
"""

from .deps import Dep, DependencySlotTable, KeyToDepMap
from .handlers import ReadonlyMutationError
from .policy import ObservabilityPolicy
from .proxy import Proxy
from .reactive import (
    ReactiveObjectFactory,
    dependency_table,
    get_default_factory,
    is_observed,
    is_readonly_wrapper,
    mark_forced_readonly,
    mark_non_observable,
    to_mutable,
    to_readonly,
    unwrap,
)
from .registry import IdentityRegistry, RegistrationError, WrapperKind
from .tracking import ITERATE_KEY, TrackOp, TriggerOp, tracking_hooks

__all__ = [
    # Entry points
    "to_mutable",
    "to_readonly",
    "is_observed",
    "is_readonly_wrapper",
    "unwrap",
    "mark_forced_readonly",
    "mark_non_observable",
    "dependency_table",
    "get_default_factory",
    # Building blocks
    "ReactiveObjectFactory",
    "IdentityRegistry",
    "DependencySlotTable",
    "ObservabilityPolicy",
    "Proxy",
    "WrapperKind",
    # Tracking seam
    "tracking_hooks",
    "TrackOp",
    "TriggerOp",
    "ITERATE_KEY",
    # Types
    "Dep",
    "KeyToDepMap",
    # Exceptions
    "RegistrationError",
    "ReadonlyMutationError",
]
