"""
Tracking hooks - the seam between trap handlers and dependency tracking
=======================================================================

Trap handlers report every intercepted read through ``track`` and every
intercepted write through ``trigger``. What happens next (collecting
subscribers into the dependency slot table, scheduling them) belongs to the
dependency-tracking collaborator, which installs its callables here.

Both hooks are no-ops until something is installed.

Example:
    reads = []
    with tracking_hooks(track=lambda target, op, key: reads.append(key)):
        proxy["a"]
    assert reads == ["a"]
"""

from contextlib import contextmanager
from enum import Enum
from typing import Any, Callable, Iterator, Optional


class TrackOp(Enum):
    """Kinds of intercepted reads."""

    GET = "get"
    HAS = "has"
    ITERATE = "iterate"


class TriggerOp(Enum):
    """Kinds of intercepted writes."""

    SET = "set"
    ADD = "add"
    DELETE = "delete"
    CLEAR = "clear"


class _IterateKey:
    """Sentinel key for reads and writes that concern the whole collection."""

    def __repr__(self):
        return "ITERATE_KEY"


ITERATE_KEY = _IterateKey()

TrackHook = Callable[[Any, TrackOp, Any], None]
TriggerHook = Callable[[Any, TriggerOp, Any], None]

_track_hook: Optional[TrackHook] = None
_trigger_hook: Optional[TriggerHook] = None


def track(target: Any, op: TrackOp, key: Any) -> None:
    """Report a read of target[key]. Target is always the raw object."""
    if _track_hook is not None:
        _track_hook(target, op, key)


def trigger(target: Any, op: TriggerOp, key: Any) -> None:
    """Report a write of target[key]. Target is always the raw object."""
    if _trigger_hook is not None:
        _trigger_hook(target, op, key)


@contextmanager
def tracking_hooks(
    track: Optional[TrackHook] = None, trigger: Optional[TriggerHook] = None
) -> Iterator[None]:
    """Install track/trigger callables for the duration of a block."""
    global _track_hook, _trigger_hook
    previous = (_track_hook, _trigger_hook)
    _track_hook, _trigger_hook = track, trigger
    try:
        yield
    finally:
        _track_hook, _trigger_hook = previous
