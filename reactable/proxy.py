"""
Proxy - the interception wrapper
================================

A Proxy binds a raw object to a handler set. Every attribute and container
access on the proxy is forwarded to the handler, which decides what happens
on read and on write. The proxy itself carries no state beyond the binding,
so a mutable and a read-only view of the same object are simply two proxies
with different handlers.

Proxies are identity-distinct from their raw objects but behave like them:

    data = {"a": 1}
    view = Proxy(data, handlers)
    view["a"]          # 1, reported to the handler as a read
    view == data       # True
    view is data       # False
    view | {"b": 2}    # {"a": 1, "b": 2}, a plain dict
"""

import operator
from typing import Any, Iterator


class Proxy:
    """Interception wrapper forwarding attribute and container protocols to handlers."""

    __slots__ = ("_reactable_target", "_reactable_handlers", "__weakref__")

    __reactable_internal__ = True

    def __init__(self, target: Any, handlers: Any):
        object.__setattr__(self, "_reactable_target", target)
        object.__setattr__(self, "_reactable_handlers", handlers)

    # ------------------------------------------------------------------
    # Attribute protocol
    # ------------------------------------------------------------------

    def __getattr__(self, name: str) -> Any:
        return self._reactable_handlers.get_attribute(
            self._reactable_target, name, self
        )

    def __setattr__(self, name: str, value: Any) -> None:
        self._reactable_handlers.set_attribute(self._reactable_target, name, value)

    def __delattr__(self, name: str) -> None:
        self._reactable_handlers.delete_attribute(self._reactable_target, name)

    def __dir__(self):
        return dir(self._reactable_target)

    # ------------------------------------------------------------------
    # Container protocol
    # ------------------------------------------------------------------

    def __getitem__(self, key: Any) -> Any:
        return self._reactable_handlers.get_item(self._reactable_target, key)

    def __setitem__(self, key: Any, value: Any) -> None:
        self._reactable_handlers.set_item(self._reactable_target, key, value)

    def __delitem__(self, key: Any) -> None:
        self._reactable_handlers.delete_item(self._reactable_target, key)

    def __contains__(self, item: Any) -> bool:
        return self._reactable_handlers.contains(self._reactable_target, item)

    def __iter__(self) -> Iterator[Any]:
        return self._reactable_handlers.iterate(self._reactable_target)

    def __len__(self) -> int:
        return self._reactable_handlers.length(self._reactable_target)

    def __bool__(self) -> bool:
        return self._reactable_handlers.truth(self._reactable_target)

    # ------------------------------------------------------------------
    # Transparent behaviour
    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Proxy):
            other = other._reactable_target
        return self._reactable_target == other

    def __hash__(self) -> int:
        return hash(self._reactable_target)

    def __str__(self) -> str:
        return str(self._reactable_target)

    def __repr__(self) -> str:
        return f"{self._reactable_handlers.label}({self._reactable_target!r})"

    # ------------------------------------------------------------------
    # Operators
    # ------------------------------------------------------------------

    def __lt__(self, other: Any) -> Any:
        return self._reactable_handlers.binary(self._reactable_target, operator.lt, other)

    def __le__(self, other: Any) -> Any:
        return self._reactable_handlers.binary(self._reactable_target, operator.le, other)

    def __gt__(self, other: Any) -> Any:
        return self._reactable_handlers.binary(self._reactable_target, operator.gt, other)

    def __ge__(self, other: Any) -> Any:
        return self._reactable_handlers.binary(self._reactable_target, operator.ge, other)

    def __add__(self, other: Any) -> Any:
        return self._reactable_handlers.binary(self._reactable_target, operator.add, other)

    def __radd__(self, other: Any) -> Any:
        return self._reactable_handlers.binary(
            self._reactable_target, operator.add, other, reflected=True
        )

    def __sub__(self, other: Any) -> Any:
        return self._reactable_handlers.binary(self._reactable_target, operator.sub, other)

    def __rsub__(self, other: Any) -> Any:
        return self._reactable_handlers.binary(
            self._reactable_target, operator.sub, other, reflected=True
        )

    def __mul__(self, other: Any) -> Any:
        return self._reactable_handlers.binary(self._reactable_target, operator.mul, other)

    def __rmul__(self, other: Any) -> Any:
        return self._reactable_handlers.binary(
            self._reactable_target, operator.mul, other, reflected=True
        )

    def __and__(self, other: Any) -> Any:
        return self._reactable_handlers.binary(self._reactable_target, operator.and_, other)

    def __rand__(self, other: Any) -> Any:
        return self._reactable_handlers.binary(
            self._reactable_target, operator.and_, other, reflected=True
        )

    def __or__(self, other: Any) -> Any:
        return self._reactable_handlers.binary(self._reactable_target, operator.or_, other)

    def __ror__(self, other: Any) -> Any:
        return self._reactable_handlers.binary(
            self._reactable_target, operator.or_, other, reflected=True
        )

    def __xor__(self, other: Any) -> Any:
        return self._reactable_handlers.binary(self._reactable_target, operator.xor, other)

    def __rxor__(self, other: Any) -> Any:
        return self._reactable_handlers.binary(
            self._reactable_target, operator.xor, other, reflected=True
        )

    # In-place operators mutate the raw object and keep the wrapper bound

    def __iadd__(self, other: Any) -> Any:
        return self._reactable_handlers.inplace(self._reactable_target, "__iadd__", other, self)

    def __isub__(self, other: Any) -> Any:
        return self._reactable_handlers.inplace(self._reactable_target, "__isub__", other, self)

    def __imul__(self, other: Any) -> Any:
        return self._reactable_handlers.inplace(self._reactable_target, "__imul__", other, self)

    def __iand__(self, other: Any) -> Any:
        return self._reactable_handlers.inplace(self._reactable_target, "__iand__", other, self)

    def __ior__(self, other: Any) -> Any:
        return self._reactable_handlers.inplace(self._reactable_target, "__ior__", other, self)

    def __ixor__(self, other: Any) -> Any:
        return self._reactable_handlers.inplace(self._reactable_target, "__ixor__", other, self)
