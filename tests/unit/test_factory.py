"""Unit tests for ReactiveObjectFactory and the module-level entry points."""

import logging
import weakref
from types import SimpleNamespace

import pytest

from reactable import (
    Proxy,
    RegistrationError,
    WrapperKind,
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
from reactable.handlers import mutable_handlers


class Point:
    def __init__(self, x, y):
        self.x = x
        self.y = y

    def rewrapped(self):
        return to_mutable(unwrap(self))


COMPOSITES = [
    pytest.param(lambda: {"a": 1}, id="dict"),
    pytest.param(lambda: [1, 2, 3], id="list"),
    pytest.param(lambda: {1, 2}, id="set"),
    pytest.param(lambda: SimpleNamespace(a=1), id="namespace"),
    pytest.param(lambda: Point(1, 2), id="record"),
    pytest.param(weakref.WeakSet, id="WeakSet"),
    pytest.param(weakref.WeakKeyDictionary, id="WeakKeyDictionary"),
]


@pytest.mark.unit
@pytest.mark.reactive
class TestIdentityStability:
    """Wrapping is idempotent and never double-wraps."""

    @pytest.mark.parametrize("make", COMPOSITES)
    def test_to_mutable_is_idempotent(self, make):
        """Wrapping twice or wrapping the wrapper returns the same wrapper"""
        x = make()
        m = to_mutable(x)

        assert to_mutable(x) is m
        assert to_mutable(m) is m

    @pytest.mark.parametrize("make", COMPOSITES)
    def test_to_readonly_is_idempotent(self, make):
        """Read-only wrapping is stable in the same way"""
        x = make()
        r = to_readonly(x)

        assert to_readonly(x) is r
        assert to_readonly(r) is r

    @pytest.mark.parametrize("make", COMPOSITES)
    def test_unwrap_returns_the_raw_object(self, make):
        """Both wrapper kinds unwrap to the raw object"""
        x = make()
        m = to_mutable(x)
        r = to_readonly(x)

        assert unwrap(m) is x
        assert unwrap(r) is x
        assert unwrap(x) is x

    @pytest.mark.parametrize("make", COMPOSITES)
    def test_mutable_and_readonly_wrappers_are_disjoint(self, make):
        """The two wrapper kinds of one object are different objects"""
        x = make()
        m = to_mutable(x)
        r = to_readonly(x)

        assert m is not r
        assert m is not x
        assert isinstance(m, Proxy) and isinstance(r, Proxy)


@pytest.mark.unit
@pytest.mark.reactive
class TestDualConversion:
    """Mutable and read-only wrappers convert into each other by identity."""

    def test_readonly_is_sticky_under_the_mutable_entry_point(self):
        """to_mutable hands a read-only wrapper back unchanged"""
        x = {"a": 1}
        r = to_readonly(x)

        assert to_mutable(r) is r
        assert to_mutable(to_readonly(x)) is to_readonly(x)

    def test_to_readonly_of_mutable_wrapper_uses_the_raw_object(self):
        """Read-only wrapping unwraps a mutable wrapper first"""
        x = [1, 2]
        m = to_mutable(x)
        r = to_readonly(m)

        assert r is to_readonly(x)
        assert unwrap(r) is x

    def test_mutable_wrapper_after_readonly_is_a_new_wrapper(self):
        """Creating the read-only view first does not block the mutable one"""
        x = SimpleNamespace(a=1)
        r = to_readonly(x)
        m = to_mutable(x)

        assert m is not r
        assert not is_readonly_wrapper(m)
        assert to_readonly(m) is r


@pytest.mark.unit
@pytest.mark.reactive
class TestMarks:
    """Out-of-band marks placed before wrapping."""

    def test_forced_readonly_redirects_to_readonly(self):
        """A forced-readonly object only ever gets its read-only wrapper"""
        z = {"a": 1}
        mark_forced_readonly(z)
        w = to_mutable(z)

        assert is_readonly_wrapper(w)
        assert w is to_readonly(z)

    def test_non_observable_values_pass_through(self):
        """A non-observable object is returned as-is by both entry points"""
        x = Point(0, 0)
        mark_non_observable(x)

        assert to_mutable(x) is x
        assert to_readonly(x) is x
        assert not is_observed(x)
        assert dependency_table(x) is None

    def test_marks_return_their_input_and_are_idempotent(self):
        """Marks chain and can be repeated"""
        data = [1]
        factory = get_default_factory()

        assert mark_forced_readonly(data) is data
        assert mark_forced_readonly(data) is data
        assert mark_non_observable(data) is data
        assert len(factory.forced_readonly) == 1
        assert len(factory.non_observable) == 1

    def test_non_observable_wins_over_forced_readonly(self):
        """An object with both marks is never wrapped"""
        data = {"a": 1}
        mark_forced_readonly(mark_non_observable(data))

        assert to_mutable(data) is data


@pytest.mark.unit
@pytest.mark.reactive
@pytest.mark.edge_case
class TestPassthrough:
    """Values that cannot or may not be wrapped come back unchanged."""

    @pytest.mark.parametrize("value", [None, 0, 3.14, "text", b"raw", True])
    def test_primitives_pass_through(self, value):
        """to_mutable and to_readonly of a primitive return it"""
        assert to_mutable(value) is value
        assert to_readonly(value) is value

    def test_primitive_wrap_logs_a_warning(self, caplog):
        """Misuse is diagnosable in development builds"""
        with caplog.at_level(logging.WARNING):
            to_mutable(42)

        assert "value cannot be made reactive: 42" in caplog.text

    def test_excluded_kinds_pass_through_silently(self, caplog):
        """Functions and immutable containers are returned without a warning"""

        def func():
            pass

        with caplog.at_level(logging.WARNING):
            assert to_mutable(func) is func
            assert to_readonly((1, 2)) == (1, 2)
            assert to_mutable(Point) is Point

        assert "cannot be made reactive" not in caplog.text

    def test_infrastructure_objects_pass_through(self):
        """The factory never wraps its own machinery"""
        factory = get_default_factory()
        assert to_mutable(factory) is factory
        assert to_mutable(factory.registry) is factory.registry


@pytest.mark.unit
@pytest.mark.reactive
class TestQueries:
    """is_observed, is_readonly_wrapper and dependency_table."""

    def test_is_observed_covers_both_kinds(self):
        """Both wrapper kinds are observed, raw objects are not"""
        x = {"a": 1}
        assert not is_observed(x)
        assert is_observed(to_mutable(x))
        assert is_observed(to_readonly(x))
        assert not is_observed(x)

    def test_is_readonly_wrapper_is_specific(self):
        """Only read-only wrappers answer True"""
        x = [1]
        assert is_readonly_wrapper(to_readonly(x))
        assert not is_readonly_wrapper(to_mutable(x))
        assert not is_readonly_wrapper(x)

    def test_table_exists_and_is_empty_after_wrap(self):
        """A successful wrap creates an empty subscriber table"""
        x = Point(1, 2)
        m = to_mutable(x)

        assert dependency_table(x) == {}
        assert dependency_table(m) is dependency_table(x)

    def test_both_kinds_share_one_table(self):
        """The table belongs to the raw object, not to a wrapper"""
        x = {"a": 1}
        m = to_mutable(x)
        table = dependency_table(m)
        r = to_readonly(x)

        assert dependency_table(r) is table


@pytest.mark.unit
@pytest.mark.reactive
class TestIsolation:
    """Factories are independent of each other."""

    def test_separate_factories_create_separate_wrappers(self, factory):
        """The same raw object gets unrelated wrappers from two factories"""
        x = {"a": 1}
        default_wrapper = to_mutable(x)
        isolated_wrapper = factory.to_mutable(x)

        assert default_wrapper is not isolated_wrapper
        assert factory.unwrap(isolated_wrapper) is x
        assert not factory.is_observed(default_wrapper)

    def test_double_registration_fails_fast(self, factory):
        """Bypassing the fast paths trips the registry invariant"""
        x = [1, 2]
        wrapper = factory.to_mutable(x)

        with pytest.raises(RegistrationError):
            factory.registry.register(x, Proxy(x, mutable_handlers(factory)), WrapperKind.MUTABLE)

        assert factory.to_mutable(x) is wrapper

    def test_reentrant_wrap_from_a_trap_returns_the_same_wrapper(self):
        """A method running through the wrapper that rewraps its object gets the wrapper back"""
        x = Point(1, 2)
        m = to_mutable(x)

        assert m.rewrapped() is m
