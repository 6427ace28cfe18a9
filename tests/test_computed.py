"""Tests for Computed values."""

import pytest

from ripplegraph import (
    CircularDependencyError,
    Computed,
    computed,
    create_computed,
    create_effect,
    create_signal,
)
from ripplegraph import _tracking

from conftest import assert_edges_mirrored


class TestComputed:
    def test_lazy_eval(self):
        call_count = 0
        s = create_signal(5)

        def fn():
            nonlocal call_count
            call_count += 1
            return s.read() * 2

        c = Computed(fn)
        assert call_count == 0  # not yet evaluated
        assert c.dirty
        assert c.read() == 10
        assert call_count == 1

    def test_caches_until_dirty(self):
        call_count = 0
        s = create_signal(5)

        def fn():
            nonlocal call_count
            call_count += 1
            return s.read() * 2

        c = Computed(fn)
        c.read()
        c.read()
        assert call_count == 1  # cached, no re-eval

    def test_invalidation(self):
        s = create_signal(5)
        c = create_computed(lambda: s.read() * 2)
        assert c.read() == 10
        s.write(10)
        assert c.read() == 20

    def test_dependency_tracking(self):
        """Computed tracks dependencies dynamically."""
        flag = create_signal(True)
        a = create_signal(1)
        b = create_signal(2)

        c = create_computed(lambda: a.read() if flag.read() else b.read())
        assert c.read() == 1

        flag.write(False)
        assert c.read() == 2  # now depends on b, not a
        assert c.id not in a.downstream

    def test_chained_computed(self):
        s = create_signal(3)
        doubled = create_computed(lambda: s.read() * 2)
        quadrupled = create_computed(lambda: doubled.read() * 2)
        assert quadrupled.read() == 12
        s.write(5)
        assert quadrupled.read() == 20

    def test_peek_is_untracked_and_stale(self):
        s = create_signal(1)
        c = create_computed(lambda: s.read() + 1)
        assert c.peek() is None  # never evaluated
        assert c.read() == 2
        c.dirty = True
        s._value = 10  # bypass propagation
        assert c.peek() == 2  # stale, not refreshed
        assert c.read() == 11

    def test_priority_after_eval(self):
        a = create_signal(1)
        b = create_signal(1)
        c = create_computed(lambda: a.read() + b.read())
        c.read()
        assert c.priority == 2
        d = create_computed(lambda: c.read() + a.read())
        d.read()
        assert d.priority == 3

    def test_propagates_to_effects(self):
        s = create_signal(5)
        c = create_computed(lambda: s.read() * 2)
        log = []
        create_effect(lambda: log.append(c.read()))
        assert log == [10]
        s.write(10)
        assert log == [10, 20]

    def test_propagates_through_chain(self):
        s = create_signal(1)
        c1 = create_computed(lambda: s.read() + 1)
        c2 = create_computed(lambda: c1.read() + 1)
        c3 = create_computed(lambda: c2.read() + 1)
        log = []
        create_effect(lambda: log.append(c3.read()))
        s.write(10)
        assert log == [4, 13]

    def test_value_property(self):
        s = create_signal(2)
        c = create_computed(lambda: s.read() ** 2)
        assert c.value == 4


class TestComputedErrors:
    def test_error_propagates_and_restores_stack(self):
        s = create_signal(0)

        def fn():
            if s.read() == 0:
                raise ZeroDivisionError("no")
            return 10 // s.read()

        c = create_computed(fn)
        with pytest.raises(ZeroDivisionError):
            c.read()
        assert _tracking.current_node() is None
        assert c.dirty  # still stale, retried on next read
        assert_edges_mirrored(s, c)
        assert s.downstream == {c.id: c}
        s.write(5)
        assert c.read() == 2

    def test_reads_before_error_stay_mirrored(self):
        a = create_signal(1)
        b = create_signal(1)
        unread = create_signal(1)

        def fn():
            total = a.read() + b.read()
            if total > 2:
                raise ValueError("too big")
            return total + unread.read()

        c = create_computed(fn)
        assert c.read() == 3
        log = []
        e = create_effect(lambda: log.append(c.read()))

        with pytest.raises(ValueError, match="too big"):
            a.write(5)
        assert_edges_mirrored(a, b, unread, c, e)
        assert set(c.upstream) == {a.id, b.id}
        assert unread.downstream == {}
        assert c.dirty

        a.write(1)
        assert c.read() == 3
        assert_edges_mirrored(a, b, unread, c, e)

    def test_self_read_raises(self):
        c = None

        def fn():
            return c.read() + 1

        c = create_computed(fn)
        with pytest.raises(CircularDependencyError):
            c.read()
        assert _tracking.current_node() is None

    def test_mutual_read_raises(self):
        holder = {}
        a = create_computed(lambda: holder["b"].read())
        holder["b"] = create_computed(lambda: a.read())
        with pytest.raises(CircularDependencyError):
            a.read()


class TestComputedDecorator:
    def test_decorator_factory(self):
        s = create_signal(7)

        @computed
        def doubled():
            return s.read() * 2

        assert doubled.read() == 14
        s.write(3)
        assert doubled.read() == 6
