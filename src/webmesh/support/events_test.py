import unittest
from unittest.mock import Mock, call

from hamcrest import assert_that, is_, empty, none

from webmesh.support.events import EventSource, ObservableValue


class EventsTest(unittest.TestCase):

    def test_handlers_empty(self):
        sut = EventSource()
        assert_that(sut.handlers(), is_(empty()))

    def test_handlers_not_empty(self):
        sut = EventSource()
        handler = Mock()
        sut.add(handler)
        assert_that(list(sut.handlers()), is_([handler]))

    def test_no_listeners(self):
        sut = EventSource()
        sut.fire(1)

    def test_manage_handlers(self):
        sut = EventSource()
        m1 = Mock()
        sut.add(m1)
        assert_that(sut._handlers, is_([m1]))

        sut.remove(m1)
        assert_that(sut._handlers, is_([]))

        sut.remove(m1)
        assert_that(sut._handlers, is_([]))

        sut += m1
        assert_that(sut._handlers, is_([m1]))

        sut -= m1
        assert_that(sut._handlers, is_([]))

    def test_subscribe_returns_unsubscriber(self):
        sut = EventSource()
        handler = Mock()
        unsubscribe = sut.subscribe(handler)
        sut.fire("a")
        unsubscribe()
        sut.fire("b")
        handler.assert_called_once_with("a")

    def test_handler_may_unsubscribe_while_firing(self):
        sut = EventSource()
        other = Mock()

        def once(*args):
            sut.remove(once)

        sut += once
        sut += other
        sut.fire(1)
        sut.fire(2)
        assert_that(other.mock_calls, is_([call(1), call(2)]))
        assert_that(sut.handlers(), is_((other,)))

    def test_fire_all_with_empty_events(self):
        sut = EventSource()
        m1 = Mock()
        sut.add(m1)
        sut.fire_all([])
        m1.assert_not_called()

    def test_listeners(self):
        sut = EventSource()
        l1 = Mock()
        l2 = Mock()
        sut += l1
        sut += l2
        sut.fire(1, v="hey")
        l1.assert_called_once_with(1, v="hey")
        l2.assert_called_once_with(1, v="hey")

        l1.reset_mock()
        sut.fire_all([1, 2, 3])
        assert_that(l1.mock_calls, is_([call(1), call(2), call(3)]))


class ObservableValueTest(unittest.TestCase):

    def test_initially_none(self):
        sut = ObservableValue()
        assert_that(sut.value, is_(none()))
        assert_that(bool(sut), is_(False))

    def test_set_notifies_with_previous(self):
        sut = ObservableValue("old")
        listener = Mock()
        sut.events += listener
        assert_that(sut.set("new"), is_(True))
        listener.assert_called_once_with("new", "old")
        assert_that(sut.value, is_("new"))

    def test_setting_same_value_does_not_notify(self):
        value = object()
        sut = ObservableValue(value)
        listener = Mock()
        sut.events += listener
        assert_that(sut.set(value), is_(False))
        listener.assert_not_called()

    def test_clear(self):
        sut = ObservableValue(1)
        sut.value = 2
        sut.clear()
        assert_that(sut.value, is_(none()))


if __name__ == '__main__':  # pragma no cover
    unittest.main()
