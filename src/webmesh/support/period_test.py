import asyncio
import unittest
from unittest import TestCase

from hamcrest import assert_that, calling, is_, raises

from webmesh.support.period import LoopClock, PeriodStrategy


class PeriodStrategyTest(TestCase):

    def setUp(self):
        self.period = 60

    def test_is_due_immediately_by_default(self):
        sut = PeriodStrategy(self.period)
        time = 123
        assert_that(sut(time), is_(0))
        assert_that(sut(time), is_(self.period))

    def test_dry_run_does_not_advance(self):
        sut = PeriodStrategy(self.period)
        time = 123
        assert_that(sut(time, dry_run=True), is_(0))
        assert_that(sut(time), is_(0))
        assert_that(sut(time), is_(self.period))

    def test_time_decreases_and_restarts(self):
        sut = PeriodStrategy(self.period)
        assert_that(sut(0), is_(0))       # 0, so period restarts
        assert_that(sut(50), is_(10))
        assert_that(sut(55), is_(5))
        assert_that(sut(65), is_(-5))     # <0, restart, without accumulating the overshoot
        assert_that(sut(65), is_(60))

    def test_mark_restarts_without_firing(self):
        sut = PeriodStrategy(self.period)
        sut.mark(10)
        assert_that(sut(10), is_(60))
        assert_that(sut(70), is_(0))

    def test_equality(self):
        assert_that(PeriodStrategy(5), is_(PeriodStrategy(5)))


class LoopClockTest(unittest.IsolatedAsyncioTestCase):

    async def test_time_is_loop_time(self):
        sut = LoopClock()
        before = asyncio.get_running_loop().time()
        assert_that(sut.time() >= before, is_(True))

    async def test_sleep(self):
        await LoopClock().sleep(0)


class LoopClockOutsideLoopTest(TestCase):

    def test_time_needs_a_running_loop(self):
        assert_that(calling(LoopClock().time), raises(RuntimeError))


if __name__ == '__main__':  # pragma no cover
    unittest.main()
