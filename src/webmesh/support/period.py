import asyncio

from webmesh.support.mixins import CommonEqualityMixin


class PeriodStrategy(CommonEqualityMixin):
    """
    Decides when a periodic operation is next due.

    The period is measured from the time the operation last fired, not from when it completed,
    so a slow operation does not push back the following one.

    :param period: The period in seconds.
    :param last_fired: The time the operation last fired, or None if it never has.
    """

    def __init__(self, period, last_fired=None):
        self.period = period
        self.last_fired = last_fired

    def __call__(self, current_time, dry_run=False):
        """return the length of time until the operation is due. Zero or less means it is due now.
            :param dry_run: when True, the last fired time is not updated
        """
        result = self._time_to_fire(current_time)
        if not dry_run and result <= 0:
            self.last_fired = current_time
        return result

    def mark(self, current_time):
        """ restarts the period from the given time without firing. """
        self.last_fired = current_time

    def _time_to_fire(self, current_time):
        return 0 if self.last_fired is None else self.period - (current_time - self.last_fired)


class LoopClock:
    """
    The time source used by timers: the running event loop's monotonic clock and asyncio.sleep.
    time() must be called from a coroutine or callback on that loop.
    Tests substitute an object with the same two methods to drive simulated time.
    """

    def time(self):
        return asyncio.get_running_loop().time()

    async def sleep(self, delay):
        await asyncio.sleep(delay)
