"""
Test support: simulated time for code driven by PollingTimer and other clock users.
"""
import asyncio
import heapq


async def settle(rounds=50):
    """ lets every task that is ready to run do so, until they all block again. """
    for _ in range(rounds):
        await asyncio.sleep(0)


class FakeClock:
    """
    A simulated time source for timers. Time only moves when advance() is called,
    waking sleepers in time order and letting the woken tasks run before moving on.
    """

    def __init__(self, now=0.0):
        self.now = now
        self._sleepers = []
        self._seq = 0

    def time(self):
        return self.now

    async def sleep(self, delay):
        future = asyncio.get_running_loop().create_future()
        self._seq += 1
        heapq.heappush(self._sleepers, (self.now + delay, self._seq, future))
        await future

    @property
    def sleeping(self):
        return sum(1 for _, _, f in self._sleepers if not f.done())

    async def advance(self, seconds):
        target = self.now + seconds
        await settle()
        while self._sleepers and self._sleepers[0][0] <= target:
            wake, _, future = heapq.heappop(self._sleepers)
            self.now = wake
            if not future.done():
                future.set_result(None)
            await settle()
        self.now = target
        await settle()
