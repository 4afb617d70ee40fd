"""
Periodic refresh of the local view from the daemon.

A PollingTimer repeatedly fetches something from the daemon and applies the result. The
PollingScheduler owns one timer that refreshes the whole connection list, and any number of
MetricsObservable instances, each sampling the metrics of one connection on its own timer.

Once a timer is stopped it issues no further calls. A call already in flight when it is stopped
runs to completion, but its result (or error) is discarded.
"""
import asyncio
import logging

from webmesh.registry import ConnectionRegistry
from webmesh.support.events import ObservableValue
from webmesh.support.period import LoopClock, PeriodStrategy

logger = logging.getLogger(__name__)


def _current_task():
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


class PollingTimer:
    """
    Runs fetch() every interval seconds as an asyncio task, and passes the result to apply(),
    or the exception to on_error(). A fetch that returns None has nothing to apply.

    Ticks never overlap: when a fetch takes longer than the interval the next tick starts
    as soon as it completes.

    :param name: describes the timer, for logging
    :param interval: seconds between ticks. The first tick is one interval after start().
    :param fetch: a coroutine function producing the value to apply
    :param apply: called with each fetched value
    :param on_error: called with the exception when fetch fails. When None, failures are logged.
    :param clock: the time source, an object with time() and a sleep(delay) coroutine
    """

    def __init__(self, name, interval, fetch, apply, on_error=None, clock=None, log=logger):
        self.name = name
        self.interval = interval
        self._fetch = fetch
        self._apply = apply
        self._on_error = on_error
        self.clock = clock or LoopClock()
        self.period = PeriodStrategy(interval)
        self.logger = log
        self.stopped = False
        self._task = None
        self._fetching = False

    @property
    def running(self):
        return self._task is not None and not self.stopped

    def start(self):
        if self._task is not None or self.stopped:
            return
        self.period.mark(self.clock.time())
        self._task = asyncio.ensure_future(self._run())

    def stop(self):
        """
        Stops the timer. A pending tick is cancelled; a fetch in flight is left to finish
        and its outcome discarded.
        :return: True if this call stopped the timer, False if it was already stopped.
        """
        if self.stopped:
            return False
        self.stopped = True
        task, self._task = self._task, None
        if task is not None and not self._fetching and task is not _current_task():
            task.cancel()
        self.logger.debug("%s stopped" % self.name)
        return True

    async def _run(self):
        while not self.stopped:
            delay = self.period(self.clock.time())
            if delay > 0:
                await self.clock.sleep(delay)
                continue
            try:
                await self.tick()
            except Exception as e:
                self.exception_handler(e)

    def exception_handler(self, e):
        self.logger.exception("%s: unexpected error applying result: %s" % (self.name, e))

    async def tick(self):
        """ fetches and applies once, unless stopped. """
        if self.stopped:
            return
        self._fetching = True
        try:
            result = await self._fetch()
        except Exception as e:
            if self.stopped:
                self.logger.debug("%s stopped, discarding error %s" % (self.name, e))
            else:
                self._error(e)
            return
        finally:
            self._fetching = False
        if self.stopped:
            self.logger.debug("%s stopped, discarding result" % self.name)
        elif result is not None:
            self._apply(result)

    def _error(self, e):
        if self._on_error is not None:
            self._on_error(e)
        else:
            self.logger.warning("%s failed: %s" % (self.name, e))


class MetricsObservable(ObservableValue):
    """
    The latest metrics sample for one connection, refreshed periodically while the connection
    is in the registry and connected. The value is None until the first sample arrives.

    Listeners on `events` are called with (metrics, previous_metrics) for each new sample.
    Closing the observable stops its timer; use it as a context manager to close it on exit.
    """

    def __init__(self, id, registry: ConnectionRegistry, interval, on_sample=None, on_error=None,
                 on_close=None, clock=None):
        super().__init__()
        self.id = id
        self.registry = registry
        self._on_sample = on_sample
        self._on_close = on_close
        self.timer = PollingTimer('metrics %s' % id, interval, self._sample, self._update, on_error, clock)

    @property
    def closed(self):
        return self.timer.stopped

    def start(self):
        self.timer.start()
        return self

    async def _sample(self):
        network = self.registry.get(self.id)
        if network is None or not network.connected:
            logger.debug("not sampling metrics for %s: not connected" % self.id)
            return None
        return await network.metrics()

    def _update(self, metrics):
        self.set(metrics)
        if self._on_sample is not None:
            self._on_sample(metrics)

    def close(self):
        if self.timer.stop() and self._on_close is not None:
            self._on_close(self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class PollingScheduler:
    """
    Keeps a registry refreshed from the daemon and samples metrics on request.

    Polling failures never propagate: they are logged and stored in `error`, which each
    polling tick overwrites: with the failure, or with None when the tick succeeds.

    :param registry: the registry to refresh
    :param fetch_networks: a coroutine function returning the daemon's current networks
    :param poll_interval: seconds between full refreshes
    :param metrics_poll_interval: the default seconds between metric samples
    """

    def __init__(self, registry: ConnectionRegistry, fetch_networks, poll_interval=5.0,
                 metrics_poll_interval=5.0, error: ObservableValue = None, clock=None, log=logger):
        self.registry = registry
        self._fetch_networks = fetch_networks
        self.poll_interval = poll_interval
        self.metrics_poll_interval = metrics_poll_interval
        self.error = error if error is not None else ObservableValue()
        self.clock = clock or LoopClock()
        self.logger = log
        self.list_timer = PollingTimer('list refresh', poll_interval, self._fetch, self._refreshed,
                                       self.record_error, self.clock, log)
        self.metrics = set()

    async def _fetch(self):
        mark = self.registry.mark()
        return mark, await self._fetch_networks()

    def _refreshed(self, result):
        mark, networks = result
        self.registry.replace_all(networks, mark)
        self.logger.debug("refreshed %d networks" % len(networks))
        self.record_success()

    def record_error(self, e):
        self.logger.info("polling failed: %s" % e)
        self.error.set(e)

    def record_success(self, *args):
        self.error.clear()

    def start(self):
        self.list_timer.start()

    @property
    def stopped(self):
        return self.list_timer.stopped

    def stop(self):
        """ stops the list refresh and every metrics observable created by this scheduler. """
        self.list_timer.stop()
        for observable in list(self.metrics):
            observable.close()

    def watch_metrics(self, id, poll_interval=None) -> MetricsObservable:
        """
        Starts sampling metrics for the connection with the given id.
        Each call creates an independent observable with its own timer.
        :param poll_interval: seconds between samples, defaulting to metrics_poll_interval
        """
        interval = poll_interval or self.metrics_poll_interval
        observable = MetricsObservable(id, self.registry, interval, on_sample=self.record_success,
                                       on_error=self.record_error, on_close=self.metrics.discard,
                                       clock=self.clock)
        if self.stopped:
            observable.close()
            return observable
        self.metrics.add(observable)
        return observable.start()
