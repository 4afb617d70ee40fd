"""
A session keeps a local view of a daemon's connections and offers the operations on them.

open() builds the daemon client, refreshes the registry once and starts polling. close()
stops every timer the session owns. Sessions are also async context managers:

    async with await open(DaemonOptions(poll_interval=2)) as session:
        network = await session.connect(parameters={...})
        with session.device_metrics(network.id) as metrics:
            ...
"""
import logging

from webmesh.daemon.base import DaemonClient
from webmesh.options import DaemonOptions
from webmesh.registry import ConnectionRegistry
from webmesh.scheduler import PollingScheduler
from webmesh.support.events import ObservableValue
from webmesh.workflows import WorkflowOrchestrator

logger = logging.getLogger(__name__)


class Session:
    """
    :param client: the daemon client
    :param options: the DaemonOptions for polling intervals
    :param owns_client: when True, aclose() also closes the client
    :param clock: the time source for the timers
    """

    def __init__(self, client: DaemonClient, options: DaemonOptions = None, owns_client=False, clock=None):
        self.options = options or DaemonOptions()
        self.client = client
        self.owns_client = owns_client
        self.networks = ConnectionRegistry()
        self.error = ObservableValue()      # the latest polling error, or None
        self.workflows = WorkflowOrchestrator(client, self.networks)
        self.scheduler = PollingScheduler(self.networks, self.workflows.fetch_networks,
                                          self.options.poll_interval, self.options.metrics_poll_interval,
                                          self.error, clock)
        self.workflows.scheduler = self.scheduler
        self.closed = False

    async def start(self):
        """
        Performs the initial refresh and starts polling. A failed refresh is recorded in `error`
        rather than raised; polling starts regardless.
        """
        try:
            await self.workflows.list_networks()
            self.error.clear()
        except Exception as e:
            self.scheduler.record_error(e)
        if not self.closed:
            self.scheduler.start()
            logger.info("session opened with %s" % self.options.daemon_address)
        return self

    def close(self):
        """ stops all polling and discards the registry. Safe to call more than once. """
        if self.closed:
            return
        self.closed = True
        self.scheduler.stop()
        self.networks.close()
        logger.info("session closed")

    async def aclose(self):
        """ closes the session, and the client too when the session created it. """
        self.close()
        if self.owns_client:
            self.owns_client = False
            await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    def snapshot(self):
        return self.networks.snapshot()

    async def daemon_status(self):
        return await self.workflows.daemon_status()

    async def list_networks(self):
        return await self.workflows.list_networks()

    async def put_network(self, params):
        return await self.workflows.put_network(params)

    async def get_network(self, id):
        return await self.workflows.get_network(id)

    async def connect(self, params=None, **kwargs):
        return await self.workflows.connect(params, **kwargs)

    async def disconnect(self, id):
        await self.workflows.disconnect(id)

    async def drop_network(self, id):
        await self.workflows.drop_network(id)

    def device_metrics(self, id, poll_interval=None):
        return self.workflows.device_metrics(id, poll_interval)


async def open(options: DaemonOptions = None, client: DaemonClient = None, clock=None) -> Session:
    """
    Opens a session with a daemon.

    :param options: the daemon address, namespace and polling intervals. Defaults to DaemonOptions().
    :param client: the daemon client to use. When None, one is built from the options and is
        closed with the session.
    :param clock: the time source for the timers
    """
    options = options or DaemonOptions()
    owns_client = client is None
    if owns_client:
        client = options.client()
    session = Session(client, options, owns_client, clock)
    return await session.start()


def close(session: Session):
    """ stops every timer owned by the session. """
    session.close()
