"""
Higher-level operations composed from daemon calls.

Each operation runs its steps strictly one after another, and fails with the error of the
first step that fails. Nothing is retried and nothing is rolled back: a connection created
or refreshed by an early step stays in the registry when a later step fails.
"""
import logging

from webmesh.daemon.base import DaemonClient, InvalidArgumentError
from webmesh.network import ConnectionStatus, Network, NetworkParameters, Parameters
from webmesh.registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class WorkflowOrchestrator:
    """
    :param client: the daemon client. Networks built here share it.
    :param registry: the registry updated with the outcome of each operation
    :param scheduler: the PollingScheduler that samples metrics for device_metrics()
    """

    def __init__(self, client: DaemonClient, registry: ConnectionRegistry, scheduler=None, log=logger):
        self.client = client
        self.registry = registry
        self.scheduler = scheduler
        self.logger = log

    async def daemon_status(self):
        """ :return: the daemon's DaemonStatus """
        return await self.client.status()

    async def fetch_networks(self) -> list:
        """
        Fetches every connection the daemon knows, without touching the registry.
        :return: a list of Network, one per connection
        """
        connections = await self.client.list_connections()
        return [Network.from_snapshot(self.client, id, conn) for id, conn in connections.items()]

    async def list_networks(self) -> list:
        """
        Replaces the registry contents with the daemon's connections.
        On failure the registry is left as it was.
        :return: the registry snapshot after the refresh
        """
        mark = self.registry.mark()
        networks = await self.fetch_networks()
        self.registry.replace_all(networks, mark)
        return self.registry.snapshot()

    async def put_network(self, params: NetworkParameters) -> Network:
        """
        Creates a connection on the daemon. The daemon does not connect it.
        :param params: the parameters and metadata of the connection, and optionally its id
        :return: the new Network, in the DISCONNECTED state
        """
        id = await self.client.put_connection(params.id, params.parameters, params.metadata)
        network = Network(self.client, id, ConnectionStatus.DISCONNECTED, params.parameters, params.metadata)
        self.registry.upsert(network)
        self.logger.info("network created: %s" % id)
        return network

    async def get_network(self, id) -> Network:
        """
        Fetches the current state of one connection and refreshes the registry entry for it.
        """
        network = Network.from_snapshot(self.client, id, await self.client.get_connection(id))
        self.registry.upsert(network)
        return network

    async def connect(self, params: Parameters = None, **kwargs) -> Network:
        """
        Connects a network. When params carries parameters or metadata, the connection is created
        first, as put_network() does. Otherwise the existing connection with params.id is fetched
        first, as get_network() does.

        :param params: a Parameters instance, or None to build one from the keyword arguments
            id, parameters and metadata
        :return: the connected Network
        :raises InvalidArgumentError: when neither an id nor parameters are given. No call is made.
        """
        if params is None:
            params = Parameters(**kwargs)
        if params.creates:
            network = await self.put_network(NetworkParameters(params.id, params.parameters, params.metadata))
        elif params.id:
            network = await self.get_network(params.id)
        else:
            raise InvalidArgumentError('no connection parameters provided')
        await network.connect()
        self.registry.upsert(network)
        return network

    async def disconnect(self, id):
        network = await self.get_network(id)
        await network.disconnect()
        self.registry.upsert(network)

    async def drop_network(self, id):
        """
        Disconnects and deletes all data for the connection with the given id.

        The network is removed from the registry even when the daemon call fails, which is still
        raised. The local view then treats the connection as gone until a later refresh reports it.
        """
        try:
            network = await self.get_network(id)
            await network.drop()
        finally:
            self.registry.remove(id)

    def device_metrics(self, id, poll_interval=None):
        """
        Starts sampling the metrics of the network with the given id, while it is connected.
        Every call returns a new, independent MetricsObservable. Close it to stop sampling.

        :param poll_interval: seconds between samples, defaulting to the scheduler's metrics interval
        """
        if self.scheduler is None:
            raise RuntimeError('device metrics need a polling scheduler')
        return self.scheduler.watch_metrics(id, poll_interval)
