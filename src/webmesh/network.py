"""
The data model for mesh network connections mirrored from the daemon.

A Network is the local entity for one connection known to the daemon. It carries the
connection's last known status, parameters and metadata, and can act on its own connection
through the daemon client it was built with. The client is shared by all networks of a session
and is not owned by any of them.
"""
import logging
from enum import Enum

from webmesh.support.mixins import CommonEqualityMixin, StringerMixin

logger = logging.getLogger(__name__)


class ConnectionStatus(Enum):
    DISCONNECTED = 'disconnected'
    CONNECTING = 'connecting'
    CONNECTED = 'connected'
    DISCONNECTING = 'disconnecting'
    ERROR = 'error'

    @classmethod
    def parse(cls, value):
        """
        Converts a status reported by the daemon into a ConnectionStatus.

        Accepts a ConnectionStatus, an enum name or value in any case, or the protobuf ordinal.
        A missing value is the protobuf default, DISCONNECTED. Anything unrecognized is ERROR.

        >>> ConnectionStatus.parse('CONNECTED')
        <ConnectionStatus.CONNECTED: 'connected'>
        >>> ConnectionStatus.parse(None)
        <ConnectionStatus.DISCONNECTED: 'disconnected'>
        """
        if value is None:
            return cls.DISCONNECTED
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            ordinals = list(cls)
            if 0 <= value < len(ordinals):
                return ordinals[value]
        elif isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                pass
        logger.warning("unknown connection status reported by daemon: %r" % (value,))
        return cls.ERROR


class ConnectionSnapshot(CommonEqualityMixin, StringerMixin):
    """ The daemon's record of a single connection at the time it was fetched. """

    def __init__(self, status=ConnectionStatus.DISCONNECTED, parameters=None, metadata=None):
        self.status = ConnectionStatus.parse(status)
        self.parameters = dict(parameters or {})
        self.metadata = dict(metadata or {})


class Metrics(CommonEqualityMixin):
    """
    A point-in-time sample of the interface metrics for one connection.
    The sample is opaque apart from a few well-known counters.
    """

    def __init__(self, values=None):
        self.values = dict(values or {})

    @property
    def device_name(self):
        return self.values.get('deviceName', '')

    @property
    def num_peers(self):
        return int(self.values.get('numPeers', 0))

    @property
    def total_receive_bytes(self):
        return int(self.values.get('totalReceiveBytes', 0))

    @property
    def total_transmit_bytes(self):
        return int(self.values.get('totalTransmitBytes', 0))

    def __repr__(self):
        return 'Metrics(%r)' % self.values


class DaemonStatus(CommonEqualityMixin, StringerMixin):
    """ Health and version information reported by the daemon. """

    def __init__(self, values=None):
        values = dict(values or {})
        self.node_id = values.get('nodeID', '')
        self.version = values.get('version', '')
        self.description = values.get('description', '')
        self.uptime = values.get('uptime', '')
        self.values = values


class Parameters(CommonEqualityMixin, StringerMixin):
    """
    Describes the connection to connect to. Either the id of an existing connection,
    or the parameters and metadata of a new one, optionally with the id to create it under.
    """

    def __init__(self, id=None, parameters=None, metadata=None):
        self.id = id
        self.parameters = parameters
        self.metadata = metadata

    @property
    def creates(self):
        """
        True when this describes a connection to create rather than an existing one: parameters
        or metadata were given, even empty ones.
        """
        return self.parameters is not None or self.metadata is not None


class NetworkParameters(Parameters):
    """ The parameters for creating (or replacing) a connection on the daemon. """

    def __init__(self, id=None, parameters=None, metadata=None):
        super().__init__(id, dict(parameters or {}), dict(metadata or {}))


class Network(CommonEqualityMixin, StringerMixin):
    """
    A mesh network connection known to the daemon.

    :param client: the daemon client used to act on this connection. Not owned.
    :param id: the daemon-assigned connection id
    """

    def __init__(self, client, id, status=ConnectionStatus.DISCONNECTED, parameters=None, metadata=None):
        self._client = client
        self.id = id
        self.status = ConnectionStatus.parse(status)
        self.parameters = dict(parameters or {})
        self.metadata = dict(metadata or {})

    @classmethod
    def from_snapshot(cls, client, id, snapshot: ConnectionSnapshot):
        return cls(client, id, snapshot.status, snapshot.parameters, snapshot.metadata)

    @property
    def client(self):
        return self._client

    @property
    def connected(self) -> bool:
        return self.status is ConnectionStatus.CONNECTED

    async def connect(self):
        """ asks the daemon to connect this network. The status is CONNECTED once the daemon accepts. """
        await self._client.connect(self.id)
        self.status = ConnectionStatus.CONNECTED
        logger.info("network connected: %s" % self.id)

    async def disconnect(self):
        await self._client.disconnect(self.id)
        self.status = ConnectionStatus.DISCONNECTED
        logger.info("network disconnected: %s" % self.id)

    async def drop(self):
        """ disconnects and deletes all daemon-side data for this network. """
        await self._client.drop_connection(self.id)
        logger.info("network dropped: %s" % self.id)

    async def metrics(self) -> Metrics:
        return await self._client.metrics(self.id)
