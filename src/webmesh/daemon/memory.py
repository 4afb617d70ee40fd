"""
An in-process daemon for tests and offline use.

The daemon keeps its connection records in memory and records every call made to it.
Calls to a method can be made to fail, or held until released, to reproduce daemon
errors and interleavings between concurrent calls.
"""
import asyncio
import itertools
import logging

from webmesh.daemon.base import DaemonClient, DaemonError
from webmesh.network import ConnectionSnapshot, ConnectionStatus, DaemonStatus, Metrics

logger = logging.getLogger(__name__)


class InMemoryDaemonClient(DaemonClient):

    def __init__(self, connections: dict = None):
        """
        :param connections: initial mapping of connection id to ConnectionSnapshot
        """
        self.connections = dict(connections or {})
        self.calls = []              # (method, id) in call order
        self.metrics_values = {}     # id -> dict of metric values to report
        self.closed = False
        self._failures = {}          # method -> exception to raise
        self._gates = {}             # method -> asyncio.Event the call waits on
        self._ids = itertools.count(1)

    def add(self, id, status=ConnectionStatus.DISCONNECTED, parameters=None, metadata=None):
        self.connections[id] = ConnectionSnapshot(status, parameters, metadata)
        return self.connections[id]

    def fail(self, method, error=None):
        """ makes every later call to method raise error, until cleared with succeed(). """
        self._failures[method] = error or DaemonError('%s failed' % method, 'internal')

    def succeed(self, method):
        self._failures.pop(method, None)

    def hold(self, method) -> asyncio.Event:
        """
        makes later calls to method wait until the returned event is set. The call's result is
        determined before it waits, as if the daemon answered and the response was delayed in transit.
        """
        gate = self._gates[method] = asyncio.Event()
        return gate

    def release(self, method):
        gate = self._gates.pop(method, None)
        if gate is not None:
            gate.set()

    def calls_to(self, method):
        return [c for c in self.calls if c[0] == method]

    async def _enter(self, method, id=None):
        self.calls.append((method, id))
        error = self._failures.get(method)
        if error is not None:
            raise error

    async def _respond(self, method, result=None):
        gate = self._gates.get(method)
        if gate is not None:
            await gate.wait()
        return result

    def _find(self, id) -> ConnectionSnapshot:
        conn = self.connections.get(id)
        if conn is None:
            raise DaemonError('connection %s not found' % id, 'not_found')
        return conn

    @staticmethod
    def _copy(conn: ConnectionSnapshot):
        return ConnectionSnapshot(conn.status, conn.parameters, conn.metadata)

    async def status(self):
        await self._enter('status')
        return await self._respond('status', DaemonStatus({'nodeID': 'memory', 'version': 'memory'}))

    async def list_connections(self) -> dict:
        await self._enter('list_connections')
        result = {id: self._copy(conn) for id, conn in self.connections.items()}
        return await self._respond('list_connections', result)

    async def get_connection(self, id):
        await self._enter('get_connection', id)
        result = self._copy(self._find(id))
        return await self._respond('get_connection', result)

    async def put_connection(self, id, parameters, metadata) -> str:
        await self._enter('put_connection', id)
        if not id:
            id = 'conn-%d' % next(self._ids)
        previous = self.connections.get(id)
        status = previous.status if previous else ConnectionStatus.DISCONNECTED
        self.connections[id] = ConnectionSnapshot(status, parameters, metadata)
        return await self._respond('put_connection', id)

    async def connect(self, id):
        await self._enter('connect', id)
        self._find(id).status = ConnectionStatus.CONNECTED
        return await self._respond('connect')

    async def disconnect(self, id):
        await self._enter('disconnect', id)
        self._find(id).status = ConnectionStatus.DISCONNECTED
        return await self._respond('disconnect')

    async def drop_connection(self, id):
        await self._enter('drop_connection', id)
        self._find(id)
        del self.connections[id]
        return await self._respond('drop_connection')

    async def metrics(self, id):
        await self._enter('metrics', id)
        if self._find(id).status is not ConnectionStatus.CONNECTED:
            raise DaemonError('connection %s is not connected' % id, 'failed_precondition')
        values = dict(self.metrics_values.get(id, {}))
        values.setdefault('deviceName', 'webmesh-%s' % id)
        return await self._respond('metrics', Metrics(values))

    async def aclose(self):
        self.closed = True
