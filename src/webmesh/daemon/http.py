"""
A DaemonClient that speaks the Connect protocol's JSON encoding over HTTP.

Each call is a POST of a JSON request body to <address>/<service>/<Method>. The namespace
is attached to every request as a header. Failed calls return a non-2xx status with a JSON
body carrying the error code and message.
"""
import logging

import httpx

from webmesh.daemon.base import DaemonClient, DaemonError
from webmesh.network import ConnectionSnapshot, DaemonStatus, Metrics

logger = logging.getLogger(__name__)

SERVICE = 'v1.AppDaemon'
NAMESPACE_HEADER = 'x-webmesh-namespace'


class HttpDaemonClient(DaemonClient):
    """
    :param address: the base URL of the daemon
    :param namespace: the namespace sent with every call
    :param timeout: the per-request timeout in seconds
    :param transport: an optional httpx transport, used in place of the network
    """

    def __init__(self, address, namespace, timeout=10.0, transport=None):
        self.address = address.rstrip('/')
        self.namespace = namespace
        self._http = httpx.AsyncClient(
            base_url=self.address,
            timeout=timeout,
            transport=transport,
            headers={
                NAMESPACE_HEADER: namespace,
                'Connect-Protocol-Version': '1',
            })

    async def _call(self, method, request=None) -> dict:
        path = '/%s/%s' % (SERVICE, method)
        try:
            response = await self._http.post(path, json=request or {})
        except httpx.TimeoutException as e:
            raise DaemonError('%s timed out: %s' % (method, e), 'deadline_exceeded') from e
        except httpx.HTTPError as e:
            raise DaemonError('%s failed: %s' % (method, e), 'unavailable') from e
        if not response.is_success:
            raise self._decode_error(method, response)
        logger.debug("%s -> %s" % (method, response.status_code))
        if not response.content:
            return {}
        try:
            body = response.json()
        except ValueError as e:
            raise DaemonError('%s returned an invalid response' % method, 'internal') from e
        if not isinstance(body, dict):
            raise DaemonError('%s returned an invalid response' % method, 'internal')
        return body

    @staticmethod
    def _decode_error(method, response: httpx.Response) -> DaemonError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        message = body.get('message') or '%s failed with HTTP %d' % (method, response.status_code)
        return DaemonError(message, body.get('code'))

    async def status(self):
        return DaemonStatus(await self._call('Status'))

    async def list_connections(self) -> dict:
        response = await self._call('ListConnections')
        return {id: self._snapshot(conn) for id, conn in (response.get('connections') or {}).items()}

    async def get_connection(self, id):
        return self._snapshot(await self._call('GetConnection', {'id': id}))

    async def put_connection(self, id, parameters, metadata) -> str:
        request = {'parameters': parameters or {}, 'metadata': metadata or {}}
        if id:
            request['id'] = id
        response = await self._call('PutConnection', request)
        return response.get('id') or id

    async def connect(self, id):
        await self._call('Connect', {'id': id})

    async def disconnect(self, id):
        await self._call('Disconnect', {'id': id})

    async def drop_connection(self, id):
        await self._call('DropConnection', {'id': id})

    async def metrics(self, id):
        response = await self._call('Metrics', {'ids': [id]})
        interfaces = response.get('interfaces') or {}
        if id not in interfaces:
            raise DaemonError('no metrics reported for %s' % id, 'not_found')
        return Metrics(interfaces[id])

    async def aclose(self):
        await self._http.aclose()

    @staticmethod
    def _snapshot(conn: dict) -> ConnectionSnapshot:
        return ConnectionSnapshot(conn.get('status'), conn.get('parameters'), conn.get('metadata'))
