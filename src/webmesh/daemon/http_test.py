import json
import unittest

import httpx
from hamcrest import assert_that, has_entries, instance_of, is_

from webmesh.daemon.base import DaemonError
from webmesh.daemon.http import NAMESPACE_HEADER, HttpDaemonClient
from webmesh.network import ConnectionStatus, DaemonStatus


class HttpDaemonClientTest(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.requests = []
        self.responses = {}
        self.sut = HttpDaemonClient('http://daemon:8080/', 'test-ns', transport=httpx.MockTransport(self.handle))

    async def asyncTearDown(self):
        await self.sut.aclose()

    def handle(self, request: httpx.Request):
        method = request.url.path.rsplit('/', 1)[-1]
        body = json.loads(request.content) if request.content else {}
        self.requests.append((request, method, body))
        response = self.responses.get(method, (200, {}))
        if isinstance(response, Exception):
            raise response
        status, payload = response
        if isinstance(payload, str):
            return httpx.Response(status, text=payload)
        return httpx.Response(status, json=payload)

    async def test_posts_to_service_method_with_namespace(self):
        await self.sut.connect('n1')
        request, method, body = self.requests[0]
        assert_that(request.method, is_('POST'))
        assert_that(str(request.url), is_('http://daemon:8080/v1.AppDaemon/Connect'))
        assert_that(request.headers[NAMESPACE_HEADER], is_('test-ns'))
        assert_that(body, is_({'id': 'n1'}))

    async def test_list_connections(self):
        self.responses['ListConnections'] = (200, {'connections': {
            'n1': {'status': 'CONNECTED', 'parameters': {'addr': 'a'}, 'metadata': {'k': 'v'}},
            'n2': {},
        }})
        connections = await self.sut.list_connections()
        assert_that(list(connections), is_(['n1', 'n2']))
        assert_that(connections['n1'].status, is_(ConnectionStatus.CONNECTED))
        assert_that(connections['n1'].metadata, is_({'k': 'v'}))
        assert_that(connections['n2'].status, is_(ConnectionStatus.DISCONNECTED))

    async def test_list_connections_empty(self):
        assert_that(await self.sut.list_connections(), is_({}))

    async def test_get_connection(self):
        self.responses['GetConnection'] = (200, {'status': 'CONNECTING'})
        snapshot = await self.sut.get_connection('n1')
        assert_that(snapshot.status, is_(ConnectionStatus.CONNECTING))
        assert_that(self.requests[0][2], is_({'id': 'n1'}))

    async def test_put_connection_without_id(self):
        self.responses['PutConnection'] = (200, {'id': 'assigned'})
        id = await self.sut.put_connection(None, {'addr': 'a'}, {'k': 'v'})
        assert_that(id, is_('assigned'))
        assert_that(self.requests[0][2], is_({'parameters': {'addr': 'a'}, 'metadata': {'k': 'v'}}))

    async def test_put_connection_with_id(self):
        id = await self.sut.put_connection('mine', {}, {})
        assert_that(id, is_('mine'))
        assert_that(self.requests[0][2], has_entries(id='mine'))

    async def test_disconnect_and_drop(self):
        await self.sut.disconnect('n1')
        await self.sut.drop_connection('n1')
        assert_that([m for _, m, _ in self.requests], is_(['Disconnect', 'DropConnection']))

    async def test_metrics(self):
        self.responses['Metrics'] = (200, {'interfaces': {'n1': {'deviceName': 'wm0', 'numPeers': 4}}})
        metrics = await self.sut.metrics('n1')
        assert_that(metrics.num_peers, is_(4))
        assert_that(self.requests[0][2], is_({'ids': ['n1']}))

    async def test_metrics_missing_interface(self):
        with self.assertRaises(DaemonError) as raised:
            await self.sut.metrics('n1')
        assert_that(raised.exception.code, is_('not_found'))

    async def test_status(self):
        self.responses['Status'] = (200, {'nodeID': 'node-a', 'version': '1.0'})
        status = await self.sut.status()
        assert_that(status, instance_of(DaemonStatus))
        assert_that(status.node_id, is_('node-a'))

    async def test_connect_error_decoded(self):
        self.responses['GetConnection'] = (404, {'code': 'not_found', 'message': 'no such connection'})
        with self.assertRaises(DaemonError) as raised:
            await self.sut.get_connection('n1')
        assert_that(raised.exception.code, is_('not_found'))
        assert_that(raised.exception.message, is_('no such connection'))

    async def test_error_without_body(self):
        self.responses['Connect'] = (503, None)
        with self.assertRaises(DaemonError) as raised:
            await self.sut.connect('n1')
        assert_that(raised.exception.code, is_(None))
        assert_that(raised.exception.message, is_('Connect failed with HTTP 503'))

    async def test_transport_error_is_unavailable(self):
        self.responses['ListConnections'] = httpx.ConnectError('connection refused')
        with self.assertRaises(DaemonError) as raised:
            await self.sut.list_connections()
        assert_that(raised.exception.code, is_('unavailable'))
        assert_that(raised.exception.__cause__, instance_of(httpx.ConnectError))

    async def test_success_with_non_json_body_is_daemon_error(self):
        self.responses['GetConnection'] = (200, '<html>proxy</html>')
        with self.assertRaises(DaemonError) as raised:
            await self.sut.get_connection('n1')
        assert_that(raised.exception.code, is_('internal'))
        assert_that(raised.exception.message, is_('GetConnection returned an invalid response'))
        assert_that(raised.exception.__cause__, instance_of(ValueError))

    async def test_success_with_non_object_body_is_daemon_error(self):
        for method, call in (('ListConnections', self.sut.list_connections),
                             ('PutConnection', lambda: self.sut.put_connection(None, {}, {})),
                             ('Metrics', lambda: self.sut.metrics('n1'))):
            self.responses[method] = (200, ['n1'])
            with self.assertRaises(DaemonError) as raised:
                await call()
            assert_that(raised.exception.code, is_('internal'))

    async def test_timeout_is_deadline_exceeded(self):
        self.responses['Status'] = httpx.ReadTimeout('too slow')
        with self.assertRaises(DaemonError) as raised:
            await self.sut.status()
        assert_that(raised.exception.code, is_('deadline_exceeded'))


if __name__ == '__main__':  # pragma no cover
    unittest.main()
