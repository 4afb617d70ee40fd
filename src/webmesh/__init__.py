"""


Mesh network connections, as seen from a client of the webmesh daemon

- Daemon: the long-running process that owns the connection state. It is reached through a remote
  procedure interface, DaemonClient. HttpDaemonClient calls a real daemon, InMemoryDaemonClient
  plays one in-process.
- Network: the local entity for one connection - id, status, parameters and metadata. A network
  can connect, disconnect, drop and sample metrics for its own connection through the client.
- ConnectionRegistry: the local, ordered view of all networks, keyed by id. It is replaced wholesale
  by each list refresh and updated piecemeal by workflows. Listeners receive
  NetworkAdded/Changed/RemovedEvent.
- PollingScheduler: refreshes the registry every poll interval, and samples metrics for
  connections on request (MetricsObservable). Polling errors are stored, not raised.
- WorkflowOrchestrator: the operations - list, put, get, connect, disconnect, drop - each composed
  of daemon calls run one after another. The first failure ends the operation.
- Session: ties the above together. open() builds it and starts polling, close() stops it.


## Concurrency

Everything runs on one asyncio event loop. Daemon calls are coroutines, so other timers and
operations run while a call is waiting. The registry is only changed by plain method calls and so
needs no locking, but changes land in the order calls complete, not the order they were made:

- a get_network() that completes after a refresh re-applies its fresher entry on top. Harmless.
- a refresh that was in flight when a network was dropped would bring it back. The registry
  remembers recent removals to leave such networks out; a refresh started after the removal is
  trusted again.

drop_network() removes the network locally even when the daemon fails to drop it. The error is still
raised, but the local view treats the connection as gone until a refresh reports it again.
"""
