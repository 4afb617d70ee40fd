"""
The daemon package is the remote procedure boundary to the daemon process that owns the
authoritative connection state. DaemonClient defines the calls; HttpDaemonClient makes them over
HTTP and InMemoryDaemonClient answers them in-process.
"""
