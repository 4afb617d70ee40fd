import os

from webmesh.config.config import apply_conf_path, load_config
from webmesh.daemon.http import HttpDaemonClient
from webmesh.support.mixins import CommonEqualityMixin, StringerMixin

DEFAULT_DAEMON_ADDRESS = 'http://127.0.0.1:58080'
DEFAULT_NAMESPACE = 'webmesh'
DEFAULT_POLL_INTERVAL = 5.0

# the section of the configuration holding the options
options_path = ('webmesh', 'options')


class DaemonOptions(CommonEqualityMixin, StringerMixin):
    """
    Options for a session with a daemon.

    :param daemon_address: the URL of the daemon
    :param namespace: the namespace attached to every call
    :param poll_interval: seconds between full refreshes of the connection list
    :param metrics_poll_interval: seconds between metric samples, unless overridden per request
    :param timeout: per-request transport timeout in seconds
    """

    def __init__(self, daemon_address=DEFAULT_DAEMON_ADDRESS, namespace=DEFAULT_NAMESPACE,
                 poll_interval=DEFAULT_POLL_INTERVAL, metrics_poll_interval=DEFAULT_POLL_INTERVAL, timeout=10.0):
        self.daemon_address = daemon_address or DEFAULT_DAEMON_ADDRESS
        self.namespace = namespace or DEFAULT_NAMESPACE
        self.poll_interval = poll_interval
        self.metrics_poll_interval = metrics_poll_interval
        self.timeout = timeout

    def client(self, transport=None):
        """
        Builds a client for the daemon these options describe.
        :param transport: an optional httpx transport to send requests through
        """
        return HttpDaemonClient(self.daemon_address, self.namespace, self.timeout, transport=transport)


def load_options(config_name='webmesh', directory=None, user_directory='~', **overrides) -> DaemonOptions:
    """
    Loads options from the layered configuration files named config_name.

    :param directory: where the configuration files live. Defaults to this package's directory,
        which holds the shipped defaults and schema.
    :param overrides: option values that take precedence over the configuration
    """
    if directory is None:
        directory = os.path.dirname(__file__)
    options = DaemonOptions()
    apply_conf_path(load_config(config_name, directory, user_directory), options_path, options)
    for k, v in overrides.items():
        if k not in vars(options):
            raise TypeError("unknown option '%s'" % k)
        setattr(options, k, v)
    return options
