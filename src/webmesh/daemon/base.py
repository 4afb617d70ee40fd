from abc import abstractmethod


class DaemonError(IOError):
    """
    Indicates a remote procedure call to the daemon failed, either in transport or
    because the daemon reported an error.

    :param message: a description of the failure
    :param code: the well-known cause, as a Connect/gRPC code name such as 'not_found' or 'unavailable'.
        None when the cause is not known.
    """

    def __init__(self, message, code=None):
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self):
        return self.message if not self.code else '[%s] %s' % (self.code, self.message)


class InvalidArgumentError(DaemonError, ValueError):
    """ A request was rejected locally before reaching the daemon. """

    def __init__(self, message):
        super().__init__(message, 'invalid_argument')


class DaemonClient:
    """
    The remote procedure interface of the daemon that owns the connection state.
    All methods are coroutines. Errors are raised as DaemonError.
    """

    @abstractmethod
    async def status(self):
        """
        :return: the daemon's health and version information
        :rtype: webmesh.network.DaemonStatus
        """
        raise NotImplementedError

    @abstractmethod
    async def list_connections(self) -> dict:
        """
        :return: a mapping from connection id to ConnectionSnapshot for every connection the daemon knows.
        """
        raise NotImplementedError

    @abstractmethod
    async def get_connection(self, id):
        """
        :return: the ConnectionSnapshot for the connection with the given id
        """
        raise NotImplementedError

    @abstractmethod
    async def put_connection(self, id, parameters, metadata) -> str:
        """
        Creates or replaces a connection.
        :param id: the id for the connection. When None, the daemon assigns one.
        :return: the id of the connection
        """
        raise NotImplementedError

    @abstractmethod
    async def connect(self, id):
        raise NotImplementedError

    @abstractmethod
    async def disconnect(self, id):
        raise NotImplementedError

    @abstractmethod
    async def drop_connection(self, id):
        """ disconnects the connection and deletes all daemon-side data for it. """
        raise NotImplementedError

    @abstractmethod
    async def metrics(self, id):
        """
        :return: a Metrics sample for the connection with the given id
        """
        raise NotImplementedError

    async def aclose(self):
        """ releases any resources held by the client. """
