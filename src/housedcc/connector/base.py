class ConnectorError(Exception):
    """ Indicates an error condition with a connection. """


class ConnectionNotConnectedError(ConnectorError):
    """ There is no conduit: the connector was never connected, or was disconnected. """


class ConnectionNotAvailableError(ConnectorError):
    """ The endpoint cannot be connected to. """


class AbstractConnector:
    """
    Manages the conduit to one endpoint. Subclasses name the endpoint, tell whether it is
    available and create the conduit.
    """

    def __init__(self):
        self._conduit = None

    @property
    def endpoint(self):
        raise NotImplementedError

    @property
    def available(self):
        return False if self.connected else self._try_available()

    @property
    def connected(self):
        return self._conduit is not None and self._conduit.open

    def connect(self):
        """
        Creates the conduit. Connecting a connected connector does nothing, and a conduit whose
        endpoint has gone away is released first.
        Raises ConnectorError if the connection cannot be established.
        """
        if self.connected:
            return
        self.disconnect()
        if not self.available:
            raise ConnectionNotAvailableError("%s is not available" % self.endpoint)
        self._conduit = self._connect()

    def disconnect(self):
        """ closes the conduit, whether or not the endpoint is still alive. """
        if self._conduit is None:
            return
        conduit, self._conduit = self._conduit, None
        conduit.close()

    @property
    def conduit(self):
        """
        The conduit last connected, even if its endpoint has since gone away.
        raises ConnectionNotConnectedError if there is no conduit
        """
        if self._conduit is None:
            raise ConnectionNotConnectedError("%s is not connected" % self.endpoint)
        return self._conduit

    def _connect(self):
        """ creates the conduit, raising ConnectorError when that is not possible. """
        raise NotImplementedError

    def _try_available(self):
        """ called only while disconnected. """
        raise NotImplementedError
