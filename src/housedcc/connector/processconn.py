import logging
import os

from housedcc.conduit.process_conduit import ProcessConduit
from housedcc.connector.base import AbstractConnector, ConnectorError

logger = logging.getLogger(__name__)


class ProcessConnector(AbstractConnector):
    """ Instantiates a process and connects to it via standard in/out. """

    def __init__(self, image, args=None, cwd=None):
        super().__init__()
        self.image = image
        self.args = args
        self.cwd = cwd

    @property
    def endpoint(self):
        return self.image

    @property
    def pid(self):
        return self._conduit.pid if self._conduit is not None else None

    def _connect(self) -> ProcessConduit:
        try:
            args = self.args if self.args is not None else []
            return ProcessConduit(self.image, *args, cwd=self.cwd)
        except (OSError, ValueError) as e:
            logger.error("cannot start %s: %s", self.image, e)
            raise ConnectorError("cannot start %s: %s" % (self.image, e)) from e

    def _try_available(self):
        return self._is_executable(self.image)

    @staticmethod
    def _is_executable(file):
        """
        Determines if the given file is executable.
        :param file: the filename to check.
        :return: True if the file is executable.
        """
        return os.path.isfile(file) and os.access(file, os.X_OK)
