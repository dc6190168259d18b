"""
The channel to the PiDCC command generator: an external process whose standard input receives
the command lines and whose standard output carries the status lines back.
"""
import logging
import os

from housedcc.connector.base import ConnectorError
from housedcc.protocol.io import LineReassembler
from housedcc.support.events import EventSource

logger = logging.getLogger(__name__)


class Lifecycle:
    not_started = 'not started'
    running = 'running'
    dead = 'dead'


class ChannelTransport:
    """
    Owns the generator process started by a connector. The read endpoint is registered with the
    event loop, and each complete line received is fired on `lines`, in order of arrival.

    Nothing here blocks: writes are a single non-blocking write, and reads drain only what
    is already available.

    :param connector: a ProcessConnector for the generator executable.
    :param loop: the event loop, with listen() and forget() methods.
    :param capture: records the I/O errors and process events for diagnostics.
    """

    def __init__(self, connector, loop, capture, reassembler=None, log=logger):
        self.connector = connector
        self.loop = loop
        self.capture = capture
        self.reassembler = reassembler if reassembler is not None else LineReassembler()
        self.lifecycle = Lifecycle.not_started
        self.lines = EventSource()
        self.logger = log
        self._conduit = None

    @property
    def running(self):
        return self.lifecycle == Lifecycle.running

    @property
    def pid(self):
        return self._conduit.pid if self._conduit is not None else None

    def initialize(self):
        """ starts the generator. Returns True if it was started. """
        return self._launch()

    def relaunch(self):
        """ stops any previous generator before starting a new one. """
        self._teardown()
        return self._launch()

    def write_line(self, text) -> bool:
        """
        Writes one line to the generator. The write is not retried: a partial write is reported
        as a failure, the same as a write error.
        """
        if not self.running:
            self.capture.record('ERROR', 'not running: %s' % text)
            return False
        data = (text + "\n").encode('ascii')
        try:
            written = os.write(self._conduit.output.fileno(), data)
        except BlockingIOError:
            self.capture.record('ERROR', 'write(): pipe full')
            return False
        except OSError as e:
            self.capture.record('ERROR', 'write(): %s' % e)
            return False
        if written != len(data):
            self.capture.record('ERROR', 'write(): %d of %d bytes' % (written, len(data)))
            return False
        return True

    def deceased(self) -> bool:
        """
        Checks, without blocking, whether the generator is gone. An exited generator is released
        before returning, so that a replacement can be started.
        """
        if not self.running:
            return True
        if self._conduit.open:
            return False
        code = self._conduit.exit_code
        self.logger.error("PiDCC process %s died, exit code %s", self.pid, code)
        self.capture.record('DIED', 'exit code %s' % code)
        self._teardown()
        self.lifecycle = Lifecycle.dead
        return True

    def close(self):
        self._teardown()
        self.lifecycle = Lifecycle.dead

    def _launch(self):
        try:
            self.connector.connect()
        except ConnectorError as e:
            self.logger.error("cannot launch %s: %s", self.connector.endpoint, e)
            self.capture.record('FAILED', str(e))
            self.lifecycle = Lifecycle.dead
            return False
        self._conduit = self.connector.conduit
        self.reassembler.reset()
        self.loop.listen(self._conduit.input, self._receive)
        self.lifecycle = Lifecycle.running
        self.logger.info("PiDCC started %s, pid %s", self.connector.endpoint, self.pid)
        self.capture.record('START', 'pid %s' % self.pid)
        return True

    def _teardown(self):
        conduit = self._conduit
        if conduit is None:
            return
        self.loop.forget(conduit.input)
        self._conduit = None
        self.connector.disconnect()

    def _receive(self, stream):
        """ called by the event loop when the read endpoint is readable. """
        reassembler = self.reassembler
        while True:
            try:
                data = os.read(stream.fileno(), reassembler.room or reassembler.capacity)
            except BlockingIOError:
                return
            except OSError as e:
                self.capture.record('ERROR', 'read(): %s' % e)
                self.loop.forget(stream)
                return
            if not data:
                # the process is gone, or going: the liveness check will tell
                self.capture.record('ERROR', 'read(): end of stream')
                self.loop.forget(stream)
                return
            for line in reassembler.feed(data):
                self.lines.fire(line)
