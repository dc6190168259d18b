"""
Tracks whether the PiDCC command generator can accept more commands, from the status lines
it writes on its standard output.

Each status line starts with a tag character, followed by a space and a free-form message.
The protocol carries no correlation with the commands sent: a status applies to the
generator as a whole.
"""
import logging
import time

from housedcc.support.events import EventSource

logger = logging.getLogger(__name__)


class Readiness:
    """ The readiness states, named after the tag that reports them. """
    idle = '#'
    busy = '%'
    full = '*'

    names = {idle: 'IDLE', busy: 'BUSY', full: 'FULL'}


class Tags:
    idle = Readiness.idle
    busy = Readiness.busy
    full = Readiness.full
    error = '!'
    debug = '$'

    # capture action for each tag
    actions = {idle: 'IDLE', busy: 'BUSY', full: 'FULL', error: 'ERROR', debug: 'DEBUG'}


class ReadinessTracker:
    """
    A state machine fed with the decoded status lines.

    Busy and full states expire after `timeout` seconds without a newer status; the tracker then
    falls back to idle. Only the full state refuses commands.

    :param capture: receives a record of each status line recognized.
    :param timeout: seconds a busy or full status remains valid.
    :param clock: returns the current time in seconds.
    """

    def __init__(self, capture, timeout=3, clock=time.time):
        self.capture = capture
        self.timeout = timeout
        self.clock = clock
        self.state = Readiness.idle
        self.deadline = None
        self.changes = EventSource()

    @property
    def accepting(self) -> bool:
        """ True when commands may be sent. Safety commands are sent regardless. """
        return self.state != Readiness.full

    @property
    def name(self):
        return Readiness.names[self.state]

    def decode(self, line):
        """
        Applies one status line. Lines with an unknown tag are ignored.
        :return: the capture action for the line, None when ignored.
        """
        if not line:
            return None
        tag = line[0]
        action = Tags.actions.get(tag)
        if action is None:
            logger.debug("ignored status line %r", line)
            return None
        self.capture.record(action, line[2:])
        if tag == Readiness.idle:
            self._change(Readiness.idle, None)
        elif tag in (Readiness.busy, Readiness.full):
            self._change(tag, self.clock() + self.timeout)
        elif tag == Tags.error:
            logger.warning("PiDCC error: %s", line[2:])
        return action

    def expire(self, now=None):
        """
        Falls back to idle when a busy or full status is older than its deadline,
        compensating for a status line that was lost.
        :return: True if the state expired.
        """
        now = self.clock() if now is None else now
        if self.deadline is not None and self.deadline < now:
            logger.info("%s status expired", self.name)
            self._change(Readiness.idle, None)
            self.capture.record('TIMEOUT')
            return True
        return False

    def _change(self, state, deadline):
        previous = self.state
        self.state = state
        self.deadline = deadline
        if previous != state:
            self.changes.fire(previous, state)
