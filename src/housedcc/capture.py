"""
Diagnostic capture: a record of each protocol line sent to or received from the command
generator, kept for troubleshooting.
"""
import logging
import time
from collections import deque, namedtuple

from housedcc.support.events import EventSource

logger = logging.getLogger(__name__)

CaptureRecord = namedtuple('CaptureRecord', 'timestamp category action text')


class Capture:
    """
    Keeps the most recent records of one category and notifies listeners of each new record.

    :param category: the name of the channel captured, such as "PIDCC".
    :param history: how many records are kept.
    """

    def __init__(self, category, history=256, clock=time.time):
        self.category = category
        self.records = deque(maxlen=history)
        self.events = EventSource()
        self.clock = clock

    def record(self, action, text=""):
        record = CaptureRecord(self.clock(), self.category, action, text)
        self.records.append(record)
        logger.debug("%s %s %s", self.category, action, text)
        self.events.fire(record)
        return record

    def actions(self):
        """ the actions of the records kept, oldest first. """
        return [r.action for r in self.records]

    def clear(self):
        self.records.clear()
