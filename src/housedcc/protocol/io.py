"""
Line reassembly over a fixed size buffer.
"""
import logging

logger = logging.getLogger(__name__)

TERMINATORS = b"\r\n"


class LineReassembler:
    """
    Splits the bytes arriving from a stream into lines terminated by a newline or a carriage return.

    Data is accumulated in a buffer of fixed capacity: the bytes between `consumer` and `producer`
    are the start of a line that has not been terminated yet, and
    0 <= consumer <= producer <= capacity always holds.

    Empty lines are skipped. When less than `margin` bytes remain free after a feed, the pending
    bytes are moved to the start of the buffer. A single line that fills the whole buffer cannot
    be kept: its bytes are discarded and the next bytes start a new line.
    """

    def __init__(self, capacity=1024, margin=128, encoding='ascii'):
        if not 0 <= margin < capacity:
            raise ValueError("margin %s must be less than the capacity %s" % (margin, capacity))
        self.buffer = bytearray(capacity)
        self.margin = margin
        self.encoding = encoding
        self.consumer = 0
        self.producer = 0
        self.overflows = 0

    @property
    def capacity(self):
        return len(self.buffer)

    @property
    def room(self):
        """ the number of bytes that can be fed before the buffer is full. """
        return self.capacity - self.producer

    @property
    def pending(self) -> bytes:
        """ the bytes received for the line not yet terminated. """
        return bytes(self.buffer[self.consumer:self.producer])

    def feed(self, data) -> list:
        """
        Appends the data received and returns the lines it completes, in order of arrival.
        Data larger than the available room is fed in several passes.
        """
        lines = []
        view = memoryview(data)
        while len(view):
            if not self.room:
                self._overflow()
            count = min(self.room, len(view))
            self._append(view[:count], lines)
            view = view[count:]
        return lines

    def reset(self):
        self.consumer = self.producer = 0

    def _append(self, data, lines):
        start = self.producer
        self.buffer[start:start + len(data)] = data
        self.producer += len(data)

        # a terminator before start was already consumed
        for i in range(max(start, self.consumer), self.producer):
            if self.buffer[i] in TERMINATORS:
                if i > self.consumer:
                    lines.append(self._decode(self.consumer, i))
                self.consumer = i + 1

        if self.consumer >= self.producer:
            self.reset()
        elif self.producer >= self.capacity - self.margin:
            self._compact()

    def _decode(self, begin, end):
        return self.buffer[begin:end].decode(self.encoding, errors='replace')

    def _compact(self):
        length = self.producer - self.consumer
        self.buffer[0:length] = self.buffer[self.consumer:self.producer]
        self.consumer = 0
        self.producer = length

    def _overflow(self):
        self.overflows += 1
        logger.warning("line longer than %d bytes discarded", self.capacity)
        self.reset()
