"""
The core-facing API of the PiDCC channel: translates locomotive and accessory commands into
command lines for the generator, subject to the generator's readiness.

Every command returns whether it was accepted for transmission, not whether a decoder acted
upon it. A refused command is not queued: the caller retries if it still matters.
"""
import logging
import time

from housedcc.capture import Capture
from housedcc.channel import ChannelTransport
from housedcc.connector.processconn import ProcessConnector
from housedcc.protocol import dcc
from housedcc.protocol.dcc import DccEncodingError
from housedcc.protocol.io import LineReassembler
from housedcc.protocol.readiness import ReadinessTracker
from housedcc.support.cadence import TickCadence
from housedcc.supervisor import Supervisor

logger = logging.getLogger(__name__)

DEFAULT_EXECUTABLE = "/usr/local/bin/pidcc"


class PiDccController:
    """
    Sends DCC commands through the channel to the PiDCC generator.

    The channel is enabled once at least one output pin is configured. When disabled, commands
    are still rendered and captured, but not written, and they report success.
    """

    def __init__(self, channel: ChannelTransport, readiness: ReadinessTracker, capture: Capture,
                 supervisor: Supervisor=None):
        self.channel = channel
        self.readiness = readiness
        self.capture = capture
        self.supervisor = supervisor if supervisor is not None else Supervisor(channel, readiness, capture)
        self.pin_a = 0
        self.pin_b = 0
        channel.lines.add(readiness.decode)

    @classmethod
    def create(cls, loop, executable=DEFAULT_EXECUTABLE, status_timeout=3, liveness_ticks=5,
               buffer_size=1024, buffer_margin=128, clock=time.time):
        """ assembles a controller for the generator executable, with its reads dispatched by the loop. """
        capture = Capture("PIDCC", clock=clock)
        channel = ChannelTransport(ProcessConnector(executable), loop, capture,
                                   LineReassembler(buffer_size, buffer_margin))
        readiness = ReadinessTracker(capture, status_timeout, clock)
        supervisor = Supervisor(channel, readiness, capture, TickCadence(liveness_ticks))
        return cls(channel, readiness, capture, supervisor)

    @property
    def enabled(self):
        return self.pin_a > 0 or self.pin_b > 0

    def initialize(self):
        """ starts the generator. A generator that cannot start is retried by the periodic tick. """
        return self.channel.initialize()

    def configure_pins(self, pin_a, pin_b=0):
        self.pin_a = int(pin_a)
        self.pin_b = int(pin_b)
        if not self.enabled:
            return False
        return self._write(dcc.pin_line(self.pin_a, self.pin_b))

    def reload(self, section):
        """ applies the pins of a configuration section, typically on restart or change. """
        self.configure_pins(section.get('pin_a', 0), section.get('pin_b', 0))

    def export_config(self):
        return {'pin_a': self.pin_a, 'pin_b': self.pin_b}

    def move(self, address, speed) -> bool:
        """
        Sets one locomotive's speed. A positive speed moves forward, a negative speed in reverse.
        Speeds beyond 28 steps are clamped.
        """
        try:
            dcc.check_locomotive(address)
            instruction = dcc.speed_instruction(speed)
        except DccEncodingError as e:
            logger.debug("move refused: %s", e)
            return False
        if not self._ready():
            return False
        return self._write(dcc.send_line(address, instruction))

    def stop(self, address=dcc.ALL_LOCOMOTIVES, emergency=False) -> bool:
        """
        Stops one locomotive, or all locomotives for address 0. A stop is a safety command and is
        sent whatever the generator's readiness.
        """
        try:
            dcc.check_stop_address(address)
        except DccEncodingError as e:
            logger.debug("stop refused: %s", e)
            return False
        return self._write(dcc.send_line(address, dcc.stop_instruction(emergency)))

    def set_function(self, address, instruction) -> bool:
        """ sends a function group instruction, as built by dcc.function_instruction(). """
        try:
            dcc.check_locomotive(address)
        except DccEncodingError as e:
            logger.debug("function refused: %s", e)
            return False
        if not 0 <= instruction <= 0xff:
            logger.debug("function refused: invalid instruction %s", instruction)
            return False
        if not self._ready():
            return False
        return self._write(dcc.send_line(address, instruction))

    def set_accessory(self, address, device, value) -> bool:
        try:
            low, high = dcc.accessory_instructions(address, device, value)
        except DccEncodingError as e:
            logger.debug("accessory refused: %s", e)
            return False
        if not self._ready():
            return False
        return self._write(dcc.send_line(low, high))

    def periodic(self, now=None):
        self.supervisor.tick(now)

    def _ready(self):
        if self.readiness.accepting:
            return True
        logger.debug("PiDCC is %s, command refused", self.readiness.name)
        return False

    def _write(self, line):
        submit = self.enabled
        self.capture.record('WRITE' if submit else 'BUILT', line)
        if not submit:
            return True
        return self.channel.write_line(line)
