import logging
import time

from housedcc.support.cadence import TickCadence

logger = logging.getLogger(__name__)


class Supervisor:
    """
    Maintains the channel to the command generator from the periodic tick.

    On every tick, a stale busy or full status falls back to idle. On every liveness tick (every
    5th tick by default) the generator process is checked and, if it has exited, relaunched.
    A relaunch that fails leaves the channel dead until the next liveness tick tries again.

    :param channel: the ChannelTransport to maintain.
    :param readiness: the ReadinessTracker whose status expires.
    :param capture: records the death of the generator.
    :param cadence: decides which ticks check the liveness of the generator.
    """

    def __init__(self, channel, readiness, capture, cadence=None, log=logger):
        self.channel = channel
        self.readiness = readiness
        self.capture = capture
        self.cadence = cadence if cadence is not None else TickCadence(5)
        self.logger = log
        self.relaunches = 0

    def tick(self, now=None):
        """
        :param now: the current time in seconds.
        :return: True if the liveness of the generator was checked on this tick.
        """
        now = time.time() if now is None else now
        self.readiness.expire(now)
        check = self.cadence() <= 0
        if check:
            self.maintain()
        return check

    def maintain(self):
        """ relaunches the generator if it is gone. Returns True if a relaunch was attempted. """
        if not self.channel.deceased():
            return False
        self.capture.record('ERROR', 'PiDCC died')
        self.relaunches += 1
        if self.channel.relaunch():
            self.logger.info("PiDCC relaunched")
        else:
            self.logger.warning("PiDCC relaunch failed, will retry")
        return True
