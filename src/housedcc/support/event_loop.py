"""
A single-threaded event loop that dispatches readability of file objects and periodic
background callbacks. All callbacks run on the thread calling run(), so the state they touch
needs no locking.
"""
import logging
import selectors
import time

logger = logging.getLogger(__name__)


class SelectorLoop:
    """
    Waits for registered file objects to become readable and calls the matching listener.
    Background callbacks are called with the current time once per period.

    Exceptions raised by callbacks are logged and do not stop the loop.
    """

    def __init__(self, selector=None, clock=time.time, log=logger):
        self.selector = selector if selector is not None else selectors.DefaultSelector()
        self.clock = clock
        self.logger = log
        self._background = []
        self._running = False

    def listen(self, fileobj, callback):
        """
        Registers a file object for readability. Only one listener is kept per file object.
        :param callback: called with the file object each time it is readable.
        """
        try:
            self.selector.modify(fileobj, selectors.EVENT_READ, callback)
        except KeyError:
            self.selector.register(fileobj, selectors.EVENT_READ, callback)

    def forget(self, fileobj):
        """ Stops listening to a file object. Forgetting an unknown file object is a no-op. """
        try:
            self.selector.unregister(fileobj)
            return True
        except (KeyError, ValueError):
            return False

    def listening(self, fileobj):
        try:
            self.selector.get_key(fileobj)
            return True
        except (KeyError, ValueError):
            return False

    def background(self, callback, period=1.0):
        """ Registers a callback called with the current time every period seconds. """
        self._background.append(_Periodic(callback, period))

    def run_once(self, timeout=None):
        """
        Dispatches the file objects that are readable within the timeout, then any background
        callbacks that are due.
        """
        wait = self._next_due()
        if timeout is not None:
            wait = timeout if wait is None else min(wait, timeout)
        for key, _ in self.selector.select(wait):
            self._do(key.data, key.fileobj)
        now = self.clock()
        for periodic in self._background:
            if periodic.due(now):
                self._do(periodic.callback, now)

    def run(self):
        self._running = True
        while self._running:
            self.run_once()
        logger.info("event loop stopped")

    def stop(self):
        self._running = False

    def close(self):
        self.selector.close()

    def _next_due(self):
        if not self._background:
            return None
        now = self.clock()
        return max(0, min(p.next_time - now for p in self._background))

    def _do(self, callme, *args):
        try:
            callme(*args)
        except Exception as e:
            self.logger.exception(e)


class _Periodic:
    def __init__(self, callback, period):
        self.callback = callback
        self.period = period
        self.next_time = 0

    def due(self, now):
        if now < self.next_time:
            return False
        self.next_time = now + self.period
        return True
