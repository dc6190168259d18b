class EventSource(object):
    """
    A list of handlers that are each called with the arguments passed to fire().
    Handlers are called in the order they were added, on the caller's thread.
    """

    def __init__(self):
        self._handlers = []

    def __iadd__(self, handler):
        return self.add(handler)

    def __isub__(self, handler):
        return self.remove(handler)

    def add(self, handler):
        if handler not in self._handlers:
            self._handlers.append(handler)
        return self

    def remove(self, handler):
        if handler in self._handlers:
            self._handlers.remove(handler)
        return self

    def handlers(self):
        return tuple(self._handlers)

    def fire(self, *args, **kwargs):
        # a handler may remove itself while being notified
        for handler in self.handlers():
            handler(*args, **kwargs)
