class TickCadence:
    """
    Counts periodic ticks and becomes due on every n'th tick.
    The first tick that is due is the n'th one counted, not the first.
    """

    def __init__(self, every, ticks=0):
        """
        :param every: the number of ticks between two due ticks. Must be at least 1.
        :param ticks: the number of ticks already counted.
        """
        if every < 1:
            raise ValueError("cadence must be at least one tick, not %s" % every)
        self.every = every
        self.ticks = ticks

    def __call__(self):
        """ counts one tick and returns the number of ticks until due, 0 when due now. """
        self.ticks += 1
        remainder = self.ticks % self.every
        return 0 if not remainder else self.every - remainder
