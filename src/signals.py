import logging
from collections import namedtuple

SeedRefreshed = namedtuple("SeedRefreshed", ["marker", "seed"])
ErrorRecorded = namedtuple("ErrorRecorded", ["component", "operation", "code"])


class SignalBus:
    """
    Fan-out of engine notifications to external monitors.
    Subscribers only observe; nothing they return reaches the engine.
    """

    def __init__(self):
        self.subscribers = []

    def subscribe(self, callback):
        self.subscribers.append(callback)
        return callback

    def unsubscribe(self, callback):
        if callback in self.subscribers:
            self.subscribers.remove(callback)

    def emit(self, signal):
        logging.debug(f"[SignalBus] {type(signal).__name__}: {signal}")
        for callback in list(self.subscribers):
            callback(signal)

