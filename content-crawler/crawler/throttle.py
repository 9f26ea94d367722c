import random
import threading
from contextlib import contextmanager

from crawler.core import logger


class Throttle:
    """
    Randomized politeness delay between requests.

    The wait is an Event.wait, so setting the stop event ends it early and
    pause() reports the interruption by returning False.
    """

    def __init__(self, min_delay, max_delay, stop_event=None, name="throttle"):
        if min_delay < 0 or max_delay < min_delay:
            raise ValueError(f"invalid delay range: {min_delay}..{max_delay}")
        self.min_delay = min_delay
        self.max_delay = max_delay
        self.stop_event = stop_event or threading.Event()
        self.name = name

    @property
    def interrupted(self) -> bool:
        return self.stop_event.is_set()

    def pause(self) -> bool:
        if self.interrupted:
            return False
        delay = random.uniform(self.min_delay, self.max_delay)
        if delay <= 0:
            return True
        if self.stop_event.wait(delay):
            logger.warning(f"Delay of {delay:.1f}s interrupted", extra={'context': self.name})
            return False
        return True

    @contextmanager
    def spacing(self):
        """Runs the wrapped block, then pauses on the way out even if the block raised."""
        try:
            yield self
        finally:
            self.pause()
