"""
The poll loop: fetch the recent window, detect new pastes, hand each one to
the handler, record it as delivered. Repeat on a fixed interval.

Fail loud. Any error ends the loop; restarting is the supervisor's job and
the resume cursor makes the restart pick up where this run stopped.
"""

import logging
import threading
import time
from typing import Callable

from delivery.handlers import PasteHandler
from errors import HandlerError
from models import Paste
from monitor.delta import Detector
from scraper.client import PastebinClient

log = logging.getLogger(__name__)


class Monitor:
    """
    Single-threaded pastebin monitor.

    Cycles never overlap and the handler is never called concurrently. If a
    cycle outlasts the interval, the missed ticks collapse into one cycle that
    starts right away.
    """

    def __init__(
        self,
        client: PastebinClient,
        detector: Detector,
        handler: PasteHandler,
        window_size: int = 50,
        poll_interval: float = 10.0,
        clock: Callable[[], float] = time.monotonic,
        wait: Callable[[float], bool] | None = None,
    ):
        if window_size <= 0:
            raise ValueError(f"window_size must be positive, got {window_size}")
        if poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {poll_interval}")
        self.client = client
        self.detector = detector
        self.handler = handler
        self.window_size = window_size
        self.poll_interval = poll_interval
        self._clock = clock
        self._stop = threading.Event()
        # Returns True when stop() was called during the wait.
        self._wait = wait or self._stop.wait

    def process(self, paste: Paste) -> None:
        """Fetch the raw body of `paste` and pass it to the handler."""
        body = self.client.raw(paste.key)
        try:
            self.handler.handle(paste, body)
        except Exception as e:
            raise HandlerError(f"{self.handler.name()} failed on paste {paste.key}: {e}") from e

    def poll_once(self) -> list[Paste]:
        """
        Run one fetch-detect-dispatch cycle. Returns the pastes delivered.

        The cursor is committed after every delivered paste, so when a paste
        fails the marker points at the last one that made it.
        """
        window = self.client.recent(self.window_size)
        new = self.detector.detect(window)
        log.info(f"{len(new)} new of {len(window)} recent pastes")

        delivered = []
        for paste in new:
            self.process(paste)
            self.detector.commit(paste)
            delivered.append(paste)
        return delivered

    def run(self) -> None:
        """
        Poll until stop() is called or something fails.

        The first cycle runs immediately, the rest on interval ticks.
        """
        self._stop.clear()
        log.info(f"Polling every {self.poll_interval}s, {self.window_size} pastes per request")

        next_tick = self._clock()
        while not self._stop.is_set():
            delay = next_tick - self._clock()
            if delay > 0 and self._wait(delay):
                break

            self.poll_once()

            next_tick += self.poll_interval
            now = self._clock()
            if next_tick < now:
                log.debug(f"Cycle overran the {self.poll_interval}s interval; polling again now")
                next_tick = now

        log.info("Monitor stopped")

    def stop(self) -> None:
        """Ask run() to return before the next cycle. Safe from a signal handler."""
        self._stop.set()
