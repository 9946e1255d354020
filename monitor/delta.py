"""
New-paste detection. Given a newest-first window, decide what hasn't been
delivered yet.

Two detectors, same contract:
- CursorDetector: remembers only the last delivered key (persisted).
- CacheDetector: remembers key -> publish timestamp for a while (in memory).

Both return new pastes oldest-first, so handlers see publication order, and
both expect commit() to be called once per paste after it was delivered.
"""

import logging
from abc import ABC, abstractmethod

from errors import NoPastesError
from models import Paste
from storage.cache import ExpiringCache
from storage.cursor import CursorStore

log = logging.getLogger(__name__)


def delta(window: list[Paste], last_key: str | None) -> tuple[list[Paste], str]:
    """
    Split a newest-first window against the last delivered key.

    Returns (new pastes oldest-first, key to remember). The key to remember is
    always the newest paste in the window.

    - No last key: first run, nothing is new. Starting up doesn't replay the
      whole window.
    - Last key in the window at position i: window[:i] is new.
    - Last key rotated out (more than len(window) pastes since the last poll):
      everything but the oldest slot is new. The oldest one is dropped.
    """
    if not window:
        raise NoPastesError("no pastes available")

    newest = window[0].key
    if not last_key:
        return [], newest

    match_pos = len(window) - 1
    for i, paste in enumerate(window):
        if paste.key == last_key:
            match_pos = i
            break
    else:
        log.warning(
            f"Last seen paste {last_key} is not in the window of {len(window)}; "
            f"some pastes were missed"
        )

    return list(reversed(window[:match_pos])), newest


class Detector(ABC):
    @abstractmethod
    def detect(self, window: list[Paste]) -> list[Paste]:
        """Return the pastes in `window` that are new, oldest first."""
        ...

    @abstractmethod
    def commit(self, paste: Paste) -> None:
        """Record that `paste` was delivered."""
        ...


class CursorDetector(Detector):
    """
    Last-key cursor over a CursorStore.

    The cursor is loaded once at construction and saved on every commit, so a
    crash mid-batch replays at most the paste that was being delivered.
    """

    def __init__(self, store: CursorStore):
        self._store = store
        self.last_key = store.load()
        if self.last_key:
            log.info(f"Resuming after paste {self.last_key}")

    def detect(self, window: list[Paste]) -> list[Paste]:
        new, newest = delta(window, self.last_key)
        # With new pastes the cursor reaches `newest` through commit(). Without
        # any (first run, or a one-paste window after a gap) move it here.
        if not new and newest != self.last_key:
            if not self.last_key:
                log.info(f"First run, starting after paste {newest}")
            self._store.save(newest)
            self.last_key = newest
        return new

    def commit(self, paste: Paste) -> None:
        self._store.save(paste.key)
        self.last_key = paste.key


class CacheDetector(Detector):
    """
    Seen-set keyed by paste key, valued by publish timestamp.

    A key seen with the same timestamp is skipped. A key seen with a different
    timestamp was republished and counts as new again. Entries expire, after
    which the paste may be delivered again.
    """

    def __init__(self, cache: ExpiringCache):
        self._cache = cache

    def detect(self, window: list[Paste]) -> list[Paste]:
        if not window:
            raise NoPastesError("no pastes available")

        self._cache.purge()
        new = []
        for paste in reversed(window):
            token = self._cache.get(paste.key)
            if token is None:
                new.append(paste)
            elif token != paste.freshness:
                log.debug(f"Paste {paste.key} republished ({token} -> {paste.freshness})")
                new.append(paste)
        return new

    def commit(self, paste: Paste) -> None:
        self._cache.set(paste.key, paste.freshness)
