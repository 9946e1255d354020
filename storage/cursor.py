"""
Cursor stores. A cursor is the key of the last delivered paste.

Contract:
- load() returns "" when there is no history yet.
- save() is synchronous. When it returns, a restart resumes from that key.
- Any I/O failure raises StateError. Continuing without a saved cursor
  risks duplicate delivery on restart.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from errors import StateError

log = logging.getLogger(__name__)


class CursorStore(ABC):
    @abstractmethod
    def load(self) -> str:
        """Return the stored key, or "" if nothing has been stored yet."""
        ...

    @abstractmethod
    def save(self, key: str) -> None:
        """Replace the stored key."""
        ...

    def clear(self) -> None:
        self.save("")


class FileCursorStore(CursorStore):
    """
    One small file holding exactly the last key as raw bytes.

    The file is truncated and rewritten on every save. A missing or empty
    file means no history. Nothing is created on disk until the first save.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> str:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return ""
        except OSError as e:
            raise StateError(f"read state file {self.path}: {e}") from e

        try:
            return raw.decode("utf-8").strip()
        except UnicodeDecodeError as e:
            raise StateError(f"state file {self.path} is not a paste key: {e}") from e

    def save(self, key: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "r+b" if self.path.exists() else "wb") as f:
                f.truncate(0)
                f.seek(0)
                f.write(key.encode("utf-8"))
                f.flush()
        except OSError as e:
            raise StateError(f"save state to {self.path}: {e}") from e
        log.debug(f"Cursor saved to {self.path}: {key or '<empty>'}")

    def clear(self) -> None:
        if self.path.exists():
            self.save("")


class MemoryCursorStore(CursorStore):
    """Keeps the cursor in memory only. Useful for one-off runs."""

    def __init__(self, key: str = ""):
        self._key = key

    def load(self) -> str:
        return self._key

    def save(self, key: str) -> None:
        self._key = key
