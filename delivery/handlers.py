"""
Paste handlers. What happens to a new paste once it has been detected.

A handler gets the paste metadata and its raw body as an open binary stream.
The handler owns the stream and must close it. Raising anything aborts the
poll loop: a handler that can't keep up should say so, not drop pastes.
"""

import json
import logging
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO

from models import Paste
from storage.db import Storage

log = logging.getLogger(__name__)


class PasteHandler(ABC):
    @abstractmethod
    def handle(self, paste: Paste, body: BinaryIO) -> None:
        """Process one new paste. Must close `body`."""
        ...

    def name(self) -> str:
        return type(self).__name__


class LogHandler(PasteHandler):
    """Log one line per paste. The default."""

    def __init__(self, logger: logging.Logger | None = None):
        self._log = logger or log

    def handle(self, paste: Paste, body: BinaryIO) -> None:
        body.close()
        self._log.info(
            f"title={paste.title} user={paste.user} syntax={paste.syntax} url={paste.full_url}"
        )


class DirectoryHandler(PasteHandler):
    """
    Write each paste to <output_dir>/<key>.txt with a <key>.json metadata sidecar.

    Existing files for the same key are overwritten.
    """

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def handle(self, paste: Paste, body: BinaryIO) -> None:
        with body:
            body_path = self._path_for(paste.key, ".txt")
            meta_path = self._path_for(paste.key, ".json")
            with open(body_path, "wb") as out:
                shutil.copyfileobj(body, out)
        meta_path.write_text(json.dumps(paste.to_dict(), indent=2), encoding="utf-8")
        log.debug(f"Wrote {body_path}")

    def _path_for(self, key: str, suffix: str) -> Path:
        root = self.output_dir.resolve()
        path = (root / f"{key}{suffix}").resolve()
        if path.parent != root:
            raise ValueError(f"paste key {key!r} escapes {root}")
        return path


class ArchiveHandler(PasteHandler):
    """Store every paste, body included, in the SQLite archive."""

    def __init__(self, storage: Storage):
        self._storage = storage

    def handle(self, paste: Paste, body: BinaryIO) -> None:
        with body:
            data = body.read()
        if self._storage.insert_paste(paste, data):
            log.debug(f"Archived {paste.key} ({len(data)} bytes)")
        else:
            log.debug(f"Paste {paste.key} already archived")
