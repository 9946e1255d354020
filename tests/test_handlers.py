"""
Tests for paste handlers, config validation and monitor wiring.
"""

import io
import json
import logging
import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest
import sys

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.settings import (
    DEFAULT_CACHE_RETENTION,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_WINDOW_SIZE,
    Config,
    load_config,
)
from delivery.handlers import ArchiveHandler, DirectoryHandler, LogHandler
from models import Paste
from monitor.delta import CacheDetector, CursorDetector
from monitor.factory import create_detector, create_handler, create_monitor, needs_storage
from storage.db import Storage


# ──────────────────────────────────────────────
# Fixtures
# ──────────────────────────────────────────────

PASTE = Paste(
    key="AbCd1234",
    title="config dump",
    user="someone",
    syntax="yaml",
    date=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
    full_url="https://pastebin.com/AbCd1234",
    size=11,
    freshness="1714564800",
)


class TrackingStream(io.BytesIO):
    """BytesIO that remembers it was closed, even after close()."""

    def __init__(self, data: bytes):
        super().__init__(data)
        self.was_closed = False

    def close(self):
        self.was_closed = True
        super().close()


@pytest.fixture
def tmp_dir():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


def _config(tmp_dir: Path, **overrides) -> Config:
    base = {
        "state_file": tmp_dir / "state",
        "db_path": tmp_dir / "pbmon.db",
        "output_dir": tmp_dir / "pastes",
    }
    base.update(overrides)
    return Config(**base)


# ──────────────────────────────────────────────
# Handlers
# ──────────────────────────────────────────────

class TestLogHandler:
    def test_logs_metadata_and_closes(self, caplog):
        body = TrackingStream(b"key: value")
        with caplog.at_level(logging.INFO):
            LogHandler().handle(PASTE, body)

        assert body.was_closed
        assert "title=config dump user=someone syntax=yaml url=https://pastebin.com/AbCd1234" in caplog.text

    def test_custom_logger(self, caplog):
        logger = logging.getLogger("pbmon.test")
        with caplog.at_level(logging.INFO, logger="pbmon.test"):
            LogHandler(logger).handle(PASTE, TrackingStream(b""))
        assert caplog.records[-1].name == "pbmon.test"


class TestDirectoryHandler:
    def test_writes_body_and_metadata(self, tmp_dir):
        out = tmp_dir / "out"
        body = TrackingStream(b"key: value\n")
        DirectoryHandler(out).handle(PASTE, body)

        assert body.was_closed
        assert (out / "AbCd1234.txt").read_bytes() == b"key: value\n"
        meta = json.loads((out / "AbCd1234.json").read_text(encoding="utf-8"))
        assert meta["key"] == "AbCd1234"
        assert meta["syntax"] == "yaml"
        assert meta["date"] == "2024-05-01T12:00:00+00:00"

    def test_key_cannot_leave_output_dir(self, tmp_dir):
        out = tmp_dir / "out"
        paste = Paste(
            key="../escaped",
            title="t",
            user="u",
            syntax="text",
            date=PASTE.date,
            full_url="",
        )
        body = TrackingStream(b"x")
        with pytest.raises(ValueError, match="escapes"):
            DirectoryHandler(out).handle(paste, body)

        assert body.was_closed
        assert not (tmp_dir / "escaped.txt").exists()


class TestArchiveHandler:
    def test_archives_body(self, tmp_dir):
        storage = Storage(tmp_dir / "archive.db")
        try:
            body = TrackingStream(b"secret=hunter2")
            ArchiveHandler(storage).handle(PASTE, body)
            assert body.was_closed
            assert storage.get_paste_body("AbCd1234") == b"secret=hunter2"

            # Same paste again is a no-op, not an error
            ArchiveHandler(storage).handle(PASTE, TrackingStream(b"changed"))
            assert storage.get_paste_body("AbCd1234") == b"secret=hunter2"
        finally:
            storage.close()


# ──────────────────────────────────────────────
# Config
# ──────────────────────────────────────────────

class TestConfig:
    def test_documented_defaults(self):
        assert DEFAULT_WINDOW_SIZE == 50
        assert DEFAULT_POLL_INTERVAL == 10.0
        assert DEFAULT_CACHE_RETENTION == 600.0

    def test_paths_coerced(self, tmp_dir):
        config = _config(tmp_dir, state_file=str(tmp_dir / "s"), db_path=str(tmp_dir / "d.db"))
        assert isinstance(config.state_file, Path)
        assert isinstance(config.db_path, Path)

    def test_state_file_expands_home(self, tmp_dir):
        config = _config(tmp_dir, state_file="~/.pbmon")
        assert config.state_file == Path.home() / ".pbmon"

    @pytest.mark.parametrize("field,value", [
        ("window_size", 0),
        ("poll_interval", -1),
        ("cache_retention", 0),
        ("http_timeout", 0),
        ("http_timeout", -5),
        ("state_backend", "redis"),
        ("handler", "kafka"),
    ])
    def test_invalid_values(self, tmp_dir, field, value):
        with pytest.raises(ValueError):
            _config(tmp_dir, **{field: value})

    def test_load_config_ignores_unset_overrides(self, tmp_dir):
        config = load_config(
            state_file=tmp_dir / "state",
            window_size=5,
            poll_interval=None,
        )
        assert config.window_size == 5
        assert config.poll_interval > 0


# ──────────────────────────────────────────────
# Factory
# ──────────────────────────────────────────────

class TestFactory:
    def test_file_backend(self, tmp_dir):
        config = _config(tmp_dir, state_backend="file")
        assert isinstance(create_detector(config), CursorDetector)
        # Nothing on disk until a cursor is saved.
        assert not (tmp_dir / "state").exists()
        assert not needs_storage(config)

    def test_cache_backend(self, tmp_dir):
        config = _config(tmp_dir, state_backend="cache")
        assert isinstance(create_detector(config), CacheDetector)

    def test_sqlite_backend_needs_storage(self, tmp_dir):
        config = _config(tmp_dir, state_backend="sqlite")
        assert needs_storage(config)
        with pytest.raises(ValueError):
            create_detector(config)

        storage = Storage(config.db_path)
        try:
            assert isinstance(create_detector(config, storage), CursorDetector)
        finally:
            storage.close()

    def test_handlers(self, tmp_dir):
        assert isinstance(create_handler(_config(tmp_dir, handler="log")), LogHandler)
        assert isinstance(create_handler(_config(tmp_dir, handler="directory")), DirectoryHandler)
        with pytest.raises(ValueError):
            create_handler(_config(tmp_dir, handler="archive"))

    def test_create_monitor_with_custom_handler(self, tmp_dir):
        config = _config(tmp_dir, window_size=7, poll_interval=3.0)
        handler = LogHandler()
        monitor = create_monitor(config, handler=handler)
        assert monitor.handler is handler
        assert monitor.window_size == 7
        assert monitor.poll_interval == 3.0
