"""
Monitor factory. Reads config, wires client, detector and handler together.
"""

from config.settings import Config
from delivery.handlers import ArchiveHandler, DirectoryHandler, LogHandler, PasteHandler
from monitor.delta import CacheDetector, CursorDetector, Detector
from monitor.poller import Monitor
from scraper.client import PastebinClient
from storage.cache import ExpiringCache
from storage.cursor import FileCursorStore
from storage.db import SQLiteCursorStore, Storage


def needs_storage(config: Config) -> bool:
    return config.state_backend == "sqlite" or config.handler == "archive"


def create_detector(config: Config, storage: Storage | None = None) -> Detector:
    """Create the new-paste detector for the configured state backend."""
    backend = config.state_backend

    if backend == "file":
        return CursorDetector(FileCursorStore(config.state_file))
    elif backend == "sqlite":
        if storage is None:
            raise ValueError("sqlite state backend needs a Storage")
        return CursorDetector(SQLiteCursorStore(storage))
    elif backend == "cache":
        return CacheDetector(ExpiringCache(config.cache_retention))
    else:
        raise ValueError(
            f"Unknown state backend: '{backend}'. "
            f"Set PBMON_STATE_BACKEND to 'file', 'sqlite', or 'cache'."
        )


def create_handler(config: Config, storage: Storage | None = None) -> PasteHandler:
    """Create the paste handler selected in config."""
    handler = config.handler

    if handler == "log":
        return LogHandler()
    elif handler == "directory":
        return DirectoryHandler(config.output_dir)
    elif handler == "archive":
        if storage is None:
            raise ValueError("archive handler needs a Storage")
        return ArchiveHandler(storage)
    else:
        raise ValueError(
            f"Unknown handler: '{handler}'. "
            f"Set PBMON_HANDLER to 'log', 'directory', or 'archive'."
        )


def create_monitor(
    config: Config,
    storage: Storage | None = None,
    handler: PasteHandler | None = None,
) -> Monitor:
    """Build a Monitor from config. Pass `handler` to plug in your own."""
    return Monitor(
        client=PastebinClient(config),
        detector=create_detector(config, storage),
        handler=handler or create_handler(config, storage),
        window_size=config.window_size,
        poll_interval=config.poll_interval,
    )
