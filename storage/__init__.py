from storage.cache import ExpiringCache
from storage.cursor import CursorStore, FileCursorStore, MemoryCursorStore
from storage.db import SQLiteCursorStore, Storage

__all__ = [
    "CursorStore",
    "ExpiringCache",
    "FileCursorStore",
    "MemoryCursorStore",
    "SQLiteCursorStore",
    "Storage",
]
