"""
Core data types. No behavior beyond decoding, just shapes.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone

_KEY_RE = re.compile(r"[A-Za-z0-9]+")


@dataclass(frozen=True)
class Paste:
    """A single paste as returned by the scraping API."""
    key: str                # unique, stable across fetches
    title: str
    user: str
    syntax: str             # language tag, e.g. "python", "text"
    date: datetime          # publish time, UTC
    full_url: str
    scrape_url: str = ""
    size: int = 0           # bytes
    expire: int = 0         # unix seconds, 0 = never
    freshness: str = ""     # raw publish timestamp, used to detect republication

    @classmethod
    def from_dict(cls, record: dict) -> "Paste":
        """
        Decode one record of the scraping API.

        The API sends every field as a string. Raises ValueError on a record
        that can't be a paste (not an object, or without a plain alphanumeric key).
        """
        if not isinstance(record, dict):
            raise ValueError(f"paste record must be an object, got {type(record).__name__}")

        key = str(record.get("key") or "").strip()
        if not key:
            raise ValueError("paste record has no key")
        if not _KEY_RE.fullmatch(key):
            raise ValueError(f"paste key {key!r} is not alphanumeric")

        raw_date = str(record.get("date") or "0")
        return cls(
            key=key,
            title=record.get("title") or "",
            user=record.get("user") or "",
            syntax=record.get("syntax") or "",
            date=_parse_unix(raw_date),
            full_url=record.get("full_url") or "",
            scrape_url=record.get("scrape_url") or "",
            size=_parse_int(record.get("size")),
            expire=_parse_int(record.get("expire")),
            freshness=raw_date,
        )

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "title": self.title,
            "user": self.user,
            "syntax": self.syntax,
            "date": self.date.isoformat(),
            "full_url": self.full_url,
            "scrape_url": self.scrape_url,
            "size": self.size,
            "expire": self.expire,
        }

    def __repr__(self) -> str:
        return f"Paste({self.key}, {self.title[:50]!r}, syntax={self.syntax})"


def _parse_int(value) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _parse_unix(value: str) -> datetime:
    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        raise ValueError(f"invalid paste date: {value!r}")
