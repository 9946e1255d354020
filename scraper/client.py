"""
Pastebin scraping API client. Uses requests.

Two calls, both plain GETs:
- api_scraping.php?limit=N   -> JSON array of the N most recent pastes, newest first
- api_scrape_item.php?i=KEY  -> raw paste body

No retries. A failed call raises FetchError and the poll loop decides what to do.
"""

import logging
from typing import BinaryIO

import requests

from config.settings import Config
from errors import FetchError
from models import Paste

log = logging.getLogger(__name__)


class PastebinClient:
    def __init__(self, config: Config, session: requests.Session | None = None):
        self._base_url = config.base_url.rstrip("/")
        self._timeout = config.http_timeout
        self._session = session or requests.Session()
        self._session.headers["User-Agent"] = config.user_agent

    def recent(self, limit: int) -> list[Paste]:
        """Fetch the `limit` most recent pastes, newest first."""
        if not isinstance(limit, int) or isinstance(limit, bool) or limit <= 0:
            raise ValueError(f"limit must be a positive integer, got {limit!r}")

        url = f"{self._base_url}/api_scraping.php"
        try:
            resp = self._session.get(url, params={"limit": limit}, timeout=self._timeout)
        except requests.RequestException as e:
            raise FetchError(f"request to {url}: {e}") from e

        try:
            if resp.status_code != 200:
                raise FetchError(f"{url} returned status code {resp.status_code}")
            try:
                records = resp.json()
            except ValueError as e:
                raise FetchError(f"decode json from {url}: {e}") from e
        finally:
            resp.close()

        if not isinstance(records, list):
            raise FetchError(f"{url} returned {type(records).__name__}, expected a list")

        try:
            pastes = [Paste.from_dict(r) for r in records]
        except ValueError as e:
            raise FetchError(f"malformed paste from {url}: {e}") from e

        log.debug(f"Fetched {len(pastes)} recent pastes (limit={limit})")
        return pastes[:limit]

    def raw(self, key: str) -> BinaryIO:
        """
        Open the raw body of a paste as a stream.

        The caller owns the returned stream and must close it.
        """
        url = f"{self._base_url}/api_scrape_item.php"
        try:
            resp = self._session.get(url, params={"i": key}, timeout=self._timeout, stream=True)
        except requests.RequestException as e:
            raise FetchError(f"request to {url} for {key}: {e}") from e

        if resp.status_code != 200:
            resp.close()
            raise FetchError(f"{url} returned status code {resp.status_code} for {key}")

        resp.raw.decode_content = True
        return resp.raw

    def close(self):
        self._session.close()
