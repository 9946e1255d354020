"""
Configuration. All settings from env vars or a .env file.
No YAML. No TOML parsing. One dataclass, passed explicitly to whatever needs it.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

# Auto-load .env file so you don't need `export $(grep ...)` every time
from dotenv import load_dotenv
load_dotenv()

STATE_BACKENDS = ("file", "sqlite", "cache")
HANDLERS = ("log", "directory", "archive")

DEFAULT_WINDOW_SIZE = 50
DEFAULT_POLL_INTERVAL = 10.0
DEFAULT_CACHE_RETENTION = 600.0


def _default_state_file() -> Path:
    return Path(os.environ.get("PBMON_STATE_FILE", "~/.pbmon")).expanduser()


@dataclass
class Config:
    # Scraping API. Your IP must be whitelisted by pastebin for this to answer.
    base_url: str = os.environ.get("PBMON_BASE_URL", "https://scrape.pastebin.com")
    user_agent: str = os.environ.get("PBMON_USER_AGENT", "pbmon/0.1")
    http_timeout: float = float(os.environ.get("PBMON_HTTP_TIMEOUT", "30"))

    # How many pastes to request per poll, and how often to poll (seconds).
    window_size: int = int(os.environ.get("PBMON_WINDOW_SIZE", str(DEFAULT_WINDOW_SIZE)))
    poll_interval: float = float(os.environ.get("PBMON_POLL_INTERVAL", str(DEFAULT_POLL_INTERVAL)))

    # Resume marker: "file" | "sqlite" | "cache"
    state_backend: str = os.environ.get("PBMON_STATE_BACKEND", "file")
    state_file: Path = field(default_factory=_default_state_file)
    db_path: Path = Path(os.environ.get("PBMON_DB_PATH", "data/pbmon.db"))

    # Cache backend only. Seen keys are forgotten after this many seconds.
    cache_retention: float = float(os.environ.get("PBMON_CACHE_RETENTION", str(DEFAULT_CACHE_RETENTION)))

    # What to do with a new paste: "log" | "directory" | "archive"
    handler: str = os.environ.get("PBMON_HANDLER", "log")
    output_dir: Path = Path(os.environ.get("PBMON_OUTPUT_DIR", "data/pastes"))

    def __post_init__(self):
        self.state_file = Path(self.state_file).expanduser()
        self.db_path = Path(self.db_path)
        self.output_dir = Path(self.output_dir)

        if self.window_size <= 0:
            raise ValueError(f"window_size must be positive, got {self.window_size}")
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.cache_retention <= 0:
            raise ValueError(f"cache_retention must be positive, got {self.cache_retention}")
        if self.http_timeout <= 0:
            raise ValueError(f"http_timeout must be positive, got {self.http_timeout}")
        if self.state_backend not in STATE_BACKENDS:
            raise ValueError(f"unknown state backend {self.state_backend!r}, expected one of {STATE_BACKENDS}")
        if self.handler not in HANDLERS:
            raise ValueError(f"unknown handler {self.handler!r}, expected one of {HANDLERS}")


def load_config(**overrides) -> Config:
    """Build a Config from the environment, with explicit overrides (e.g. CLI flags) on top."""
    return Config(**{k: v for k, v in overrides.items() if v is not None})
