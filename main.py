#!/usr/bin/env python3
"""
pbmon: watch pastebin's scraping API and act on every new paste.

Usage:
    python main.py run                  # Poll forever (Ctrl-C or SIGTERM to stop)
    python main.py once                 # Run a single poll cycle
    python main.py state                # Show the stored resume cursor
    python main.py reset                # Forget the resume cursor
    python main.py stats                # Show archive stats (archive handler)
    python main.py show KEY             # Print an archived paste body
"""

import argparse
import logging
import signal
import sys

from config import load_config
from errors import MonitorError
from monitor.factory import create_monitor, needs_storage
from monitor.poller import Monitor
from storage import FileCursorStore, SQLiteCursorStore, Storage

log = logging.getLogger("pbmon")


def setup_logging(verbose: bool = False):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def cmd_run(monitor: Monitor) -> int:
    """Poll until stopped. Any monitor error is fatal."""
    def _stop(signum, frame):
        log.info(f"Received signal {signum}, stopping after the current cycle")
        monitor.stop()

    signal.signal(signal.SIGTERM, _stop)
    signal.signal(signal.SIGINT, _stop)

    try:
        monitor.run()
    except MonitorError as e:
        log.error(f"Monitor failed: {e}")
        return 1
    return 0


def cmd_once(monitor: Monitor) -> int:
    """One fetch-detect-dispatch cycle."""
    try:
        delivered = monitor.poll_once()
    except MonitorError as e:
        log.error(f"Poll failed: {e}")
        return 1
    print(f"Delivered {len(delivered)} new pastes")
    return 0


def cmd_state(config, storage) -> int:
    """Print the stored resume cursor."""
    if config.state_backend == "cache":
        print("Cache backend keeps no persisted state.")
        return 0
    store = SQLiteCursorStore(storage) if config.state_backend == "sqlite" else FileCursorStore(config.state_file)
    key = store.load()
    print(f"Last delivered paste: {key or '(none, next run starts fresh)'}")
    return 0


def cmd_reset(config, storage) -> int:
    """Forget the resume cursor. The next run starts from the newest paste."""
    if config.state_backend == "cache":
        print("Cache backend keeps no persisted state.")
        return 0
    store = SQLiteCursorStore(storage) if config.state_backend == "sqlite" else FileCursorStore(config.state_file)
    store.clear()
    print("Resume cursor cleared.")
    return 0


def cmd_stats(storage) -> int:
    """Print archive stats."""
    stats = storage.get_stats()
    print(f"Total pastes: {stats['total_pastes']}")
    for syntax, count in stats["by_syntax"].items():
        print(f"  {syntax}: {count}")
    return 0


def cmd_show(storage, key: str) -> int:
    """Print the body of an archived paste."""
    body = storage.get_paste_body(key)
    if body is None:
        print(f"Paste {key} is not in the archive.")
        return 1
    sys.stdout.write(body.decode("utf-8", errors="replace"))
    return 0


def cli():
    parser = argparse.ArgumentParser(
        prog="pbmon",
        description="Monitor pastebin for new pastes",
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    common.add_argument("--backend", choices=["file", "sqlite", "cache"], default=None,
                        help="Resume state backend (default: file)")
    common.add_argument("--state-file", type=str, default=None,
                        help="State file for the file backend (default: ~/.pbmon)")
    common.add_argument("--db", type=str, default=None, help="SQLite database path")

    polling = argparse.ArgumentParser(add_help=False)
    polling.add_argument("--window", type=int, default=None,
                         help="Pastes to request per poll (default 50)")
    polling.add_argument("--interval", type=float, default=None,
                         help="Seconds between polls (default 10)")
    polling.add_argument("--handler", choices=["log", "directory", "archive"], default=None,
                         help="What to do with new pastes (default: log)")
    polling.add_argument("--output-dir", type=str, default=None,
                         help="Target directory for the directory handler")

    sub = parser.add_subparsers(dest="command", help="Command to run")

    sub.add_parser("run", parents=[common, polling], help="Poll forever")
    sub.add_parser("once", parents=[common, polling], help="Run a single poll cycle")
    sub.add_parser("state", parents=[common], help="Show the stored resume cursor")
    sub.add_parser("reset", parents=[common], help="Forget the resume cursor")
    sub.add_parser("stats", parents=[common], help="Show archive stats")
    show = sub.add_parser("show", parents=[common], help="Print an archived paste body")
    show.add_argument("key", help="Paste key")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_logging(args.verbose)
    try:
        config = load_config(
            state_backend=args.backend,
            state_file=args.state_file,
            db_path=args.db,
            window_size=getattr(args, "window", None),
            poll_interval=getattr(args, "interval", None),
            handler=getattr(args, "handler", None),
            output_dir=getattr(args, "output_dir", None),
        )
    except ValueError as e:
        parser.error(str(e))

    storage = None
    if needs_storage(config) or args.command in ("stats", "show"):
        storage = Storage(config.db_path)

    monitor = None
    try:
        match args.command:
            case "run":
                monitor = create_monitor(config, storage)
                code = cmd_run(monitor)
            case "once":
                monitor = create_monitor(config, storage)
                code = cmd_once(monitor)
            case "state":
                code = cmd_state(config, storage)
            case "reset":
                code = cmd_reset(config, storage)
            case "stats":
                code = cmd_stats(storage)
            case "show":
                code = cmd_show(storage, args.key)
            case _:
                parser.print_help()
                code = 1
    except MonitorError as e:
        log.error(f"{args.command} failed: {e}")
        code = 1
    finally:
        if monitor is not None:
            monitor.client.close()
        if storage is not None:
            storage.close()

    sys.exit(code)


if __name__ == "__main__":
    cli()
