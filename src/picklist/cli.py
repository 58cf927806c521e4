"""CLI entry point for the picklist demo."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

import picklist.io.logging_setup
import picklist.io.settings
from picklist.controller import SelectController
from picklist.tui.app import PicklistApp

logger = logging.getLogger(__name__)

DEFAULT_ITEMS = ("Apple", "Orange", "Banana", "Cherry", "Mango")


def parse_items(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def read_items_file(path: Path) -> list[str]:
    return [line.strip() for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]


def make_fetch(items, *, delay: float = 0.0, fail: bool = False):
    """Build a zero-argument fetch coroutine function simulating a remote source."""

    async def fetch():
        if delay > 0:
            await asyncio.sleep(delay)
        if fail:
            raise ConnectionError("simulated fetch failure")
        return list(items)

    return fetch


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Headless dropdown controller demo")
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--items",
        type=str,
        default=None,
        help="Comma-separated items (default: a fruit list)",
    )
    source.add_argument(
        "--items-file",
        type=Path,
        default=None,
        help="Read items from a file, one per line",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=0.5,
        help="Simulated fetch latency in seconds (default: 0.5)",
    )
    parser.add_argument(
        "--fail", action="store_true", help="Make the simulated fetch fail"
    )
    parser.add_argument(
        "--auto-close",
        type=float,
        default=None,
        help="Close the open list after this many idle seconds",
    )
    parser.add_argument(
        "--id-prefix",
        type=str,
        default=None,
        help="Prefix for derived element ids (default from settings, else 'picklist')",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (default: PICKLIST_LOG_LEVEL or INFO)",
    )
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    runtime = picklist.io.logging_setup.configure("picklist-demo", level=args.log_level, stream=False)

    if args.items_file is not None:
        try:
            items = read_items_file(args.items_file)
        except OSError as e:
            parser.error(f"cannot read {args.items_file}: {e}")
    elif args.items is not None:
        items = parse_items(args.items)
    else:
        items = list(DEFAULT_ITEMS)

    overrides = {}
    if args.auto_close is not None:
        overrides["auto_close_after"] = args.auto_close if args.auto_close > 0 else None
    if args.id_prefix:
        overrides["id_prefix"] = args.id_prefix
    config = picklist.io.settings.load_controller_config(**overrides)

    logger.info(
        "starting demo (items=%d, delay=%.2f, fail=%s, log=%s)",
        len(items), args.delay, args.fail, runtime.file_path,
    )

    controller = SelectController(config=config)
    app = PicklistApp(controller, operation=make_fetch(items, delay=args.delay, fail=args.fail))
    app.run()
    controller.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main())
