"""Command-line entry point: store an image URL in the next numbered slot."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from config.settings import AppConfig, load_config
from modules.errors import StorageError, UsageError
from modules.services.storage_service import StorageService
from modules.utils.logging import setup_logging

USAGE = "Usage: new-storage <image-url>"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="new-storage",
        description="Download an image into the next numbered folder and push it with git.",
    )
    parser.add_argument("url", nargs="?", help="URL of the image to store")
    parser.add_argument("--root", type=Path, help="storage root (defaults to STORAGE_ROOT or the current directory)")
    parser.add_argument("--items", action="store_true", help="allocate slots under <root>/items")
    parser.add_argument("--quality", type=int, help="JPEG quality, 1-100")
    parser.add_argument("--no-publish", action="store_true", help="skip git add/commit/push")
    parser.add_argument("--env-file", help="path of a KEY=VALUE file to load before reading settings")
    return parser


def apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Apply command-line options on top of the loaded configuration."""
    if args.root is not None:
        config.storage_root = args.root.expanduser().resolve()
    if args.items:
        config.use_items_dir = True
    if args.quality is not None:
        if not 1 <= args.quality <= 100:
            raise UsageError(f"--quality must be between 1 and 100, got {args.quality}")
        config.jpeg_quality = args.quality
    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the tool and return the process exit code."""
    args = build_parser().parse_args(argv)
    if not args.url:
        print(USAGE, file=sys.stderr)
        return 1

    try:
        config = apply_overrides(load_config(args.env_file), args)
        logger = setup_logging(config)
        service = StorageService(config, reporter=print)
        service.store(args.url, publish=not args.no_publish)
    except (StorageError, ValueError, OSError) as exc:
        logging.getLogger("new_storage").debug("Run failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    logger.debug("Finished storing %s", args.url)
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
