"""Command line entry point: create tables, load files, run the three queries.

Usage:
    reviewstore [OPTIONS] COMMAND [ARGS]

Examples:
    reviewstore --config config/reviewstore.yaml create-tables
    reviewstore --backend duckdb --database data/reviews.duckdb load-items meta.json
    reviewstore user-reviews A2SUAM1J3GNN3B
"""

from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path
from typing import Any

from reviewstore.api import ReviewStore
from reviewstore.errors import IngestTimeout, ReviewStoreError
from reviewstore.lib.config_loader import (
    BACKENDS,
    DEFAULT_CONFIG_PATH,
    IngestSettings,
    StoreSettings,
    ingest_settings,
    load_config,
    store_settings,
    validate_config,
)
from reviewstore.lib.logging_config import setup_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Command-line arguments. Defaults to sys.argv[1:].

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        prog="reviewstore",
        description="Load and query the denormalized item/review tables.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  reviewstore create-tables\n"
            "  reviewstore load-reviews data/reviews.json --workers 256\n"
            "  reviewstore --backend duckdb --database data/reviews.duckdb item B000000001\n"
        ),
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"YAML config file (default: {DEFAULT_CONFIG_PATH} if it exists)",
    )
    parser.add_argument("--backend", choices=BACKENDS, help="Store backend override")
    parser.add_argument("--bundle", help="Astra secure connect bundle (cassandra)")
    parser.add_argument("--database", help="DuckDB database file (duckdb)")
    parser.add_argument("--keyspace", help="Keyspace holding the tables")
    parser.add_argument("--log-level", default=None, help="Logging level (default: INFO)")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("create-tables", help="Create the three tables")

    for name, help_text in (
        ("load-items", "Load a newline-delimited JSON items file"),
        ("load-reviews", "Load a newline-delimited JSON reviews file"),
    ):
        load = commands.add_parser(name, help=help_text)
        load.add_argument("path", type=Path)
        load.add_argument("--workers", type=int, help="Concurrent writers")
        load.add_argument("--timeout", type=float, help="Ingest timeout in seconds")

    commands.add_parser("item", help="Show one item").add_argument("asin")
    commands.add_parser("user-reviews", help="List a reviewer's reviews").add_argument("reviewer_id")
    commands.add_parser("item-reviews", help="List an item's reviews").add_argument("asin")

    return parser.parse_args(argv)


def _load_settings(
    args: argparse.Namespace,
) -> tuple[dict[str, Any], StoreSettings, IngestSettings]:
    config_path = args.config
    if config_path is None and DEFAULT_CONFIG_PATH.exists():
        config_path = DEFAULT_CONFIG_PATH
    config = load_config(config_path) if config_path is not None else {}

    store = store_settings(config)
    overrides = {
        "backend": args.backend,
        "secure_connect_bundle": args.bundle,
        "database": args.database,
        "keyspace": args.keyspace,
    }
    store = dataclasses.replace(store, **{k: v for k, v in overrides.items() if v is not None})

    ingest_overrides = {
        "workers": getattr(args, "workers", None),
        "timeout_seconds": getattr(args, "timeout", None),
    }
    ingest_overrides = {k: v for k, v in ingest_overrides.items() if v is not None}
    if ingest_overrides:
        config = {**config, "ingest": {**(config.get("ingest") or {}), **ingest_overrides}}
        validate_config(config)
    return config, store, ingest_settings(config)


def _run_command(store: ReviewStore, args: argparse.Namespace) -> None:
    if args.command == "create-tables":
        store.create_tables()
        return

    store.initialize()
    if args.command == "load-items":
        print(store.load_items(args.path).summary())
    elif args.command == "load-reviews":
        print(store.load_reviews(args.path).summary())
    elif args.command == "item":
        text = store.item(args.asin)
        print(text, end="" if text.endswith("\n") else "\n")
    elif args.command == "user-reviews":
        for review in store.user_reviews(args.reviewer_id):
            print(review, end="")
    elif args.command == "item-reviews":
        for review in store.item_reviews(args.asin):
            print(review, end="")


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Args:
        argv: Command-line arguments. Defaults to sys.argv[1:].

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    args = parse_args(argv)
    logger = setup_logging(level=args.log_level or "INFO")

    try:
        config, store_config, ingest_config = _load_settings(args)
    except (OSError, ReviewStoreError):
        logger.exception("Invalid configuration")
        return 2

    logging_section = config.get("logging") or {}
    logger = setup_logging(
        level=args.log_level or logging_section.get("level", "INFO"),
        json_format=bool(logging_section.get("json", False)),
    )

    try:
        with ReviewStore.open(store_config, ingest=ingest_config) as store:
            _run_command(store, args)
    except IngestTimeout as exc:
        logger.error("Ingest timed out")
        print(exc.result.summary())
        return 1
    except (OSError, ReviewStoreError):
        logger.exception("%s failed", args.command)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
