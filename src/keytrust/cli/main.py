#!/usr/bin/env python
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from keytrust import __version__
from keytrust.cli.output import ConsoleOutput
from keytrust.config import KeyTrustConfig


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="keytrust",
        description="keytrust - OpenPGP key acceptance database maintenance",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # Global options
    parser.add_argument("--db", type=Path, help="Acceptance database (default: $KEYTRUST_DB_PATH)")
    parser.add_argument("--env-file", type=Path, help="Load settings from this .env file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    subparsers.add_parser("check-db", help="Create the acceptance tables if missing")
    subparsers.add_parser("stats", help="Show number of keys per decision")
    subparsers.add_parser("version", help="Show version")

    return parser


def main(argv: Optional[List[str]] = None, console: Optional[ConsoleOutput] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    logging.getLogger("keytrust").setLevel(logging.DEBUG if args.verbose else logging.WARNING)

    console = console or ConsoleOutput()

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "version":
        console.print(f"keytrust {__version__}")
        return 0

    config = KeyTrustConfig.from_env(args.env_file)
    if args.db:
        config = replace(config, db_path=args.db, audit_path=None)

    from keytrust.cli.commands import check_db, stats

    if args.command == "check-db":
        return asyncio.run(check_db.run(config, console))
    elif args.command == "stats":
        return asyncio.run(stats.run(config, console))

    return 0


if __name__ == "__main__":
    sys.exit(main())
