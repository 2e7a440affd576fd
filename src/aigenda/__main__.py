"""Entry point: python -m aigenda <command>

- add <text>       Append a note to today's log
- list             Show today's notes (--date D for one day, --all for every day)
- ai <request>     Let the agent act on your notes
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from aigenda.config import load_config


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="aigenda", description="AI-ready daily notes CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Add a note to today's log")
    add.add_argument("text", nargs="+")

    ls = sub.add_parser("list", help="List notes (today by default)")
    ls.add_argument("--all", action="store_true", help="List all days")
    ls.add_argument("--date", help="Specific date (YYYY-MM-DD)")

    ai = sub.add_parser("ai", help="Run the notes agent on a natural-language request")
    ai.add_argument("request", nargs="+")
    ai.add_argument("-y", "--yes", action="store_true", help="Approve every tool call")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        config = load_config()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    _setup_logging(config.log_level)

    from aigenda.commands import run_add, run_agent, run_list
    from aigenda.errors import StorageError
    from aigenda.storage.fs import FsStorage

    storage = FsStorage(config.notes_dir)
    try:
        if args.command == "add":
            return run_add(storage, args.text)
        if args.command == "list":
            return run_list(storage, all_days=args.all, day=args.date)
        return asyncio.run(run_agent(config, args.request, assume_yes=args.yes))
    except StorageError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
