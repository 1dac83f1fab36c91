#!/usr/bin/env python3
"""
ZenTask CLI - command-line interface for categories, tasks and repairs.

Usage:
    python -m cli [--owner USER] <command> <subcommand> [options]

Commands:
    categories     Manage categories and run reconciliation
    subcategories  Manage subcategories of a category
    tasks          List, summarize, import and repair tasks
    migrate        Database migrations

Examples:
    python -m cli --owner alice categories list
    python -m cli --owner alice categories sync
    python -m cli --owner alice categories reset
    python -m cli --owner alice tasks import extraction.json
    python -m cli migrate apply
"""

import sys
import argparse
from cli import categories, subcategories, tasks, migrate
from config import load_config
from services.base import Services
from db.manager import DatabaseManager
from logger import setup_logging


def main():
    """Main CLI entry point with subcommands."""
    parser = argparse.ArgumentParser(
        prog="cli",
        description="ZenTask - task categories and reconciliation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--owner",
        help="User id to operate on (defaults to [user] default_owner in the config)",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
    )

    categories.setup_parser(subparsers)
    subcategories.setup_parser(subparsers)
    tasks.setup_parser(subparsers)
    migrate.setup_parser(subparsers)

    args = parser.parse_args()

    if hasattr(args, "func"):
        try:
            config = load_config()
            setup_logging(config)

            if args.command == "migrate":
                # Migrations work on the raw database
                args.func(args, DatabaseManager(config))
            else:
                services = Services(config)
                args.owner = args.owner or config.default_owner
                if not args.owner:
                    raise ValueError(
                        "No owner given: pass --owner or set [user] default_owner"
                    )
                args.func(args, services)
        except Exception as e:
            print(f"Error: {e}")
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
