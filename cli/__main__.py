#!/usr/bin/env python3
"""
Spendwise CLI - record transactions, import bank exports and review spending.

Usage:
    python -m cli <command> <subcommand> [options]

Commands:
    transactions Add, list, delete and import transactions
    reports      Statistics and insights
    migrate      Database migrations

Examples:
    python -m cli migrate apply
    python -m cli transactions add --description "Whole Foods" --amount 54.20 --type expense
    python -m cli transactions import statement.csv
    python -m cli reports stats --month 2024/01
    python -m cli reports insights
"""

import sys
import argparse
from cli import transactions, reports, migrate
from config import load_config
from services.base import Services
from db.manager import DatabaseManager
from logger import setup_logging


def main():
    """Main CLI entry point with subcommands."""
    parser = argparse.ArgumentParser(
        prog="cli",
        description="Spendwise - Personal expense tracking",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
    )

    transactions.setup_parser(subparsers)
    reports.setup_parser(subparsers)
    migrate.setup_parser(subparsers)

    args = parser.parse_args()

    if hasattr(args, "func"):
        try:
            config = load_config()
            setup_logging(config)

            if args.command == "migrate":
                # Migrate commands need db_manager for raw database operations
                args.func(args, DatabaseManager(config))
            else:
                args.func(args, Services(config))
        except Exception as e:
            print(f"Error: {e}")
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
