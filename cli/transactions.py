#!/usr/bin/env python3

import sys
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Tuple
from dateutil import parser as date_parser
from categorization import categorize_batch, categorize_with_source
from ingestion import get_supported_extensions, ingest_file
from models.transaction import Transaction, TRANSACTION_TYPES
from tools.transactions import format_currency
from logger import get_logger

logger = get_logger()


def parse_month(value: str) -> Tuple[int, int]:
    """Parse a YYYY/MM month argument.

    Raises:
        ValueError: If the format is wrong or the month is out of range.
    """
    try:
        year_str, month_str = value.split("/")
        year, month = int(year_str), int(month_str)
    except ValueError:
        raise ValueError(f"Invalid month '{value}', expected YYYY/MM")
    if month < 1 or month > 12:
        raise ValueError("Month must be between 1 and 12")
    return year, month


def cmd_add(args, services):
    """Record a single transaction, categorizing it if no category is given."""
    try:
        amount = Decimal(args.amount)
    except InvalidOperation:
        logger.error(f"Invalid amount: {args.amount}")
        sys.exit(1)

    if amount <= 0:
        logger.error("Amount must be greater than zero.")
        sys.exit(1)

    try:
        transaction_date = (
            date_parser.parse(args.date).date() if args.date else date.today()
        )
    except (ValueError, OverflowError):
        logger.error(f"Invalid date: {args.date}")
        sys.exit(1)

    if args.category:
        category, ai_generated = args.category, False
    else:
        result = categorize_with_source(
            args.description, amount, args.type, services.config
        )
        category, ai_generated = result.category, True
        logger.info(f"Categorized as '{category}' (by {result.source})")

    transaction = Transaction.create(
        description=args.description,
        amount=amount,
        transaction_date=transaction_date,
        type=args.type,
        category=category,
        ai_generated=ai_generated,
    )

    try:
        services.transactions.create(transaction)
    except Exception as e:
        logger.error(f"Error creating transaction: {e}")
        sys.exit(1)

    logger.info(f"✓ Transaction created with ID: {transaction.id}")


def cmd_list(args, services):
    """List transactions, newest first."""
    try:
        if args.month:
            year, month = parse_month(args.month)
            transactions = services.transactions.find_by_month(year, month)
        else:
            transactions = services.transactions.find_all()
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    if not transactions:
        logger.info("No transactions found.")
        return

    for t in transactions:
        sign = "+" if t.type == "income" else "-"
        marker = " (auto)" if t.ai_generated else ""
        logger.info(
            f"{t.id}  {t.transaction_date.isoformat()}  "
            f"{sign}{format_currency(t.amount):>12}  "
            f"{(t.category or 'Uncategorized') + marker:<24}  {t.description}"
        )

    logger.info(f"\nTotal transactions: {len(transactions)}")


def cmd_delete(args, services):
    """Delete a transaction by ID."""
    transaction = services.transactions.find(args.transaction_id)
    if not transaction:
        logger.error(f"Transaction with ID '{args.transaction_id}' not found.")
        sys.exit(1)

    if services.transactions.delete(transaction.id):
        logger.info(f"✓ Deleted transaction: {transaction.description}")
    else:
        logger.error("Failed to delete transaction.")
        sys.exit(1)


def cmd_import(args, services):
    """Import transactions from a CSV or Excel bank export.

    Rows that can't be parsed are skipped. Every imported transaction is
    categorized automatically.
    """
    path = Path(args.file)
    if not path.exists():
        logger.error(f"File not found: {args.file}")
        sys.exit(1)

    logger.info(f"Importing transactions from: {path}")
    logger.info("-" * 80)

    try:
        transactions = ingest_file(path, services.config)
    except ValueError as e:
        logger.error(str(e))
        logger.info(f"Supported formats: {', '.join(get_supported_extensions())}")
        sys.exit(1)

    if not transactions:
        logger.info("No transactions to import.")
        return

    categorize_batch(transactions, services.config)

    try:
        inserted_count = services.transactions.bulk_create(transactions)
    except Exception as e:
        logger.error(f"Error during import: {e}")
        sys.exit(1)

    logger.info(f"✓ Successfully imported {inserted_count} transactions")


def setup_parser(subparsers):
    """Setup transactions subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "transactions",
        help="Manage transactions",
        description="Add, list, delete and import transactions",
    )

    transactions_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available transaction commands",
        dest="subcommand",
        required=True,
    )

    add_parser = transactions_subparsers.add_parser(
        "add", help="Record a single transaction"
    )
    add_parser.add_argument("--description", required=True, help="What it was for")
    add_parser.add_argument("--amount", required=True, help="Positive amount")
    add_parser.add_argument(
        "--type", required=True, choices=TRANSACTION_TYPES, help="income or expense"
    )
    add_parser.add_argument("--date", help="Transaction date (default: today)")
    add_parser.add_argument(
        "--category", help="Category (default: categorized automatically)"
    )
    add_parser.set_defaults(func=cmd_add)

    list_parser = transactions_subparsers.add_parser(
        "list", help="List transactions, newest first"
    )
    list_parser.add_argument("--month", help="Only this month (YYYY/MM)")
    list_parser.set_defaults(func=cmd_list)

    delete_parser = transactions_subparsers.add_parser(
        "delete", help="Delete a transaction by ID"
    )
    delete_parser.add_argument("transaction_id", help="ID of the transaction")
    delete_parser.set_defaults(func=cmd_delete)

    import_parser = transactions_subparsers.add_parser(
        "import", help="Import transactions from a CSV or Excel file"
    )
    import_parser.add_argument("file", help="Path to a .csv or .xlsx export")
    import_parser.set_defaults(func=cmd_import)
