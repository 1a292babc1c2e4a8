import logging
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from dateutil import parser as date_parser

from categorization import ColumnMapping
from models.transaction import Transaction

logger = logging.getLogger(__name__)

_CURRENCY_NOISE = re.compile(r"[^\d.\-]")


def parse_amount(value: Any) -> Decimal:
    """Parse a signed amount from a cell value.

    Accepts numbers and strings such as "-5", "$1,234.50" or "(12.00)"
    (accounting-style negative).

    Raises:
        ValueError: If the value is empty or not a number
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Invalid amount: {value!r}")
    if isinstance(value, (int, float, Decimal)):
        return Decimal(str(value))

    text = str(value).strip()
    negative = text.startswith("(") and text.endswith(")")
    cleaned = _CURRENCY_NOISE.sub("", text)
    if not cleaned or cleaned in ("-", "."):
        raise ValueError(f"Invalid amount: {value!r}")

    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {value!r}")

    return -abs(amount) if negative else amount


def parse_date(value: Any, default: date) -> date:
    """Parse a transaction date from a cell value.

    Missing values fall back to the given default.

    Raises:
        ValueError: If the value cannot be parsed as a date
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    try:
        return date_parser.parse(str(value).strip()).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Invalid date: {value!r}") from e


def row_amount(row: Dict[str, Any], mapping: ColumnMapping) -> Decimal:
    """Get a row's signed amount: negative for money out, positive for money in.

    With split columns a filled debit cell is money out and a filled credit
    cell money in, whatever sign the bank printed.

    Raises:
        ValueError: If no amount cell holds a number
    """
    if mapping.amount:
        return parse_amount(row.get(mapping.amount))

    debit = row.get(mapping.debit)
    if not _is_blank(debit):
        debit_amount = parse_amount(debit)
        if debit_amount != 0:
            return -abs(debit_amount)

    credit = row.get(mapping.credit)
    if not _is_blank(credit):
        return abs(parse_amount(credit))

    raise ValueError("Invalid amount: no debit or credit value")


def row_to_transaction(
    row: Dict[str, Any], mapping: ColumnMapping, default_date: date
) -> Transaction:
    """Convert a header-keyed row to an uncategorized Transaction.

    Negative amounts (and debits) are expenses, positive amounts (and credits)
    income. The stored amount is always the absolute value.

    Raises:
        ValueError: If the description is empty or the amount/date is invalid
    """
    description = str(row.get(mapping.description) or "").strip()
    if not description:
        raise ValueError("Missing description")

    amount_value = row_amount(row, mapping)
    if amount_value == 0:
        raise ValueError("Zero amount")

    transaction_date = parse_date(row.get(mapping.date), default_date)

    return Transaction.create(
        description=description,
        amount=abs(amount_value),
        transaction_date=transaction_date,
        type="expense" if amount_value < 0 else "income",
    )


def rows_to_transactions(
    rows: List[Dict[str, Any]],
    mapping: ColumnMapping,
    default_date: Optional[date] = None,
) -> List[Transaction]:
    """Convert rows to transactions, skipping any row that can't be parsed."""
    default_date = default_date or date.today()
    transactions = []

    # line 1 is the header
    for line_num, row in enumerate(rows, start=2):
        try:
            transactions.append(row_to_transaction(row, mapping, default_date))
        except ValueError as e:
            logger.warning(f"Skipping line {line_num}: {e}")
            continue

    logger.info(
        f"Mapped {len(transactions)} transactions "
        f"({len(rows) - len(transactions)} row(s) skipped)"
    )
    return transactions


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())
