"""Transaction analysis tools."""

from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, Tuple
from models.stats import MonthlyTrend, TransactionStats
from models.transaction import Transaction


def calculate_stats(transactions: Iterable[Transaction]) -> TransactionStats:
    """Reduce a list of transactions into summary statistics.

    Args:
        transactions: Transactions to aggregate, in any order.

    Returns:
        TransactionStats with:
        - total_income / total_expenses: sums over income / expense transactions
        - balance: total_income - total_expenses
        - category_breakdown: expense totals keyed by category, in order of the
          category's first appearance among expense transactions
        - monthly_trend: per-month income and expenses, oldest month first

    Example:
        >>> stats = calculate_stats([salary_jan, groceries_jan])
        >>> stats.monthly_trend[0].month
        'Jan 2024'
    """
    total_income = Decimal("0")
    total_expenses = Decimal("0")
    category_breakdown: Dict[str, Decimal] = {}
    months: Dict[Tuple[int, int], MonthlyTrend] = {}

    for transaction in transactions:
        key = (transaction.transaction_date.year, transaction.transaction_date.month)
        if key not in months:
            months[key] = MonthlyTrend(
                month=date(key[0], key[1], 1).strftime("%b %Y"),
                year=key[0],
                month_number=key[1],
            )
        bucket = months[key]

        if transaction.type == "income":
            total_income += transaction.amount
            bucket.income += transaction.amount
        elif transaction.type == "expense":
            total_expenses += transaction.amount
            bucket.expenses += transaction.amount

            category = transaction.category or "Other"
            if category not in category_breakdown:
                category_breakdown[category] = Decimal("0")
            category_breakdown[category] += transaction.amount

    return TransactionStats(
        total_income=total_income,
        total_expenses=total_expenses,
        balance=total_income - total_expenses,
        category_breakdown=category_breakdown,
        monthly_trend=[months[key] for key in sorted(months)],
    )


def format_currency(amount: Decimal) -> str:
    """Format an amount as US dollars, e.g. $1,234.50 or -$12.00."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"
