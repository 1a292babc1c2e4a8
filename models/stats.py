"""Derived statistics models. Recomputed on demand and never persisted."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List


@dataclass
class MonthlyTrend:
    """Income and expense totals for one calendar month.

    Attributes:
        month: Display label, e.g. "Jan 2024".
        year: Calendar year, used for ordering.
        month_number: Calendar month (1-12), used for ordering.
        income: Summed income for the month.
        expenses: Summed expenses for the month.
    """

    month: str
    year: int
    month_number: int
    income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")


@dataclass
class TransactionStats:
    """Aggregate statistics over a list of transactions.

    Attributes:
        total_income: Sum of income amounts.
        total_expenses: Sum of expense amounts.
        balance: total_income - total_expenses (may be negative).
        category_breakdown: Expense totals per category, in order of first appearance.
        monthly_trend: One entry per month present in the input, oldest first.
    """

    total_income: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")
    category_breakdown: Dict[str, Decimal] = field(default_factory=dict)
    monthly_trend: List[MonthlyTrend] = field(default_factory=list)
