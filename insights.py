"""Spending insights derived from transaction statistics.

Local insights come from a fixed rule set over TransactionStats. When an LLM
is configured, generate_insights asks it for free-text insights instead and
falls back to the local rules if that yields nothing.
"""

from decimal import Decimal
from typing import List, Optional, Sequence, Union
from config import Config
from llm import get_llm_provider
from models.insight import Insight
from models.stats import TransactionStats
from models.transaction import Transaction
from tools.transactions import calculate_stats, format_currency
from logger import get_logger

logger = get_logger()

TOP_CATEGORY_SHARE_THRESHOLD = Decimal("30")
EXPENSE_INCREASE_THRESHOLD = Decimal("20")
RECENT_TRANSACTION_LIMIT = 10


def generate_local_insights(
    data: Union[TransactionStats, Sequence[Transaction]],
) -> List[Insight]:
    """Apply the rule set to statistics (or to transactions, aggregated first).

    Rules are independent and evaluated in order:
    1. Expenses exceed income -> warning with both totals and the deficit.
    2. Largest expense category holds more than 30% of expenses -> info.
       Ties go to the category that appeared first among expenses.
    3. Positive balance -> info.
    4. Latest month's expenses rose more than 20% over the previous month
       -> warning. When the previous month had no expenses, any rise counts
       and the message quotes both totals instead of a percentage.

    Args:
        data: TransactionStats, or a list of transactions.

    Returns:
        List of Insight objects, possibly empty.
    """
    stats = data if isinstance(data, TransactionStats) else calculate_stats(data)
    insights: List[Insight] = []

    if stats.total_expenses > stats.total_income:
        deficit = stats.total_expenses - stats.total_income
        insights.append(
            Insight(
                type="warning",
                message=(
                    f"Your expenses ({format_currency(stats.total_expenses)}) exceed "
                    f"your income ({format_currency(stats.total_income)}) "
                    f"by {format_currency(deficit)}."
                ),
            )
        )

    if stats.category_breakdown and stats.total_expenses > 0:
        # max() keeps the first of equal items, i.e. first-inserted category
        top_category, amount = max(
            stats.category_breakdown.items(), key=lambda item: item[1]
        )
        percentage = amount / stats.total_expenses * 100
        if percentage > TOP_CATEGORY_SHARE_THRESHOLD:
            insights.append(
                Insight(
                    type="info",
                    message=(
                        f"{top_category} is your largest expense category, "
                        f"accounting for {percentage:.1f}% of total spending."
                    ),
                )
            )

    if stats.balance > 0:
        insights.append(
            Insight(
                type="info",
                message=(
                    f"You have a positive balance of {format_currency(stats.balance)}. "
                    "Great job managing your finances!"
                ),
            )
        )

    if len(stats.monthly_trend) >= 2:
        previous, latest = stats.monthly_trend[-2], stats.monthly_trend[-1]
        change = latest.expenses - previous.expenses
        threshold = previous.expenses * EXPENSE_INCREASE_THRESHOLD / 100
        if change > 0 and change > threshold:
            if previous.expenses > 0:
                change_percent = change / previous.expenses * 100
                message = (
                    f"Your expenses increased by {change_percent:.1f}% "
                    "compared to last month."
                )
            else:
                message = (
                    f"Your expenses rose from {format_currency(previous.expenses)} "
                    f"to {format_currency(latest.expenses)} compared to last month."
                )
            insights.append(Insight(type="warning", message=message))

    return insights


def generate_insights(
    transactions: Sequence[Transaction], config: Optional[Config] = None
) -> List[Insight]:
    """Generate insights with the LLM if configured, else with the local rules.

    Any LLM failure, or an empty answer, is logged and replaced by the full
    local rule set. Nothing is retried.

    Args:
        transactions: Transactions to analyse.
        config: Optional config enabling the LLM.

    Returns:
        List of Insight objects. LLM insights have type None.
    """
    stats = calculate_stats(transactions)

    try:
        provider = get_llm_provider(config)
    except Exception as e:
        logger.error(f"Failed to initialize LLM provider: {e}")
        provider = None

    if provider is not None:
        try:
            messages = provider.generate_insights(
                build_insight_summary(transactions, stats)
            )
            insights = [Insight(message=m.strip()) for m in messages if m and m.strip()]
            if insights:
                return insights
            logger.warning("LLM returned no insights, using local rules")
        except Exception as e:
            logger.error(f"LLM insight generation failed: {e}")

    return generate_local_insights(stats)


def build_insight_summary(
    transactions: Sequence[Transaction], stats: TransactionStats
) -> str:
    """Format totals, the category breakdown and recent transactions for the LLM."""
    lines = [
        f"Total income: {format_currency(stats.total_income)}",
        f"Total expenses: {format_currency(stats.total_expenses)}",
        f"Balance: {format_currency(stats.balance)}",
        "",
        "Expenses by category:",
    ]
    if stats.category_breakdown:
        for category, amount in stats.category_breakdown.items():
            lines.append(f"- {category}: {format_currency(amount)}")
    else:
        lines.append("- none")

    recent = sorted(transactions, key=lambda t: t.transaction_date, reverse=True)
    lines.append("")
    lines.append(f"Most recent transactions (up to {RECENT_TRANSACTION_LIMIT}):")
    for t in recent[:RECENT_TRANSACTION_LIMIT]:
        lines.append(
            f"- {t.transaction_date.isoformat()}: '{t.description}', "
            f"{format_currency(t.amount)}, {t.type}, {t.category or 'Uncategorized'}"
        )

    return "\n".join(lines)


def generate_spending_tips(transactions: Sequence[Transaction]) -> List[Insight]:
    """Pattern-based suggestions about day-to-day spending habits.

    Args:
        transactions: Transactions in chronological (insertion) order.

    Returns:
        List of suggestion-type insights; never empty.
    """
    expenses = [t for t in transactions if t.type == "expense"]
    if not expenses:
        return [
            Insight(
                type="suggestion",
                message="Start tracking your expenses to get personalized insights!",
            )
        ]

    stats = calculate_stats(expenses)
    tips: List[Insight] = []

    dining = stats.category_breakdown.get("Dining Out")
    groceries = stats.category_breakdown.get("Groceries")
    if dining and groceries and dining / (dining + groceries) > Decimal("0.5"):
        tips.append(
            Insight(
                type="suggestion",
                message="Consider cooking more at home to reduce dining out expenses.",
            )
        )

    recent = expenses[-RECENT_TRANSACTION_LIMIT:]
    average = sum((t.amount for t in recent), Decimal("0")) / len(recent)
    if average > 50:
        tips.append(
            Insight(
                type="suggestion",
                message=(
                    f"Your recent transactions average {format_currency(average)}. "
                    "Consider tracking smaller daily expenses."
                ),
            )
        )

    return tips or [
        Insight(type="suggestion", message="Keep tracking to unlock more insights!")
    ]
