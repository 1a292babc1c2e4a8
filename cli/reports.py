#!/usr/bin/env python3

import sys
from cli.transactions import parse_month
from insights import generate_insights, generate_spending_tips
from tools.transactions import calculate_stats, format_currency
from logger import get_logger

logger = get_logger()

_INSIGHT_MARKERS = {"warning": "!", "info": "i", "suggestion": "*"}


def cmd_stats(args, services):
    """Show totals, the category breakdown and the monthly trend."""
    try:
        if args.month:
            year, month = parse_month(args.month)
            transactions = services.transactions.find_by_month(year, month)
        else:
            transactions = services.transactions.find_all()
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    stats = calculate_stats(transactions)

    logger.info("\nSummary")
    logger.info("=" * 80)
    logger.info(f"Total income:   {format_currency(stats.total_income):>14}")
    logger.info(f"Total expenses: {format_currency(stats.total_expenses):>14}")
    logger.info(f"Balance:        {format_currency(stats.balance):>14}")

    if stats.category_breakdown:
        logger.info("\nExpenses by category")
        logger.info("-" * 80)
        ranked = sorted(
            stats.category_breakdown.items(), key=lambda item: item[1], reverse=True
        )
        for category, amount in ranked:
            if stats.total_expenses > 0:
                share = f"{amount / stats.total_expenses * 100:5.1f}%"
            else:
                share = "    -"
            logger.info(f"{category:<20} {format_currency(amount):>14}  {share}")

    if stats.monthly_trend:
        logger.info("\nMonthly trend")
        logger.info("-" * 80)
        for row in stats.monthly_trend:
            logger.info(
                f"{row.month:<10} income {format_currency(row.income):>14}  "
                f"expenses {format_currency(row.expenses):>14}"
            )


def cmd_insights(args, services):
    """Show insights about spending, from the LLM if configured."""
    # find_all is newest first
    transactions = list(reversed(services.transactions.find_all()))

    insights = generate_insights(transactions, services.config)
    if args.tips:
        insights += generate_spending_tips(transactions)

    if not insights:
        logger.info("No insights yet. Keep tracking your transactions!")
        return

    logger.info("\nInsights")
    logger.info("=" * 80)
    for insight in insights:
        marker = _INSIGHT_MARKERS.get(insight.type, "-")
        logger.info(f"[{marker}] {insight.message}")


def setup_parser(subparsers):
    """Setup reports subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "reports",
        help="Statistics and insights",
        description="Summaries and insights over recorded transactions",
    )

    reports_subparsers = parser.add_subparsers(
        title="subcommands",
        description="Available report commands",
        dest="subcommand",
        required=True,
    )

    stats_parser = reports_subparsers.add_parser(
        "stats", help="Show totals, category breakdown and monthly trend"
    )
    stats_parser.add_argument("--month", help="Only this month (YYYY/MM)")
    stats_parser.set_defaults(func=cmd_stats)

    insights_parser = reports_subparsers.add_parser(
        "insights", help="Show spending insights"
    )
    insights_parser.add_argument(
        "--tips", action="store_true", help="Also show spending habit suggestions"
    )
    insights_parser.set_defaults(func=cmd_insights)
