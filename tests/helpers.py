"""Helper utilities for tests."""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from llm.providers.base import LLMProvider
from models.transaction import Transaction


def make_transaction(
    amount,
    type: str = "expense",
    category: Optional[str] = None,
    transaction_date: date = date(2024, 1, 15),
    description: str = "Test transaction",
) -> Transaction:
    """Build a Transaction with sensible defaults."""
    return Transaction.create(
        description=description,
        amount=Decimal(str(amount)),
        transaction_date=transaction_date,
        type=type,
        category=category,
    )


class FakeProvider(LLMProvider):
    """LLM provider double returning canned answers or raising a given error."""

    def __init__(
        self,
        category: Optional[str] = None,
        columns: Optional[Dict[str, Optional[str]]] = None,
        insights: Optional[List[str]] = None,
        error: Optional[Exception] = None,
    ):
        self.category = category
        self.columns = columns or {}
        self.insights = insights or []
        self.error = error
        self.calls: List[tuple] = []

    def suggest_category(self, description, amount, type, allowed_categories):
        self.calls.append(("suggest_category", description, type))
        if self.error:
            raise self.error
        return self.category

    def detect_columns(self, headers: Sequence[str]):
        self.calls.append(("detect_columns", list(headers)))
        if self.error:
            raise self.error
        return self.columns

    def generate_insights(self, summary: str):
        self.calls.append(("generate_insights", summary))
        if self.error:
            raise self.error
        return self.insights
