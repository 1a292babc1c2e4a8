"""Base provider interface for LLM implementations."""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, List, Optional, Sequence


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    Providers only talk to the model and return its raw answers. Validating an
    answer and falling back to the local heuristics is the caller's job.
    """

    @abstractmethod
    def suggest_category(
        self,
        description: str,
        amount: Decimal,
        type: str,
        allowed_categories: Sequence[str],
    ) -> Optional[str]:
        """Ask the LLM for a single category label.

        Args:
            description: Transaction description.
            amount: Transaction amount (positive).
            type: 'income' or 'expense'.
            allowed_categories: Labels the answer must be drawn from.

        Returns:
            The label returned by the model, or None if it gave no answer.

        Raises:
            Exception: If the LLM API call fails.
        """
        pass

    @abstractmethod
    def detect_columns(self, headers: Sequence[str]) -> Dict[str, Optional[str]]:
        """Ask the LLM which spreadsheet headers hold each transaction field.

        Args:
            headers: Header row of the imported file.

        Returns:
            Dictionary with keys 'date', 'description', 'amount', 'debit' and
            'credit' mapped to a header name or None. 'debit' and 'credit' are
            set instead of 'amount' when money out and money in are split.

        Raises:
            Exception: If the LLM API call fails.
        """
        pass

    @abstractmethod
    def generate_insights(self, summary: str) -> List[str]:
        """Ask the LLM for a handful of insights about a spending summary.

        Args:
            summary: Pre-formatted text describing totals, the category
                     breakdown and recent transactions.

        Returns:
            List of insight strings (may be empty).

        Raises:
            Exception: If the LLM API call fails.
        """
        pass
