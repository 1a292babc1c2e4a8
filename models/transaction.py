from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional
import uuid

TRANSACTION_TYPES = ("income", "expense")


@dataclass
class Transaction:
    id: str  # opaque uuid4 hex
    description: str
    amount: Decimal  # always positive
    transaction_date: date
    type: str  # 'income' or 'expense'
    category: Optional[str] = None
    ai_generated: bool = False  # category came from the heuristic or the LLM

    @classmethod
    def create(
        cls,
        description: str,
        amount: Decimal,
        transaction_date: date,
        type: str,
        category: Optional[str] = None,
        ai_generated: bool = False,
    ) -> "Transaction":
        """Create a Transaction with a freshly generated ID.

        Raises:
            ValueError: If type is not 'income' or 'expense', or amount is negative.
        """
        if type not in TRANSACTION_TYPES:
            raise ValueError(f"Unknown transaction type: {type}")
        if amount < 0:
            raise ValueError(f"Amount must be positive, got {amount}")

        return cls(
            id=uuid.uuid4().hex,
            description=description,
            amount=amount,
            transaction_date=transaction_date,
            type=type,
            category=category,
            ai_generated=ai_generated,
        )
