"""Transaction categorization and import column detection.

Both work in two tiers. When an LLM provider is configured it is asked first,
and its answer is accepted only if it passes validation. Otherwise, or on any
error, the keyword rules in this module decide. Neither function ever raises
because of the LLM.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Sequence, Tuple
from config import Config
from llm import LLMProvider, get_llm_provider
from models.transaction import Transaction
from logger import get_logger

logger = get_logger()

INCOME_CATEGORIES = ["Salary", "Freelance", "Investment", "Other Income"]
EXPENSE_CATEGORIES = [
    "Groceries",
    "Dining Out",
    "Transportation",
    "Housing",
    "Utilities",
    "Entertainment",
    "Healthcare",
    "Fitness",
    "Shopping",
    "Other",
]

_FALLBACK_CATEGORY = {"income": "Other Income", "expense": "Other"}

# Ordered: the first rule whose keyword appears in the description wins
_INCOME_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("salary", "paycheck"), "Salary"),
    (("freelance", "contract"), "Freelance"),
    (("investment", "dividend"), "Investment"),
]

_EXPENSE_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("grocery", "food", "supermarket"), "Groceries"),
    (("restaurant", "cafe", "coffee"), "Dining Out"),
    (("gas", "fuel", "uber", "taxi"), "Transportation"),
    (("rent", "mortgage"), "Housing"),
    (("electric", "water", "internet", "phone"), "Utilities"),
    (("netflix", "spotify", "subscription"), "Entertainment"),
    (("doctor", "pharmacy", "hospital"), "Healthcare"),
    (("gym", "fitness"), "Fitness"),
    (("clothes", "shopping"), "Shopping"),
]

# Field -> header keywords, in priority order
_COLUMN_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "date": ("date",),
    "amount": ("amount", "value", "debit", "credit"),
    "debit": ("debit", "withdrawal"),
    "credit": ("credit", "deposit"),
    "description": ("description", "memo", "details", "transaction", "payee"),
}

_SIGNED_AMOUNT_KEYWORDS = ("amount", "value")


@dataclass
class CategorizationResult:
    """Outcome of categorizing one transaction.

    Attributes:
        category: The chosen label, always a member of the type's category list.
        source: 'llm' if the LLM answer was accepted, 'rules' if the keyword
                rules were used.
    """

    category: str
    source: str


@dataclass
class ColumnMapping:
    """Header names holding each transaction field (None if not found).

    Amounts come either from one signed ``amount`` column or from a pair of
    ``debit`` (money out) and ``credit`` (money in) columns.
    """

    date: Optional[str] = None
    description: Optional[str] = None
    amount: Optional[str] = None
    debit: Optional[str] = None
    credit: Optional[str] = None
    source: str = "rules"

    @property
    def has_amount(self) -> bool:
        return bool(self.amount or (self.debit and self.credit))

    @property
    def is_complete(self) -> bool:
        return bool(self.date and self.description and self.has_amount)

    @property
    def columns(self) -> List[str]:
        """Mapped header names, in field order."""
        fields = [self.date, self.description, self.amount, self.debit, self.credit]
        return [c for c in fields if c]


def allowed_categories(type: str) -> List[str]:
    """Get the category labels valid for a transaction type."""
    return INCOME_CATEGORIES if type == "income" else EXPENSE_CATEGORIES


def rule_based_category(description: str, type: str) -> str:
    """Pick a category by keyword matching on the description.

    Args:
        description: Free-text transaction description (may be empty).
        type: 'income' or 'expense'.

    Returns:
        The first matching rule's category, or the type's fallback label.
    """
    lower_desc = (description or "").lower()
    rules = _INCOME_RULES if type == "income" else _EXPENSE_RULES

    for keywords, category in rules:
        if any(keyword in lower_desc for keyword in keywords):
            return category

    return _FALLBACK_CATEGORY.get(type, "Other")


def categorize_with_source(
    description: str,
    amount: Decimal,
    type: str,
    config: Optional[Config] = None,
) -> CategorizationResult:
    """Categorize a transaction, reporting whether the LLM or the rules decided.

    Args:
        description: Transaction description.
        amount: Transaction amount.
        type: 'income' or 'expense'.
        config: Optional config. If None or LLM is disabled, only rules are used.

    Returns:
        CategorizationResult with a label from the type's category list.
    """
    return _categorize(_resolve_provider(config), description, amount, type)


def categorize_transaction(
    description: str,
    amount: Decimal,
    type: str,
    config: Optional[Config] = None,
) -> str:
    """Categorize a transaction and return only the category label."""
    return categorize_with_source(description, amount, type, config).category


def categorize_batch(
    transactions: List[Transaction], config: Optional[Config] = None
) -> List[Transaction]:
    """Categorize imported transactions in place.

    Each transaction is categorized independently. LLM calls are dispatched on
    a thread pool; results keep the input order.

    Args:
        transactions: Transactions to categorize.
        config: Optional config enabling the LLM.

    Returns:
        The same transactions with category set and ai_generated=True.
    """
    if not transactions:
        return transactions

    provider = _resolve_provider(config)

    def categorize_one(transaction: Transaction) -> CategorizationResult:
        return _categorize(
            provider, transaction.description, transaction.amount, transaction.type
        )

    if provider is not None and len(transactions) > 1:
        max_workers = max(1, config.llm_max_workers)
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            results = list(executor.map(categorize_one, transactions))
    else:
        results = [categorize_one(t) for t in transactions]

    for transaction, result in zip(transactions, results):
        transaction.category = result.category
        transaction.ai_generated = True

    llm_count = sum(1 for r in results if r.source == "llm")
    logger.info(
        f"Categorized {len(transactions)} transaction(s) "
        f"({llm_count} by LLM, {len(transactions) - llm_count} by rules)"
    )

    return transactions


def keyword_column_mapping(headers: Sequence[str]) -> ColumnMapping:
    """Map headers to fields by keyword, each header used at most once.

    A single amount or value column is preferred. Without one, a pair of
    separate debit and credit columns is mapped as split amount columns.
    """
    used = set()

    def find(keywords: Tuple[str, ...]) -> Optional[str]:
        for keyword in keywords:
            match = next(
                (
                    h
                    for h in headers
                    if h not in used and keyword in str(h).strip().lower()
                ),
                None,
            )
            if match is not None:
                return match
        return None

    def take(keywords: Tuple[str, ...]) -> Optional[str]:
        match = find(keywords)
        if match is not None:
            used.add(match)
        return match

    mapping = ColumnMapping(source="rules")
    mapping.date = take(_COLUMN_KEYWORDS["date"])

    debit = find(_COLUMN_KEYWORDS["debit"])
    credit = find(_COLUMN_KEYWORDS["credit"])
    if debit is not None and credit is not None and debit != credit:
        used.update((debit, credit))
        mapping.amount = take(_SIGNED_AMOUNT_KEYWORDS)
        if mapping.amount is None:
            mapping.debit, mapping.credit = debit, credit
        else:
            used.difference_update((debit, credit))
    else:
        mapping.amount = take(_COLUMN_KEYWORDS["amount"])

    mapping.description = take(_COLUMN_KEYWORDS["description"])
    return mapping


def detect_columns(
    headers: Sequence[str], config: Optional[Config] = None
) -> ColumnMapping:
    """Work out which headers hold the date, description and amount.

    The LLM mapping is only used when it names a date, a description and
    either an amount or a debit/credit pair, all distinct headers that exist
    in the file; otherwise the keyword mapping is returned.

    Args:
        headers: Header row of the imported file.
        config: Optional config enabling the LLM.

    Returns:
        ColumnMapping; fields may be None if nothing matched.
    """
    provider = _resolve_provider(config)

    if provider is not None:
        try:
            suggestion = provider.detect_columns(list(headers))
            mapping = ColumnMapping(
                date=suggestion.get("date"),
                description=suggestion.get("description"),
                amount=suggestion.get("amount"),
                debit=suggestion.get("debit"),
                credit=suggestion.get("credit"),
                source="llm",
            )
            chosen = mapping.columns
            if (
                mapping.is_complete
                and all(c in headers for c in chosen)
                and len(set(chosen)) == len(chosen)
            ):
                logger.info(f"LLM column mapping accepted: {chosen}")
                return mapping
            logger.warning(f"Rejected LLM column mapping {chosen} for {list(headers)}")
        except Exception as e:
            logger.error(f"LLM column detection failed: {e}")

    return keyword_column_mapping(headers)


def _resolve_provider(config: Optional[Config]) -> Optional[LLMProvider]:
    if config is None:
        return None
    try:
        return get_llm_provider(config)
    except Exception as e:
        logger.error(f"Failed to initialize LLM provider: {e}")
        return None


def _categorize(
    provider: Optional[LLMProvider],
    description: str,
    amount: Decimal,
    type: str,
) -> CategorizationResult:
    if provider is not None:
        allowed = allowed_categories(type)
        try:
            suggestion = provider.suggest_category(description, amount, type, allowed)
            if suggestion in allowed:
                return CategorizationResult(category=suggestion, source="llm")
            logger.warning(
                f"LLM suggested '{suggestion}' for '{description}', "
                f"not a valid {type} category"
            )
        except Exception as e:
            logger.error(f"LLM categorization failed: {e}")

    return CategorizationResult(
        category=rule_based_category(description, type), source="rules"
    )
