from decimal import Decimal

import pytest

import categorization
from categorization import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORIES,
    categorize_batch,
    categorize_transaction,
    categorize_with_source,
    detect_columns,
    keyword_column_mapping,
    rule_based_category,
)
from tests.helpers import FakeProvider, make_transaction


@pytest.fixture
def use_provider(monkeypatch):
    """Install a FakeProvider as the configured LLM provider."""

    def install(provider):
        monkeypatch.setattr(categorization, "get_llm_provider", lambda config: provider)
        return provider

    return install


class TestRuleBasedCategory:
    """Tests for keyword categorization."""

    def test_grocery_example(self):
        """Test the grocery example maps to Groceries."""
        assert rule_based_category("Whole Foods grocery run", "expense") == "Groceries"

    def test_empty_income_falls_back(self):
        """Test that an empty income description falls back to Other Income."""
        assert rule_based_category("", "income") == "Other Income"

    def test_empty_expense_falls_back(self):
        """Test that an empty expense description falls back to Other."""
        assert rule_based_category("", "expense") == "Other"

    @pytest.mark.parametrize(
        "description,expected",
        [
            ("Starbucks COFFEE", "Dining Out"),
            ("Shell gas station", "Transportation"),
            ("Monthly rent", "Housing"),
            ("Comcast internet", "Utilities"),
            ("Netflix", "Entertainment"),
            ("CVS Pharmacy", "Healthcare"),
            ("Planet Fitness", "Fitness"),
            ("Online shopping", "Shopping"),
            ("Hardware store", "Other"),
        ],
    )
    def test_expense_rules(self, description, expected):
        """Test each expense keyword rule."""
        assert rule_based_category(description, "expense") == expected

    @pytest.mark.parametrize(
        "description,expected",
        [
            ("ACME Corp Paycheck", "Salary"),
            ("Freelance design work", "Freelance"),
            ("Quarterly dividend", "Investment"),
            ("Birthday gift", "Other Income"),
        ],
    )
    def test_income_rules(self, description, expected):
        """Test each income keyword rule."""
        assert rule_based_category(description, "income") == expected

    def test_first_matching_rule_wins(self):
        """Test that 'food' (Groceries) beats 'restaurant' (Dining Out) by rule order."""
        assert rule_based_category("Restaurant food", "expense") == "Groceries"

    def test_expense_keywords_ignored_for_income(self):
        """Test that expense keywords never apply to income."""
        assert rule_based_category("grocery refund", "income") == "Other Income"

    def test_always_returns_expense_category(self):
        """Test that expenses always get an expense category."""
        for description in ["", "???", "salary", "x" * 500]:
            assert rule_based_category(description, "expense") in EXPENSE_CATEGORIES


class TestCategorizeTransaction:
    """Tests for the two-tier categorizer."""

    def test_without_config_uses_rules(self):
        """Test that no config means the keyword rules decide."""
        result = categorize_with_source("Whole Foods grocery run", Decimal("54.20"), "expense")

        assert result.category == "Groceries"
        assert result.source == "rules"

    def test_examples(self):
        """Test the documented categorization examples."""
        assert categorize_transaction("Whole Foods grocery run", 54.20, "expense") == "Groceries"
        assert categorize_transaction("", 10, "income") == "Other Income"

    def test_llm_answer_accepted(self, llm_config, use_provider):
        """Test that a valid LLM answer is used and reported as such."""
        provider = use_provider(FakeProvider(category="Shopping"))

        result = categorize_with_source("Target", Decimal("20"), "expense", llm_config)

        assert result.category == "Shopping"
        assert result.source == "llm"
        assert provider.calls == [("suggest_category", "Target", "expense")]

    def test_llm_error_falls_back_to_rules(self, llm_config, use_provider):
        """Test that an LLM error falls back to the keyword rules."""
        use_provider(FakeProvider(error=ConnectionError("network down")))
        description = "Whole Foods grocery run"

        result = categorize_with_source(description, Decimal("54.20"), "expense", llm_config)

        assert result.source == "rules"
        assert result.category == rule_based_category(description, "expense")

    def test_llm_out_of_set_answer_falls_back(self, llm_config, use_provider):
        """Test that a label outside the category list is rejected."""
        use_provider(FakeProvider(category="Pet Supplies"))

        result = categorize_with_source("Uber ride", Decimal("12"), "expense", llm_config)

        assert result.category == "Transportation"
        assert result.source == "rules"

    def test_llm_answer_from_other_type_rejected(self, llm_config, use_provider):
        """Test that an income label is not accepted for an expense."""
        use_provider(FakeProvider(category="Salary"))

        result = categorize_with_source("Mystery", Decimal("12"), "expense", llm_config)

        assert result.category == "Other"

    def test_llm_empty_answer_falls_back(self, llm_config, use_provider):
        """Test that an empty LLM answer falls back to the keyword rules."""
        use_provider(FakeProvider(category=None))

        assert categorize_transaction("paycheck", 100, "income", llm_config) == "Salary"

    def test_provider_init_error_falls_back(self, test_config):
        """Test that an enabled LLM without an API key degrades to rules."""
        test_config.llm_enabled = True
        test_config.llm_openai_api_key = ""

        result = categorize_with_source("Netflix", Decimal("15.99"), "expense", test_config)

        assert result.category == "Entertainment"
        assert result.source == "rules"


class TestCategorizeBatch:
    """Tests for categorize_batch function."""

    def test_empty_list(self):
        """Test that an empty batch is returned unchanged."""
        assert categorize_batch([]) == []

    def test_sets_category_and_flag_in_order(self):
        """Test that a batch is categorized in order and flagged automatic."""
        transactions = [
            make_transaction(5, "expense", description="coffee"),
            make_transaction(900, "income", description="salary"),
            make_transaction(40, "expense", description="gym membership"),
        ]

        result = categorize_batch(transactions)

        assert [t.category for t in result] == ["Dining Out", "Salary", "Fitness"]
        assert all(t.ai_generated for t in result)

    def test_llm_batch_runs_every_transaction(self, llm_config, use_provider):
        """Test that every transaction in a batch is sent to the LLM."""
        provider = use_provider(FakeProvider(category="Other"))
        transactions = [
            make_transaction(i, "expense", description=f"item {i}") for i in range(1, 6)
        ]

        categorize_batch(transactions, llm_config)

        assert len(provider.calls) == 5
        assert all(t.category == "Other" for t in transactions)

    def test_llm_batch_income_answer_validated_per_type(self, llm_config, use_provider):
        """Test that LLM answers are validated against each transaction's type."""
        use_provider(FakeProvider(category="Groceries"))
        transactions = [
            make_transaction(10, "expense", description="x"),
            make_transaction(10, "income", description="dividend"),
        ]

        categorize_batch(transactions, llm_config)

        assert transactions[0].category == "Groceries"
        assert transactions[1].category == "Investment"
        assert transactions[1].category in INCOME_CATEGORIES


class TestDetectColumns:
    """Tests for column detection."""

    def test_common_headers(self):
        """Test the usual Date, Description, Amount headers."""
        mapping = keyword_column_mapping(["Date", "Description", "Amount"])

        assert mapping.date == "Date"
        assert mapping.description == "Description"
        assert mapping.amount == "Amount"
        assert mapping.is_complete

    def test_transaction_date_not_used_as_description(self):
        """Test that a header is never used for two fields."""
        mapping = keyword_column_mapping(["Transaction Date", "Memo", "Value"])

        assert mapping.date == "Transaction Date"
        assert mapping.description == "Memo"
        assert mapping.amount == "Value"

    def test_keyword_priority(self):
        """Test that 'amount' is preferred over 'debit' regardless of column order."""
        mapping = keyword_column_mapping(["Debit", "Details", "Posting Date", "Amount"])

        assert mapping.amount == "Amount"
        assert mapping.description == "Details"
        assert mapping.date == "Posting Date"

    def test_missing_columns(self):
        """Test that unrecognised headers leave every field unset."""
        mapping = keyword_column_mapping(["foo", "bar"])

        assert mapping.date is None
        assert mapping.description is None
        assert mapping.amount is None
        assert not mapping.is_complete

    def test_llm_mapping_accepted(self, llm_config, use_provider):
        """Test that a valid LLM mapping is used."""
        headers = ["Booked", "Payee Name", "Sum"]
        use_provider(
            FakeProvider(
                columns={"date": "Booked", "description": "Payee Name", "amount": "Sum"}
            )
        )

        mapping = detect_columns(headers, llm_config)

        assert mapping.source == "llm"
        assert (mapping.date, mapping.description, mapping.amount) == (
            "Booked",
            "Payee Name",
            "Sum",
        )

    def test_llm_mapping_with_unknown_header_rejected(self, llm_config, use_provider):
        """Test that an LLM mapping naming a missing header is rejected."""
        headers = ["Date", "Description", "Amount"]
        use_provider(
            FakeProvider(
                columns={"date": "Date", "description": "Narrative", "amount": "Amount"}
            )
        )

        mapping = detect_columns(headers, llm_config)

        assert mapping.source == "rules"
        assert mapping.description == "Description"

    def test_llm_mapping_with_duplicate_header_rejected(self, llm_config, use_provider):
        """Test that an LLM mapping reusing a header is rejected."""
        headers = ["Date", "Description", "Amount"]
        use_provider(
            FakeProvider(
                columns={"date": "Date", "description": "Amount", "amount": "Amount"}
            )
        )

        assert detect_columns(headers, llm_config).source == "rules"

    def test_llm_error_falls_back(self, llm_config, use_provider):
        """Test that an LLM error falls back to the keyword mapping."""
        use_provider(FakeProvider(error=TimeoutError("slow")))

        mapping = detect_columns(["Date", "Memo", "Amount"], llm_config)

        assert mapping.source == "rules"
        assert mapping.description == "Memo"

    def test_split_debit_credit_headers(self):
        """Test that separate Debit and Credit headers map as a split amount."""
        mapping = keyword_column_mapping(["Date", "Description", "Debit", "Credit"])

        assert mapping.amount is None
        assert (mapping.debit, mapping.credit) == ("Debit", "Credit")
        assert mapping.description == "Description"
        assert mapping.is_complete

    def test_split_amount_headers_not_taken_as_signed_amount(self):
        """Test that 'Debit Amount'/'Credit Amount' are a pair, not one amount."""
        mapping = keyword_column_mapping(
            ["Posted Date", "Payee", "Debit Amount", "Credit Amount"]
        )

        assert mapping.amount is None
        assert (mapping.debit, mapping.credit) == ("Debit Amount", "Credit Amount")
        assert mapping.description == "Payee"

    def test_withdrawal_deposit_headers(self):
        """Test the Withdrawals/Deposits naming used by some banks."""
        mapping = keyword_column_mapping(["Date", "Details", "Withdrawals", "Deposits"])

        assert (mapping.debit, mapping.credit) == ("Withdrawals", "Deposits")

    def test_lone_debit_column_is_signed_amount(self):
        """Test that a Debit column without a Credit column holds signed amounts."""
        mapping = keyword_column_mapping(["Transaction Date", "Memo", "Debit"])

        assert mapping.amount == "Debit"
        assert mapping.debit is None and mapping.credit is None

    def test_debit_without_credit_is_incomplete(self):
        """Test that a debit column alone does not count as an amount."""
        mapping = categorization.ColumnMapping(
            date="Date", description="Description", debit="Debit"
        )

        assert not mapping.has_amount
        assert not mapping.is_complete

    def test_llm_split_mapping_accepted(self, llm_config, use_provider):
        """Test that an LLM mapping with debit and credit headers is used."""
        headers = ["Booked", "Narrative", "Paid Out", "Paid In"]
        use_provider(
            FakeProvider(
                columns={
                    "date": "Booked",
                    "description": "Narrative",
                    "amount": None,
                    "debit": "Paid Out",
                    "credit": "Paid In",
                }
            )
        )

        mapping = detect_columns(headers, llm_config)

        assert mapping.source == "llm"
        assert (mapping.debit, mapping.credit) == ("Paid Out", "Paid In")

    def test_llm_mapping_with_only_debit_rejected(self, llm_config, use_provider):
        """Test that an LLM mapping with a debit but no credit header is rejected."""
        headers = ["Date", "Description", "Debit", "Credit"]
        use_provider(
            FakeProvider(
                columns={"date": "Date", "description": "Description", "debit": "Debit"}
            )
        )

        mapping = detect_columns(headers, llm_config)

        assert mapping.source == "rules"
        assert (mapping.debit, mapping.credit) == ("Debit", "Credit")

    def test_signed_amount_preferred_over_split_pair(self):
        """Test that an Amount column wins over Debit and Credit columns."""
        mapping = keyword_column_mapping(["Date", "Memo", "Amount", "Debit", "Credit"])

        assert mapping.amount == "Amount"
        assert mapping.debit is None and mapping.credit is None
