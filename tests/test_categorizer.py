"""Tests for keyword categorization."""

from decimal import Decimal

import pytest

from finance_ledger.models.category import DefaultCategory, KeywordRule
from finance_ledger.processing.categorizer import DEFAULT_RULES, Categorizer, categorize


class TestCategorize:
    """Tests for the built-in rule set."""

    @pytest.mark.parametrize(
        "description,amount,expected",
        [
            ("COSTCO WHOLESALE", "-54.32", DefaultCategory.GROCERIES),
            ("PAYROLL DEPOSIT", "2500.00", DefaultCategory.INCOME),
            ("ZELLE PAYMENT TO JOHN", "-40.00", DefaultCategory.TRANSFER),
            ("MONTHLY SERVICE FEE", "-12.00", DefaultCategory.FEES),
            ("THE HOME DEPOT #123", "-89.10", DefaultCategory.HOME_IMPROVEMENT),
            ("STARBUCKS STORE 1234", "-5.25", DefaultCategory.DINING),
            ("SHELL OIL 12345", "-45.00", DefaultCategory.TRANSPORTATION),
            ("COMCAST CABLE", "-80.00", DefaultCategory.UTILITIES),
            ("NETFLIX.COM", "-15.99", DefaultCategory.ENTERTAINMENT),
            ("AMAZON PRIME*AB12", "-14.99", DefaultCategory.SUBSCRIPTIONS),
            ("CVS/PHARMACY #0042", "-9.99", DefaultCategory.HEALTH),
            ("MARRIOTT HOTEL", "-210.00", DefaultCategory.TRAVEL),
            ("BEST BUY 00123", "-199.99", DefaultCategory.SHOPPING),
            ("SOMETHING UNRELATED", "-1.00", DefaultCategory.OTHER),
        ],
    )
    def test_default_rules(self, description: str, amount: str, expected: DefaultCategory) -> None:
        assert categorize(description, Decimal(amount)) == expected

    def test_matching_is_case_insensitive(self) -> None:
        assert categorize("whole foods market", Decimal("-30")) == DefaultCategory.GROCERIES

    def test_income_requires_positive_amount(self) -> None:
        """A debit mentioning a deposit is not income."""
        assert categorize("DIRECT DEPOSIT REVERSAL", Decimal("-100")) == DefaultCategory.OTHER

    def test_zero_amount_is_not_income(self) -> None:
        assert categorize("PAYROLL", Decimal("0")) == DefaultCategory.OTHER

    def test_transfer_beats_shopping(self) -> None:
        """PayPal purchases count as transfers, not shopping."""
        assert categorize("PAYPAL *SHOP", Decimal("-20")) == DefaultCategory.TRANSFER

    def test_dining_beats_transportation(self) -> None:
        """'uber eats' is checked before 'uber'."""
        assert categorize("UBER EATS ORDER", Decimal("-25")) == DefaultCategory.DINING
        assert categorize("UBER TRIP", Decimal("-25")) == DefaultCategory.TRANSPORTATION

    def test_dining_beats_shopping(self) -> None:
        assert categorize("CORNER CAFE SHOP", Decimal("-4")) == DefaultCategory.DINING

    def test_substring_matches_inside_words(self) -> None:
        """Keywords are substrings, so 'gas' matches inside longer words."""
        assert categorize("VEGAS BUFFET", Decimal("-30")) == DefaultCategory.TRANSPORTATION

    def test_income_keyword_on_credit_wins_over_transfer(self) -> None:
        assert categorize("DIRECT DEP TRANSFER", Decimal("100")) == DefaultCategory.INCOME


class TestCategorizer:
    """Tests for Categorizer with custom rules."""

    def test_first_matching_rule_wins(self) -> None:
        rules = (
            KeywordRule(DefaultCategory.TRAVEL, ("air",)),
            KeywordRule(DefaultCategory.SHOPPING, ("air",)),
        )
        categorizer = Categorizer(rules)

        assert categorizer.categorize("AIR CANADA", Decimal("-300")) == DefaultCategory.TRAVEL

    def test_no_rules_falls_back_to_other(self) -> None:
        assert Categorizer(()).categorize("ANYTHING", Decimal("1")) == DefaultCategory.OTHER

    def test_default_rule_order(self) -> None:
        order = [rule.category for rule in DEFAULT_RULES]

        assert order[:3] == [
            DefaultCategory.INCOME,
            DefaultCategory.TRANSFER,
            DefaultCategory.FEES,
        ]
        assert order[-1] == DefaultCategory.SHOPPING
        assert DEFAULT_RULES[0].credits_only
        assert not any(rule.credits_only for rule in DEFAULT_RULES[1:])


class TestKeywordRule:
    """Tests for KeywordRule.matches."""

    def test_substring_overlap_is_a_match(self) -> None:
        """'coffee' contains 'fee', so the fees rule claims it first."""
        fees = next(rule for rule in DEFAULT_RULES if rule.category == DefaultCategory.FEES)

        assert fees.matches("COFFEE BAR", Decimal("-3"))
        assert categorize("COFFEE BAR", Decimal("-3")) == DefaultCategory.FEES

    def test_credits_only_rule(self) -> None:
        rule = KeywordRule(DefaultCategory.INCOME, ("refund",), credits_only=True)

        assert rule.matches("REFUND", Decimal("5"))
        assert not rule.matches("REFUND", Decimal("-5"))
