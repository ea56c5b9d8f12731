"""Keyword-based transaction categorizer."""

from decimal import Decimal

from finance_ledger.models.category import DefaultCategory, KeywordRule
from finance_ledger.utils.logging_config import get_logger

logger = get_logger(__name__)


# Evaluated top to bottom; the first matching rule wins.
DEFAULT_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(
        DefaultCategory.INCOME,
        ("deposit", "payroll", "direct dep"),
        credits_only=True,
    ),
    KeywordRule(DefaultCategory.TRANSFER, ("transfer", "zelle", "venmo", "paypal")),
    KeywordRule(DefaultCategory.FEES, ("fee", "charge", "interest")),
    KeywordRule(
        DefaultCategory.HOME_IMPROVEMENT,
        (
            "home depot", "lowes", "lowe's", "menards", "ace hardware",
            "hardware", "lumber", "plumbing", "electrical",
        ),
    ),
    KeywordRule(
        DefaultCategory.GROCERIES,
        (
            "grocery", "whole foods", "trader joe", "safeway", "kroger", "costco",
            "walmart", "target", "aldi", "publix", "wegmans", "sprouts",
        ),
    ),
    KeywordRule(
        DefaultCategory.DINING,
        (
            "restaurant", "doordash", "uber eats", "grubhub", "mcdonald", "starbucks",
            "chipotle", "cafe", "coffee", "pizza", "burger",
        ),
    ),
    KeywordRule(
        DefaultCategory.TRANSPORTATION,
        ("uber", "lyft", "gas", "shell", "chevron", "exxon", "parking", "transit", "metro"),
    ),
    KeywordRule(
        DefaultCategory.UTILITIES,
        (
            "electric", "water", "gas bill", "internet", "comcast", "verizon",
            "at&t", "t-mobile", "utility",
        ),
    ),
    KeywordRule(
        DefaultCategory.ENTERTAINMENT,
        ("netflix", "spotify", "hulu", "disney", "movie", "theater", "concert", "ticket"),
    ),
    KeywordRule(
        DefaultCategory.SUBSCRIPTIONS,
        ("subscription", "apple.com", "amazon prime", "membership"),
    ),
    KeywordRule(
        DefaultCategory.HEALTH,
        (
            "pharmacy", "cvs", "walgreens", "doctor", "medical", "hospital",
            "dental", "health",
        ),
    ),
    KeywordRule(DefaultCategory.TRAVEL, ("airline", "hotel", "airbnb", "flight", "travel")),
    KeywordRule(
        DefaultCategory.SHOPPING,
        ("amazon", "best buy", "apple store", "shop", "store"),
    ),
)


class Categorizer:
    """Assigns a category to a transaction description.

    Rules are checked in order and the first match wins. Descriptions that
    match nothing fall back to ``other``, so classification never fails.
    """

    def __init__(self, rules: tuple[KeywordRule, ...] = DEFAULT_RULES):
        """Initialize categorizer.

        Args:
            rules: Ordered keyword rules (defaults to the built-in set).
        """
        self.rules = rules

    def categorize(self, description: str, amount: Decimal) -> DefaultCategory:
        """Categorize a single transaction.

        Args:
            description: Transaction description.
            amount: Signed transaction amount.

        Returns:
            The matched category, or ``DefaultCategory.OTHER``.
        """
        for rule in self.rules:
            if rule.matches(description, amount):
                logger.debug(f"Rule {rule.category.value} matched for {description[:40]!r}")
                return rule.category
        return DefaultCategory.OTHER


_default_categorizer = Categorizer()


def categorize(description: str, amount: Decimal) -> DefaultCategory:
    """Convenience function using the built-in rules.

    Args:
        description: Transaction description.
        amount: Signed transaction amount.

    Returns:
        The matched category.
    """
    return _default_categorizer.categorize(description, amount)
