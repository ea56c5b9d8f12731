"""Category definitions and keyword rules for transaction classification."""

import re
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Union


class DefaultCategory(str, Enum):
    """Built-in spending categories."""

    GROCERIES = "groceries"
    DINING = "dining"
    TRANSPORTATION = "transportation"
    UTILITIES = "utilities"
    ENTERTAINMENT = "entertainment"
    SHOPPING = "shopping"
    HEALTH = "health"
    TRAVEL = "travel"
    SUBSCRIPTIONS = "subscriptions"
    HOME_IMPROVEMENT = "home_improvement"
    INCOME = "income"
    TRANSFER = "transfer"
    FEES = "fees"
    OTHER = "other"


# A category is either a built-in value or a custom registry key ("custom_<slug>").
Category = Union[DefaultCategory, str]

CUSTOM_PREFIX = "custom_"

# Color used when a category cannot be resolved
FALLBACK_COLOR = "#9ca3af"

# Palette for custom categories, assigned in order and cycled
CUSTOM_CATEGORY_COLORS = [
    "#f43f5e",  # rose
    "#14b8a6",  # teal
    "#f59e0b",  # amber
    "#6366f1",  # indigo
    "#84cc16",  # lime
    "#e879f9",  # fuchsia
    "#22d3ee",  # cyan
    "#fb923c",  # orange
]


@dataclass(frozen=True)
class CategoryConfig:
    """Display settings for a category.

    Attributes:
        label: Human-readable category name.
        color: Hex color code (e.g., "#22c55e").
    """

    label: str
    color: str

    def to_dict(self) -> dict[str, str]:
        """Serialize for storage."""
        return {"label": self.label, "color": self.color}

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "CategoryConfig":
        """Create a CategoryConfig from stored data.

        Args:
            data: Dictionary with "label" and optional "color".

        Returns:
            A new CategoryConfig instance.
        """
        return cls(
            label=str(data["label"]),
            color=str(data.get("color", FALLBACK_COLOR)),
        )


DEFAULT_CATEGORIES: dict[DefaultCategory, CategoryConfig] = {
    DefaultCategory.GROCERIES: CategoryConfig("Groceries", "#22c55e"),
    DefaultCategory.DINING: CategoryConfig("Dining & Restaurants", "#f97316"),
    DefaultCategory.TRANSPORTATION: CategoryConfig("Transportation", "#3b82f6"),
    DefaultCategory.UTILITIES: CategoryConfig("Utilities & Bills", "#8b5cf6"),
    DefaultCategory.ENTERTAINMENT: CategoryConfig("Entertainment", "#ec4899"),
    DefaultCategory.SHOPPING: CategoryConfig("Shopping", "#eab308"),
    DefaultCategory.HEALTH: CategoryConfig("Health & Medical", "#ef4444"),
    DefaultCategory.TRAVEL: CategoryConfig("Travel", "#06b6d4"),
    DefaultCategory.SUBSCRIPTIONS: CategoryConfig("Subscriptions", "#a855f7"),
    DefaultCategory.HOME_IMPROVEMENT: CategoryConfig("Home Improvement", "#0ea5e9"),
    DefaultCategory.INCOME: CategoryConfig("Income", "#10b981"),
    DefaultCategory.TRANSFER: CategoryConfig("Transfers", "#6b7280"),
    DefaultCategory.FEES: CategoryConfig("Fees & Charges", "#dc2626"),
    DefaultCategory.OTHER: CategoryConfig("Other", FALLBACK_COLOR),
}

_DEFAULT_VALUES = frozenset(c.value for c in DefaultCategory)


def category_key(category: Category) -> str:
    """Return the plain string key for a category."""
    if isinstance(category, DefaultCategory):
        return category.value
    return str(category)


def is_default_category(category: Category) -> bool:
    """Check whether a category is one of the built-in categories."""
    return category_key(category) in _DEFAULT_VALUES


def is_custom_key(category: Category) -> bool:
    """Check whether a category has the custom key shape ``custom_<slug>``."""
    key = category_key(category)
    return key.startswith(CUSTOM_PREFIX) and len(key) > len(CUSTOM_PREFIX)


def custom_key_for(name: str) -> str:
    """Build the registry key for a custom category name.

    The name is lowercased and every whitespace run becomes ``_``, including
    leading and trailing ones, so " Pet Care" and "Pet Care" are different keys.

    Args:
        name: User-supplied category name (e.g., "Pet Care").

    Returns:
        Key such as ``custom_pet_care``.
    """
    slug = re.sub(r"\s+", "_", name.lower())
    return f"{CUSTOM_PREFIX}{slug}"


def get_category_config(
    category: Category,
    custom_categories: dict[str, CategoryConfig],
) -> CategoryConfig:
    """Resolve display settings for any category.

    Lookup never fails: unknown keys get a label derived from the key and
    the fallback color.

    Args:
        category: Default category or custom key.
        custom_categories: Custom category registry.

    Returns:
        The resolved CategoryConfig.
    """
    key = category_key(category)
    if key in _DEFAULT_VALUES:
        return DEFAULT_CATEGORIES[DefaultCategory(key)]
    if key in custom_categories:
        return custom_categories[key]
    return CategoryConfig(label=key.replace(CUSTOM_PREFIX, "", 1), color=FALLBACK_COLOR)


@dataclass(frozen=True)
class KeywordRule:
    """Ordered keyword rule mapping descriptions to a category.

    Keyword matching is a case-insensitive substring test.

    Attributes:
        category: Category assigned when the rule matches.
        keywords: Keywords, any of which may match.
        credits_only: Only match strictly positive amounts.
    """

    category: DefaultCategory
    keywords: tuple[str, ...] = field(default_factory=tuple)
    credits_only: bool = False

    def matches(self, description: str, amount: Decimal) -> bool:
        """Check if a transaction matches this rule.

        Args:
            description: Transaction description (any case).
            amount: Signed transaction amount.

        Returns:
            True when the amount constraint holds and any keyword occurs in
            the description.
        """
        if self.credits_only and not amount > 0:
            return False
        description_lower = description.lower()
        return any(keyword in description_lower for keyword in self.keywords)

    def __repr__(self) -> str:
        return f"KeywordRule(category={self.category.value!r}, keywords={len(self.keywords)})"
