"""Transaction processing components."""

from finance_ledger.processing.categorizer import (
    DEFAULT_RULES,
    Categorizer,
    categorize,
)
from finance_ledger.processing.similarity import (
    find_similar,
    normalize_description,
)
from finance_ledger.processing.summary import summarize

__all__ = [
    "Categorizer",
    "categorize",
    "DEFAULT_RULES",
    "summarize",
    "find_similar",
    "normalize_description",
]
