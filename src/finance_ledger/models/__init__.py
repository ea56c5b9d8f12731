"""Data models for statements, transactions, categories and summaries."""

from finance_ledger.models.category import (
    CUSTOM_CATEGORY_COLORS,
    DEFAULT_CATEGORIES,
    Category,
    CategoryConfig,
    DefaultCategory,
    KeywordRule,
    get_category_config,
)
from finance_ledger.models.report import CategorySummary, Summary
from finance_ledger.models.statement import AccountType, Statement, StatementPeriod
from finance_ledger.models.transaction import Transaction, TransactionType

__all__ = [
    "Transaction",
    "TransactionType",
    "Statement",
    "StatementPeriod",
    "AccountType",
    "Category",
    "CategoryConfig",
    "DefaultCategory",
    "KeywordRule",
    "DEFAULT_CATEGORIES",
    "CUSTOM_CATEGORY_COLORS",
    "get_category_config",
    "Summary",
    "CategorySummary",
]
