"""Bank-statement ingestion, categorization and ledger management."""

__version__ = "0.1.0"

from finance_ledger.models import (
    AccountType,
    CategoryConfig,
    DefaultCategory,
    Statement,
    Summary,
    Transaction,
    TransactionType,
)
from finance_ledger.parsers import (
    ParseError,
    StatementParser,
    detect_account_type,
    parse_statement,
    statement_from_extraction,
)
from finance_ledger.persistence import JsonFilePersistence, MemoryPersistence
from finance_ledger.store import CURRENT_VERSION, CategoryChangeProposal, FinanceStore

__all__ = [
    "__version__",
    "AccountType",
    "CategoryConfig",
    "DefaultCategory",
    "Statement",
    "Summary",
    "Transaction",
    "TransactionType",
    "ParseError",
    "StatementParser",
    "detect_account_type",
    "parse_statement",
    "statement_from_extraction",
    "FinanceStore",
    "CategoryChangeProposal",
    "CURRENT_VERSION",
    "JsonFilePersistence",
    "MemoryPersistence",
]
