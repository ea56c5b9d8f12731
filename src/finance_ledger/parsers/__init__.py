"""Parsers that turn statement exports into Statements."""

from finance_ledger.parsers.base import ParseDiagnostics, ParseError, SkippedRow
from finance_ledger.parsers.csv_parser import (
    LAYOUTS,
    ColumnMapping,
    StatementParser,
    detect_account_type,
    parse_statement,
)
from finance_ledger.parsers.extraction import statement_from_extraction
from finance_ledger.parsers.tokenizer import split_csv_line

__all__ = [
    "ParseError",
    "ParseDiagnostics",
    "SkippedRow",
    "StatementParser",
    "ColumnMapping",
    "LAYOUTS",
    "detect_account_type",
    "parse_statement",
    "statement_from_extraction",
    "split_csv_line",
]
