"""Shared parser types: errors, diagnostics and statement assembly."""

from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Optional

from finance_ledger.models.statement import AccountType, Statement, StatementPeriod
from finance_ledger.models.transaction import Transaction
from finance_ledger.processing.categorizer import Categorizer
from finance_ledger.processing.summary import summarize
from finance_ledger.utils.date_utils import date_range
from finance_ledger.utils.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_FILE_NAME = "uploaded.csv"


class ParseError(Exception):
    """Exception raised when a whole file or payload cannot be parsed."""

    def __init__(self, message: str, file_path: Optional[Path] = None):
        """Initialize ParseError.

        Args:
            message: Error message.
            file_path: Optional path to the file that failed to parse.
        """
        self.file_path = file_path
        super().__init__(message)


@dataclass
class SkippedRow:
    """A row dropped during parsing."""

    line_number: int
    reason: str
    content: str


@dataclass
class ParseDiagnostics:
    """Optional sink for rows dropped during best-effort parsing.

    Parsing never fails because of a bad row; pass an instance to a parser
    to find out which rows were dropped and why.
    """

    skipped: list[SkippedRow] = field(default_factory=list)

    def record(self, line_number: int, reason: str, content: str) -> None:
        self.skipped.append(SkippedRow(line_number, reason, content))

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


def build_transaction(
    date: str,
    description: str,
    amount: Decimal,
    categorizer: Categorizer,
) -> Transaction:
    """Wrap an extracted row as a categorized Transaction with a fresh id."""
    return Transaction(
        date=date,
        description=description,
        amount=amount,
        category=categorizer.categorize(description, amount),
    )


def build_statement(
    transactions: list[Transaction],
    file_name: str,
    account_type: AccountType,
) -> Statement:
    """Assemble a Statement from parsed transactions.

    Transactions are sorted newest first (stable for equal dates) and the
    period and summary are computed from them.

    Args:
        transactions: Parsed transactions in source order.
        file_name: Source file name.
        account_type: Account type of the statement.

    Returns:
        A new Statement.
    """
    ordered = sorted(transactions, key=lambda t: t.date, reverse=True)
    start, end = date_range([t.date for t in ordered])
    return Statement(
        file_name=file_name,
        account_type=account_type,
        statement_period=StatementPeriod(start=start, end=end),
        transactions=ordered,
        summary=summarize(ordered),
    )
