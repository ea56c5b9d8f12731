"""CSV statement parser for the two supported bank export layouts."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from finance_ledger.models.statement import AccountType, Statement
from finance_ledger.models.transaction import Transaction
from finance_ledger.parsers.base import (
    DEFAULT_FILE_NAME,
    ParseDiagnostics,
    ParseError,
    build_statement,
    build_transaction,
)
from finance_ledger.parsers.tokenizer import split_csv_line
from finance_ledger.processing.categorizer import Categorizer
from finance_ledger.utils.date_utils import normalize_date
from finance_ledger.utils.decimal_utils import parse_amount
from finance_ledger.utils.logging_config import get_logger

logger = get_logger(__name__)

# Maximum CSV file size to prevent memory exhaustion (50 MB)
MAX_CSV_FILE_SIZE = 50 * 1024 * 1024


@dataclass(frozen=True)
class ColumnMapping:
    """Fixed positions of the fields read from each row."""

    date_col: int
    description_col: int
    amount_col: int


# Checking: Details,Posting Date,Description,Amount,Type,Balance,Check or Slip #
# Credit:   Transaction Date,Post Date,Description,Category,Type,Amount,Memo
LAYOUTS: dict[AccountType, ColumnMapping] = {
    AccountType.CHECKING: ColumnMapping(date_col=1, description_col=2, amount_col=3),
    AccountType.CREDIT: ColumnMapping(date_col=0, description_col=2, amount_col=5),
}


def detect_account_type(csv_text: str) -> AccountType:
    """Detect the export layout from the header line.

    Args:
        csv_text: Full CSV content.

    Returns:
        CHECKING for "Details ... Posting Date" headers, CREDIT for
        "Transaction Date ... Post Date" headers, CHECKING otherwise.
    """
    header = csv_text.split("\n", 1)[0].lower()

    if "details" in header and "posting date" in header:
        return AccountType.CHECKING
    if "transaction date" in header and "post date" in header:
        return AccountType.CREDIT

    logger.debug("Unrecognized CSV header, defaulting to checking layout")
    return AccountType.CHECKING


class StatementParser:
    """Parses CSV statement exports into Statements.

    Parsing is best-effort per row: rows with an empty date or description,
    or an amount that is not a number, are dropped and the rest of the file
    is still ingested.
    """

    def __init__(self, categorizer: Optional[Categorizer] = None):
        """Initialize statement parser.

        Args:
            categorizer: Categorizer for new transactions (built-in rules by default).
        """
        self.categorizer = categorizer or Categorizer()

    def parse(
        self,
        csv_text: str,
        account_type: "AccountType | str | None" = None,
        file_name: str = DEFAULT_FILE_NAME,
        diagnostics: Optional[ParseDiagnostics] = None,
    ) -> Statement:
        """Parse CSV content into a Statement.

        Args:
            csv_text: Full CSV content including the header line.
            account_type: Layout to use; detected from the header when None.
            file_name: Name recorded on the statement.
            diagnostics: Optional sink for dropped rows.

        Returns:
            Statement with transactions sorted newest first.
        """
        if account_type is None:
            resolved_type = detect_account_type(csv_text)
        else:
            resolved_type = AccountType.parse(account_type)
        mapping = LAYOUTS[resolved_type]

        lines = csv_text.strip().split("\n")
        transactions: list[Transaction] = []
        skipped_count = 0

        # Line 1 is the header
        for line_number, raw_line in enumerate(lines[1:], start=2):
            line = raw_line.strip()
            if not line:
                continue

            txn = self._parse_row(line, line_number, mapping, diagnostics)
            if txn is None:
                skipped_count += 1
                continue
            transactions.append(txn)

        logger.info(
            f"Parsed {len(transactions)} transactions from {file_name} as "
            f"{resolved_type.value} ({skipped_count} rows skipped)"
        )
        return build_statement(transactions, file_name, resolved_type)

    def parse_file(
        self,
        file_path: Path,
        account_type: "AccountType | str | None" = None,
        diagnostics: Optional[ParseDiagnostics] = None,
    ) -> Statement:
        """Parse a CSV file; the statement is named after the file.

        Args:
            file_path: Path to the CSV export.
            account_type: Layout to use; detected from the header when None.
            diagnostics: Optional sink for dropped rows.

        Returns:
            Parsed Statement.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ParseError: If the file is too large or cannot be read.
        """
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        file_size = file_path.stat().st_size
        if file_size > MAX_CSV_FILE_SIZE:
            raise ParseError(
                f"File too large ({file_size / 1024 / 1024:.1f} MB). "
                f"Maximum allowed is {MAX_CSV_FILE_SIZE / 1024 / 1024:.0f} MB",
                file_path,
            )

        try:
            csv_text = file_path.read_text(encoding="utf-8-sig", errors="replace")
        except OSError as e:
            raise ParseError(f"Failed to read CSV file: {e}", file_path) from e

        return self.parse(
            csv_text,
            account_type=account_type,
            file_name=file_path.name,
            diagnostics=diagnostics,
        )

    def _parse_row(
        self,
        line: str,
        line_number: int,
        mapping: ColumnMapping,
        diagnostics: Optional[ParseDiagnostics],
    ) -> Optional[Transaction]:
        """Parse a single CSV line into a Transaction.

        Returns:
            Transaction, or None if the row should be skipped.
        """
        fields = split_csv_line(line)
        date_str = self._safe_get(fields, mapping.date_col)
        description = self._safe_get(fields, mapping.description_col)
        amount_str = self._safe_get(fields, mapping.amount_col)

        reason = None
        amount = None
        if not date_str:
            reason = "empty date field"
        elif not description:
            reason = "empty description"
        else:
            try:
                amount = parse_amount(amount_str)
            except ValueError:
                reason = f"unparseable amount {amount_str!r}"

        if reason is not None or amount is None:
            logger.debug(f"Skipping line {line_number}: {reason}")
            if diagnostics is not None:
                diagnostics.record(line_number, reason or "invalid row", line)
            return None

        return build_transaction(
            date=normalize_date(date_str),
            description=description,
            amount=amount,
            categorizer=self.categorizer,
        )

    @staticmethod
    def _safe_get(fields: list[str], idx: int) -> str:
        if idx >= len(fields):
            return ""
        return fields[idx]


def parse_statement(
    csv_text: str,
    account_type: "AccountType | str | None" = None,
    file_name: str = DEFAULT_FILE_NAME,
) -> Statement:
    """Convenience function to parse CSV content with the built-in rules.

    Args:
        csv_text: Full CSV content including the header line.
        account_type: Layout to use; detected from the header when None.
        file_name: Name recorded on the statement.

    Returns:
        Parsed Statement.
    """
    return StatementParser().parse(csv_text, account_type=account_type, file_name=file_name)
