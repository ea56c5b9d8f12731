"""Tests for the CSV tokenizer and statement parser."""

from decimal import Decimal
from pathlib import Path
from unittest.mock import patch

import pytest

from conftest import CHECKING_HEADER, CREDIT_HEADER
from finance_ledger.models.statement import AccountType
from finance_ledger.models.transaction import TransactionType
from finance_ledger.parsers import (
    ParseDiagnostics,
    ParseError,
    StatementParser,
    detect_account_type,
    parse_statement,
    split_csv_line,
)
from finance_ledger.utils.date_utils import normalize_date
from finance_ledger.utils.decimal_utils import parse_amount


class TestSplitCsvLine:
    """Tests for split_csv_line."""

    def test_plain_fields(self) -> None:
        assert split_csv_line("a,b,c") == ["a", "b", "c"]

    def test_quoted_comma_stays_in_field(self) -> None:
        """Commas inside quotes do not split."""
        assert split_csv_line('a,"b, c",d') == ["a", "b, c", "d"]

    def test_fields_are_trimmed(self) -> None:
        assert split_csv_line("  x ,  y  ") == ["x", "y"]

    def test_empty_fields_kept(self) -> None:
        assert split_csv_line("a,,b,") == ["a", "", "b", ""]

    def test_unterminated_quote_does_not_raise(self) -> None:
        """An open quote swallows the rest of the line into one field."""
        assert split_csv_line('a,"b,c') == ["a", "b,c"]

    def test_empty_line(self) -> None:
        assert split_csv_line("") == [""]


class TestNormalizeDate:
    """Tests for normalize_date."""

    def test_us_date_rewritten(self) -> None:
        assert normalize_date("01/05/2024") == "2024-01-05"

    def test_single_digit_parts_padded(self) -> None:
        assert normalize_date("1/5/2024") == "2024-01-05"

    def test_iso_date_passes_through(self) -> None:
        assert normalize_date("2024-01-05") == "2024-01-05"

    def test_unexpected_literal_passes_through(self) -> None:
        assert normalize_date("Jan 5") == "Jan 5"


class TestParseAmount:
    """Tests for parse_amount."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("-54.32", Decimal("-54.32")),
            ("+2500.00", Decimal("2500.00")),
            (" .5 ", Decimal("0.5")),
            ("1e3", Decimal("1000")),
            ("12.50 USD", Decimal("12.50")),
            ("1_000", Decimal("1")),
            ("1,234.56", Decimal("1")),
        ],
    )
    def test_leading_number(self, raw: str, expected: Decimal) -> None:
        assert parse_amount(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", "abc", "USD 12", "$5.00", "-", "Infinity", "NaN"])
    def test_rejected(self, raw: str) -> None:
        with pytest.raises(ValueError):
            parse_amount(raw)


class TestDetectAccountType:
    """Tests for header-based layout detection."""

    def test_checking_header(self) -> None:
        assert detect_account_type(CHECKING_HEADER + "\n") == AccountType.CHECKING

    def test_credit_header(self) -> None:
        assert detect_account_type(CREDIT_HEADER + "\nrow") == AccountType.CREDIT

    def test_unknown_header_defaults_to_checking(self) -> None:
        assert detect_account_type("Date,Memo,Value") == AccountType.CHECKING

    def test_only_first_line_is_inspected(self) -> None:
        text = "Date,Memo,Value\n" + CREDIT_HEADER
        assert detect_account_type(text) == AccountType.CHECKING


class TestStatementParser:
    """Tests for StatementParser."""

    @pytest.fixture
    def parser(self) -> StatementParser:
        return StatementParser()

    def test_checking_export(self, parser: StatementParser, checking_csv: str) -> None:
        """Two checking rows become categorized transactions with totals."""
        statement = parser.parse(checking_csv, file_name="Chase1234_Activity.csv")

        assert statement.account_type == AccountType.CHECKING
        assert statement.file_name == "Chase1234_Activity.csv"
        assert len(statement.transactions) == 2

        by_description = {t.description: t for t in statement.transactions}
        assert by_description["COSTCO WHOLESALE"].category == "groceries"
        assert by_description["COSTCO WHOLESALE"].amount == Decimal("-54.32")
        assert by_description["PAYROLL DEPOSIT"].category == "income"

        assert statement.summary.total_income == Decimal("2500.00")
        assert statement.summary.total_expenses == Decimal("54.32")
        assert statement.summary.net_change == Decimal("2445.68")
        assert statement.summary.transaction_count == 2
        for txn in statement.transactions:
            assert (txn.transaction_type == TransactionType.CREDIT) == (txn.amount >= 0)

    def test_transactions_sorted_newest_first(
        self, parser: StatementParser, checking_csv: str
    ) -> None:
        statement = parser.parse(checking_csv)

        assert [t.date for t in statement.transactions] == ["2024-01-06", "2024-01-05"]
        assert statement.statement_period.start == "2024-01-05"
        assert statement.statement_period.end == "2024-01-06"

    def test_credit_export(self, parser: StatementParser, credit_csv: str) -> None:
        """Credit layout reads date from column 0 and amount from column 5."""
        statement = parser.parse(credit_csv)

        assert statement.account_type == AccountType.CREDIT
        assert len(statement.transactions) == 3
        starbucks = next(t for t in statement.transactions if t.description == "STARBUCKS #123")
        assert starbucks.date == "2024-02-10"
        assert starbucks.amount == Decimal("-6.50")
        assert starbucks.category == "dining"
        for txn in statement.transactions:
            assert (txn.transaction_type == TransactionType.CREDIT) == (txn.amount >= 0)
        assert statement.transactions[0].transaction_type == TransactionType.CREDIT

    def test_explicit_account_type_overrides_detection(self, parser: StatementParser) -> None:
        text = "whatever header\n01/02/2024,01/03/2024,HULU,,Sale,-7.99,"
        statement = parser.parse(text, account_type="credit")

        assert statement.account_type == AccountType.CREDIT
        assert statement.transactions[0].amount == Decimal("-7.99")

    def test_bad_rows_skipped_and_reported(self, parser: StatementParser) -> None:
        """Malformed rows are dropped; blank lines are ignored silently."""
        text = "\n".join([
            CHECKING_HEADER,
            '"",01/05/2024,"GOOD ROW",-1.00,,,',
            "",
            '"",01/06/2024,"BAD AMOUNT",abc,,,',
            '"",,"NO DATE",-2.00,,,',
            '"",01/07/2024,"",-3.00,,,',
            '"",01/08/2024',
        ])
        diagnostics = ParseDiagnostics()

        statement = parser.parse(text, diagnostics=diagnostics)

        assert [t.description for t in statement.transactions] == ["GOOD ROW"]
        assert diagnostics.skipped_count == 4
        assert [row.line_number for row in diagnostics.skipped] == [4, 5, 6, 7]
        assert "amount" in diagnostics.skipped[0].reason
        assert diagnostics.skipped[1].reason == "empty date field"
        assert diagnostics.skipped[2].reason == "empty description"

    def test_amount_read_from_leading_number(self, parser: StatementParser) -> None:
        """Trailing text after the number is ignored, as are digit separators."""
        text = "\n".join([
            CHECKING_HEADER,
            '"",01/05/2024,"UNDERSCORE",1_000,,,',
            '"",01/06/2024,"THOUSANDS","1,234.56",,,',
            '"",01/07/2024,"CURRENCY",12.50 USD,,,',
        ])

        statement = parser.parse(text)

        amounts = {t.description: t.amount for t in statement.transactions}
        assert amounts == {
            "UNDERSCORE": Decimal("1"),
            "THOUSANDS": Decimal("1"),
            "CURRENCY": Decimal("12.50"),
        }

    def test_header_only(self, parser: StatementParser) -> None:
        statement = parser.parse(CHECKING_HEADER + "\n")

        assert statement.transactions == []
        assert statement.statement_period.start == ""
        assert statement.statement_period.end == ""
        assert statement.summary.transaction_count == 0
        assert statement.summary.by_category == []

    def test_crlf_line_endings(self, parser: StatementParser, checking_csv: str) -> None:
        statement = parser.parse(checking_csv.replace("\n", "\r\n"))

        assert len(statement.transactions) == 2
        assert statement.transactions[0].description == "PAYROLL DEPOSIT"

    def test_each_transaction_gets_unique_id(
        self, parser: StatementParser, checking_csv: str
    ) -> None:
        first = parser.parse(checking_csv)
        second = parser.parse(checking_csv)

        ids = [t.id for t in first.transactions + second.transactions]
        assert len(set(ids)) == 4

    def test_default_file_name(self, checking_csv: str) -> None:
        assert parse_statement(checking_csv).file_name == "uploaded.csv"


class TestParseFile:
    """Tests for StatementParser.parse_file."""

    def test_statement_named_after_file(self, tmp_path: Path, checking_csv: str) -> None:
        path = tmp_path / "Chase1234_Activity.csv"
        path.write_text(checking_csv, encoding="utf-8")

        statement = StatementParser().parse_file(path)

        assert statement.file_name == "Chase1234_Activity.csv"
        assert len(statement.transactions) == 2

    def test_byte_order_mark_ignored(self, tmp_path: Path, credit_csv: str) -> None:
        """A UTF-8 BOM must not break header detection."""
        path = tmp_path / "card.csv"
        path.write_text("\ufeff" + credit_csv, encoding="utf-8")

        statement = StatementParser().parse_file(path)

        assert statement.account_type == AccountType.CREDIT

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            StatementParser().parse_file(tmp_path / "missing.csv")

    def test_file_too_large(self, tmp_path: Path, checking_csv: str) -> None:
        path = tmp_path / "big.csv"
        path.write_text(checking_csv, encoding="utf-8")

        with patch("finance_ledger.parsers.csv_parser.MAX_CSV_FILE_SIZE", 10):
            with pytest.raises(ParseError) as exc_info:
                StatementParser().parse_file(path)

        assert exc_info.value.file_path == path
