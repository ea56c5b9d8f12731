"""Statement data model: one ingested bank or card export."""

from dataclasses import dataclass, field
from enum import Enum

from finance_ledger.models.report import Summary
from finance_ledger.models.transaction import Transaction, generate_id
from finance_ledger.utils.date_utils import utc_now_iso


class AccountType(Enum):
    """Type of account a statement was exported from."""

    CHECKING = "checking"
    CREDIT = "credit"

    @classmethod
    def parse(cls, value: "str | AccountType") -> "AccountType":
        """Coerce a string such as "credit" to an AccountType.

        Raises:
            ValueError: If the value is not a known account type.
        """
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


@dataclass(frozen=True)
class StatementPeriod:
    """Date span covered by a statement (empty strings when it has no rows)."""

    start: str = ""
    end: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start, "end": self.end}

    @property
    def display(self) -> str:
        if not self.start and not self.end:
            return "No data"
        return f"{self.start} to {self.end}"


@dataclass(eq=False)
class Statement:
    """An ingested statement and the transactions it owns.

    Attributes:
        file_name: Name of the source file.
        account_type: Checking or credit.
        statement_period: Earliest and latest transaction dates.
        transactions: Transactions in statement order (newest first when parsed).
        summary: Summary computed at ingestion time. It is not updated when
            categories change; recompute from the ledger for display.
        id: Opaque unique identifier.
        uploaded_at: ISO-8601 ingestion timestamp.
    """

    file_name: str
    account_type: AccountType
    statement_period: StatementPeriod
    transactions: list[Transaction] = field(default_factory=list)
    summary: Summary = field(default_factory=Summary)
    id: str = field(default_factory=generate_id)
    uploaded_at: str = field(default_factory=utc_now_iso)

    @property
    def dedup_key(self) -> tuple[str, str, str]:
        """Key used to reject re-imports of the same statement."""
        return (self.file_name, self.statement_period.start, self.statement_period.end)

    def find_transaction(self, transaction_id: str) -> Transaction | None:
        for txn in self.transactions:
            if txn.id == transaction_id:
                return txn
        return None

    def to_dict(self) -> dict[str, object]:
        """Serialize using the stored-state field names."""
        return {
            "id": self.id,
            "fileName": self.file_name,
            "accountType": self.account_type.value,
            "statementPeriod": self.statement_period.to_dict(),
            "transactions": [txn.to_dict() for txn in self.transactions],
            "summary": self.summary.to_dict(),
            "uploadedAt": self.uploaded_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "Statement":
        """Create a Statement from stored data.

        Args:
            data: Dictionary in the stored-state layout.

        Returns:
            A new Statement instance.

        Raises:
            KeyError: If a required field is missing.
            ValueError: If a field has an invalid value.
            TypeError: If a field has the wrong shape.
        """
        period = data.get("statementPeriod") or {}
        if not isinstance(period, dict):
            raise TypeError("statementPeriod must be an object")

        raw_transactions = data.get("transactions") or []
        if not isinstance(raw_transactions, list):
            raise TypeError("transactions must be a list")

        summary_data = data.get("summary")
        transactions = [Transaction.from_dict(t) for t in raw_transactions]

        return cls(
            id=str(data["id"]),
            file_name=str(data["fileName"]),
            account_type=AccountType.parse(str(data.get("accountType", "checking"))),
            statement_period=StatementPeriod(
                start=str(period.get("start", "")),
                end=str(period.get("end", "")),
            ),
            transactions=transactions,
            summary=Summary.from_dict(summary_data) if isinstance(summary_data, dict) else Summary(),
            uploaded_at=str(data.get("uploadedAt", "")) or utc_now_iso(),
        )

    def __repr__(self) -> str:
        return (
            f"Statement(file_name={self.file_name!r}, "
            f"account_type={self.account_type.value}, "
            f"period={self.statement_period.display}, "
            f"transactions={len(self.transactions)})"
        )
