"""Summary data models for income/expense reporting."""

from dataclasses import dataclass, field
from decimal import Decimal

from finance_ledger.utils.decimal_utils import ZERO, to_decimal, to_json_number


@dataclass
class CategorySummary:
    """Spending totals for one category.

    Attributes:
        category: Category key.
        total: Sum of absolute debit amounts in this category.
        count: Number of debit transactions in this category.
        percentage: Share of total expenses (0-100), 0 when there are no expenses.
    """

    category: str
    total: Decimal
    count: int
    percentage: float

    def to_dict(self) -> dict[str, object]:
        return {
            "category": self.category,
            "total": to_json_number(self.total),
            "count": self.count,
            "percentage": self.percentage,
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "CategorySummary":
        return cls(
            category=str(data["category"]),
            total=to_decimal(data.get("total", 0)),
            count=int(data.get("count", 0)),  # type: ignore[arg-type]
            percentage=float(data.get("percentage", 0.0)),  # type: ignore[arg-type]
        )


@dataclass
class Summary:
    """Income/expense statistics over a set of transactions.

    Attributes:
        total_income: Sum of credit amounts.
        total_expenses: Sum of absolute debit amounts.
        transaction_count: Number of transactions (credits and debits).
        by_category: Debit totals per category, largest first.
    """

    total_income: Decimal = ZERO
    total_expenses: Decimal = ZERO
    transaction_count: int = 0
    by_category: list[CategorySummary] = field(default_factory=list)

    @property
    def net_change(self) -> Decimal:
        """Total income minus total expenses."""
        return self.total_income - self.total_expenses

    def for_category(self, category: str) -> CategorySummary | None:
        """Return the breakdown entry for a category, if it has any spending."""
        for entry in self.by_category:
            if entry.category == category:
                return entry
        return None

    def to_dict(self) -> dict[str, object]:
        return {
            "totalIncome": to_json_number(self.total_income),
            "totalExpenses": to_json_number(self.total_expenses),
            "netChange": to_json_number(self.net_change),
            "transactionCount": self.transaction_count,
            "byCategory": [entry.to_dict() for entry in self.by_category],
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "Summary":
        """Create a Summary from stored data (``netChange`` is recomputed)."""
        by_category = data.get("byCategory") or []
        return cls(
            total_income=to_decimal(data.get("totalIncome", 0)),
            total_expenses=to_decimal(data.get("totalExpenses", 0)),
            transaction_count=int(data.get("transactionCount", 0)),  # type: ignore[arg-type]
            by_category=[CategorySummary.from_dict(entry) for entry in by_category],  # type: ignore[union-attr]
        )
