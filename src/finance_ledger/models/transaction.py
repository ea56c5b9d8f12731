"""Transaction data model for statement rows."""

import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from finance_ledger.models.category import Category, category_key
from finance_ledger.utils.decimal_utils import to_decimal, to_json_number


class TransactionType(Enum):
    """Type of transaction (credit or debit)."""

    CREDIT = "credit"  # Money in (amount >= 0)
    DEBIT = "debit"  # Money out (amount < 0)

    @classmethod
    def for_amount(cls, amount: Decimal) -> "TransactionType":
        """Return the type implied by the sign of an amount."""
        return cls.CREDIT if amount >= 0 else cls.DEBIT


def generate_id() -> str:
    """Generate an opaque unique identifier."""
    return str(uuid.uuid4())


@dataclass(eq=False)
class Transaction:
    """A single statement row.

    Identity fields are fixed at parse time. Only ``category`` changes
    afterwards, and always on the instance owned by its statement.

    Attributes:
        date: Transaction date, ``YYYY-MM-DD`` when the source allowed it.
        description: Merchant/payee text as extracted from the source.
        amount: Signed amount (positive=money in, negative=money out).
        category: Default category value or ``custom_<slug>`` key.
        id: Opaque unique identifier.
    """

    date: str
    description: str
    amount: Decimal
    category: str
    id: str = field(default_factory=generate_id)

    def __post_init__(self) -> None:
        self.category = category_key(self.category)

    @property
    def transaction_type(self) -> TransactionType:
        """Credit or debit, always derived from the amount sign."""
        return TransactionType.for_amount(self.amount)

    @property
    def is_debit(self) -> bool:
        return self.transaction_type is TransactionType.DEBIT

    def assign_category(self, category: Category) -> None:
        """Set the category of this transaction.

        Args:
            category: Default category or custom key.
        """
        self.category = category_key(category)

    def to_dict(self) -> dict[str, object]:
        """Serialize using the stored-state field names."""
        return {
            "id": self.id,
            "date": self.date,
            "description": self.description,
            "amount": to_json_number(self.amount),
            "type": self.transaction_type.value,
            "category": self.category,
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "Transaction":
        """Create a Transaction from stored data.

        The stored ``type`` is ignored; it is recomputed from the amount.

        Args:
            data: Dictionary with id, date, description, amount and category.

        Returns:
            A new Transaction instance.

        Raises:
            KeyError: If a required field is missing.
            ValueError: If the amount is not numeric.
        """
        return cls(
            id=str(data["id"]),
            date=str(data["date"]),
            description=str(data["description"]),
            amount=to_decimal(data["amount"]),
            category=str(data.get("category", "other")),
        )

    def __repr__(self) -> str:
        return (
            f"Transaction(date={self.date}, "
            f"description={self.description[:30]!r}, "
            f"amount={self.amount}, "
            f"category={self.category})"
        )
