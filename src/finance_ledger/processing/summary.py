"""Income/expense summary generation."""

from collections.abc import Iterable
from decimal import Decimal

from finance_ledger.models.report import CategorySummary, Summary
from finance_ledger.models.transaction import Transaction, TransactionType
from finance_ledger.utils.decimal_utils import ZERO


def summarize(transactions: Iterable[Transaction]) -> Summary:
    """Reduce transactions to income, expense and per-category totals.

    Credits count as income and debits as expenses (by absolute value).
    The category breakdown covers debits only, is sorted by total
    descending, and keeps first-seen order for equal totals.

    Args:
        transactions: Transactions to summarize.

    Returns:
        Summary of the transactions.
    """
    total_income = ZERO
    total_expenses = ZERO
    count = 0
    # dicts preserve insertion order, which gives first-seen tie ordering
    category_totals: dict[str, list] = {}

    for txn in transactions:
        count += 1
        if txn.transaction_type is TransactionType.CREDIT:
            total_income += txn.amount
            continue

        spent = abs(txn.amount)
        total_expenses += spent
        entry = category_totals.setdefault(txn.category, [ZERO, 0])
        entry[0] += spent
        entry[1] += 1

    by_category = [
        CategorySummary(
            category=category,
            total=total,
            count=txn_count,
            percentage=_percentage(total, total_expenses),
        )
        for category, (total, txn_count) in category_totals.items()
    ]
    by_category.sort(key=lambda entry: entry.total, reverse=True)

    return Summary(
        total_income=total_income,
        total_expenses=total_expenses,
        transaction_count=count,
        by_category=by_category,
    )


def _percentage(part: Decimal, whole: Decimal) -> float:
    if whole == 0:
        return 0.0
    return float(part / whole * 100)
