"""Similar-merchant detection for bulk recategorization."""

import re
from collections.abc import Iterable

from finance_ledger.models.category import Category, category_key
from finance_ledger.models.transaction import Transaction

# Store numbers, reference codes and masking characters
_NOISE_PATTERN = re.compile(r"[0-9#*]+")
_WHITESPACE_PATTERN = re.compile(r"\s+")

# Number of leading words that identify a merchant
MERCHANT_TOKENS = 3


def normalize_description(description: str) -> str:
    """Reduce a description to a short comparable merchant prefix.

    Lowercases, strips digits, ``#`` and ``*``, collapses whitespace and
    keeps the first three words. "COSTCO #1234" and "Costco #5678" both
    become "costco".

    Args:
        description: Raw transaction description.

    Returns:
        Normalized merchant prefix (may be empty).
    """
    text = _NOISE_PATTERN.sub("", description.lower())
    text = _WHITESPACE_PATTERN.sub(" ", text).strip()
    return " ".join(text.split(" ")[:MERCHANT_TOKENS])


def is_similar(first: str, second: str) -> bool:
    """Check whether two normalized descriptions refer to the same merchant.

    They match when equal or when either contains the other.
    """
    return first == second or first in second or second in first


def find_similar(
    target: Transaction,
    pool: Iterable[Transaction],
    new_category: Category,
) -> list[Transaction]:
    """Find transactions that likely share the target's merchant.

    The target itself and transactions already in ``new_category`` are
    excluded. The pool is never modified.

    Args:
        target: Transaction being recategorized.
        pool: Candidate transactions (typically the whole ledger).
        new_category: Category the target is moving to.

    Returns:
        Matching transactions in pool order.
    """
    new_key = category_key(new_category)
    target_normalized = normalize_description(target.description)

    matches = []
    for txn in pool:
        if txn.id == target.id or txn.category == new_key:
            continue
        if is_similar(normalize_description(txn.description), target_normalized):
            matches.append(txn)
    return matches
