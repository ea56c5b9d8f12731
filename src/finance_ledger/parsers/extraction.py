"""Adapter for transactions extracted from non-CSV documents.

An external document-extraction service (for example a vision model reading
a PDF statement) returns JSON of the form::

    {
      "accountType": "checking" | "credit",
      "transactions": [
        {"date": "YYYY-MM-DD", "description": "...", "amount": -12.34}
      ]
    }

This module turns that output into a Statement with the same treatment as
CSV rows: fresh ids, type from the amount sign and keyword categorization.
"""

import json
import re
from typing import Optional

from finance_ledger.models.statement import AccountType, Statement
from finance_ledger.models.transaction import Transaction
from finance_ledger.parsers.base import (
    ParseDiagnostics,
    ParseError,
    build_statement,
    build_transaction,
)
from finance_ledger.processing.categorizer import Categorizer
from finance_ledger.utils.decimal_utils import to_decimal
from finance_ledger.utils.logging_config import get_logger

logger = get_logger(__name__)

# Model replies may wrap the JSON object in prose or code fences
_JSON_OBJECT_PATTERN = re.compile(r"\{.*\}", re.DOTALL)


def _load_payload(payload: "dict[str, object] | str") -> dict[str, object]:
    if isinstance(payload, dict):
        return payload

    match = _JSON_OBJECT_PATTERN.search(payload)
    if not match:
        raise ParseError("Extraction output contains no JSON object")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ParseError(f"Extraction output is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ParseError("Extraction output must be a JSON object")
    return data


def _resolve_account_type(
    declared: object,
    fallback: "AccountType | str | None",
) -> AccountType:
    for candidate in (declared, fallback):
        if not candidate:
            continue
        try:
            return AccountType.parse(candidate)  # type: ignore[arg-type]
        except ValueError:
            logger.warning(f"Ignoring unknown account type {candidate!r}")
    return AccountType.CHECKING


def statement_from_extraction(
    payload: "dict[str, object] | str",
    file_name: str,
    account_type: "AccountType | str | None" = None,
    categorizer: Optional[Categorizer] = None,
    diagnostics: Optional[ParseDiagnostics] = None,
) -> Statement:
    """Wrap extracted transaction records into a Statement.

    Args:
        payload: Parsed JSON object, or raw model text containing one.
        file_name: Name of the source document.
        account_type: Used when the payload does not declare one.
        categorizer: Categorizer for new transactions (built-in rules by default).
        diagnostics: Optional sink for dropped records.

    Returns:
        Statement with transactions sorted newest first.

    Raises:
        ParseError: If the payload is not a JSON object with a
            ``transactions`` list.
    """
    data = _load_payload(payload)
    records = data.get("transactions")
    if not isinstance(records, list):
        raise ParseError("Extraction output has no 'transactions' list")

    categorizer = categorizer or Categorizer()
    resolved_type = _resolve_account_type(data.get("accountType"), account_type)

    transactions: list[Transaction] = []
    for index, record in enumerate(records, start=1):
        txn = _record_to_transaction(record, index, categorizer, diagnostics)
        if txn is not None:
            transactions.append(txn)

    skipped = len(records) - len(transactions)
    logger.info(
        f"Wrapped {len(transactions)} extracted transactions from {file_name} "
        f"({skipped} records skipped)"
    )
    return build_statement(transactions, file_name, resolved_type)


def _record_to_transaction(
    record: object,
    index: int,
    categorizer: Categorizer,
    diagnostics: Optional[ParseDiagnostics],
) -> Optional[Transaction]:
    reason = None
    if not isinstance(record, dict):
        reason = "record is not an object"
    else:
        date_str = str(record.get("date") or "").strip()
        description = str(record.get("description") or "").strip()
        if not date_str:
            reason = "empty date field"
        elif not description:
            reason = "empty description"
        else:
            try:
                amount = to_decimal(record.get("amount"))
            except ValueError:
                reason = f"unparseable amount {record.get('amount')!r}"

    if reason is not None:
        logger.debug(f"Skipping extracted record {index}: {reason}")
        if diagnostics is not None:
            diagnostics.record(index, reason, repr(record))
        return None

    return build_transaction(date_str, description, amount, categorizer)
