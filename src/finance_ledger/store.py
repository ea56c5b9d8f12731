"""Finance store: the statements, custom categories and derived ledger.

The store is the single owner of ingested statements. Everything else
(the ledger, summaries, periods) is computed from the statements on every
read, so category changes made in place on a statement's transactions are
always reflected.
"""

import json
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional

from finance_ledger.models.category import (
    CUSTOM_CATEGORY_COLORS,
    DEFAULT_CATEGORIES,
    Category,
    CategoryConfig,
    DefaultCategory,
    category_key,
    custom_key_for,
    get_category_config,
    is_default_category,
)
from finance_ledger.models.report import Summary
from finance_ledger.models.statement import Statement, StatementPeriod
from finance_ledger.models.transaction import Transaction
from finance_ledger.persistence import PersistencePort, StoredState
from finance_ledger.processing.similarity import find_similar
from finance_ledger.processing.summary import summarize
from finance_ledger.utils.date_utils import date_range, utc_now_iso
from finance_ledger.utils.logging_config import LogContext, get_logger

logger = get_logger(__name__)

# Stored data with any other version is discarded on load.
CURRENT_VERSION = 1


@dataclass
class CategoryChangeProposal:
    """A pending recategorization and the transactions it could extend to.

    Attributes:
        target: Transaction the user recategorized.
        new_category: Category key being applied.
        similar: Other transactions that look like the same merchant.
    """

    target: Transaction
    new_category: str
    similar: list[Transaction] = field(default_factory=list)

    @property
    def has_similar(self) -> bool:
        return bool(self.similar)

    @property
    def transaction_ids(self) -> list[str]:
        """Target id followed by the ids of all similar transactions."""
        return [self.target.id] + [t.id for t in self.similar]


@dataclass
class _State:
    statements: list[Statement]
    custom_categories: dict[str, CategoryConfig]
    last_updated: str


class FinanceStore:
    """Owns statements and custom categories and derives the ledger.

    Invariants maintained by every operation:
    - no two statements share (file name, period start, period end)
    - every transaction category is a default category or a registered
      custom key
    - the ledger is always the flattened, date-descending view of the
      statements

    Mutations are serialized with a per-store lock. When ``autosave`` is
    set, every mutation is followed by a save through the persistence port;
    a failed save is logged and the in-memory state is kept.
    """

    def __init__(
        self,
        persistence: Optional[PersistencePort] = None,
        autosave: bool = False,
    ):
        """Initialize an empty store.

        Args:
            persistence: Backend used by load() and save().
            autosave: Save after every mutation.
        """
        self.persistence = persistence
        self.autosave = autosave
        self._lock = threading.RLock()
        self._statements: list[Statement] = []
        self._custom_categories: dict[str, CategoryConfig] = {}
        self.last_updated = utc_now_iso()

    # ------------------------------------------------------------------
    # Read API
    # ------------------------------------------------------------------

    @property
    def version(self) -> int:
        return CURRENT_VERSION

    @property
    def statements(self) -> list[Statement]:
        """Statements in insertion order (a new list; do not mutate the items)."""
        with self._lock:
            return list(self._statements)

    @property
    def custom_categories(self) -> dict[str, CategoryConfig]:
        with self._lock:
            return dict(self._custom_categories)

    @property
    def ledger(self) -> list[Transaction]:
        return self.get_ledger()

    def get_ledger(self) -> list[Transaction]:
        """Return all transactions across statements, newest first.

        Transactions with the same date keep statement order, then their
        order within the statement.
        """
        with self._lock:
            transactions = [t for s in self._statements for t in s.transactions]
        return sorted(transactions, key=lambda t: t.date, reverse=True)

    def get_summary(self) -> Summary:
        """Summarize the current ledger."""
        return summarize(self.get_ledger())

    def get_period(self) -> StatementPeriod:
        """Earliest and latest dates across the ledger (empty when no data)."""
        start, end = date_range([t.date for t in self.get_ledger()])
        return StatementPeriod(start=start, end=end)

    def find_transaction(self, transaction_id: str) -> Optional[Transaction]:
        with self._lock:
            for statement in self._statements:
                txn = statement.find_transaction(transaction_id)
                if txn is not None:
                    return txn
        return None

    def get_category_config(self, category: Category) -> CategoryConfig:
        """Resolve display settings for a category; never raises."""
        with self._lock:
            return get_category_config(category, self._custom_categories)

    def all_categories(self) -> dict[str, CategoryConfig]:
        """Default categories followed by custom ones, keyed by category key."""
        with self._lock:
            merged = {c.value: config for c, config in DEFAULT_CATEGORIES.items()}
            merged.update(self._custom_categories)
            return merged

    def is_known_category(self, category: Category) -> bool:
        with self._lock:
            return is_default_category(category) or category_key(category) in self._custom_categories

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def add_statement(self, statement: Statement) -> bool:
        """Add a statement unless an identical one is already stored.

        Categories the store does not know are reset to ``other``.

        Args:
            statement: Parsed statement.

        Returns:
            True if added, False if it duplicates an existing statement.
        """
        with self._lock:
            if any(s.dedup_key == statement.dedup_key for s in self._statements):
                logger.warning(f"Duplicate statement detected, skipping: {statement.file_name}")
                return False

            self._reconcile_categories([statement])
            self._statements.append(statement)
            logger.info(
                f"Added statement {statement.file_name} "
                f"({len(statement.transactions)} transactions, {statement.statement_period.display})"
            )
            self._touch()
            return True

    def remove_statement(self, index: int) -> Optional[Statement]:
        """Remove a statement and all of its transactions.

        Args:
            index: Position in ``statements``.

        Returns:
            The removed statement, or None if the index is out of range.
        """
        with self._lock:
            if not 0 <= index < len(self._statements):
                logger.warning(f"No statement at index {index}, nothing removed")
                return None

            removed = self._statements.pop(index)
            logger.info(f"Removed statement {removed.file_name}")
            self._touch()
            return removed

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    def set_transaction_category(self, transaction_id: str, category: Category) -> bool:
        """Change the category of one transaction in place.

        Args:
            transaction_id: Id of the transaction.
            category: Default category or registered custom key.

        Returns:
            True if the transaction was found and updated.
        """
        return self.set_transaction_categories_bulk([transaction_id], category) > 0

    def set_transaction_categories_bulk(
        self,
        transaction_ids: Iterable[str],
        category: Category,
    ) -> int:
        """Change the category of several transactions in one pass.

        Args:
            transaction_ids: Ids of the transactions.
            category: Default category or registered custom key.

        Returns:
            Number of transactions updated (0 if the category is unknown).
        """
        key = category_key(category)
        ids = set(transaction_ids)
        with self._lock:
            if not self.is_known_category(key):
                logger.warning(f"Unknown category {key!r}, no transactions changed")
                return 0

            updated = 0
            for statement in self._statements:
                for txn in statement.transactions:
                    if txn.id in ids:
                        txn.assign_category(key)
                        updated += 1

            if updated == 0:
                logger.warning(f"No transactions found for {len(ids)} id(s)")
                return 0

            logger.info(f"Set category {key} on {updated} transaction(s)")
            self._touch()
            return updated

    def add_custom_category(
        self,
        name: str,
        config: Optional[CategoryConfig] = None,
    ) -> Optional[str]:
        """Register a custom category.

        The key is ``custom_`` plus the lowercased name with whitespace runs
        replaced by ``_``. Without an explicit config the label is the
        trimmed name and the color is the next palette entry.

        Args:
            name: Category name, e.g. "Pet Care".
            config: Optional label/color to store as-is.

        Returns:
            The category key, or None if the name is blank.
        """
        if not name or not name.strip():
            logger.warning("Ignoring custom category with a blank name")
            return None

        key = custom_key_for(name)
        with self._lock:
            if config is None:
                color_index = len(self._custom_categories) % len(CUSTOM_CATEGORY_COLORS)
                config = CategoryConfig(label=name.strip(), color=CUSTOM_CATEGORY_COLORS[color_index])
            self._custom_categories[key] = config
            logger.info(f"Added custom category {key} ({config.label})")
            self._touch()
        return key

    def remove_custom_category(self, key: str) -> int:
        """Delete a custom category, moving its transactions to ``other``.

        Args:
            key: Custom category key (``custom_<slug>``).

        Returns:
            Number of transactions reassigned.
        """
        with self._lock:
            if key not in self._custom_categories:
                logger.warning(f"Custom category {key!r} not found")
                return 0

            reassigned = 0
            for statement in self._statements:
                for txn in statement.transactions:
                    if txn.category == key:
                        txn.assign_category(DefaultCategory.OTHER)
                        reassigned += 1

            del self._custom_categories[key]
            logger.info(f"Removed custom category {key}, {reassigned} transaction(s) moved to other")
            self._touch()
            return reassigned

    def propose_category_change(
        self,
        transaction_id: str,
        category: Category,
    ) -> Optional[CategoryChangeProposal]:
        """Prepare a recategorization and find similar transactions.

        Nothing is changed until apply_category_change() is called.

        Args:
            transaction_id: Transaction the user is recategorizing.
            category: New category.

        Returns:
            The proposal, or None if the transaction or category is unknown.
        """
        key = category_key(category)
        with self._lock:
            if not self.is_known_category(key):
                logger.warning(f"Unknown category {key!r}")
                return None
            target = self.find_transaction(transaction_id)
            if target is None:
                logger.warning(f"Transaction {transaction_id!r} not found")
                return None
            similar = find_similar(target, self.get_ledger(), key)

        logger.debug(f"Found {len(similar)} transaction(s) similar to {target.description[:30]!r}")
        return CategoryChangeProposal(target=target, new_category=key, similar=similar)

    def apply_category_change(
        self,
        proposal: CategoryChangeProposal,
        include_similar: bool = False,
    ) -> int:
        """Apply a proposal to the target alone or to all similar transactions.

        Args:
            proposal: Result of propose_category_change().
            include_similar: Also recategorize the similar transactions.

        Returns:
            Number of transactions updated.
        """
        if include_similar and proposal.has_similar:
            return self.set_transaction_categories_bulk(
                proposal.transaction_ids, proposal.new_category
            )
        return int(self.set_transaction_category(proposal.target.id, proposal.new_category))

    # ------------------------------------------------------------------
    # Whole-state operations
    # ------------------------------------------------------------------

    def clear_all(self) -> None:
        """Drop all statements and custom categories."""
        with self._lock:
            self._apply_state(self._default_state())
            logger.info("Cleared all finance data")
            self._touch()

    def to_stored_state(self) -> StoredState:
        """Serialize the store for persistence or export."""
        with self._lock:
            return {
                "version": CURRENT_VERSION,
                "statements": [s.to_dict() for s in self._statements],
                "customCategories": {
                    key: config.to_dict() for key, config in self._custom_categories.items()
                },
                "lastUpdated": self.last_updated,
            }

    def load(self) -> bool:
        """Replace the in-memory state with the persisted one.

        Stored data from another version, or data that cannot be decoded,
        is discarded and the store starts empty. Neither case raises.

        Returns:
            True if persisted data was loaded.
        """
        if self.persistence is None:
            return False

        with self._lock, LogContext(logger, "load", backend=type(self.persistence).__name__):
            stored = self.persistence.load()
            if stored is None:
                self._apply_state(self._default_state())
                return False

            version = stored.get("version")
            # bool is an int subclass and 1.0 == 1, so check the type too
            if type(version) is not int or version != CURRENT_VERSION:
                logger.info(
                    f"Stored data has version {version!r}, expected {CURRENT_VERSION}; "
                    "starting with empty data"
                )
                self._apply_state(self._default_state())
                return False

            try:
                state = self._decode_state(stored)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.error(f"Error loading finance data: {e}")
                self._apply_state(self._default_state())
                return False

            self._apply_state(state)
            logger.info(f"Loaded {len(self._statements)} statement(s)")
            return True

    def save(self) -> bool:
        """Write the current state through the persistence port.

        Returns:
            True on success. On failure the in-memory state is unchanged.
        """
        if self.persistence is None:
            return False
        with self._lock, LogContext(
            logger,
            "save",
            backend=type(self.persistence).__name__,
            statements=len(self._statements),
        ):
            saved = self.persistence.save(self.to_stored_state())
        if not saved:
            logger.error("Saving finance data failed; in-memory data is kept")
        return saved

    def export_json(self) -> str:
        """Return the stored state as indented JSON for backups."""
        return json.dumps(self.to_stored_state(), indent=2)

    def import_json(self, text: str) -> bool:
        """Replace the store with a JSON backup.

        The backup must be a JSON object with a ``statements`` list whose
        entries decode as statements. The version is not checked. On any
        failure the store is left untouched.

        Args:
            text: Backup file content.

        Returns:
            True if the backup was imported.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning(f"Import rejected, not valid JSON: {e}")
            return False

        if not isinstance(data, dict) or not isinstance(data.get("statements"), list):
            logger.warning("Import rejected, backup has no 'statements' list")
            return False

        try:
            state = self._decode_state(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Import rejected, invalid statement data: {e}")
            return False

        with self._lock, LogContext(logger, "import", statements=len(state.statements)):
            self._apply_state(state)
            logger.info(f"Imported {len(self._statements)} statement(s)")
            self._touch()
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _default_state() -> _State:
        return _State(statements=[], custom_categories={}, last_updated=utc_now_iso())

    def _apply_state(self, state: _State) -> None:
        self._statements = state.statements
        self._custom_categories = state.custom_categories
        self.last_updated = state.last_updated
        self._reconcile_categories(self._statements)

    def _decode_state(self, data: StoredState) -> _State:
        # Missing or null sections are empty; any other non-list/non-object is invalid
        raw_statements = data.get("statements")
        if raw_statements is None:
            raw_statements = []
        if not isinstance(raw_statements, list):
            raise TypeError("statements must be a list")

        raw_categories = data.get("customCategories")
        if raw_categories is None:
            raw_categories = {}
        if not isinstance(raw_categories, dict):
            raise TypeError("customCategories must be an object")

        custom_categories = {
            str(key): CategoryConfig.from_dict(value) for key, value in raw_categories.items()
        }

        statements: list[Statement] = []
        seen: set[tuple[str, str, str]] = set()
        for raw in raw_statements:
            statement = Statement.from_dict(raw)
            if statement.dedup_key in seen:
                logger.warning(f"Dropping duplicate stored statement {statement.file_name}")
                continue
            seen.add(statement.dedup_key)
            statements.append(statement)

        return _State(
            statements=statements,
            custom_categories=custom_categories,
            last_updated=str(data.get("lastUpdated") or utc_now_iso()),
        )

    def _reconcile_categories(self, statements: list[Statement]) -> None:
        """Reset categories the store does not know to ``other``."""
        reset = 0
        for statement in statements:
            for txn in statement.transactions:
                if not self.is_known_category(txn.category):
                    txn.assign_category(DefaultCategory.OTHER)
                    reset += 1
        if reset:
            logger.warning(f"Reset {reset} transaction(s) with unknown categories to other")

    def _touch(self) -> None:
        self.last_updated = utc_now_iso()
        if self.autosave and self.persistence is not None:
            self.save()
