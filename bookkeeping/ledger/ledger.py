"""
The Ledger

DESIGN DECISION: The Ledger is the single writable owner of the
transaction sequence. Only two operations mutate it:

- add: validate a draft, assign an id, append, persist
- remove: drop a transaction by id, persist

Everything else (filters, reports, the UI) reads snapshots.

Ids are time-based (milliseconds since the epoch) with a monotonic guard: a new id is always strictly
greater than every id handed out before, so ids are never reused even
after the newest transaction is deleted and the process restarts.

Persistence failures never undo a mutation. The in-memory ledger stays
authoritative for the session, the failure is logged, and the next
mutation (or flush()) writes the full ledger again.
"""

import time
from collections.abc import Callable, Iterable, Iterator
from typing import Optional

import structlog

from bookkeeping.models.report import ValidationResult
from bookkeeping.models.transaction import Transaction, TransactionDraft
from bookkeeping.services.storage.interface import PersistenceError
from bookkeeping.services.storage.persistence import LedgerPersistence
from bookkeeping.validation.validator import TransactionValidator

logger = structlog.get_logger(__name__)


class TransactionValidationError(ValueError):
    """A draft is missing required fields or has invalid values."""

    def __init__(self, result: ValidationResult):
        self.result = result
        self.missing_fields = [
            issue.field
            for issue in result.issues
            if issue.severity == "error" and issue.issue_type == "missing"
        ]
        self.error_fields = result.error_fields
        messages = "; ".join(
            issue.message for issue in result.issues if issue.severity == "error"
        )
        super().__init__(f"Transaction is invalid: {messages}")


class Ledger:
    """
    Ordered, in-memory collection of transactions.

    Insertion order is preserved and no two transactions share an id.
    """

    def __init__(
        self,
        persistence: Optional[LedgerPersistence] = None,
        transactions: Iterable[Transaction] = (),
        validator: Optional[TransactionValidator] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the ledger.

        Args:
            persistence: Where to save after each mutation.
                         If None, the ledger lives in memory only.
            transactions: Initial contents (e.g. loaded from storage)
            validator: Draft validator (defaults to one built from settings)
            clock: Seconds since the epoch, used for id assignment
        """
        self._persistence = persistence
        self._validator = validator or TransactionValidator()
        self._clock = clock
        self._transactions: list[Transaction] = []
        self._last_id = 0
        self._pending_save = False

        seen_ids: set[int] = set()
        for transaction in transactions:
            if transaction.id in seen_ids:
                raise ValueError(f"Duplicate transaction id: {transaction.id}")
            seen_ids.add(transaction.id)
            self._transactions.append(transaction)
            self._last_id = max(self._last_id, transaction.id)

    @classmethod
    def open(
        cls,
        persistence: LedgerPersistence,
        **kwargs,
    ) -> "Ledger":
        """
        Load the ledger from storage once, at startup.

        Raises:
            PersistenceError: If the stored ledger cannot be read
        """
        return cls(persistence=persistence, transactions=persistence.load(), **kwargs)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def all(self) -> tuple[Transaction, ...]:
        """Read-only snapshot in insertion order."""
        return tuple(self._transactions)

    def get(self, transaction_id: int) -> Optional[Transaction]:
        for transaction in self._transactions:
            if transaction.id == transaction_id:
                return transaction
        return None

    def __len__(self) -> int:
        return len(self._transactions)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(self.all())

    @property
    def validator(self) -> TransactionValidator:
        return self._validator

    @property
    def pending_save(self) -> bool:
        """True when the last save failed and storage is behind memory."""
        return self._pending_save

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def add(self, draft: TransactionDraft) -> Transaction:
        """
        Validate a draft and append it as a new transaction.

        Returns:
            The stored Transaction

        Raises:
            TransactionValidationError: If required fields are missing or
                invalid. Nothing is stored in that case.
        """
        result = self._validator.validate(draft)
        if result.has_errors:
            logger.info(
                "transaction_rejected",
                error_fields=result.error_fields,
            )
            raise TransactionValidationError(result)

        for warning in result.warnings:
            logger.warning("transaction_validation_warning", warning=warning)

        transaction = Transaction(
            id=self._next_id(),
            date=draft.date,
            description=draft.description,
            amount=draft.amount,
            type=draft.type,
            notes=draft.notes,
        )
        self._transactions.append(transaction)
        self._last_id = transaction.id

        logger.info(
            "transaction_added",
            transaction_id=transaction.id,
            type=transaction.type.value,
            amount=str(transaction.amount),
        )
        self._commit()
        return transaction

    def remove(self, transaction_id: int) -> bool:
        """
        Remove a transaction by id.

        Confirmation is the caller's job; this removes immediately.

        Returns:
            True if a transaction was removed, False if the id was not found
        """
        for index, transaction in enumerate(self._transactions):
            if transaction.id == transaction_id:
                del self._transactions[index]
                logger.info("transaction_removed", transaction_id=transaction_id)
                self._commit()
                return True

        logger.info("transaction_remove_not_found", transaction_id=transaction_id)
        return False

    def flush(self) -> bool:
        """
        Write the current ledger to storage.

        Returns:
            True if storage now matches memory
        """
        return self._commit()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _next_id(self) -> int:
        candidate = int(self._clock() * 1000)
        return max(candidate, self._last_id + 1)

    def _commit(self) -> bool:
        if self._persistence is None:
            return True
        try:
            self._persistence.save(self._transactions)
        except PersistenceError as e:
            self._pending_save = True
            logger.warning(
                "ledger_save_failed",
                error=str(e),
                transaction_count=len(self._transactions),
            )
            return False
        self._pending_save = False
        return True
