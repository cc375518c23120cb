"""
Ledger Persistence

Serializes the whole ledger into one slot of a SlotStorageInterface as a
JSON array of transaction records, and reads it back at startup.

Record format (one per transaction, insertion order):
    {"id": 1704412800000, "date": "2024-01-05", "description": "Office chair",
     "amount": "129.99", "type": "Office Supplies", "notes": null}

Amounts are written as decimal strings. JSON numbers are also accepted on
load and are parsed straight to Decimal, never through float.
"""

import json
from collections.abc import Iterable
from decimal import Decimal

import structlog
from pydantic import ValidationError

from bookkeeping.models.transaction import Transaction
from bookkeeping.services.storage.interface import (
    CorruptSlotError,
    SlotStorageInterface,
)

logger = structlog.get_logger(__name__)

DEFAULT_SLOT = "transactions"


class LedgerPersistence:
    """Reads and writes the serialized ledger in a named slot."""

    def __init__(self, storage: SlotStorageInterface, slot: str = DEFAULT_SLOT):
        self._storage = storage
        self.slot = slot

    def load(self) -> list[Transaction]:
        """
        Load the ledger from storage.

        Returns:
            Transactions in stored order; [] if the slot is missing or empty

        Raises:
            CorruptSlotError: If the slot does not hold a JSON array
            PersistenceError: If the store cannot be read
        """
        raw = self._storage.read(self.slot)
        if raw is None or not raw.strip():
            logger.info("ledger_slot_empty", slot=self.slot)
            return []

        try:
            records = json.loads(raw, parse_float=Decimal)
        except json.JSONDecodeError as e:
            raise CorruptSlotError(f"Slot '{self.slot}' is not valid JSON: {e}")

        if not isinstance(records, list):
            raise CorruptSlotError(
                f"Slot '{self.slot}' holds {type(records).__name__}, expected a list"
            )

        transactions: list[Transaction] = []
        seen_ids: set[int] = set()
        for position, record in enumerate(records):
            try:
                transaction = Transaction.model_validate(record)
            except ValidationError as e:
                logger.error(
                    "ledger_record_skipped",
                    slot=self.slot,
                    position=position,
                    record=record,
                    error=str(e),
                )
                continue
            if transaction.id in seen_ids:
                logger.error(
                    "ledger_duplicate_id_skipped",
                    slot=self.slot,
                    position=position,
                    transaction_id=transaction.id,
                )
                continue
            seen_ids.add(transaction.id)
            transactions.append(transaction)

        logger.info("ledger_loaded", slot=self.slot, transaction_count=len(transactions))
        return transactions

    def save(self, transactions: Iterable[Transaction]) -> None:
        """
        Write the full ledger to storage.

        Raises:
            PersistenceError: If the write fails
        """
        records = [transaction.to_record() for transaction in transactions]
        self._storage.write(self.slot, json.dumps(records, ensure_ascii=False))
        logger.debug("ledger_saved", slot=self.slot, transaction_count=len(records))
