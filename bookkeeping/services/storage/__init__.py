"""
Storage Services Package

Provides the slot-store interface, its implementations and the ledger
persistence bridge. Local files are the default backend; Google Sheets
is available as a drop-in replacement.
"""

from bookkeeping.services.storage.interface import (
    CorruptSlotError,
    PersistenceError,
    SlotStorageInterface,
    StoreUnavailableError,
)
from bookkeeping.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsSlotStorage,
)
from bookkeeping.services.storage.local import LocalFileSlotStorage
from bookkeeping.services.storage.memory import InMemorySlotStorage
from bookkeeping.services.storage.persistence import DEFAULT_SLOT, LedgerPersistence

__all__ = [
    # Interfaces
    "SlotStorageInterface",
    # Exceptions
    "CorruptSlotError",
    "PersistenceError",
    "StoreUnavailableError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsSlotStorage",
    "InMemorySlotStorage",
    "LocalFileSlotStorage",
    # Ledger bridge
    "DEFAULT_SLOT",
    "LedgerPersistence",
]
