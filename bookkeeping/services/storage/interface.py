"""
Abstract Storage Interface

DESIGN DECISION: The ledger is persisted into a single named slot of a
durable key-value store. Defining the store as an abstract interface
allows us to:
1. Keep the ledger on local disk by default
2. Swap in Google Sheets without touching the ledger
3. Use in-memory storage for testing

The interface is intentionally tiny: read a slot, write a slot.
Serialization of the ledger lives in persistence.py, not in the stores.
"""

from abc import ABC, abstractmethod
from typing import Optional


class SlotStorageInterface(ABC):
    """
    Abstract interface for a durable key-value store.

    Any storage implementation (local files, Google Sheets, etc.)
    must implement these methods.
    """

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: Slot name

        Returns:
            The stored text, or None if the slot was never written

        Raises:
            PersistenceError: If the store cannot be reached
        """
        pass

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """
        Replace the value stored under a key.

        The write is complete when this returns.

        Args:
            key: Slot name
            value: Text to store

        Raises:
            PersistenceError: If the write fails
        """
        pass


class PersistenceError(Exception):
    """Base exception for storage operations."""
    pass


class StoreUnavailableError(PersistenceError):
    """Could not connect to the storage backend."""
    pass


class CorruptSlotError(PersistenceError):
    """The stored payload cannot be decoded."""
    pass
