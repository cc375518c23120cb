"""In-memory slot store, for tests and throwaway sessions."""

from typing import Optional

from bookkeeping.services.storage.interface import SlotStorageInterface


class InMemorySlotStorage(SlotStorageInterface):
    """Keeps slots in a dict. Nothing survives the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._slots: dict[str, str] = dict(initial or {})
        self.write_count = 0

    def read(self, key: str) -> Optional[str]:
        return self._slots.get(key)

    def write(self, key: str, value: str) -> None:
        self._slots[key] = value
        self.write_count += 1
