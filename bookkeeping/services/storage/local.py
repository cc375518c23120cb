"""
Local Filesystem Slot Store

Directory layout: {root}/{slot}.json

Writes go to a temporary file in the same directory which then
replaces the slot file, so a crash mid-write never leaves a
half-written ledger behind.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional

from slugify import slugify

from bookkeeping.services.storage.interface import (
    PersistenceError,
    SlotStorageInterface,
    StoreUnavailableError,
)


class LocalFileSlotStorage(SlotStorageInterface):
    """One JSON file per slot under a root directory."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def path_for(self, key: str) -> Path:
        """Return the file backing a slot (slot names are slugified)."""
        return self.root / f"{self._slot_filename(key)}.json"

    def read(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreUnavailableError(f"Failed to read slot '{key}' from {path}: {e}")

    def write(self, key: str, value: str) -> None:
        path = self.path_for(key)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.root, prefix=f".{path.stem}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(value)
                    handle.flush()
                    os.fsync(handle.fileno())
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise PersistenceError(f"Failed to write slot '{key}' to {path}: {e}")

    @staticmethod
    def _slot_filename(key: str) -> str:
        """Convert a slot name to a filesystem-safe slug."""
        slug = str(slugify(key, max_length=80))
        if not slug:
            raise ValueError(f"Invalid slot name: {key!r}")
        return slug
