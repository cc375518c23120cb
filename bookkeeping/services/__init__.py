"""Services package: receipt extraction and ledger storage."""

from bookkeeping.services.ocr import (
    ExtractionError,
    MalformedFieldError,
    MindeeReceiptService,
    NoPredictionError,
    ReceiptScanner,
    ScanOutcome,
    ServiceFailureError,
)
from bookkeeping.services.storage import (
    CorruptSlotError,
    GoogleSheetsClient,
    GoogleSheetsSlotStorage,
    InMemorySlotStorage,
    LedgerPersistence,
    LocalFileSlotStorage,
    PersistenceError,
    SlotStorageInterface,
    StoreUnavailableError,
)

__all__ = [
    # Receipt extraction
    "ExtractionError",
    "MalformedFieldError",
    "MindeeReceiptService",
    "NoPredictionError",
    "ReceiptScanner",
    "ScanOutcome",
    "ServiceFailureError",
    # Storage
    "CorruptSlotError",
    "GoogleSheetsClient",
    "GoogleSheetsSlotStorage",
    "InMemorySlotStorage",
    "LedgerPersistence",
    "LocalFileSlotStorage",
    "PersistenceError",
    "SlotStorageInterface",
    "StoreUnavailableError",
]
