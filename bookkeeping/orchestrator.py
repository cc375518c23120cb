"""
Main Orchestrator for the Bookkeeping System

This module ties together all the components and defines the
flows the UI drives:
1. Record (draft → validate → ledger → storage)
2. Scan (receipt → extract → pre-fill draft)
3. View (ledger → filter → list or report)

DESIGN DECISION: Derived views are pulled, never cached. Every call to
visible_transactions() or report() recomputes from the ledger, so what
the UI shows can never lag behind the last add or remove.
"""

from typing import Optional

import structlog
from pydantic import ValidationError

from bookkeeping.config import Settings, get_settings
from bookkeeping.ledger import Ledger, TransactionValidationError
from bookkeeping.models.report import ExpenseSummary, FilterSpec, ViewMode
from bookkeeping.models.transaction import Transaction, TransactionDraft
from bookkeeping.queries import filter_transactions, summarize
from bookkeeping.services.ocr import (
    MindeeReceiptService,
    ReceiptScanner,
    ScanOutcome,
)
from bookkeeping.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsSlotStorage,
    InMemorySlotStorage,
    LedgerPersistence,
    LocalFileSlotStorage,
    SlotStorageInterface,
)
from bookkeeping.validation import TransactionValidator

logger = structlog.get_logger(__name__)


class Bookkeeper:
    """
    UI-facing surface over the ledger.

    Holds the current filter and view mode. The ledger stays the only
    thing that mutates transactions; this class just forwards to it.
    """

    def __init__(
        self,
        ledger: Ledger,
        scanner: Optional[ReceiptScanner] = None,
    ):
        self._ledger = ledger
        self._scanner = scanner
        self.filter_spec = FilterSpec()
        self.view_mode = ViewMode.TRANSACTIONS

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    @property
    def can_scan(self) -> bool:
        return self._scanner is not None

    def new_session(self) -> "Bookkeeper":
        """
        A Bookkeeper over the same ledger and scanner with its own view state.

        The ledger is shared by every browser session, but each session
        filters and switches views independently.
        """
        return Bookkeeper(self._ledger, self._scanner)

    # -------------------------------------------------------------------------
    # View state
    # -------------------------------------------------------------------------

    def set_filter(self, **criteria) -> FilterSpec:
        """Replace the given FilterSpec fields, keeping the rest."""
        self.filter_spec = FilterSpec(**{**self.filter_spec.model_dump(), **criteria})
        return self.filter_spec

    def clear_filter(self) -> None:
        self.filter_spec = FilterSpec()

    def toggle_view(self) -> ViewMode:
        self.view_mode = self.view_mode.toggled()
        return self.view_mode

    # -------------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------------

    def visible_transactions(self) -> list[Transaction]:
        """Ledger contents matching the current filter, in insertion order."""
        return filter_transactions(self._ledger.all(), self.filter_spec)

    def report(self) -> ExpenseSummary:
        """Totals over the currently visible transactions."""
        return summarize(self.visible_transactions())

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def record(self, draft: TransactionDraft) -> Transaction:
        """
        Add a transaction from a submitted draft.

        Raises:
            TransactionValidationError: If the draft is incomplete
        """
        return self._ledger.add(draft)

    def validation_message(self, error: TransactionValidationError) -> str:
        """Plain-language explanation of why a draft was rejected."""
        return self._ledger.validator.get_user_friendly_summary(error.result)

    def delete(self, transaction_id: int) -> bool:
        """Delete a transaction the user has already confirmed."""
        return self._ledger.remove(transaction_id)

    async def scan_receipt(
        self,
        document: bytes,
        filename: str,
        draft: TransactionDraft,
    ) -> Optional[ScanOutcome]:
        """
        Pre-fill a draft from a receipt.

        Returns:
            None if scanning is unavailable or a scan is already running
        """
        if self._scanner is None:
            logger.warning("receipt_scan_unavailable", filename=filename)
            return None
        return await self._scanner.scan(document, filename, draft)


def create_storage(settings: Settings) -> SlotStorageInterface:
    """Build the slot store selected by STORAGE_BACKEND."""
    backend = settings.storage.backend
    if backend == "memory":
        return InMemorySlotStorage()
    if backend == "google_sheets":
        return GoogleSheetsSlotStorage(GoogleSheetsClient())
    return LocalFileSlotStorage(settings.storage.data_dir)


def create_app_components(
    settings: Optional[Settings] = None,
    storage: Optional[SlotStorageInterface] = None,
    receipt_service: Optional[MindeeReceiptService] = None,
) -> Bookkeeper:
    """
    Factory function to create all application components.

    Args:
        settings: Configuration (defaults to get_settings())
        storage: Slot store override, mainly for tests
        receipt_service: Extraction service override, mainly for tests

    Returns:
        A Bookkeeper over the loaded ledger. Receipt scanning is
        disabled when no Mindee API key is configured.

    Raises:
        PersistenceError: If the stored ledger cannot be loaded
    """
    settings = settings or get_settings()
    if storage is None:
        storage = create_storage(settings)

    persistence = LedgerPersistence(storage, slot=settings.storage.ledger_slot)
    validator = TransactionValidator(
        max_amount=settings.app.max_transaction_amount,
        future_date_tolerance_days=settings.app.future_date_tolerance_days,
    )
    ledger = Ledger.open(persistence, validator=validator)

    scanner = None
    if receipt_service is None:
        try:
            receipt_service = MindeeReceiptService(api_key=settings.mindee.api_key)
        except ValidationError as e:
            logger.warning(
                "receipt_scanning_disabled",
                reason="MINDEE_API_KEY is not set",
                error_count=e.error_count(),
            )
    if receipt_service is not None:
        scanner = ReceiptScanner(receipt_service)

    logger.info(
        "app_components_created",
        backend=settings.storage.backend,
        transaction_count=len(ledger),
        scanning_enabled=scanner is not None,
    )
    return Bookkeeper(ledger, scanner)
