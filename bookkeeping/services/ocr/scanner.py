"""
Receipt Scanner

Wraps the extraction service for the UI:
1. At most one extraction in flight (busy flag, always released)
2. Extraction failures become a message, never an exception
3. A draft is only pre-filled when the receipt had a total AND a date
"""

from typing import Optional

import structlog
from pydantic import BaseModel

from bookkeeping.models.transaction import ReceiptExtraction, TransactionDraft
from bookkeeping.services.ocr.mindee_service import (
    ExtractionError,
    MindeeReceiptService,
)

logger = structlog.get_logger(__name__)


class ScanOutcome(BaseModel):
    """Result of one scan request."""

    draft: TransactionDraft
    extraction: Optional[ReceiptExtraction] = None
    applied: bool = False
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


def apply_extraction(
    draft: TransactionDraft,
    extraction: ReceiptExtraction,
) -> TransactionDraft:
    """
    Pre-fill a draft from a receipt.

    Returns the same draft object, untouched, unless the extraction has
    both a total and a date.
    """
    if not extraction.can_autofill:
        return draft

    return draft.model_copy(update={
        "amount": extraction.total_amount,
        "date": extraction.date,
        "description": extraction.merchant_name or draft.description,
        "type": extraction.category,
    })


class ReceiptScanner:
    """Runs receipt extractions one at a time."""

    def __init__(self, service: MindeeReceiptService):
        self._service = service
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    async def scan(
        self,
        document: bytes,
        filename: str,
        draft: TransactionDraft,
    ) -> Optional[ScanOutcome]:
        """
        Extract a receipt and pre-fill the draft.

        Returns:
            None if another scan is still running (the request is ignored),
            otherwise a ScanOutcome. On failure the outcome carries the
            original draft and an error message.
        """
        if self._busy:
            logger.warning("receipt_scan_ignored_busy", filename=filename)
            return None

        self._busy = True
        try:
            try:
                extraction = await self._service.extract(document, filename)
            except ExtractionError as e:
                logger.error(
                    "receipt_scan_failed",
                    filename=filename,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                return ScanOutcome(draft=draft, error=str(e))

            updated = apply_extraction(draft, extraction)
            applied = updated is not draft
            if not applied:
                logger.info(
                    "receipt_scan_not_applied",
                    filename=filename,
                    has_total=bool(extraction.total_amount),
                    has_date=extraction.date is not None,
                )
            return ScanOutcome(draft=updated, extraction=extraction, applied=applied)
        finally:
            self._busy = False
