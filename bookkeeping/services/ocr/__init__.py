"""Receipt extraction package."""

from bookkeeping.services.ocr.mindee_service import (
    ExtractionError,
    MalformedFieldError,
    MindeeReceiptService,
    NoPredictionError,
    ServiceFailureError,
    normalize_prediction,
    resolve_first,
    suggest_category,
)
from bookkeeping.services.ocr.scanner import (
    ReceiptScanner,
    ScanOutcome,
    apply_extraction,
)

__all__ = [
    "ExtractionError",
    "MalformedFieldError",
    "MindeeReceiptService",
    "NoPredictionError",
    "ReceiptScanner",
    "ScanOutcome",
    "ServiceFailureError",
    "apply_extraction",
    "normalize_prediction",
    "resolve_first",
    "suggest_category",
]
