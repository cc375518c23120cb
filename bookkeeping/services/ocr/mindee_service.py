"""
Receipt Extraction using Mindee

DESIGN DECISION: We use Mindee because:
1. Specialized for financial documents (invoices, receipts, bills)
2. Returns STRUCTURED data, not just raw text

This service handles:
1. Sending the uploaded document to the Mindee invoice API
2. Reading the raw prediction defensively
3. Converting it to our ReceiptExtraction model

Providers are inconsistent about which field holds what, so every field
is read through an ordered list of candidate paths. The precedence lives
in the *_CANDIDATES constants below and nowhere else.

The result is best-effort. A receipt with no readable total or date still
produces a ReceiptExtraction; the scanner decides whether it is good
enough to pre-fill the form (see ReceiptExtraction.can_autofill).
"""

import asyncio
import json
from collections.abc import Callable, Mapping, Sequence
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

import structlog
from mindee import Client, product
from mindee.error import MindeeHTTPError
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from bookkeeping.config import get_settings
from bookkeeping.models.transaction import ReceiptExtraction, TransactionType

logger = structlog.get_logger(__name__)


# Ordered candidate paths into the prediction object; first usable value wins
MERCHANT_NAME_CANDIDATES: tuple[tuple[str, ...], ...] = (
    ("supplier", "supplier_name"),
    ("supplier_name",),
    ("company_registration",),
)
TOTAL_AMOUNT_CANDIDATES: tuple[tuple[str, ...], ...] = (
    ("total_incl_tax",),
    ("total_amount",),
    ("total",),
)
DATE_CANDIDATES: tuple[tuple[str, ...], ...] = (
    ("date",),
)
CATEGORY_CANDIDATES: tuple[tuple[str, ...], ...] = (
    ("category",),
)

DATE_FORMATS = ["%Y-%m-%d", "%d-%m-%Y", "%d/%m/%Y", "%Y/%m/%d", "%d.%m.%Y"]

# Mindee receipt categories onto ours
PROVIDER_CATEGORIES: dict[str, TransactionType] = {
    "food": TransactionType.MEALS,
    "transport": TransactionType.TRAVEL,
    "parking": TransactionType.TRAVEL,
    "toll": TransactionType.TRAVEL,
    "gasoline": TransactionType.TRAVEL,
    "accommodation": TransactionType.TRAVEL,
    "telecom": TransactionType.UTILITIES,
    "shopping": TransactionType.OFFICE_SUPPLIES,
}

CATEGORY_KEYWORDS: list[tuple[TransactionType, list[str]]] = [
    (TransactionType.MEALS, [
        "restaurant", "cafe", "coffee", "bistro", "pizza", "burger",
        "bar ", "grill", "diner", "bakery", "starbucks", "mcdonald",
    ]),
    (TransactionType.TRAVEL, [
        "airline", "airways", "hotel", "taxi", "uber", "lyft", "rail",
        "parking", "petrol", "fuel", "shell", "airbnb", "hertz",
    ]),
    (TransactionType.OFFICE_SUPPLIES, [
        "office", "staples", "stationery", "depot", "paper", "ikea",
    ]),
    (TransactionType.UTILITIES, [
        "electric", "power", "water", "gas", "telecom", "internet",
        "broadband", "mobile", "verizon", "vodafone",
    ]),
    (TransactionType.INSURANCE, [
        "insurance", "assurance", "allianz", "axa",
    ]),
    (TransactionType.ADVERTISING, [
        "advertising", "ads", "marketing", "media",
    ]),
    (TransactionType.PROFESSIONAL_FEES, [
        "law", "legal", "attorney", "accountant", "consulting", "notary",
    ]),
    (TransactionType.BANK_CHARGES, [
        "bank", "interest", "paypal", "stripe",
    ]),
    (TransactionType.RENT, [
        "rent", "lease", "property", "realty",
    ]),
]

CENT = Decimal("0.01")


class ExtractionError(Exception):
    """Base exception for receipt extraction errors."""
    pass


class ServiceFailureError(ExtractionError):
    """The recognition service did not return a successful response."""

    def __init__(self, status_text: str, status_code: Optional[int] = None):
        self.status_text = status_text
        self.status_code = status_code
        super().__init__(f"Receipt service failed: {status_text}")


class NoPredictionError(ExtractionError):
    """The response carries no prediction payload at all."""
    pass


class MalformedFieldError(ExtractionError):
    """The prediction payload is present but not shaped like one."""
    pass


# =============================================================================
# RESPONSE NORMALIZATION (pure)
# =============================================================================

def resolve_first(
    node: Mapping[str, Any],
    candidates: Sequence[Sequence[str]],
    coerce: Callable[[Any], Any],
) -> Any:
    """
    Return the first candidate whose value coerces to something usable.

    Each candidate is a path of keys into node. Mindee wraps values as
    {"value": ...}; list-valued nodes use their first element. coerce
    returns None to reject a value and move on to the next candidate.

    Returns:
        The coerced value, or None if no candidate resolved
    """
    for path in candidates:
        raw = _walk(node, path)
        if raw is None:
            continue
        value = coerce(raw)
        if value is not None:
            return value
    return None


def _walk(node: Any, path: Sequence[str]) -> Any:
    current = node
    for key in path:
        current = _first(current)
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    current = _first(current)
    if isinstance(current, Mapping):
        current = current.get("value")
    return current


def _first(node: Any) -> Any:
    if isinstance(node, list):
        return node[0] if node else None
    return node


def _coerce_text(value: Any) -> Optional[str]:
    if isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def _coerce_amount(value: Any) -> Optional[Decimal]:
    """Numbers and numeric strings become Decimal; anything else is skipped."""
    amount = None
    if not isinstance(value, bool):
        try:
            parsed = Decimal(str(value).strip())
            if parsed.is_finite() and parsed >= 0:
                amount = parsed.quantize(CENT, rounding=ROUND_HALF_UP)
        except (InvalidOperation, ValueError):
            # Totals too large to hold at cent precision land here too
            amount = None

    if amount is None:
        logger.warning("receipt_total_not_numeric", value=repr(value))
    return amount


def parse_receipt_date(value: Any) -> Optional[date]:
    """Parse ISO dates, ISO datetimes and common day/month formats."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def suggest_category(merchant_name: str) -> TransactionType:
    """
    Make an educated guess about the category from the merchant name.

    This is a SUGGESTION only - the user can change it before saving.
    Simple keyword matching keeps the guess transparent.
    """
    if not merchant_name:
        return TransactionType.OTHER

    merchant_lower = merchant_name.lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(kw in merchant_lower for kw in keywords):
            return category
    return TransactionType.OTHER


def _map_provider_category(value: Any) -> Optional[TransactionType]:
    text = _coerce_text(value)
    if text is None:
        return None
    key = text.lower()
    if key in PROVIDER_CATEGORIES:
        return PROVIDER_CATEGORIES[key]
    parsed = TransactionType.parse(text)
    return parsed if parsed != TransactionType.OTHER else None


def normalize_prediction(
    payload: Any,
    today: Callable[[], date] = date.today,
) -> ReceiptExtraction:
    """
    Turn a raw Mindee response body into a ReceiptExtraction.

    Args:
        payload: The decoded JSON response
        today: Source of the fallback date

    Raises:
        NoPredictionError: document.inference.prediction is missing
        MalformedFieldError: the prediction is not a JSON object
    """
    prediction = None
    if isinstance(payload, Mapping):
        document = payload.get("document")
        inference = document.get("inference") if isinstance(document, Mapping) else None
        if isinstance(inference, Mapping):
            prediction = inference.get("prediction")

    if prediction is None:
        raise NoPredictionError("No prediction data found in response")
    if not isinstance(prediction, Mapping):
        raise MalformedFieldError(
            f"Prediction should be an object, got {type(prediction).__name__}"
        )

    warnings: list[str] = []

    merchant_name = resolve_first(prediction, MERCHANT_NAME_CANDIDATES, _coerce_text) or ""

    total_amount = resolve_first(prediction, TOTAL_AMOUNT_CANDIDATES, _coerce_amount)
    if total_amount is None:
        total_amount = Decimal("0")
        warnings.append("No total amount found on the receipt")

    receipt_date: Optional[date] = None
    raw_date = resolve_first(prediction, DATE_CANDIDATES, _coerce_text)
    if raw_date is not None:
        receipt_date = parse_receipt_date(raw_date)
        if receipt_date is None:
            receipt_date = today()
            logger.warning(
                "receipt_date_fallback",
                raw_date=raw_date,
                fallback=receipt_date.isoformat(),
            )
            warnings.append(
                f"Could not read the receipt date '{raw_date}'; used today's date"
            )

    category = (
        resolve_first(prediction, CATEGORY_CANDIDATES, _map_provider_category)
        or suggest_category(merchant_name)
    )

    return ReceiptExtraction(
        total_amount=total_amount,
        date=receipt_date,
        merchant_name=merchant_name[:500],
        category=category,
        warnings=warnings,
    )


# =============================================================================
# SERVICE
# =============================================================================

def _is_transient(error: BaseException) -> bool:
    """Only server-side failures are worth another attempt."""
    if not isinstance(error, MindeeHTTPError):
        return False
    return isinstance(error.status_code, int) and error.status_code >= 500


class MindeeReceiptService:
    """
    Receipt extraction backed by the Mindee invoice API.

    IMPORTANT BOUNDARIES:
    1. This service ONLY extracts data - it never touches the ledger
    2. Failures are raised as ExtractionError subclasses
    """

    def __init__(
        self,
        client: Optional[Client] = None,
        api_key: Optional[str] = None,
    ):
        self._client = client
        self._api_key = api_key

    def _get_client(self) -> Client:
        """Get or create Mindee client."""
        if self._client is None:
            api_key = self._api_key or get_settings().mindee.api_key
            self._client = Client(api_key=api_key)
        return self._client

    @retry(
        retry=retry_if_exception(_is_transient),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _predict(self, document: bytes, filename: str) -> Any:
        """Upload the document and return the raw response body."""
        client = self._get_client()
        input_doc = client.source_from_bytes(document, filename)
        response = client.parse(product.InvoiceV4, input_doc)
        raw = response.raw_http
        if isinstance(raw, (str, bytes)):
            raw = json.loads(raw)
        return raw

    async def extract(self, document: bytes, filename: str) -> ReceiptExtraction:
        """
        Extract receipt data from an uploaded document.

        The blocking SDK call runs in a worker thread.

        Args:
            document: Raw file bytes
            filename: Original filename (Mindee uses it to detect the type)

        Returns:
            ReceiptExtraction with best-effort fields

        Raises:
            ServiceFailureError: Non-success response or transport failure
            NoPredictionError: Response has no prediction
            MalformedFieldError: Prediction is not an object
        """
        logger.info("receipt_extraction_started", filename=filename, size=len(document))

        try:
            payload = await asyncio.to_thread(self._predict, document, filename)
        except MindeeHTTPError as e:
            raise ServiceFailureError(e.api_message or str(e), e.status_code) from e
        except (OSError, ValueError, RuntimeError) as e:
            raise ServiceFailureError(str(e)) from e

        extraction = normalize_prediction(payload)
        logger.info(
            "receipt_extraction_completed",
            filename=filename,
            merchant_name=extraction.merchant_name,
            total_amount=str(extraction.total_amount),
            has_date=extraction.date is not None,
            warning_count=len(extraction.warnings),
        )
        return extraction
