"""Integration tests for the Bookkeeper surface and component factory."""

import json
from datetime import date
from decimal import Decimal

import pytest

from bookkeeping.config import get_settings
from bookkeeping.ledger import Ledger, TransactionValidationError
from bookkeeping.models import ReceiptExtraction, TransactionDraft, TransactionType, ViewMode
from bookkeeping.orchestrator import Bookkeeper, create_app_components, create_storage
from bookkeeping.services.ocr import ReceiptScanner
from bookkeeping.services.storage import (
    CorruptSlotError,
    InMemorySlotStorage,
    LocalFileSlotStorage,
)


class StubService:
    async def extract(self, document, filename):
        return ReceiptExtraction(
            total_amount=Decimal("42.10"),
            date=date(2024, 6, 1),
            merchant_name="Corner Cafe",
            category=TransactionType.MEALS,
        )


@pytest.fixture
def bookkeeper(ledger):
    return Bookkeeper(ledger, ReceiptScanner(StubService()))


class TestBookkeeper:
    """Tests for the UI-facing surface."""

    def test_views_follow_mutations(self, bookkeeper, make_draft):
        """Test that derived views reflect every add and remove."""
        chair = bookkeeper.record(make_draft())
        bookkeeper.record(make_draft(description="Taxi", amount=Decimal("20.00"), type="Travel"))
        assert bookkeeper.report().total == Decimal("149.99")

        bookkeeper.delete(chair.id)
        assert [t.description for t in bookkeeper.visible_transactions()] == ["Taxi"]
        assert bookkeeper.report().total == Decimal("20.00")

    def test_filter_applies_to_list_and_report(self, bookkeeper, make_draft):
        """Test that the current filter drives both views."""
        bookkeeper.record(make_draft())
        bookkeeper.record(make_draft(description="Taxi", amount=Decimal("20.00"), type="Travel"))

        bookkeeper.set_filter(search="chair")
        assert len(bookkeeper.visible_transactions()) == 1
        assert bookkeeper.report().by_category == {"Office Supplies": Decimal("129.99")}

        bookkeeper.set_filter(start_date="2024-02-01")
        assert bookkeeper.filter_spec.search == "chair"
        assert bookkeeper.visible_transactions() == []

        bookkeeper.clear_filter()
        assert len(bookkeeper.visible_transactions()) == 2

    def test_toggle_view(self, bookkeeper):
        """Test switching between list and report views."""
        assert bookkeeper.view_mode == ViewMode.TRANSACTIONS
        assert bookkeeper.toggle_view() == ViewMode.REPORTS
        assert bookkeeper.toggle_view() == ViewMode.TRANSACTIONS

    def test_record_rejects_incomplete_draft(self, bookkeeper):
        """Test that validation errors reach the caller."""
        with pytest.raises(TransactionValidationError):
            bookkeeper.record(TransactionDraft(description="Lunch"))
        assert bookkeeper.visible_transactions() == []

    def test_validation_message(self, bookkeeper):
        """Test the plain-language message for a rejected draft."""
        with pytest.raises(TransactionValidationError) as exc_info:
            bookkeeper.record(TransactionDraft(description="x" * 501))
        message = bookkeeper.validation_message(exc_info.value)
        assert "Date is required" in message
        assert "Amount is required" in message
        assert "limited to 500 characters" in message

    def test_sessions_keep_their_own_view_state(self, bookkeeper, make_draft):
        """Test that sessions share the ledger but not filters or view mode."""
        other = bookkeeper.new_session()
        assert other.ledger is bookkeeper.ledger
        assert other.can_scan

        bookkeeper.record(make_draft())
        bookkeeper.set_filter(search="taxi")
        bookkeeper.toggle_view()

        assert other.filter_spec.search == ""
        assert other.view_mode == ViewMode.TRANSACTIONS
        assert [t.description for t in other.visible_transactions()] == ["Office chair"]
        assert bookkeeper.visible_transactions() == []

    def test_delete_unknown_id(self, bookkeeper):
        """Test that deleting an unknown id is a no-op."""
        assert bookkeeper.delete(999) is False

    @pytest.mark.asyncio
    async def test_scan_then_record(self, bookkeeper):
        """Test the receipt-to-ledger flow."""
        outcome = await bookkeeper.scan_receipt(b"img", "r.jpg", TransactionDraft())
        assert outcome.applied

        transaction = bookkeeper.record(outcome.draft)
        assert transaction.amount == Decimal("42.10")
        assert transaction.type == TransactionType.MEALS

    @pytest.mark.asyncio
    async def test_scan_unavailable(self, ledger):
        """Test scanning without a configured service."""
        bookkeeper = Bookkeeper(ledger)
        assert not bookkeeper.can_scan
        assert await bookkeeper.scan_receipt(b"img", "r.jpg", TransactionDraft()) is None


class TestCreateAppComponents:
    """Tests for the component factory."""

    def test_storage_backends(self, monkeypatch, tmp_path):
        """Test that STORAGE_BACKEND selects the slot store."""
        monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path))
        assert isinstance(create_storage(get_settings()), LocalFileSlotStorage)

        monkeypatch.setenv("STORAGE_BACKEND", "memory")
        get_settings.cache_clear()
        assert isinstance(create_storage(get_settings()), InMemorySlotStorage)

    def test_loads_existing_ledger(self):
        """Test that the factory loads stored transactions at startup."""
        record = {
            "id": 7, "date": "2024-01-05", "description": "Rent",
            "amount": "900.00", "type": "Rent", "notes": None,
        }
        storage = InMemorySlotStorage({"transactions": json.dumps([record])})
        bookkeeper = create_app_components(storage=storage, receipt_service=StubService())
        assert [t.id for t in bookkeeper.ledger.all()] == [7]
        assert bookkeeper.can_scan

    def test_scanning_disabled_without_api_key(self):
        """Test that a missing Mindee key disables scanning, not the app."""
        bookkeeper = create_app_components(storage=InMemorySlotStorage())
        assert isinstance(bookkeeper.ledger, Ledger)
        assert not bookkeeper.can_scan

    def test_scanning_enabled_with_api_key(self, monkeypatch):
        """Test that a configured key enables scanning."""
        monkeypatch.setenv("MINDEE_API_KEY", "test-key")
        bookkeeper = create_app_components(storage=InMemorySlotStorage())
        assert bookkeeper.can_scan

    def test_corrupt_ledger_propagates(self):
        """Test that an unreadable ledger stops startup."""
        storage = InMemorySlotStorage({"transactions": "{"})
        with pytest.raises(CorruptSlotError):
            create_app_components(storage=storage, receipt_service=StubService())
