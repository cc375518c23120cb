"""Tests for the slot stores (local files, memory, mocked Google Sheets)."""

from unittest.mock import MagicMock

import pytest
from tenacity import wait_none

from bookkeeping.services.storage import (
    GoogleSheetsSlotStorage,
    InMemorySlotStorage,
    LocalFileSlotStorage,
    PersistenceError,
    StoreUnavailableError,
)
from bookkeeping.services.storage.google_sheets import MAX_CELL_CHARS


class TestLocalFileSlotStorage:
    """Tests for the local directory store."""

    def test_missing_slot_reads_none(self, tmp_path):
        """Test that an unwritten slot reads as None."""
        assert LocalFileSlotStorage(tmp_path).read("transactions") is None

    def test_write_then_read(self, tmp_path):
        """Test that a written value can be read back."""
        store = LocalFileSlotStorage(tmp_path / "data")
        store.write("transactions", '[{"id": 1}]')
        assert store.read("transactions") == '[{"id": 1}]'
        assert (tmp_path / "data" / "transactions.json").exists()

    def test_overwrite_leaves_no_temp_files(self, tmp_path):
        """Test that replacing a slot leaves only the slot file."""
        store = LocalFileSlotStorage(tmp_path)
        store.write("transactions", "[]")
        store.write("transactions", "[1]")
        assert [p.name for p in tmp_path.iterdir()] == ["transactions.json"]
        assert store.read("transactions") == "[1]"

    def test_slot_names_are_slugified(self, tmp_path):
        """Test that slot names cannot escape the root directory."""
        store = LocalFileSlotStorage(tmp_path)
        assert store.path_for("../My Ledger").parent == tmp_path
        assert store.path_for("../My Ledger").name == "my-ledger.json"

    def test_empty_slot_name_rejected(self, tmp_path):
        """Test that a slot name with nothing usable is rejected."""
        with pytest.raises(ValueError):
            LocalFileSlotStorage(tmp_path).path_for("///")

    def test_unreadable_slot(self, tmp_path):
        """Test that read errors other than not-found raise."""
        (tmp_path / "transactions.json").mkdir()
        with pytest.raises(StoreUnavailableError):
            LocalFileSlotStorage(tmp_path).read("transactions")

    def test_unwritable_root(self, tmp_path):
        """Test that write errors raise PersistenceError."""
        blocker = tmp_path / "data"
        blocker.write_text("not a directory")
        with pytest.raises(PersistenceError):
            LocalFileSlotStorage(blocker).write("transactions", "[]")


class TestInMemorySlotStorage:
    """Tests for the in-memory store."""

    def test_initial_values_and_writes(self):
        """Test reading seeded slots and counting writes."""
        store = InMemorySlotStorage({"transactions": "[]"})
        assert store.read("transactions") == "[]"
        assert store.read("other") is None
        store.write("other", "x")
        assert store.read("other") == "x"
        assert store.write_count == 1


class TestGoogleSheetsSlotStorage:
    """Tests for the Sheets store with a mocked worksheet."""

    @pytest.fixture(autouse=True)
    def no_retry_wait(self, monkeypatch):
        monkeypatch.setattr(GoogleSheetsSlotStorage._read_row.retry, "wait", wait_none())
        monkeypatch.setattr(GoogleSheetsSlotStorage._write_row.retry, "wait", wait_none())

    @pytest.fixture
    def sheet(self):
        sheet = MagicMock()
        sheet.get_all_values.return_value = [
            ["slot", "value"],
            ["settings", "{}"],
            ["transactions", "[]"],
        ]
        return sheet

    @pytest.fixture
    def store(self, sheet):
        client = MagicMock()
        client.get_slot_sheet.return_value = sheet
        return GoogleSheetsSlotStorage(client)

    def test_read_existing(self, store):
        """Test reading a slot row."""
        assert store.read("transactions") == "[]"

    def test_read_missing(self, store):
        """Test that an absent slot reads as None."""
        assert store.read("archive") is None

    def test_write_updates_existing_row(self, store, sheet):
        """Test that writing an existing slot updates its value cell."""
        store.write("transactions", '[{"id": 1}]')
        sheet.update_cell.assert_called_once_with(3, 2, '[{"id": 1}]')
        sheet.append_row.assert_not_called()

    def test_write_appends_new_row(self, store, sheet):
        """Test that writing a new slot appends a row."""
        store.write("archive", "[]")
        sheet.append_row.assert_called_once_with(["archive", "[]"], value_input_option="RAW")

    def test_oversized_value_rejected_without_calls(self, store, sheet):
        """Test that values beyond the cell limit fail fast."""
        with pytest.raises(PersistenceError):
            store.write("transactions", "x" * (MAX_CELL_CHARS + 1))
        sheet.get_all_values.assert_not_called()

    def test_transient_failure_retried(self, store, sheet):
        """Test that a failed API call is retried."""
        sheet.get_all_values.side_effect = [
            RuntimeError("rate limited"),
            [["slot", "value"], ["transactions", "[1]"]],
        ]
        assert store.read("transactions") == "[1]"
        assert sheet.get_all_values.call_count == 2

    def test_persistent_failure_raises(self, store, sheet):
        """Test that repeated failures surface as persistence errors."""
        sheet.update_cell.side_effect = RuntimeError("quota exceeded")
        with pytest.raises(PersistenceError, match="quota exceeded"):
            store.write("transactions", "[]")
        assert sheet.update_cell.call_count == 3

    def test_read_failure_is_store_unavailable(self, store, sheet):
        """Test that read failures raise StoreUnavailableError."""
        sheet.get_all_values.side_effect = RuntimeError("offline")
        with pytest.raises(StoreUnavailableError):
            store.read("transactions")
