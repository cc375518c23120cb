"""
Google Sheets Slot Store

DESIGN DECISION: Google Sheets is offered as a storage backend because:
1. The user can look at their ledger directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

Layout: one worksheet, one row per slot, column A = slot name,
column B = slot value (the serialized ledger).

TRADEOFFS:
- A single cell holds at most 50,000 characters, which is a few hundred
  transactions; the local store has no such limit
- No transactions (each write replaces one cell)
"""

from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from bookkeeping.config import get_settings
from bookkeeping.services.storage.interface import (
    PersistenceError,
    SlotStorageInterface,
    StoreUnavailableError,
)

SLOT_COLUMNS = ["slot", "value"]

# Google Sheets cell limit
MAX_CELL_CHARS = 50_000


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise StoreUnavailableError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StoreUnavailableError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise StoreUnavailableError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_slot_sheet(self) -> gspread.Worksheet:
        """Get or create the slot worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.slot_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.slot_sheet_name,
                rows=100,
                cols=len(SLOT_COLUMNS),
            )
            sheet.append_row(SLOT_COLUMNS)
        return sheet


class GoogleSheetsSlotStorage(SlotStorageInterface):
    """
    Google Sheets implementation of the slot store.

    Slots are stored as rows in a worksheet with one slot per row.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _find_row(self, sheet: gspread.Worksheet, key: str) -> tuple[Optional[int], list]:
        """Return (1-based row index, row values) for a slot, or (None, [])."""
        all_rows = sheet.get_all_values()
        for idx, row in enumerate(all_rows[1:], start=2):  # Start from 2 (row 1 is header)
            if row and row[0] == key:
                return idx, row
        return None, []

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _read_row(self, key: str) -> list:
        sheet = self._client.get_slot_sheet()
        _, row = self._find_row(sheet, key)
        return row

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _write_row(self, key: str, value: str) -> None:
        sheet = self._client.get_slot_sheet()
        idx, _ = self._find_row(sheet, key)
        if idx is None:
            sheet.append_row([key, value], value_input_option="RAW")
        else:
            sheet.update_cell(idx, 2, value)

    def read(self, key: str) -> Optional[str]:
        """Read a slot value from Google Sheets."""
        try:
            row = self._read_row(key)
        except PersistenceError:
            raise
        except Exception as e:
            raise StoreUnavailableError(f"Failed to read slot '{key}': {e}")
        if len(row) < 2:
            return None
        return row[1]

    def write(self, key: str, value: str) -> None:
        """Write a slot value to Google Sheets."""
        if len(value) > MAX_CELL_CHARS:
            raise PersistenceError(
                f"Slot '{key}' is {len(value)} characters; "
                f"a Google Sheets cell holds at most {MAX_CELL_CHARS}"
            )
        try:
            self._write_row(key, value)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to write slot '{key}': {e}")
