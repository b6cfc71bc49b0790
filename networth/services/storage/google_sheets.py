"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is offered as a remote backend because:
1. The user can see (and back up) the raw data in a spreadsheet
2. No database setup required
3. The same data is reachable from several machines

The worksheet holds one row per key: `key | value`. Each collection is a
single JSON string in the value column.

TRADEOFFS:
- A cell holds at most 50,000 characters, which caps collection size
- No transactions (each key is written independently)
- Every call is a network round trip, so calls are retried
"""

from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from networth.config import GoogleSheetsSettings, get_settings
from networth.services.storage.interface import (
    ConnectionError,
    KeyValueStore,
    PersistenceError,
)


STORE_COLUMNS = ["key", "value"]

# Hard limit imposed by Google Sheets on a single cell
CELL_CHAR_LIMIT = 50_000


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

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
            except FileNotFoundError as e:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                ) from e
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}") from e

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound as e:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                ) from e
        return self._spreadsheet

    def get_store_sheet(self) -> gspread.Worksheet:
        """Get or create the key/value worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.worksheet_name)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=self._settings.worksheet_name,
                rows=100,
                cols=len(STORE_COLUMNS),
            )
            sheet.append_row(STORE_COLUMNS)
        return sheet


class GoogleSheetsKeyValueStore(KeyValueStore):
    """
    Google Sheets implementation of the key-value store.

    Row 1 is the header; keys are looked up by scanning column A.
    Only the API round trips are retried - local checks fail immediately.
    """

    max_value_length = CELL_CHAR_LIMIT

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    @staticmethod
    def _find_row(rows: list[list[str]], key: str) -> Optional[int]:
        """1-based sheet row index of a key, skipping the header."""
        for idx, row in enumerate(rows[1:], start=2):
            if row and row[0] == key:
                return idx
        return None

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _fetch(self) -> tuple[gspread.Worksheet, list[list[str]]]:
        """Get the worksheet and all of its values."""
        try:
            sheet = self._client.get_store_sheet()
            return sheet, sheet.get_all_values()
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to read Google Sheets store: {e}") from e

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _write(
        self,
        sheet: gspread.Worksheet,
        row_idx: Optional[int],
        key: str,
        value: str,
    ) -> None:
        try:
            if row_idx is None:
                sheet.append_row([key, value], value_input_option="RAW")
            else:
                sheet.update(
                    range_name=f"B{row_idx}",
                    values=[[value]],
                    value_input_option="RAW",
                )
        except Exception as e:
            raise PersistenceError(f"Failed to save key {key!r}: {e}") from e

    def load(self, key: str) -> Optional[str]:
        """Read a value from the worksheet."""
        _, rows = self._fetch()
        idx = self._find_row(rows, key)
        if idx is None:
            return None
        row = rows[idx - 1]
        return row[1] if len(row) > 1 else ""

    def save(self, key: str, value: str) -> None:
        """Insert or overwrite the row for a key."""
        if len(value) > self.max_value_length:
            raise PersistenceError(
                f"Value for {key!r} is {len(value)} characters; "
                f"Google Sheets cells hold at most {self.max_value_length}"
            )
        sheet, rows = self._fetch()
        self._write(sheet, self._find_row(rows, key), key, value)

    def delete(self, key: str) -> None:
        """Delete the row for a key, if present."""
        sheet, rows = self._fetch()
        idx = self._find_row(rows, key)
        if idx is None:
            return
        try:
            sheet.delete_rows(idx)
        except Exception as e:
            raise PersistenceError(f"Failed to delete key {key!r}: {e}") from e
