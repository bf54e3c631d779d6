"""
Google Sheets Record Store

DESIGN DECISION: Google Sheets is kept as an alternative backend because:
1. Non-technical users can view their data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions (recurring chains can be left incomplete, see the engine)
- Limited query capabilities (we filter in Python)

One worksheet per collection, one record per row, every value stored as
text. Blank cells read back as missing values in the mapping layer.
"""

from datetime import datetime, timezone
from typing import Any, Optional, Sequence, Union
from uuid import uuid4

import gspread
import structlog
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from financas.config import get_settings
from financas.services.storage.interface import (
    Collection,
    ConnectionError,
    NotFoundError,
    Record,
    RecordMatcher,
    RecordStore,
    StorageError,
)


logger = structlog.get_logger(__name__)


# Column layout per worksheet
COLUMNS: dict[Collection, list[str]] = {
    Collection.DEBTS: [
        "id",
        "created_at",
        "original_id",
        "month_key",
        "name",
        "amount",
        "status",
        "category",
        "due_date",
        "paid_date",
        "is_recurrent",
        "card_id",
        "recurrence_type",
        "recurrence_start_month",
        "recurrence_end_month",
    ],
    Collection.MONTHS: [
        "id",
        "created_at",
        "month_key",
    ],
    Collection.INSTALLMENTS: [
        "id",
        "created_at",
        "name",
        "total_amount",
        "installment_amount",
        "total_installments",
        "paid_installments",
        "first_due_date",
        "next_due_date",
        "category",
        "payment_method",
        "status",
        "description",
        "card_id",
    ],
    Collection.SUBSCRIPTIONS: [
        "id",
        "created_at",
        "name",
        "plan",
        "amount",
        "category",
        "billing_cycle",
        "payment_method",
        "status",
        "next_billing_date",
        "start_date",
    ],
    Collection.CARDS: [
        "id",
        "created_at",
        "name",
        "last_four_digits",
        "flag",
        "type",
        "issuer",
        "limit",
        "balance",
        "used_amount",
        "closing_day",
        "due_date",
        "status",
    ],
}


def _cell(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


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
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

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
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_sheet(self, collection: Collection) -> gspread.Worksheet:
        """Get or create the worksheet of a collection."""
        spreadsheet = self.get_spreadsheet()
        title = self._settings.sheet_name_for(collection.value)
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            columns = COLUMNS[collection]
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=1000,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet


class GoogleSheetsRecordStore(RecordStore):
    """
    Google Sheets implementation of the record store.

    Rows are addressed by their `id` column. Deletes walk the sheet bottom
    up so row numbers stay valid while rows disappear.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_record(self, collection: Collection, row: list) -> Record:
        """Convert a spreadsheet row to a record (missing cells read as blank)."""
        columns = COLUMNS[collection]
        padded = list(row) + [""] * (len(columns) - len(row))
        return dict(zip(columns, padded))

    def _record_to_row(self, collection: Collection, record: Record) -> list[str]:
        return [_cell(record.get(column)) for column in COLUMNS[collection]]

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def select(
        self,
        collection: Collection,
        matcher: Optional[RecordMatcher] = None,
        order_by: Optional[str] = None,
    ) -> list[Record]:
        try:
            sheet = self._client.get_sheet(collection)
            all_rows = sheet.get_all_values()[1:]  # Skip header
        except ConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to list {collection.value}: {e}")

        records = []
        for row in all_rows:
            if not row or not row[0]:  # Skip empty rows
                continue
            record = self._row_to_record(collection, row)
            if matcher is None or matcher.matches(record):
                records.append(record)

        if order_by:
            records.sort(key=lambda r: r.get(order_by) or "")
        return records

    async def insert(
        self,
        collection: Collection,
        records: Union[Record, Sequence[Record]],
    ) -> list[Record]:
        batch = [records] if isinstance(records, dict) else list(records)
        now = datetime.now(timezone.utc).isoformat()

        stored = []
        for record in batch:
            row_record = dict(record)
            row_record.setdefault("id", str(uuid4()))
            row_record.setdefault("created_at", now)
            stored.append(row_record)

        try:
            sheet = self._client.get_sheet(collection)
            sheet.append_rows(
                [self._record_to_row(collection, r) for r in stored],
                value_input_option="RAW",
            )
        except Exception as e:
            raise StorageError(f"Failed to insert into {collection.value}: {e}")

        logger.debug("sheet_rows_appended", collection=collection.value, count=len(stored))
        return stored

    async def update(
        self,
        collection: Collection,
        record_id: str,
        changes: Record,
    ) -> None:
        columns = COLUMNS[collection]
        try:
            sheet = self._client.get_sheet(collection)
            all_rows = sheet.get_all_values()

            # Find the row with this id
            for idx, row in enumerate(all_rows[1:], start=2):  # Start from 2 (row 1 is header)
                if row and row[0] == record_id:
                    # Update each changed cell in the row
                    for field, value in changes.items():
                        if field in columns:
                            sheet.update_cell(idx, columns.index(field) + 1, _cell(value))
                    return

            raise NotFoundError(f"{collection.value} record not found: {record_id}")
        except NotFoundError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update {collection.value}: {e}")

    async def delete(
        self,
        collection: Collection,
        matcher: RecordMatcher,
    ) -> None:
        try:
            sheet = self._client.get_sheet(collection)
            all_rows = sheet.get_all_values()

            doomed = [
                idx
                for idx, row in enumerate(all_rows[1:], start=2)
                if row and row[0] and matcher.matches(self._row_to_record(collection, row))
            ]
            for idx in reversed(doomed):
                sheet.delete_rows(idx)
        except Exception as e:
            raise StorageError(f"Failed to delete from {collection.value}: {e}")
