"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is a usable backend for a small shop because:
1. The owner can open the ledger directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- No transactions: a purchase row and its mirrored expense row are two
  separate appends, which is exactly why partial success is reported
- Every append is one API call (fine for voice-paced input)
"""

import json
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from shopsahai.config import get_settings
from shopsahai.models.audit import AuditEvent, AuditEventType, AuditSeverity
from shopsahai.models.command import (
    BorrowRecord,
    PurchaseRecord,
    TransactionRecord,
    WriteResult,
)
from shopsahai.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    LedgerStorageInterface,
    NotFoundError,
    StorageError,
)


TRANSACTION_COLUMNS = [
    "id",
    "created_at",
    "type",
    "amount",
    "category",
    "description",
]

PURCHASE_COLUMNS = [
    "id",
    "created_at",
    "supplier_name",
    "total_amount",
    "amount_paid",
    "balance",
]

BORROW_COLUMNS = [
    "id",
    "created_at",
    "borrower_name",
    "total_given",
    "amount_paid",
    "balance",
]

AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_type",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and worksheet creation.
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
                raise NotFoundError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_worksheet(self, title: str, columns: list[str], rows: int = 1000) -> gspread.Worksheet:
        """Get or create a worksheet, writing the header row on creation."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_transactions_sheet(self) -> gspread.Worksheet:
        return self.get_worksheet(self._settings.transactions_sheet_name, TRANSACTION_COLUMNS)

    def get_purchases_sheet(self) -> gspread.Worksheet:
        return self.get_worksheet(self._settings.purchases_sheet_name, PURCHASE_COLUMNS)

    def get_borrows_sheet(self) -> gspread.Worksheet:
        return self.get_worksheet(self._settings.borrows_sheet_name, BORROW_COLUMNS)

    def get_audit_sheet(self) -> gspread.Worksheet:
        # More rows for audit log
        return self.get_worksheet(self._settings.audit_sheet_name, AUDIT_COLUMNS, rows=5000)


class GoogleSheetsLedgerStorage(LedgerStorageInterface):
    """
    Google Sheets implementation of the ledger.

    One worksheet per record type, one row per record.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def _append(self, sheet: gspread.Worksheet, row: list) -> None:
        sheet.append_row(row, value_input_option="RAW")

    async def _write(self, get_sheet, row: list, what: str) -> WriteResult:
        try:
            sheet = get_sheet()
            await self._append(sheet, row)
            return WriteResult.ok(row[0])
        except StorageError as e:
            return WriteResult.failed(str(e))
        except Exception as e:
            return WriteResult.failed(f"Failed to save {what}: {e}")

    @staticmethod
    def _new_row_prefix() -> list:
        return [str(uuid4()), datetime.utcnow().isoformat()]

    async def insert_transaction(self, record: TransactionRecord) -> WriteResult:
        row = self._new_row_prefix() + [
            record.type.value,
            record.amount,
            record.category,
            record.description,
        ]
        return await self._write(self._client.get_transactions_sheet, row, "transaction")

    async def insert_purchase(self, record: PurchaseRecord) -> WriteResult:
        row = self._new_row_prefix() + [
            record.supplier_name,
            record.total_amount,
            record.amount_paid,
            record.balance,
        ]
        return await self._write(self._client.get_purchases_sheet, row, "purchase")

    async def insert_borrow(self, record: BorrowRecord) -> WriteResult:
        row = self._new_row_prefix() + [
            record.name,
            record.total_given,
            record.amount_paid,
            record.balance,
        ]
        return await self._write(self._client.get_borrows_sheet, row, "borrow")


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        """Convert a spreadsheet row to an AuditEvent."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return AuditEvent(
            event_id=UUID(safe_get(0)),
            timestamp=datetime.fromisoformat(safe_get(1)),
            event_type=AuditEventType(safe_get(2)),
            severity=AuditSeverity(safe_get(3)),
            entity_type=safe_get(4) or None,
            correlation_id=UUID(safe_get(5)) if safe_get(5) else None,
            description=safe_get(6),
            details=json.loads(safe_get(7)) if safe_get(7) else {},
            error_message=safe_get(8) or None,
            is_user_action=safe_get(9).lower() == "true",
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            sheet = self._client.get_audit_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            raise StorageError(f"Failed to write audit event: {e}")

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Get events by correlation ID."""
        try:
            sheet = self._client.get_audit_sheet()
            all_rows = sheet.get_all_values()[1:]

            events = []
            for row in all_rows:
                if row and len(row) > 5 and row[5] == str(correlation_id):
                    try:
                        events.append(self._row_to_event(row))
                    except Exception:
                        continue  # Skip malformed rows

            # Sort chronologically
            events.sort(key=lambda e: e.timestamp)
            return events
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")
