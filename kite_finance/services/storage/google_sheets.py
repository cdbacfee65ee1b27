"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is the default external record store because:
1. Users can view and edit their budgets directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions, so one ledger query may see a concurrent edit
  (the per-query LedgerContext reads each sheet range once to limit this)
- Limited query capabilities (we filter in Python)

Budgets and transactions are only ever READ from here. The only sheet
this module writes to is the append-only audit log.
"""

import json
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional
from uuid import UUID

import gspread
import structlog
from google.oauth2.service_account import Credentials
from pydantic import ValidationError as PydanticValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from kite_finance.config import get_settings
from kite_finance.models.audit import AuditEvent, AuditEventType, AuditSeverity
from kite_finance.models.budget import Budget, CarryStrategy, Transaction
from kite_finance.services.storage.interface import (
    AuditStorageInterface,
    BudgetSource,
    ConnectionError,
    NotFoundError,
    StorageError,
    TransactionSource,
)


logger = structlog.get_logger(__name__)


# Column mappings for Budgets sheet
BUDGET_COLUMNS = [
    "id",
    "category_id",
    "month",
    "amount",
    "carry_strategy",
    "notes",
]

# Column mappings for Transactions sheet
TRANSACTION_COLUMNS = [
    "id",
    "account_id",
    "date",
    "amount",
    "category_id",
    "description",
    "merchant",
    "currency",
]

# Column mappings for Audit sheet
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_type",
    "entity_id",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
]

# Errors raised while turning a row into a model
ROW_ERRORS = (PydanticValidationError, InvalidOperation, ValueError, IndexError)


def _cell(row: list, index: int, default: str = "") -> str:
    """Read a cell, tolerating short rows."""
    try:
        return row[index] if row[index] else default
    except IndexError:
        return default


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @property
    def settings(self):
        return self._settings

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

    def get_worksheet(self, title: str) -> gspread.Worksheet:
        """
        Get an existing worksheet.

        Record sheets are owned by other collaborators, so a missing
        one is reported rather than created.
        """
        spreadsheet = self.get_spreadsheet()
        try:
            return spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            raise NotFoundError(f"Worksheet not found: {title}")

    def get_audit_sheet(self) -> gspread.Worksheet:
        """Get or create the Audit worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.audit_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.audit_sheet_name,
                rows=5000,
                cols=len(AUDIT_COLUMNS),
            )
            sheet.append_row(AUDIT_COLUMNS)
        return sheet


class _WorksheetReader:
    """Shared row fetching for the read-only record sheets."""

    def __init__(self, client: GoogleSheetsClient, sheet_name: str):
        self._client = client
        self._sheet_name = sheet_name

    @retry(
        retry=retry_if_exception_type(gspread.exceptions.APIError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _fetch_values(self) -> list[list[str]]:
        sheet = self._client.get_worksheet(self._sheet_name)
        # Skip header
        return sheet.get_all_values()[1:]

    def _rows(self) -> list[list[str]]:
        try:
            return self._fetch_values()
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read {self._sheet_name}: {e}") from e

    def _skip_row(self, row: list, error: Exception) -> None:
        logger.warning(
            "sheet_row_skipped",
            sheet=self._sheet_name,
            row_id=_cell(row, 0),
            error=str(error),
        )


class GoogleSheetsBudgetSource(_WorksheetReader, BudgetSource):
    """
    Google Sheets implementation of the budget source.

    One budget per row. carry_strategy holds the enum value
    ("carryNone", "carryUnspent", "carryOverspend"); blank means carryNone.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        client = client or GoogleSheetsClient()
        super().__init__(client, client.settings.budgets_sheet_name)

    def _row_to_budget(self, row: list) -> Budget:
        """Convert a spreadsheet row to a Budget."""
        return Budget(
            id=_cell(row, 0) or None,
            category_id=_cell(row, 1),
            month=_cell(row, 2),
            amount=Decimal(_cell(row, 3, "0")),
            carry_strategy=CarryStrategy(_cell(row, 4, CarryStrategy.CARRY_NONE.value)),
            notes=_cell(row, 5) or None,
        )

    def _budgets(self, category_id: Optional[str] = None, month: Optional[str] = None) -> list[Budget]:
        budgets = []
        for row in self._rows():
            if not row or not any(row):  # Skip empty rows
                continue
            if category_id is not None and _cell(row, 1).strip() != category_id:
                continue
            if month is not None and _cell(row, 2).strip() != month:
                continue
            try:
                budgets.append(self._row_to_budget(row))
            except ROW_ERRORS as e:
                self._skip_row(row, e)
        return budgets

    def get_by_category_and_month(
        self,
        category_id: str,
        month: str,
    ) -> Optional[Budget]:
        matches = self._budgets(category_id=category_id, month=month)
        if len(matches) > 1:
            raise StorageError(
                f"Found {len(matches)} budgets for {category_id} in {month}"
            )
        return matches[0] if matches else None

    def get_by_month(self, month: str) -> list[Budget]:
        return self._budgets(month=month)


class GoogleSheetsTransactionSource(_WorksheetReader, TransactionSource):
    """
    Google Sheets implementation of the transaction source.

    Dates are ISO strings (YYYY-MM-DD). Amounts are signed decimals.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        client = client or GoogleSheetsClient()
        super().__init__(client, client.settings.transactions_sheet_name)

    def _row_to_transaction(self, row: list) -> Transaction:
        """Convert a spreadsheet row to a Transaction."""
        return Transaction(
            id=_cell(row, 0) or None,
            account_id=_cell(row, 1) or None,
            date=date.fromisoformat(_cell(row, 2)[:10]),
            amount=Decimal(_cell(row, 3)),
            category_id=_cell(row, 4) or None,
            description=_cell(row, 5),
            merchant=_cell(row, 6) or None,
            currency=_cell(row, 7) or None,
        )

    def _transactions(self) -> list[Transaction]:
        transactions = []
        for row in self._rows():
            if not row or not any(row):
                continue
            try:
                transactions.append(self._row_to_transaction(row))
            except ROW_ERRORS as e:
                self._skip_row(row, e)
        return transactions

    def get_by_category_id(self, category_id: str) -> list[Transaction]:
        return [t for t in self._transactions() if t.category_id == category_id]

    def get_by_date_range(self, start: date, end: date) -> list[Transaction]:
        return [t for t in self._transactions() if start <= t.date < end]


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        """Convert a spreadsheet row to an AuditEvent."""
        return AuditEvent(
            event_id=UUID(_cell(row, 0)),
            timestamp=datetime.fromisoformat(_cell(row, 1)),
            event_type=AuditEventType(_cell(row, 2)),
            severity=AuditSeverity(_cell(row, 3)),
            entity_type=_cell(row, 4) or None,
            entity_id=_cell(row, 5) or None,
            correlation_id=UUID(_cell(row, 6)) if _cell(row, 6) else None,
            description=_cell(row, 7),
            details=json.loads(_cell(row, 8)) if _cell(row, 8) else {},
            error_message=_cell(row, 9) or None,
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _append(self, row: list) -> None:
        sheet = self._client.get_audit_sheet()
        sheet.append_row(row, value_input_option="RAW")

    def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            self._append(event.to_sheets_row())
            return True
        except Exception as e:
            # Audit logging must not break the main flow
            logger.warning("audit_append_failed", event_id=str(event.event_id), error=str(e))
            return False

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Get recent events."""
        try:
            sheet = self._client.get_audit_sheet()
            all_rows = sheet.get_all_values()[1:]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}") from e

        events = []
        for row in all_rows:
            if row and row[0]:
                try:
                    events.append(self._row_to_event(row))
                except ROW_ERRORS:
                    continue

        # Sort newest first
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
