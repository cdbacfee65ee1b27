"""Services package."""

from kite_finance.services.storage import (
    AuditStorageInterface,
    BudgetSource,
    ConnectionError,
    GoogleSheetsAuditStorage,
    GoogleSheetsBudgetSource,
    GoogleSheetsClient,
    GoogleSheetsTransactionSource,
    InMemoryAuditStorage,
    InMemoryBudgetSource,
    InMemoryTransactionSource,
    NotFoundError,
    StorageError,
    TransactionSource,
)

__all__ = [
    "AuditStorageInterface",
    "BudgetSource",
    "ConnectionError",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsBudgetSource",
    "GoogleSheetsClient",
    "GoogleSheetsTransactionSource",
    "InMemoryAuditStorage",
    "InMemoryBudgetSource",
    "InMemoryTransactionSource",
    "NotFoundError",
    "StorageError",
    "TransactionSource",
]
