"""
Storage Services Package

Provides read-only source interfaces and concrete implementations.
Google Sheets is the default backend, but it is designed to be swappable.
"""

from kite_finance.services.storage.interface import (
    AuditStorageInterface,
    BudgetSource,
    ConnectionError,
    NotFoundError,
    StorageError,
    TransactionSource,
)
from kite_finance.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryBudgetSource,
    InMemoryTransactionSource,
)
from kite_finance.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsBudgetSource,
    GoogleSheetsClient,
    GoogleSheetsTransactionSource,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "BudgetSource",
    "TransactionSource",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryBudgetSource",
    "InMemoryTransactionSource",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsBudgetSource",
    "GoogleSheetsClient",
    "GoogleSheetsTransactionSource",
]
