"""
Abstract Storage Interface

DESIGN DECISION: The ledger engine never talks to a database directly.
It reads through these interfaces. This allows us to:
1. Swap Google Sheets for a real database later
2. Use in-memory storage for testing
3. Wrap sources in a per-query snapshot transparently
4. Keep ledger logic decoupled from storage implementation

The interfaces are read-only on purpose. Writing budgets and
transactions is the job of other collaborators; the engine only reads.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from kite_finance.models.audit import AuditEvent
from kite_finance.models.budget import Budget, Transaction


class BudgetSource(ABC):
    """
    Read-only access to budgets.

    Any storage implementation (Google Sheets, PostgreSQL, etc.)
    must implement these methods.
    """

    @abstractmethod
    def get_by_category_and_month(
        self,
        category_id: str,
        month: str,
    ) -> Optional[Budget]:
        """
        Retrieve the budget for one category-month.

        Args:
            category_id: The category identifier
            month: Month key in YYYY-MM format

        Returns:
            The budget if one exists, None otherwise

        Raises:
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    def get_by_month(self, month: str) -> list[Budget]:
        """
        Retrieve every budget of a month, across all categories.

        Raises:
            StorageError: If the read fails
        """
        pass


class TransactionSource(ABC):
    """Read-only access to transactions."""

    @abstractmethod
    def get_by_category_id(self, category_id: str) -> list[Transaction]:
        """
        Retrieve every transaction of a category, any date.

        Raises:
            StorageError: If the read fails
        """
        pass

    @abstractmethod
    def get_by_date_range(self, start: date, end: date) -> list[Transaction]:
        """
        Retrieve every transaction dated in [start, end).

        Args:
            start: First day included
            end: First day excluded

        Raises:
            StorageError: If the read fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Sheet or table expected by a source does not exist."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
