"""
In-Memory Storage Implementation

Holds budgets and transactions in plain Python containers. Used by the
test suite and by callers that already have their records loaded (for
example an importer that wants a ledger preview before saving).
"""

from datetime import date
from typing import Iterable, Optional

from kite_finance.models.audit import AuditEvent
from kite_finance.models.budget import Budget, Transaction
from kite_finance.services.storage.interface import (
    AuditStorageInterface,
    BudgetSource,
    TransactionSource,
)


class InMemoryBudgetSource(BudgetSource):
    """Budgets keyed by (category_id, month)."""

    def __init__(self, budgets: Iterable[Budget] = ()):
        self._budgets: dict[tuple[str, str], Budget] = {}
        for budget in budgets:
            self.put(budget)

    def put(self, budget: Budget) -> None:
        """Insert or replace the budget for its (category_id, month) key."""
        self._budgets[(budget.category_id, budget.month)] = budget

    def remove(self, category_id: str, month: str) -> None:
        self._budgets.pop((category_id, month), None)

    def get_by_category_and_month(
        self,
        category_id: str,
        month: str,
    ) -> Optional[Budget]:
        return self._budgets.get((category_id, month))

    def get_by_month(self, month: str) -> list[Budget]:
        return [b for (_, m), b in self._budgets.items() if m == month]


class InMemoryTransactionSource(TransactionSource):
    """Transactions in insertion order."""

    def __init__(self, transactions: Iterable[Transaction] = ()):
        self._transactions: list[Transaction] = list(transactions)

    def add(self, transaction: Transaction) -> None:
        self._transactions.append(transaction)

    def get_by_category_id(self, category_id: str) -> list[Transaction]:
        return [t for t in self._transactions if t.category_id == category_id]

    def get_by_date_range(self, start: date, end: date) -> list[Transaction]:
        return [t for t in self._transactions if start <= t.date < end]


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return sorted(self.events, key=lambda e: e.timestamp, reverse=True)[:limit]
