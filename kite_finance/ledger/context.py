"""
Per-Query Snapshot of Budget and Transaction Reads

A single ledger query reads many records: the queried month's budget,
every ancestor budget in the carryover chain, and the category's
transactions. Sources are not transactional, so an edit landing between
two of those reads could mix old and new state inside one answer.

LedgerContext narrows that window:
- each (category_id, month) budget is read at most once per query
- each category's transaction list is read exactly once per query, so
  every month in a chain is computed from the same transaction snapshot
- ledgers assembled during the query are memoized by (category_id, month)

A context lives for one public call and is then discarded. It is never
shared between calls; ledgers are always recomputed from current data.
"""

from datetime import date
from typing import Optional

from kite_finance.models.budget import Budget, BudgetLedger, Transaction
from kite_finance.services.storage import BudgetSource, StorageError, TransactionSource


class LedgerContext:
    """Read-through cache over the sources for one query."""

    def __init__(
        self,
        budgets: BudgetSource,
        transactions: TransactionSource,
        lookback_floor: Optional[str] = None,
    ):
        """
        Args:
            budgets: Source of budget records
            transactions: Source of transaction records
            lookback_floor: Oldest month whose ledger may be assembled.
                Its carry-in is treated as zero. None means unbounded.
        """
        self._budget_source = budgets
        self._transaction_source = transactions
        self.lookback_floor = lookback_floor
        self._budgets: dict[tuple[str, str], Optional[Budget]] = {}
        self._transactions: dict[str, list[Transaction]] = {}
        self._ledgers: dict[tuple[str, str], BudgetLedger] = {}

    def with_floor(self, lookback_floor: Optional[str]) -> "LedgerContext":
        """
        Another view of the same read snapshot with a different floor.

        Budget and transaction reads are shared. Memoized ledgers are
        not, since a ledger depends on the floor it was assembled under.
        """
        view = LedgerContext(self._budget_source, self._transaction_source, lookback_floor)
        view._budgets = self._budgets
        view._transactions = self._transactions
        return view

    def budget(self, category_id: str, month: str) -> Optional[Budget]:
        """
        Get the budget for a category-month, reading the source once.

        Raises:
            StorageError: If the source fails, or returns a budget for a
                different key than the one asked for
        """
        key = (category_id, month)
        if key not in self._budgets:
            budget = self._budget_source.get_by_category_and_month(category_id, month)
            if budget is not None and (budget.category_id, budget.month) != key:
                raise StorageError(
                    f"Budget source returned {budget.category_id}/{budget.month} "
                    f"when asked for {category_id}/{month}"
                )
            self._budgets[key] = budget
        return self._budgets[key]

    def transactions(self, category_id: str) -> list[Transaction]:
        if category_id not in self._transactions:
            self._transactions[category_id] = list(
                self._transaction_source.get_by_category_id(category_id)
            )
        return self._transactions[category_id]

    def expenses(self, category_id: str, start: date, end: date) -> list[Transaction]:
        """Expense transactions of a category dated in [start, end)."""
        return [
            t for t in self.transactions(category_id)
            if t.category_id == category_id and t.is_expense and start <= t.date < end
        ]

    def at_floor(self, month: str) -> bool:
        return self.lookback_floor is not None and month <= self.lookback_floor

    def ledger(self, category_id: str, month: str) -> Optional[BudgetLedger]:
        return self._ledgers.get((category_id, month))

    def remember(self, ledger: BudgetLedger) -> None:
        self._ledgers[(ledger.category_id, ledger.month)] = ledger

    @property
    def ledger_count(self) -> int:
        return len(self._ledgers)
