"""
Monthly Aggregates

Dashboard totals across every category of a month. These read the
sources directly and do not depend on the ledger engine: a month's total
budget is the plain sum of its budgets, with no carryover applied.

GUARANTEES:
- Only sums real records from the sources
- Uncategorized transactions never count as spend
- Income and refunds (positive amounts) never reduce spend
"""

from collections import defaultdict
from decimal import Decimal

from kite_finance.models.budget import ZERO, Transaction
from kite_finance.services.storage import BudgetSource, TransactionSource
from kite_finance.validation import month_bounds


class MonthlyAggregates:
    """Sums budgets and expenses over all categories of a month."""

    def __init__(self, budgets: BudgetSource, transactions: TransactionSource):
        self._budgets = budgets
        self._transactions = transactions

    def _categorized_expenses(self, month: str) -> list[Transaction]:
        start, end = month_bounds(month)
        return [
            t for t in self._transactions.get_by_date_range(start, end)
            if t.is_categorized_expense and start <= t.date < end
        ]

    def total_budget(self, month: str) -> Decimal:
        """Sum of every budget amount for the month."""
        month_bounds(month)
        return sum((b.amount for b in self._budgets.get_by_month(month)), ZERO)

    def total_spent(self, month: str) -> Decimal:
        """Sum of expense magnitudes over categorized transactions."""
        return sum((-t.amount for t in self._categorized_expenses(month)), ZERO)

    def spending_by_category(self, month: str) -> dict[str, Decimal]:
        """Expense magnitudes per category, categories without spend omitted."""
        spending: dict[str, Decimal] = defaultdict(lambda: ZERO)
        for t in self._categorized_expenses(month):
            spending[t.category_id] += -t.amount
        return dict(spending)
