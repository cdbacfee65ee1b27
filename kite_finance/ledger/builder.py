"""
Ledger Builder

Assembles the ledger of one category-month:

    Budgeted   (first day of month)   budget amount
    CarryIn    (first day of month)   inherited carry, omitted when zero
    Spent      (transaction date)     one line per expense transaction
    CarryOut   (last day of month)    forwarded carry, omitted when zero

Totals:
    total_budgeted    = budget amount (carry-in is NOT folded in)
    total_carried_in  = signed carry from the previous month
    total_carried_out = magnitude the previous month carried out
    total_spent       = sum of expense magnitudes
    remaining         = total_budgeted + total_carried_in - total_spent

IMPORTANT: The builder never writes to a source and never caches across
calls. Each build() gets its own LedgerContext snapshot.
"""

from typing import Optional

import structlog

from kite_finance.config import get_settings
from kite_finance.ledger.carryover import CarryoverResolver, forward_carry
from kite_finance.ledger.context import LedgerContext
from kite_finance.models.budget import (
    ZERO,
    Budget,
    BudgetLedger,
    BudgetLedgerEntry,
    Carryover,
    LedgerEntryType,
)
from kite_finance.services.storage import BudgetSource, TransactionSource
from kite_finance.validation import (
    add_months,
    last_day_of_month,
    month_bounds,
    month_label,
    previous_month,
    validate_category_id,
)


logger = structlog.get_logger(__name__)


class LedgerBuilder:
    """
    Builds BudgetLedger objects from budget and transaction sources.

    Owns the CarryoverResolver; the two cooperate to build ancestor
    ledgers for the carryover chain.
    """

    def __init__(
        self,
        budgets: BudgetSource,
        transactions: TransactionSource,
        max_lookback_months: Optional[int] = None,
    ):
        """
        Args:
            budgets: Source of budget records
            transactions: Source of transaction records
            max_lookback_months: Cap on carryover chain length.
                Defaults to LEDGER_MAX_LOOKBACK_MONTHS.
        """
        if max_lookback_months is None:
            max_lookback_months = get_settings().ledger.max_lookback_months
        self._budgets = budgets
        self._transactions = transactions
        self._resolver = CarryoverResolver(self, max_lookback_months)

    @property
    def resolver(self) -> CarryoverResolver:
        return self._resolver

    def new_context(
        self,
        anchor_month: str,
        snapshot: Optional[LedgerContext] = None,
    ) -> LedgerContext:
        """
        Create the context for a query anchored at a month.

        Ledgers older than anchor_month minus the look-back cap are
        never assembled. Pass an existing snapshot to reuse its reads.
        """
        floor = add_months(anchor_month, -self._resolver.max_lookback_months)
        if snapshot is not None:
            return snapshot.with_floor(floor)
        return LedgerContext(self._budgets, self._transactions, lookback_floor=floor)

    def build(
        self,
        category_id: str,
        month: str,
        context: Optional[LedgerContext] = None,
    ) -> BudgetLedger:
        """
        Build the ledger for a category-month.

        Returns the empty ledger when the month has no budget.

        Raises:
            ValidationError: If the category id or month key is malformed
            StorageError: If a source read fails
        """
        validate_category_id(category_id)
        month_bounds(month)

        if context is None:
            context = self.new_context(month)

        known = context.ledger(category_id, month)
        if known is not None:
            return known

        budget = context.budget(category_id, month)
        if budget is None:
            return BudgetLedger.empty(category_id, month)

        if context.at_floor(month):
            carry = Carryover.none()
        else:
            carry = self._resolver.resolve(category_id, month, budget, context)

        ledger = self.assemble(category_id, month, budget, carry, context)
        context.remember(ledger)

        logger.debug(
            "ledger_built",
            category_id=category_id,
            month=month,
            remaining=str(ledger.remaining),
            entries=len(ledger.entries),
            ledgers_in_context=context.ledger_count,
        )
        return ledger

    def assemble(
        self,
        category_id: str,
        month: str,
        budget: Budget,
        carry: Carryover,
        context: LedgerContext,
    ) -> BudgetLedger:
        """
        Assemble a ledger from a budget and an already-resolved carry.

        Does not look at any other month.
        """
        month_start, month_end = month_bounds(month)
        expenses = context.expenses(category_id, month_start, month_end)
        total_spent = sum((-t.amount for t in expenses), ZERO)

        remaining = budget.amount + carry.carry_in - total_spent
        carry_forward = forward_carry(budget.carry_strategy, remaining)

        entries = [
            BudgetLedgerEntry(
                type=LedgerEntryType.BUDGETED,
                amount=budget.amount,
                description=f"Budgeted for {month_label(month)}",
                date=month_start,
            )
        ]

        if carry.carry_in != 0:
            source_month = previous_month(month)
            entries.append(BudgetLedgerEntry(
                type=LedgerEntryType.CARRY_IN,
                amount=carry.carry_in,
                description=f"Carried over from {month_label(source_month)}",
                date=month_start,
            ))

        for t in expenses:
            entries.append(BudgetLedgerEntry(
                type=LedgerEntryType.SPENT,
                amount=-t.amount,
                description=t.description or t.merchant or "Expense",
                date=t.date,
            ))

        if carry_forward != 0:
            kind = "unspent" if carry_forward > 0 else "overspend"
            entries.append(BudgetLedgerEntry(
                type=LedgerEntryType.CARRY_OUT,
                amount=abs(carry_forward),
                description=f"Carrying {kind} to {self._next_label(month)}",
                date=last_day_of_month(month),
            ))

        # Stable sort keeps Budgeted before CarryIn and CarryOut after
        # any spend on the last day
        entries.sort(key=lambda entry: entry.date)

        return BudgetLedger(
            category_id=category_id,
            month=month,
            entries=entries,
            total_budgeted=budget.amount,
            total_spent=total_spent,
            total_carried_in=carry.carry_in,
            total_carried_out=carry.carry_out,
            remaining=remaining,
        )

    @staticmethod
    def _next_label(month: str) -> str:
        _, month_end = month_bounds(month)
        return month_end.strftime("%B %Y")
