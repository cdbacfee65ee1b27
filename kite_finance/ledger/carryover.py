"""
Carryover Resolution

Decides what a month inherits from the month before it.

POLICY ASYMMETRY:
- carry-IN of a month is decided by the PREVIOUS month's strategy,
  applied to the previous month's remaining balance
- carry-OUT of a month (its CarryOut ledger line) is decided by the
  month's OWN strategy, applied to its own remaining balance

Both directions use the same sign rules, so a month whose strategy is
carryUnspent forwards max(remaining, 0) and the following month inherits
exactly that amount, whatever the following month's own strategy is.

A month without a budget is a hard stop. Resolution never looks past a
gap to find an older budget.

DESIGN DECISION: The backward dependency (each month needs the previous
month's remaining, which needs the month before that) is resolved with
an explicit walk instead of recursion:
1. walk backwards collecting consecutive budgeted months
2. assemble their ledgers oldest-first, feeding each carry into the next
The walk stops at a gap, at a ledger already memoized in the query
context, or at the look-back floor.
"""

from decimal import Decimal
from typing import TYPE_CHECKING, Optional

import structlog

from kite_finance.ledger.context import LedgerContext
from kite_finance.models.budget import ZERO, Budget, BudgetLedger, CarryStrategy, Carryover
from kite_finance.validation import previous_month

if TYPE_CHECKING:
    from kite_finance.ledger.builder import LedgerBuilder


logger = structlog.get_logger(__name__)


def forward_carry(strategy: CarryStrategy, remaining: Decimal) -> Decimal:
    """
    Signed amount a month forwards to the next one under its strategy.

    carryNone -> 0, carryUnspent -> max(remaining, 0),
    carryOverspend -> min(remaining, 0).
    """
    if strategy == CarryStrategy.CARRY_UNSPENT:
        return remaining if remaining > 0 else ZERO
    if strategy == CarryStrategy.CARRY_OVERSPEND:
        return remaining if remaining < 0 else ZERO
    return ZERO


def carryover_from(strategy: CarryStrategy, remaining: Decimal) -> Carryover:
    """
    Carry a month inherits from a predecessor with this strategy and remaining.

    carry_in keeps the sign (negative for inherited overspend);
    carry_out is the magnitude the predecessor gave away.
    """
    amount = forward_carry(strategy, remaining)
    return Carryover(carry_in=amount, carry_out=abs(amount))


class CarryoverResolver:
    """
    Computes (carry_in, carry_out) for a category-month.

    Ancestor ledgers are assembled through the owning LedgerBuilder, so
    they are exactly the ledgers a direct query for those months returns.
    """

    def __init__(self, builder: "LedgerBuilder", max_lookback_months: int = 60):
        if max_lookback_months < 1:
            raise ValueError("max_lookback_months must be at least 1")
        self._builder = builder
        self.max_lookback_months = max_lookback_months

    def resolve(
        self,
        category_id: str,
        month: str,
        current_budget: Optional[Budget] = None,
        context: Optional[LedgerContext] = None,
    ) -> Carryover:
        """
        Resolve the carryover into a month.

        Args:
            category_id: Category being reconciled
            month: Month receiving the carry (YYYY-MM)
            current_budget: The month's own budget. Not used by the
                policy, which only looks at the previous month.
            context: Query snapshot; a fresh one is created if omitted

        Returns:
            Carryover.none() when the previous month has no budget,
            otherwise the previous strategy applied to its remaining

        Raises:
            ValidationError: If the month key is malformed
            StorageError: If a source read fails
        """
        earlier = previous_month(month)
        if context is None:
            context = self._builder.new_context(month)

        if earlier is None:
            return Carryover.none()

        earlier_budget = context.budget(category_id, earlier)
        if earlier_budget is None:
            return Carryover.none()

        earlier_ledger = self._ledger_for(category_id, earlier, earlier_budget, context)
        carry = carryover_from(earlier_budget.carry_strategy, earlier_ledger.remaining)

        logger.debug(
            "carryover_resolved",
            category_id=category_id,
            month=month,
            previous_strategy=earlier_budget.carry_strategy.value,
            previous_remaining=str(earlier_ledger.remaining),
            carry_in=str(carry.carry_in),
            carry_out=str(carry.carry_out),
        )
        return carry

    def _ledger_for(
        self,
        category_id: str,
        month: str,
        budget: Budget,
        context: LedgerContext,
    ) -> BudgetLedger:
        """Ledger of a budgeted month, assembled oldest-first without recursion."""
        known = context.ledger(category_id, month)
        if known is not None:
            return known

        # Newest first; chain[0] is the month asked for
        chain: list[tuple[str, Budget]] = [(month, budget)]
        carry = Carryover.none()

        cursor = month
        while True:
            if context.at_floor(cursor):
                self._note_truncation(category_id, cursor, context)
                break

            earlier = previous_month(cursor)
            if earlier is None:
                break

            earlier_budget = context.budget(category_id, earlier)
            if earlier_budget is None:
                break

            earlier_ledger = context.ledger(category_id, earlier)
            if earlier_ledger is not None:
                carry = carryover_from(earlier_budget.carry_strategy, earlier_ledger.remaining)
                break

            chain.append((earlier, earlier_budget))
            cursor = earlier

        ledger = None
        for chain_month, chain_budget in reversed(chain):
            if ledger is not None:
                carry = carryover_from(previous_strategy, ledger.remaining)
            ledger = self._builder.assemble(category_id, chain_month, chain_budget, carry, context)
            context.remember(ledger)
            previous_strategy = chain_budget.carry_strategy

        return ledger

    def _note_truncation(self, category_id: str, month: str, context: LedgerContext) -> None:
        earlier = previous_month(month)
        if earlier is not None and context.budget(category_id, earlier) is not None:
            logger.warning(
                "carryover_lookback_truncated",
                category_id=category_id,
                oldest_month=month,
                max_lookback_months=self.max_lookback_months,
            )
