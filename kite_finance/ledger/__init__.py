"""Budget ledger engine."""

from kite_finance.ledger.builder import LedgerBuilder
from kite_finance.ledger.carryover import CarryoverResolver, carryover_from, forward_carry
from kite_finance.ledger.context import LedgerContext

__all__ = [
    "CarryoverResolver",
    "LedgerBuilder",
    "LedgerContext",
    "carryover_from",
    "forward_carry",
]
