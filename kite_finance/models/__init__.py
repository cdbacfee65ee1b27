"""
Data Models Package

This package contains all Pydantic models used by the ledger engine.
Records read from sources and ledgers handed to callers conform to these schemas.
"""

from kite_finance.models.budget import (
    Budget,
    BudgetLedger,
    BudgetLedgerEntry,
    BudgetStatus,
    CarryStrategy,
    Carryover,
    CategoryBudgetSummary,
    LedgerEntryType,
    MonthSummary,
    Transaction,
)
from kite_finance.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Budget models
    "Budget",
    "BudgetLedger",
    "BudgetLedgerEntry",
    "BudgetStatus",
    "CarryStrategy",
    "Carryover",
    "CategoryBudgetSummary",
    "LedgerEntryType",
    "MonthSummary",
    "Transaction",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
