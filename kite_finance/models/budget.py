"""
Core Data Models for the Budget Ledger

These models define the schemas for everything the ledger engine reads
and everything it produces:
1. Budget and Transaction are raw records supplied by external sources
2. BudgetLedger and BudgetLedgerEntry are derived, never persisted
3. MonthSummary aggregates ledgers for dashboard callers

DESIGN DECISION: Money is always Decimal. Float sums drift over long
carryover chains, and a ledger that is off by a cent is not auditable.
"""

import re
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


MONTH_KEY_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")

ZERO = Decimal("0")


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class CarryStrategy(str, Enum):
    """
    Carryover policy attached to a budget.

    The strategy of a month decides what that month forwards to the next one.
    """
    CARRY_NONE = "carryNone"            # Nothing is forwarded
    CARRY_UNSPENT = "carryUnspent"      # Leftover money is forwarded
    CARRY_OVERSPEND = "carryOverspend"  # Overrun is forwarded as a debt


class LedgerEntryType(str, Enum):
    """Kinds of lines that appear in a ledger."""
    BUDGETED = "budgeted"
    CARRY_IN = "carryIn"
    SPENT = "spent"
    CARRY_OUT = "carryOut"


class BudgetStatus(str, Enum):
    """Traffic-light classification of spend against a budget."""
    GOOD = "good"
    WARNING = "warning"
    DANGER = "danger"


# =============================================================================
# SOURCE RECORDS
# =============================================================================

class Budget(BaseModel):
    """
    A budgeted amount for one category in one month.

    (category_id, month) is the natural key. Sources must never return two
    budgets for the same pair.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[str] = Field(
        default=None,
        description="Identifier in the backing store, if it has one"
    )
    category_id: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Category this budget applies to"
    )
    month: str = Field(
        ...,
        description="Budget period in YYYY-MM format"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Budgeted amount for the month"
    )
    carry_strategy: CarryStrategy = Field(
        default=CarryStrategy.CARRY_NONE,
        description="What this month forwards to the next one"
    )
    notes: Optional[str] = Field(
        default=None,
        max_length=1000
    )

    @field_validator('month')
    @classmethod
    def validate_month(cls, v: str) -> str:
        if not MONTH_KEY_PATTERN.match(v):
            raise ValueError(f"Month must be in YYYY-MM format, got {v!r}")
        return v


class Transaction(BaseModel):
    """
    A single account movement.

    Negative amounts are expenses, positive amounts are income or refunds.
    Only categorized expenses count as spend.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[str] = None
    account_id: Optional[str] = None
    category_id: Optional[str] = Field(
        default=None,
        description="None for uncategorized transactions"
    )
    date: date
    amount: Decimal = Field(
        ...,
        description="Signed amount (negative = expense)"
    )
    description: str = Field(
        default="",
        max_length=500
    )
    merchant: Optional[str] = Field(
        default=None,
        max_length=200
    )
    currency: Optional[str] = Field(
        default=None,
        max_length=3,
        description="Informational only, amounts are never converted"
    )

    @field_validator('category_id')
    @classmethod
    def blank_category_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @property
    def is_expense(self) -> bool:
        return self.amount < 0

    @property
    def is_categorized_expense(self) -> bool:
        return self.is_expense and self.category_id is not None


# =============================================================================
# DERIVED LEDGER MODELS
# =============================================================================

class BudgetLedgerEntry(BaseModel):
    """One display/audit line of a ledger."""

    type: LedgerEntryType
    amount: Decimal
    description: str
    date: date


class Carryover(BaseModel):
    """
    Amounts moved across a month boundary.

    carry_in is signed (negative when an overspend is inherited).
    carry_out is the magnitude the previous month gave away.
    """

    carry_in: Decimal = ZERO
    carry_out: Decimal = Field(default=ZERO, ge=0)

    @classmethod
    def none(cls) -> "Carryover":
        return cls()


class BudgetLedger(BaseModel):
    """
    Reconciliation of one category-month.

    INVARIANT: remaining == total_budgeted + total_carried_in - total_spent
    INVARIANT: entries are sorted by date, oldest first
    """

    category_id: str
    month: str
    entries: list[BudgetLedgerEntry] = Field(default_factory=list)
    total_budgeted: Decimal = ZERO
    total_spent: Decimal = ZERO
    total_carried_in: Decimal = ZERO
    total_carried_out: Decimal = ZERO
    remaining: Decimal = ZERO

    @classmethod
    def empty(cls, category_id: str, month: str) -> "BudgetLedger":
        """The ledger of a category-month that has no budget."""
        return cls(category_id=category_id, month=month)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    @property
    def available(self) -> Decimal:
        """Money available to spend this month (budget plus carry-in)."""
        return self.total_budgeted + self.total_carried_in

    @property
    def carry_forward(self) -> Decimal:
        """
        Signed amount this month forwards to the next one.

        Positive for unspent money, negative for overspend.
        """
        for entry in self.entries:
            if entry.type == LedgerEntryType.CARRY_OUT:
                return entry.amount if self.remaining > 0 else -entry.amount
        return ZERO

    def entries_of_type(self, entry_type: LedgerEntryType) -> list[BudgetLedgerEntry]:
        return [entry for entry in self.entries if entry.type == entry_type]


# =============================================================================
# DASHBOARD AGGREGATES
# =============================================================================

class CategoryBudgetSummary(BaseModel):
    """Ledger of one category plus its progress classification."""

    category_id: str
    ledger: BudgetLedger
    progress_percent: float = Field(ge=0.0, le=100.0)
    status: BudgetStatus
    is_overspent: bool


class MonthSummary(BaseModel):
    """All budgeted categories of a month, as shown on a budgets page."""

    month: str
    categories: list[CategoryBudgetSummary] = Field(default_factory=list)
    total_budgeted: Decimal = ZERO
    total_spent: Decimal = ZERO
    total_remaining: Decimal = ZERO

    @property
    def overspent_categories(self) -> list[str]:
        return [c.category_id for c in self.categories if c.is_overspent]
