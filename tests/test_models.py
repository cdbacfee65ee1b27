"""
Tests for Kite Finance models

Test strategy:
1. Unit tests for individual components (models, validators, policies)
2. Engine tests against in-memory sources
3. No real API calls in tests (use mocks)
"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from uuid import uuid4

from kite_finance.models.budget import (
    Budget,
    BudgetLedger,
    BudgetLedgerEntry,
    BudgetStatus,
    CarryStrategy,
    Carryover,
    LedgerEntryType,
    Transaction,
)
from kite_finance.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestBudgetModels:
    """Tests for source record models."""

    def test_budget_creation(self):
        """Test Budget model creation."""
        budget = Budget(
            category_id="groceries",
            month="2024-01",
            amount=Decimal("250.00"),
            carry_strategy=CarryStrategy.CARRY_UNSPENT,
        )
        assert budget.category_id == "groceries"
        assert budget.amount == Decimal("250.00")
        assert budget.carry_strategy == CarryStrategy.CARRY_UNSPENT

    def test_budget_defaults_to_carry_none(self):
        """Test that budgets carry nothing unless told otherwise."""
        budget = Budget(category_id="rent", month="2024-01", amount=Decimal("900"))
        assert budget.carry_strategy == CarryStrategy.CARRY_NONE

    def test_budget_strips_whitespace(self):
        """Test that whitespace is stripped from the category id."""
        budget = Budget(category_id="  rent  ", month="2024-01", amount=Decimal("900"))
        assert budget.category_id == "rent"

    def test_budget_rejects_negative_amount(self):
        """Test that negative budget amounts are rejected."""
        with pytest.raises(ValueError):
            Budget(category_id="rent", month="2024-01", amount=Decimal("-1"))

    def test_budget_rejects_malformed_month(self):
        """Test that month must be YYYY-MM."""
        with pytest.raises(ValueError, match="YYYY-MM"):
            Budget(category_id="rent", month="2024-1", amount=Decimal("10"))

    def test_budget_accepts_strategy_wire_values(self):
        """Test that carry strategies parse from their stored names."""
        budget = Budget(
            category_id="fun",
            month="2024-03",
            amount=Decimal("50"),
            carry_strategy="carryOverspend",
        )
        assert budget.carry_strategy == CarryStrategy.CARRY_OVERSPEND

    def test_transaction_expense_flags(self):
        """Test expense classification of transactions."""
        expense = Transaction(category_id="fun", date=date(2024, 1, 5), amount=Decimal("-20"))
        refund = Transaction(category_id="fun", date=date(2024, 1, 6), amount=Decimal("5"))
        uncategorized = Transaction(date=date(2024, 1, 7), amount=Decimal("-9"))

        assert expense.is_expense and expense.is_categorized_expense
        assert not refund.is_expense
        assert uncategorized.is_expense
        assert not uncategorized.is_categorized_expense

    def test_transaction_blank_category_is_uncategorized(self):
        """Test that an empty category id means uncategorized."""
        transaction = Transaction(category_id="", date=date(2024, 1, 5), amount=Decimal("-1"))
        assert transaction.category_id is None


class TestLedgerModels:
    """Tests for derived ledger models."""

    def test_empty_ledger(self):
        """Test the canonical empty ledger."""
        ledger = BudgetLedger.empty("groceries", "2024-01")
        assert ledger.is_empty
        assert ledger.entries == []
        assert ledger.total_budgeted == 0
        assert ledger.total_spent == 0
        assert ledger.total_carried_in == 0
        assert ledger.total_carried_out == 0
        assert ledger.remaining == 0
        assert ledger.carry_forward == 0

    def test_available_includes_carry_in(self):
        """Test available is budget plus carry-in."""
        ledger = BudgetLedger(
            category_id="groceries",
            month="2024-02",
            total_budgeted=Decimal("100"),
            total_carried_in=Decimal("-30"),
        )
        assert ledger.available == Decimal("70")

    def test_carry_forward_sign_follows_remaining(self):
        """Test that carry_forward is negative for forwarded overspend."""
        ledger = BudgetLedger(
            category_id="groceries",
            month="2024-01",
            entries=[
                BudgetLedgerEntry(
                    type=LedgerEntryType.CARRY_OUT,
                    amount=Decimal("50"),
                    description="Carrying overspend to February 2024",
                    date=date(2024, 1, 31),
                ),
            ],
            remaining=Decimal("-50"),
        )
        assert ledger.carry_forward == Decimal("-50")
        assert len(ledger.entries_of_type(LedgerEntryType.CARRY_OUT)) == 1

    def test_carryover_rejects_negative_carry_out(self):
        """Test that carry_out is a magnitude."""
        with pytest.raises(ValueError):
            Carryover(carry_in=Decimal("-5"), carry_out=Decimal("-5"))

    def test_enum_wire_values(self):
        """Test enum string values."""
        assert LedgerEntryType.CARRY_IN.value == "carryIn"
        assert CarryStrategy.CARRY_UNSPENT.value == "carryUnspent"
        assert BudgetStatus.WARNING == "warning"


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.LEDGER_CALCULATED,
            description="Ledger calculated",
        )
        assert event.event_type == AuditEventType.LEDGER_CALCULATED
        assert event.severity == AuditSeverity.INFO
        assert isinstance(event.timestamp, datetime)

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEventBuilder.ledger_calculated(
            category_id="groceries",
            month="2024-01",
            remaining="40",
            entry_count=3,
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "ledger_calculated"
        assert log_dict["entity_id"] == "groceries:2024-01"
        assert log_dict["details"]["remaining"] == "40"

    def test_audit_event_to_sheets_row(self):
        """Test conversion to sheets row."""
        correlation_id = uuid4()
        event = AuditEventBuilder.storage_read_failed(
            operation="calculate_budget_ledger",
            error_message="timeout",
            correlation_id=correlation_id,
        )
        row = event.to_sheets_row()
        assert len(row) == 10  # Expected number of columns
        assert row[2] == "storage_read_failed"
        assert row[3] == "error"
        assert row[6] == str(correlation_id)
        assert row[9] == "timeout"

    def test_validation_failed_is_warning(self):
        """Test AuditEventBuilder.validation_failed severity."""
        event = AuditEventBuilder.validation_failed("calculate_budget_ledger", "bad month")
        assert event.event_type == AuditEventType.VALIDATION_FAILED
        assert event.severity == AuditSeverity.WARNING
        assert event.error_message == "bad month"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
