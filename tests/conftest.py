"""
Shared fixtures for the ledger test suite.

Engine tests run against in-memory sources only. No real API calls.
"""

from datetime import date
from decimal import Decimal

import pytest

from kite_finance.config import LedgerSettings
from kite_finance.ledger import LedgerBuilder
from kite_finance.models.budget import Budget, CarryStrategy, Transaction
from kite_finance.service import LedgerService
from kite_finance.services.storage import (
    InMemoryAuditStorage,
    InMemoryBudgetSource,
    InMemoryTransactionSource,
)
from kite_finance.audit import AuditLogger


@pytest.fixture
def budgets() -> InMemoryBudgetSource:
    return InMemoryBudgetSource()


@pytest.fixture
def transactions() -> InMemoryTransactionSource:
    return InMemoryTransactionSource()


@pytest.fixture
def add_budget(budgets):
    """Put a budget into the in-memory source."""
    def _add(
        month: str,
        amount: str = "100",
        strategy: CarryStrategy = CarryStrategy.CARRY_NONE,
        category_id: str = "groceries",
    ) -> Budget:
        budget = Budget(
            category_id=category_id,
            month=month,
            amount=Decimal(amount),
            carry_strategy=strategy,
        )
        budgets.put(budget)
        return budget
    return _add


@pytest.fixture
def add_transaction(transactions):
    """Add a transaction; negative amounts are expenses."""
    def _add(
        day: date,
        amount: str,
        category_id="groceries",
        description: str = "Supermarket",
    ) -> Transaction:
        transaction = Transaction(
            category_id=category_id,
            date=day,
            amount=Decimal(amount),
            description=description,
        )
        transactions.add(transaction)
        return transaction
    return _add


@pytest.fixture
def builder(budgets, transactions) -> LedgerBuilder:
    return LedgerBuilder(budgets, transactions, max_lookback_months=60)


@pytest.fixture
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage()


@pytest.fixture
def ledger_settings() -> LedgerSettings:
    return LedgerSettings(
        max_lookback_months=60,
        warning_threshold_percent=80.0,
        danger_threshold_percent=100.0,
    )


@pytest.fixture
def service(budgets, transactions, audit_storage, ledger_settings) -> LedgerService:
    return LedgerService(
        budgets,
        transactions,
        audit_logger=AuditLogger(audit_storage),
        settings=ledger_settings,
    )
