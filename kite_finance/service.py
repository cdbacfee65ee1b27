"""
Ledger Service - Public API

This module ties together the ledger engine, the monthly aggregates,
configuration and auditing, and is the only entry point callers
(budget pages, report generators, notification checks) should use.

DESIGN DECISION: The service enforces the boundaries:
- Inputs are validated before any source is read
- Sources are only ever read, never written
- No partial results: any failure aborts the whole call
- Every call and every failure is audited

Everything here is stateless per call. Two callers may use the same
LedgerService concurrently without locking.
"""

from contextlib import contextmanager
from decimal import Decimal
from typing import Iterator, Optional, Union
from uuid import UUID

import structlog

from kite_finance.audit import AuditLogger, configure_logging, create_correlation_id
from kite_finance.config import LedgerSettings, get_settings
from kite_finance.ledger import LedgerBuilder
from kite_finance.models.budget import (
    ZERO,
    BudgetLedger,
    BudgetStatus,
    CategoryBudgetSummary,
    MonthSummary,
)
from kite_finance.queries import MonthlyAggregates
from kite_finance.services.storage import (
    BudgetSource,
    GoogleSheetsAuditStorage,
    GoogleSheetsBudgetSource,
    GoogleSheetsClient,
    GoogleSheetsTransactionSource,
    InMemoryBudgetSource,
    InMemoryTransactionSource,
    StorageError,
    TransactionSource,
)
from kite_finance.validation import ValidationError, month_bounds, months_between


logger = structlog.get_logger(__name__)

Number = Union[int, float, Decimal]

HUNDRED = Decimal("100")


def _percent(spent: Number, budgeted: Number) -> Decimal:
    # str() round-trip keeps 0.8 as 0.8 instead of its binary expansion
    return Decimal(str(spent)) / Decimal(str(budgeted)) * HUNDRED


class LedgerService:
    """
    Budget ledgers and the small helpers built on top of them.

    Flow for calculate_budget_ledger:
    1. Validate category id and month key
    2. Build the ledger (walking the carryover chain as needed)
    3. Audit the result
    """

    def __init__(
        self,
        budgets: BudgetSource,
        transactions: TransactionSource,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[LedgerSettings] = None,
    ):
        self._settings = settings or get_settings().ledger
        self._builder = LedgerBuilder(
            budgets,
            transactions,
            max_lookback_months=self._settings.max_lookback_months,
        )
        self._aggregates = MonthlyAggregates(budgets, transactions)
        self._budgets = budgets
        self._audit_logger = audit_logger or AuditLogger()

    @property
    def builder(self) -> LedgerBuilder:
        return self._builder

    @contextmanager
    def _audited(self, operation: str, correlation_id: Optional[UUID]) -> Iterator[None]:
        """Audit and re-raise any failure."""
        try:
            yield
        except ValidationError as e:
            self._audit_logger.log_validation_failed(
                operation=operation,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise
        except StorageError as e:
            self._audit_logger.log_storage_read_failed(
                operation=operation,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            raise
        except Exception as e:
            self._audit_logger.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={"operation": operation},
                correlation_id=correlation_id,
            )
            raise

    # -------------------------------------------------------------------------
    # Ledgers
    # -------------------------------------------------------------------------

    def calculate_budget_ledger(
        self,
        category_id: str,
        month: str,
        correlation_id: Optional[UUID] = None,
    ) -> BudgetLedger:
        """
        Calculate the budget ledger for a category and month.

        A month without a budget yields the empty ledger.

        Raises:
            ValidationError: If the category id or month key is malformed
            StorageError: If a source read fails
        """
        correlation_id = correlation_id or create_correlation_id()

        with self._audited("calculate_budget_ledger", correlation_id):
            ledger = self._builder.build(category_id, month)

        self._audit_logger.log_ledger_calculated(
            category_id=category_id,
            month=month,
            remaining=str(ledger.remaining),
            entry_count=len(ledger.entries),
            correlation_id=correlation_id,
        )
        return ledger

    def calculate_ledger_history(
        self,
        category_id: str,
        start_month: str,
        end_month: str,
        correlation_id: Optional[UUID] = None,
    ) -> list[BudgetLedger]:
        """
        Calculate ledgers for every month from start_month to end_month.

        All months share one read snapshot, so each budget and the
        category's transactions are read once for the whole range. Each
        month keeps its own look-back floor, so every ledger returned is
        identical to calculate_budget_ledger's for that month.

        Raises:
            ValidationError: If inputs are malformed, start is after end,
                or the range is longer than the look-back cap
            StorageError: If a source read fails
        """
        correlation_id = correlation_id or create_correlation_id()

        with self._audited("calculate_ledger_history", correlation_id):
            months = months_between(start_month, end_month)
            if len(months) > self._settings.max_lookback_months:
                raise ValidationError(
                    f"History of {len(months)} months exceeds the "
                    f"{self._settings.max_lookback_months}-month look-back limit"
                )
            snapshot = self._builder.new_context(end_month)
            ledgers = [
                self._builder.build(
                    category_id,
                    month,
                    self._builder.new_context(month, snapshot),
                )
                for month in months
            ]

        self._audit_logger.log_history_calculated(
            category_id=category_id,
            start_month=start_month,
            end_month=end_month,
            month_count=len(ledgers),
            correlation_id=correlation_id,
        )
        return ledgers

    # -------------------------------------------------------------------------
    # Progress helpers
    # -------------------------------------------------------------------------

    def calculate_budget_progress(self, spent: Number, budgeted: Number) -> float:
        """
        Get budget progress as a percentage, capped at 100.

        Returns 0 when nothing is budgeted. The percentage is computed in
        Decimal and returned as a float for display (progress bars), so
        it may carry binary rounding noise, e.g. 33.333333333333336.
        Use get_budget_status for threshold decisions, which stays exact.
        """
        if budgeted == 0:
            return 0.0
        return float(min(_percent(spent, budgeted), HUNDRED))

    def is_budget_overspent(self, spent: Number, budgeted: Number) -> bool:
        return spent > budgeted

    def get_budget_status(self, spent: Number, budgeted: Number) -> BudgetStatus:
        """
        Classify spend against a budget.

        Thresholds are strict: exactly 80% is still good and exactly
        100% is still a warning.
        """
        if budgeted == 0:
            return BudgetStatus.GOOD

        percentage = _percent(spent, budgeted)

        if percentage > Decimal(str(self._settings.danger_threshold_percent)):
            return BudgetStatus.DANGER
        if percentage > Decimal(str(self._settings.warning_threshold_percent)):
            return BudgetStatus.WARNING
        return BudgetStatus.GOOD

    # -------------------------------------------------------------------------
    # Monthly aggregates
    # -------------------------------------------------------------------------

    def get_total_budget_for_month(self, month: str) -> Decimal:
        """Total budget amount for a month, carryover not applied."""
        with self._audited("get_total_budget_for_month", None):
            return self._aggregates.total_budget(month)

    def get_total_spent_for_month(self, month: str) -> Decimal:
        """Total spent for a month across all categories."""
        with self._audited("get_total_spent_for_month", None):
            return self._aggregates.total_spent(month)

    def get_spending_by_category(self, month: str) -> dict[str, Decimal]:
        with self._audited("get_spending_by_category", None):
            return self._aggregates.spending_by_category(month)

    def get_month_summary(
        self,
        month: str,
        correlation_id: Optional[UUID] = None,
    ) -> MonthSummary:
        """
        Ledger, progress and status for every budgeted category of a month.

        Progress and status compare spend with the raw budgeted amount,
        the way the budgets page shows them. Categories are ordered by id.
        """
        correlation_id = correlation_id or create_correlation_id()

        with self._audited("get_month_summary", correlation_id):
            month_bounds(month)
            budgets = sorted(self._budgets.get_by_month(month), key=lambda b: b.category_id)
            categories = []
            for budget in budgets:
                ledger = self._builder.build(budget.category_id, month)
                categories.append(CategoryBudgetSummary(
                    category_id=budget.category_id,
                    ledger=ledger,
                    progress_percent=self.calculate_budget_progress(
                        ledger.total_spent, ledger.total_budgeted
                    ),
                    status=self.get_budget_status(ledger.total_spent, ledger.total_budgeted),
                    is_overspent=self.is_budget_overspent(
                        ledger.total_spent, ledger.total_budgeted
                    ),
                ))

        summary = MonthSummary(
            month=month,
            categories=categories,
            total_budgeted=sum((c.ledger.total_budgeted for c in categories), ZERO),
            total_spent=sum((c.ledger.total_spent for c in categories), ZERO),
            total_remaining=sum((c.ledger.remaining for c in categories), ZERO),
        )

        self._audit_logger.log_month_summary_calculated(
            month=month,
            category_count=len(categories),
            total_spent=str(summary.total_spent),
            correlation_id=correlation_id,
        )
        return summary


def create_ledger_service(
    use_storage: bool = True,
) -> LedgerService:
    """
    Factory function to create a fully wired LedgerService.

    Args:
        use_storage: Whether to read from Google Sheets.
                    Set to False for an empty in-memory service.

    Returns:
        LedgerService reading from the configured record store
    """
    settings = get_settings()
    configure_logging(settings.app.log_level)

    if use_storage:
        try:
            sheets_client = GoogleSheetsClient()
            budgets = GoogleSheetsBudgetSource(sheets_client)
            transactions = GoogleSheetsTransactionSource(sheets_client)
            audit_logger = AuditLogger(GoogleSheetsAuditStorage(sheets_client))
            return LedgerService(budgets, transactions, audit_logger, settings.ledger)
        except Exception as e:
            # Storage not configured - continue without it
            logger.warning("storage_not_configured", error=str(e))

    return LedgerService(
        InMemoryBudgetSource(),
        InMemoryTransactionSource(),
        AuditLogger(),  # Local-only logging
        settings.ledger,
    )
