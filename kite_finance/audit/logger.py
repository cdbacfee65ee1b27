"""
Audit Logger

DESIGN DECISION: Every ledger query and every failure is logged.
This provides:
1. Traceability of the numbers a user was shown
2. Debugging capability for long carryover chains
3. History of validation and storage failures

The audit logger:
- Gracefully handles failures (a broken audit sink never breaks a ledger query)
- Supports correlation IDs to trace related events
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from kite_finance.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from kite_finance.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route the structured log to stderr at the given level."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper()))


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit store, if one is configured (for persistence)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("kite_finance.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_ledger_calculated(
        self,
        category_id: str,
        month: str,
        remaining: str,
        entry_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a completed ledger computation."""
        event = AuditEventBuilder.ledger_calculated(
            category_id=category_id,
            month=month,
            remaining=remaining,
            entry_count=entry_count,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_history_calculated(
        self,
        category_id: str,
        start_month: str,
        end_month: str,
        month_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.history_calculated(
            category_id=category_id,
            start_month=start_month,
            end_month=end_month,
            month_count=month_count,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_month_summary_calculated(
        self,
        month: str,
        category_count: int,
        total_spent: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.month_summary_calculated(
            month=month,
            category_count=category_count,
            total_spent=total_spent,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_validation_failed(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log rejected input."""
        event = AuditEventBuilder.validation_failed(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_storage_read_failed(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a source read failure."""
        event = AuditEventBuilder.storage_read_failed(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a caller action (e.g., a dashboard refresh).
    Pass it through all subsequent operations.
    """
    return uuid4()
