"""
Audit Logger

DESIGN DECISION: Every report request, replay and reconciliation is logged.
This provides:
1. Traceability of which figures were produced for which period
2. A visible trail of reconciliation mismatches
3. Debugging capability when the record source fails

The audit logger:
- Is async so it fits the report flows that call it
- Gracefully handles failures (doesn't break a report if logging fails)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from ledgerbook.models.audit import AuditEvent, AuditEventBuilder
from ledgerbook.services.storage import AuditStorageInterface


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


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence), when one is configured
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
        self._logger = structlog.get_logger(__name__)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_ledger_built(
        self,
        period: str,
        ledger_count: int,
        record_count: int,
        correlation_id: UUID,
        company_id: Optional[str] = None,
    ) -> None:
        """Log a completed ledger report."""
        await self.log(AuditEventBuilder.ledger_report_built(
            period=period,
            ledger_count=ledger_count,
            record_count=record_count,
            correlation_id=correlation_id,
            company_id=company_id,
        ))

    async def log_invalid_period(
        self,
        period: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.invalid_period_requested(
            period=period,
            correlation_id=correlation_id,
        ))

    async def log_ledger_exported(
        self,
        period: str,
        row_count: int,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.ledger_exported(
            period=period,
            row_count=row_count,
            correlation_id=correlation_id,
        ))

    async def log_balance_replayed(
        self,
        record_count: int,
        final_balance: str,
        correlation_id: UUID,
        company_id: Optional[str] = None,
    ) -> None:
        await self.log(AuditEventBuilder.balance_replayed(
            record_count=record_count,
            final_balance=final_balance,
            correlation_id=correlation_id,
            company_id=company_id,
        ))

    async def log_reconciliation(
        self,
        is_balanced: bool,
        total: str,
        difference: str,
        discrepancy_count: int,
        correlation_id: UUID,
        company_id: Optional[str] = None,
    ) -> None:
        """Log the outcome of a reconciliation run."""
        if is_balanced:
            event = AuditEventBuilder.reconciliation_passed(
                total=total,
                correlation_id=correlation_id,
                company_id=company_id,
            )
        else:
            event = AuditEventBuilder.reconciliation_failed(
                difference=difference,
                discrepancy_count=discrepancy_count,
                correlation_id=correlation_id,
                company_id=company_id,
            )
        await self.log(event)

    async def log_record_accepted(
        self,
        record_id: str,
        record_type: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.record_accepted(
            record_id=record_id,
            record_type=record_type,
            amount=amount,
            correlation_id=correlation_id,
        ))

    async def log_record_rejected(
        self,
        record_id: Optional[str],
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a record refused at intake, with its validation issues."""
        await self.log(AuditEventBuilder.record_rejected(
            record_id=record_id,
            issues=issues,
            correlation_id=correlation_id,
        ))

    async def log_record_source_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.record_source_error(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a report request and pass it through.
    """
    return uuid4()
