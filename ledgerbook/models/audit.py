"""
Audit Models for Ledgerbook

Report requests, replays and reconciliations are logged for audit purposes.
This provides:
1. Traceability of which period/company a figure was produced for
2. A record of every reconciliation mismatch
3. Debugging information when the record source misbehaves

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Ledger reports
    LEDGER_REPORT_BUILT = "ledger_report_built"
    INVALID_PERIOD_REQUESTED = "invalid_period_requested"
    LEDGER_EXPORTED = "ledger_exported"

    # Balance replay
    BALANCE_REPLAYED = "balance_replayed"
    RECONCILIATION_PASSED = "reconciliation_passed"
    RECONCILIATION_FAILED = "reconciliation_failed"

    # Record intake
    RECORD_ACCEPTED = "record_accepted"
    RECORD_REJECTED = "record_rejected"

    # System events
    RECORD_SOURCE_ERROR = "record_source_error"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'ledger_report', 'record', 'company')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate events of one request"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }

    def to_row(self) -> list[str]:
        """
        Flatten to text cells for tabular audit storage.

        Columns: [event_id, timestamp, event_type, severity, entity_type,
        entity_id, correlation_id, description, details_json, error_message]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            self.entity_id or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.ledger_report_built(period_desc, 4, 12, cid)
        event = AuditEventBuilder.reconciliation_failed(diff, 1, cid)
    """

    @staticmethod
    def ledger_report_built(
        period: str,
        ledger_count: int,
        record_count: int,
        correlation_id: UUID,
        company_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_REPORT_BUILT,
            entity_type="ledger_report",
            entity_id=company_id,
            correlation_id=correlation_id,
            description=f"Ledger built for {period}: {ledger_count} ledgers",
            details={
                "period": period,
                "ledger_count": ledger_count,
                "record_count": record_count,
            },
        )

    @staticmethod
    def invalid_period_requested(
        period: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVALID_PERIOD_REQUESTED,
            severity=AuditSeverity.WARNING,
            entity_type="ledger_report",
            correlation_id=correlation_id,
            description=f"Invalid reporting period requested: {period}",
            details={"period": period},
        )

    @staticmethod
    def ledger_exported(
        period: str,
        row_count: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_EXPORTED,
            entity_type="ledger_report",
            correlation_id=correlation_id,
            description=f"Ledger exported for {period} ({row_count} rows)",
            details={"period": period, "row_count": row_count},
        )

    @staticmethod
    def balance_replayed(
        record_count: int,
        final_balance: str,
        correlation_id: UUID,
        company_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BALANCE_REPLAYED,
            entity_type="company",
            entity_id=company_id,
            correlation_id=correlation_id,
            description=f"Replayed {record_count} records, combined balance {final_balance}",
            details={
                "record_count": record_count,
                "final_balance": final_balance,
            },
        )

    @staticmethod
    def reconciliation_passed(
        total: str,
        correlation_id: UUID,
        company_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECONCILIATION_PASSED,
            entity_type="company",
            entity_id=company_id,
            correlation_id=correlation_id,
            description=f"Stored balances reconcile with history ({total})",
            details={"total": total},
        )

    @staticmethod
    def reconciliation_failed(
        difference: str,
        discrepancy_count: int,
        correlation_id: UUID,
        company_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECONCILIATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="company",
            entity_id=company_id,
            correlation_id=correlation_id,
            description=(
                f"Stored balances differ from history by {difference} "
                f"across {discrepancy_count} accounts"
            ),
            details={
                "difference": difference,
                "discrepancy_count": discrepancy_count,
            },
        )

    @staticmethod
    def record_accepted(
        record_id: str,
        record_type: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_ACCEPTED,
            entity_type="record",
            entity_id=record_id,
            description=f"Record accepted: {record_type} {amount}",
            details={"type": record_type, "amount": amount},
            correlation_id=correlation_id,
        )

    @staticmethod
    def record_rejected(
        record_id: Optional[str],
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="record",
            entity_id=record_id,
            description=f"Record rejected with {len(issues)} issues",
            details={"issues": issues},
            correlation_id=correlation_id,
        )

    @staticmethod
    def record_source_error(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_SOURCE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"Record source error during {operation}",
            error_message=error_message,
            details={"operation": operation},
            correlation_id=correlation_id,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
