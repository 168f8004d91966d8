"""
Data Models Package

This package contains all Pydantic models used in Ledgerbook.
Input models (records, accounts, categories) are frozen; derived models
(ledgers, snapshots) are rebuilt on every request.
"""

from ledgerbook.models.records import (
    AccountCategory,
    CashAccount,
    CashAccountType,
    CashMovementRecord,
    CategoryKind,
    PostingSide,
    ReportingPeriod,
    TransactionType,
)
from ledgerbook.models.ledger import (
    AccountDiscrepancy,
    BalanceSnapshot,
    GlobalBalanceReplay,
    LedgerAccount,
    LedgerEntry,
    LedgerRef,
    LedgerReport,
    MovementKind,
    PeriodSummary,
    Posting,
    ReconciliationResult,
)
from ledgerbook.models.validation import (
    ValidationIssue,
    ValidationResult,
)
from ledgerbook.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Input models
    "AccountCategory",
    "CashAccount",
    "CashAccountType",
    "CashMovementRecord",
    "CategoryKind",
    "PostingSide",
    "ReportingPeriod",
    "TransactionType",
    # Derived models
    "AccountDiscrepancy",
    "BalanceSnapshot",
    "GlobalBalanceReplay",
    "LedgerAccount",
    "LedgerEntry",
    "LedgerRef",
    "LedgerReport",
    "MovementKind",
    "PeriodSummary",
    "Posting",
    "ReconciliationResult",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
