"""
Abstract Record Source Interface

DESIGN DECISION: The ledger engine never talks to storage. The report flow
asks a record source for a snapshot (records, cash accounts, categories)
and hands that snapshot to the engine. This allows us to:
1. Swap the backing store without touching ledger logic
2. Use in-memory storage for testing
3. Keep the engine a pure function of its inputs

The interface is intentionally small: only the reads the reports need,
plus the append-only audit log.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from ledgerbook.models.audit import AuditEvent
from ledgerbook.models.records import (
    AccountCategory,
    CashAccount,
    CashMovementRecord,
)


class RecordSourceInterface(ABC):
    """
    Abstract interface for the record store.

    Any storage implementation (database, spreadsheet, API) must
    implement these methods.
    """

    @abstractmethod
    async def list_records(
        self,
        company_id: Optional[str] = None,
    ) -> list[CashMovementRecord]:
        """
        List cash-movement records.

        Args:
            company_id: Only records of this company (all if None)

        Returns:
            Records in no particular order

        Raises:
            SourceUnavailableError: If the store cannot be reached
        """
        pass

    @abstractmethod
    async def list_cash_accounts(
        self,
        company_id: Optional[str] = None,
    ) -> list[CashAccount]:
        """
        List cash accounts with opening and stored balances.

        Args:
            company_id: Only accounts of this company (all if None)
        """
        pass

    @abstractmethod
    async def list_categories(
        self,
        company_id: Optional[str] = None,
    ) -> list[AccountCategory]:
        """
        List account categories.

        Args:
            company_id: Only categories of this company (all if None)
        """
        pass

    @abstractmethod
    async def get_record(self, record_id: str) -> Optional[CashMovementRecord]:
        """
        Retrieve a record by its ID.

        Returns:
            The record if found, None otherwise
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (one report request).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class SourceUnavailableError(StorageError):
    """Could not reach the storage backend."""
    pass


class RecordRejectedError(StorageError):
    """A record failed intake validation and was not stored."""

    def __init__(self, message: str, issues: Optional[list] = None):
        super().__init__(message)
        self.issues = issues or []
