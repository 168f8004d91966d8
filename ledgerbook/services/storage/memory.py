"""
In-Memory Storage Implementation

Backs tests, demos and single-process use. Behaves like the real record
store in the ways the ledger depends on:

- records pass intake validation before they are stored
- records without a creation timestamp are stamped at ingestion
- each cash account's current_balance is updated incrementally, with the
  same posting rules the ledger uses, whenever a record is added or
  removed

Removing a record with adjust_balances=False leaves the stored balances
stale on purpose; reconciliation is what catches that.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Optional
from uuid import UUID

import structlog

from ledgerbook.config import LedgerSettings, get_settings
from ledgerbook.engine.classifier import AccountClassifier, cash_ledger_key
from ledgerbook.models.audit import AuditEvent
from ledgerbook.models.records import (
    AccountCategory,
    CashAccount,
    CashMovementRecord,
)
from ledgerbook.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    NotFoundError,
    RecordRejectedError,
    RecordSourceInterface,
)
from ledgerbook.validation import RecordValidator


logger = structlog.get_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _matches(company_id: Optional[str], item_company: Optional[str]) -> bool:
    return company_id is None or item_company == company_id


class InMemoryRecordSource(RecordSourceInterface):
    """Record store held in process memory."""

    def __init__(
        self,
        settings: Optional[LedgerSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._settings = settings or get_settings().ledger
        self._clock = clock or _utc_now
        self._records: dict[str, CashMovementRecord] = {}
        self._accounts: dict[str, CashAccount] = {}
        self._categories: dict[str, AccountCategory] = {}

    # -------------------------------------------------------------------------
    # Reference data
    # -------------------------------------------------------------------------

    def add_account(self, account: CashAccount) -> CashAccount:
        """Register a cash account. Its stored balance starts at the opening balance."""
        if account.id in self._accounts:
            raise DuplicateError(f"Cash account already exists: {account.id}")
        if account.current_balance is None:
            account = account.model_copy(
                update={"current_balance": account.opening_balance}
            )
        self._accounts[account.id] = account
        return account

    def add_category(self, category: AccountCategory) -> AccountCategory:
        if category.id in self._categories:
            raise DuplicateError(f"Category already exists: {category.id}")
        self._categories[category.id] = category
        return category

    # -------------------------------------------------------------------------
    # Records
    # -------------------------------------------------------------------------

    async def ingest(self, raw: dict[str, Any]) -> CashMovementRecord:
        """
        Validate and store one record, updating stored account balances.

        Raises:
            RecordRejectedError: If the record fails schema validation
            DuplicateError: If a record with the same id exists
        """
        validator = RecordValidator(
            self._accounts.values(),
            self._categories.values(),
        )
        record, result = validator.validate(raw)
        if record is None:
            logger.info(
                "record_rejected",
                record_id=result.record_id,
                error_count=result.error_count,
            )
            raise RecordRejectedError(
                f"Record {result.record_id or '<no id>'} rejected",
                issues=[issue.model_dump() for issue in result.issues],
            )

        if record.id in self._records:
            raise DuplicateError(f"Record already exists: {record.id}")

        if record.created_at is None:
            record = record.model_copy(update={"created_at": self._clock()})

        for warning in result.warnings:
            logger.info("record_warning", record_id=record.id, warning=warning)

        self._records[record.id] = record
        self._apply_balances(record, direction=Decimal("1"))
        return record

    async def delete_record(
        self,
        record_id: str,
        adjust_balances: bool = True,
    ) -> bool:
        """
        Remove a record.

        Raises:
            NotFoundError: If no record has this id
        """
        record = self._records.pop(record_id, None)
        if record is None:
            raise NotFoundError(f"Record not found: {record_id}")
        if adjust_balances:
            self._apply_balances(record, direction=Decimal("-1"))
        return True

    def _apply_balances(self, record: CashMovementRecord, direction: Decimal) -> None:
        classifier = AccountClassifier(
            self._accounts.values(),
            self._categories.values(),
            self._settings,
        )
        by_key = {cash_ledger_key(account_id): account_id for account_id in self._accounts}
        for posting in classifier.classify(record):
            account_id = by_key.get(posting.ledger.key)
            if account_id is None:
                continue
            account = self._accounts[account_id]
            self._accounts[account_id] = account.model_copy(update={
                "current_balance": account.stored_balance + direction * posting.signed_amount
            })

    # -------------------------------------------------------------------------
    # RecordSourceInterface
    # -------------------------------------------------------------------------

    async def list_records(
        self,
        company_id: Optional[str] = None,
    ) -> list[CashMovementRecord]:
        return [
            record for record in self._records.values()
            if _matches(company_id, record.company_id)
        ]

    async def list_cash_accounts(
        self,
        company_id: Optional[str] = None,
    ) -> list[CashAccount]:
        return [
            account for account in self._accounts.values()
            if _matches(company_id, account.company_id)
        ]

    async def list_categories(
        self,
        company_id: Optional[str] = None,
    ) -> list[AccountCategory]:
        return [
            category for category in self._categories.values()
            if _matches(company_id, category.company_id)
        ]

    async def get_record(self, record_id: str) -> Optional[CashMovementRecord]:
        return self._records.get(record_id)


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only audit log held in process memory."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
