"""
Report Orchestrator for Ledgerbook

Ties the record source, the ledger engine and the audit log together for
the report screens and the entry form:
1. Ledger report (snapshot -> build ledgers -> audit)
2. Balance replay (snapshot -> replay -> audit)
3. Reconciliation (snapshot -> replay vs stored balances -> audit)
4. Record intake (validate -> store -> audit)

DESIGN DECISION: The orchestrator owns all I/O. It loads one snapshot of
the record source per request and hands it to the engine, which stays a
pure function. Report results are never written back.
"""

from typing import Any, NamedTuple, Optional
from uuid import UUID

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ledgerbook.audit import AuditLogger, create_correlation_id
from ledgerbook.config import LedgerSettings, get_settings
from ledgerbook.engine import (
    build_ledgers,
    ledger_rows,
    reconcile,
    replay_global_balance,
    replay_rows,
    summarize_period,
)
from ledgerbook.models.ledger import (
    GlobalBalanceReplay,
    LedgerReport,
    PeriodSummary,
    ReconciliationResult,
)
from ledgerbook.models.records import (
    AccountCategory,
    CashAccount,
    CashMovementRecord,
    ReportingPeriod,
)
from ledgerbook.services.storage import (
    DuplicateError,
    InMemoryAuditStorage,
    InMemoryRecordSource,
    RecordRejectedError,
    RecordSourceInterface,
    SourceUnavailableError,
)


class RecordSnapshot(NamedTuple):
    """Everything the engine needs, read once per request."""
    records: list[CashMovementRecord]
    accounts: list[CashAccount]
    categories: list[AccountCategory]


class LedgerReportFlow:
    """
    Orchestrates report requests against a record source.

    Every public method loads a fresh snapshot; there is no cache to
    invalidate.
    """

    def __init__(
        self,
        record_source: RecordSourceInterface,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[LedgerSettings] = None,
        retry_attempts: Optional[int] = None,
        retry_wait=None,
    ):
        self._source = record_source
        self._audit_logger = audit_logger
        self._settings = settings or get_settings().ledger
        self._retry_attempts = retry_attempts or get_settings().app.source_retry_attempts
        self._retry_wait = retry_wait or wait_exponential(multiplier=1, min=2, max=10)

    async def load_snapshot(
        self,
        company_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> RecordSnapshot:
        """
        Read records, accounts and categories for one company.

        Retries while the source reports itself unavailable.

        Raises:
            SourceUnavailableError: If every attempt failed
        """
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._retry_attempts),
                wait=self._retry_wait,
                retry=retry_if_exception_type(SourceUnavailableError),
                reraise=True,
            ):
                with attempt:
                    return RecordSnapshot(
                        records=await self._source.list_records(company_id),
                        accounts=await self._source.list_cash_accounts(company_id),
                        categories=await self._source.list_categories(company_id),
                    )
        except SourceUnavailableError as e:
            if self._audit_logger:
                await self._audit_logger.log_record_source_error(
                    operation="load_snapshot",
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise

    async def build_ledger(
        self,
        period: ReportingPeriod,
        company_id: Optional[str] = None,
        account_key: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> LedgerReport:
        """
        Build the general ledger for a period.

        An invalid period is answered with an empty, flagged report
        without touching the record source.
        """
        correlation_id = correlation_id or create_correlation_id()

        if not period.is_valid:
            if self._audit_logger:
                await self._audit_logger.log_invalid_period(
                    period=period.describe(),
                    correlation_id=correlation_id,
                )
            return build_ledgers([], [], [], period, self._settings)

        snapshot = await self.load_snapshot(company_id, correlation_id)
        report = build_ledgers(
            snapshot.records,
            snapshot.accounts,
            snapshot.categories,
            period,
            settings=self._settings,
            account_key=account_key,
        )

        if self._audit_logger:
            await self._audit_logger.log_ledger_built(
                period=period.describe(),
                ledger_count=len(report.ledgers),
                record_count=len(snapshot.records),
                correlation_id=correlation_id,
                company_id=company_id,
            )

        return report

    async def export_ledger(
        self,
        period: ReportingPeriod,
        company_id: Optional[str] = None,
        account_key: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> list[list[str]]:
        """Ledger report flattened to text rows (header first)."""
        correlation_id = correlation_id or create_correlation_id()
        report = await self.build_ledger(
            period,
            company_id=company_id,
            account_key=account_key,
            correlation_id=correlation_id,
        )
        rows = ledger_rows(report, self._settings)

        if self._audit_logger:
            await self._audit_logger.log_ledger_exported(
                period=period.describe(),
                row_count=len(rows),
                correlation_id=correlation_id,
            )

        return rows

    async def replay_balances(
        self,
        company_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> GlobalBalanceReplay:
        """Combined cash balance after every record of the company."""
        correlation_id = correlation_id or create_correlation_id()
        snapshot = await self.load_snapshot(company_id, correlation_id)
        replay = replay_global_balance(snapshot.records, snapshot.accounts)

        if self._audit_logger:
            await self._audit_logger.log_balance_replayed(
                record_count=len(snapshot.records),
                final_balance=str(replay.final_balance),
                correlation_id=correlation_id,
                company_id=company_id,
            )

        return replay

    async def export_replay(
        self,
        company_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> list[list[str]]:
        """Balance replay flattened to one text row per record."""
        correlation_id = correlation_id or create_correlation_id()
        snapshot = await self.load_snapshot(company_id, correlation_id)
        replay = replay_global_balance(snapshot.records, snapshot.accounts)
        return replay_rows(replay, snapshot.records, self._settings)

    async def reconcile(
        self,
        company_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> ReconciliationResult:
        """Check stored account balances against the full history."""
        correlation_id = correlation_id or create_correlation_id()
        snapshot = await self.load_snapshot(company_id, correlation_id)
        result = reconcile(
            snapshot.records,
            snapshot.accounts,
            snapshot.categories,
            self._settings,
        )

        if self._audit_logger:
            await self._audit_logger.log_reconciliation(
                is_balanced=result.is_balanced,
                total=str(result.replayed_total),
                difference=str(result.difference),
                discrepancy_count=len(result.discrepancies),
                correlation_id=correlation_id,
                company_id=company_id,
            )

        return result

    async def summarize(
        self,
        period: ReportingPeriod,
        company_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> PeriodSummary:
        """Income/expense/transfer totals for a period."""
        snapshot = await self.load_snapshot(company_id, correlation_id)
        return summarize_period(snapshot.records, period)


class RecordIntakeFlow:
    """
    Entry-form side: validate, store and audit one record at a time.

    Rejections and duplicates are audited and re-raised so the form can
    show them.
    """

    def __init__(
        self,
        store: InMemoryRecordSource,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._audit_logger = audit_logger

    async def submit(
        self,
        raw: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> CashMovementRecord:
        """
        Store one record as entered.

        Raises:
            RecordRejectedError: If the record failed intake validation
            DuplicateError: If the record id is already taken
        """
        correlation_id = correlation_id or create_correlation_id()
        raw_id = raw.get("id")
        record_id = str(raw_id) if raw_id is not None else None

        try:
            record = await self._store.ingest(raw)
        except RecordRejectedError as e:
            if self._audit_logger:
                await self._audit_logger.log_record_rejected(
                    record_id=record_id,
                    issues=e.issues,
                    correlation_id=correlation_id,
                )
            raise
        except DuplicateError as e:
            if self._audit_logger:
                await self._audit_logger.log_error(
                    error_type="duplicate_record",
                    error_message=str(e),
                    details={"record_id": record_id},
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_record_accepted(
                record_id=record.id,
                record_type=record.type.value,
                amount=str(record.amount),
                correlation_id=correlation_id,
            )
        return record


def create_app_components(
    record_source: Optional[RecordSourceInterface] = None,
) -> tuple[LedgerReportFlow, RecordSourceInterface, AuditLogger]:
    """
    Factory function to create the application components.

    Args:
        record_source: Record store to report on. Defaults to an empty
                       in-memory store.

    Returns:
        (report_flow, record_source, audit_logger)
    """
    settings = get_settings()
    record_source = record_source or InMemoryRecordSource(settings.ledger)
    audit_logger = AuditLogger(InMemoryAuditStorage())

    report_flow = LedgerReportFlow(
        record_source=record_source,
        audit_logger=audit_logger,
        settings=settings.ledger,
    )

    return report_flow, record_source, audit_logger
