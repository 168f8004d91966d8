"""
Ledger Account Builder

Builds one account book per cash account and per category for a
reporting period.

For every posting of every record:
- dated before the period: folded into the ledger's opening balance
- dated inside the period: becomes a visible entry
- dated after the period: ignored

Entries are sorted by (transaction_date, sequence), then walked once from
the opening balance using the ledger's normal-side sign rule. The last
running balance is the closing balance.
"""

from decimal import Decimal
from typing import Iterable, Optional

import structlog

from ledgerbook.config import LedgerSettings, get_settings
from ledgerbook.engine.classifier import AccountClassifier, cash_ledger_key
from ledgerbook.engine.ordering import assign_sequence
from ledgerbook.models.ledger import (
    LedgerAccount,
    LedgerEntry,
    LedgerRef,
    LedgerReport,
    Posting,
)
from ledgerbook.models.records import (
    AccountCategory,
    CashAccount,
    CashMovementRecord,
    CategoryKind,
    ReportingPeriod,
)


logger = structlog.get_logger(__name__)


def apply_sign(kind: CategoryKind, debit: Decimal, credit: Decimal) -> Decimal:
    """Balance change for a debit/credit pair on a ledger of this kind."""
    return kind.balance_change(debit, credit)


def _display_order(ledger: LedgerAccount) -> tuple:
    return (not ledger.is_cash_account, ledger.code, ledger.name, ledger.key)


class LedgerAccountBuilder:
    """
    Accumulates postings into ledgers for one period.

    Holds state for a single build; create a new one per report.
    """

    def __init__(
        self,
        period: ReportingPeriod,
        classifier: AccountClassifier,
        accounts: Iterable[CashAccount] = (),
    ):
        self._period = period
        self._classifier = classifier
        self._openings: dict[str, Decimal] = {}
        self._refs: dict[str, LedgerRef] = {}
        self._pending: dict[str, list[LedgerEntry]] = {}

        # Every cash account has a ledger, with or without records
        for account in accounts:
            self._touch(classifier.cash_ledger(account.id))
            self._openings[cash_ledger_key(account.id)] = account.opening_balance

    def _touch(self, ref: LedgerRef) -> None:
        if ref.key not in self._refs:
            self._refs[ref.key] = ref
            self._openings.setdefault(ref.key, Decimal("0"))
            self._pending[ref.key] = []

    def add(self, record: CashMovementRecord, sequence: int) -> None:
        """Route every posting of one record into its ledger."""
        day = record.transaction_date
        if day > self._period.end:
            return

        for posting in self._classifier.classify(record):
            self._touch(posting.ledger)
            if day < self._period.start:
                self._openings[posting.ledger.key] += posting.signed_amount
            else:
                self._pending[posting.ledger.key].append(
                    self._entry(record, posting, sequence)
                )

    @staticmethod
    def _entry(
        record: CashMovementRecord,
        posting: Posting,
        sequence: int,
    ) -> LedgerEntry:
        return LedgerEntry(
            transaction_date=record.transaction_date,
            description=posting.description,
            movement=posting.movement,
            debit=posting.debit,
            credit=posting.credit,
            record_id=record.id,
            sequence=sequence,
        )

    def finish(self) -> list[LedgerAccount]:
        """Resolve running balances and totals for every touched ledger."""
        ledgers = []
        for key, ref in self._refs.items():
            opening = self._openings[key]
            entries = sorted(
                self._pending[key],
                key=lambda entry: (entry.transaction_date, entry.sequence),
            )

            running = opening
            total_debit = Decimal("0")
            total_credit = Decimal("0")
            for entry in entries:
                running += apply_sign(ref.kind, entry.debit, entry.credit)
                entry.balance = running
                total_debit += entry.debit
                total_credit += entry.credit

            ledgers.append(LedgerAccount(
                key=key,
                code=ref.code,
                name=ref.name,
                kind=ref.kind,
                is_cash_account=ref.is_cash_account,
                opening_balance=opening,
                entries=entries,
                closing_balance=running,
                total_debit=total_debit,
                total_credit=total_credit,
            ))

        return sorted(ledgers, key=_display_order)


def build_ledgers(
    records: Iterable[CashMovementRecord],
    accounts: Iterable[CashAccount],
    categories: Iterable[AccountCategory],
    period: ReportingPeriod,
    settings: Optional[LedgerSettings] = None,
    account_key: Optional[str] = None,
) -> LedgerReport:
    """
    Build the general ledger for a period.

    Args:
        records: Full record history, in any order
        accounts: Cash accounts with their opening balances
        categories: Chart of accounts
        period: Inclusive reporting period
        settings: Ledger settings (defaults to the configured ones)
        account_key: Only return the ledger with this key

    Returns:
        LedgerReport; period_valid is False (and ledgers empty) when the
        period starts after it ends
    """
    settings = settings or get_settings().ledger

    if not period.is_valid:
        logger.warning("invalid_period", start=str(period.start), end=str(period.end))
        return LedgerReport(
            period=period,
            period_valid=False,
            message=f"Period start {period.start} is after end {period.end}",
        )

    accounts = list(accounts)
    classifier = AccountClassifier(accounts, categories, settings)
    builder = LedgerAccountBuilder(period, classifier, accounts)

    sequenced = assign_sequence(records)
    for item in sequenced:
        builder.add(item.record, item.sequence)

    ledgers = builder.finish()
    if settings.hide_empty_ledgers:
        ledgers = [ledger for ledger in ledgers if not ledger.is_empty]
    if account_key is not None:
        ledgers = [ledger for ledger in ledgers if ledger.key == account_key]

    logger.debug(
        "ledgers_built",
        period=period.describe(),
        record_count=len(sequenced),
        ledger_count=len(ledgers),
    )

    return LedgerReport(period=period, ledgers=ledgers)
