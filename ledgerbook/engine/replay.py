"""
Global Balance Replay Engine

Replays the whole record history (no period bounds) and reports the
combined balance of all cash accounts after every record:

    start     = sum of opening balances
    income    total += amount
    expense   total -= amount + fee
    transfer  total -= fee

A transfer moves money between two cash accounts, so only its fee leaves
the combined pool.

The same history replayed per account gives what each account's stored
balance ought to be. reconcile() compares the two, which catches records
that were edited or deleted without the matching balance adjustment.
"""

from decimal import Decimal
from typing import Iterable, Optional

import structlog

from ledgerbook.config import LedgerSettings, get_settings
from ledgerbook.engine.classifier import AccountClassifier, cash_ledger_key
from ledgerbook.engine.ordering import chronological
from ledgerbook.models.ledger import (
    AccountDiscrepancy,
    BalanceSnapshot,
    GlobalBalanceReplay,
    ReconciliationResult,
)
from ledgerbook.models.records import (
    AccountCategory,
    CashAccount,
    CashMovementRecord,
    TransactionType,
)


logger = structlog.get_logger(__name__)


def combined_delta(record: CashMovementRecord) -> Decimal:
    """Change in the combined cash balance caused by one record."""
    if record.type == TransactionType.INCOME:
        return record.amount
    if record.type == TransactionType.EXPENSE:
        return -(record.amount + record.effective_fee)
    return -record.effective_fee


def replay_global_balance(
    records: Iterable[CashMovementRecord],
    accounts: Iterable[CashAccount],
) -> GlobalBalanceReplay:
    """
    Combined cash balance after each record, in chronological order.

    The result's `balances` maps record id to the balance right after it.
    """
    starting = sum((account.opening_balance for account in accounts), Decimal("0"))

    total = starting
    snapshots = []
    for item in chronological(records):
        record = item.record
        delta = combined_delta(record)
        total += delta
        snapshots.append(BalanceSnapshot(
            record_id=record.id,
            transaction_date=record.transaction_date,
            type=record.type,
            sequence=item.sequence,
            delta=delta,
            balance_after=total,
        ))

    return GlobalBalanceReplay(starting_balance=starting, snapshots=snapshots)


def replay_account_balances(
    records: Iterable[CashMovementRecord],
    accounts: Iterable[CashAccount],
    categories: Iterable[AccountCategory] = (),
    settings: Optional[LedgerSettings] = None,
) -> dict[str, Decimal]:
    """
    Expected current balance per cash ledger key after the full history.

    Records pointing at unknown accounts show up under the unclassified
    cash key.
    """
    accounts = list(accounts)
    classifier = AccountClassifier(accounts, categories, settings)

    balances = {
        cash_ledger_key(account.id): account.opening_balance
        for account in accounts
    }
    for item in chronological(records):
        for posting in classifier.classify(item.record):
            if not posting.ledger.is_cash_account:
                continue
            key = posting.ledger.key
            balances[key] = balances.get(key, Decimal("0")) + posting.signed_amount
    return balances


def reconcile(
    records: Iterable[CashMovementRecord],
    accounts: Iterable[CashAccount],
    categories: Iterable[AccountCategory] = (),
    settings: Optional[LedgerSettings] = None,
) -> ReconciliationResult:
    """
    Compare replayed history with the balances the record store keeps.

    Accounts without a stored current balance are compared using their
    opening balance.
    """
    settings = settings or get_settings().ledger
    records = list(records)
    accounts = list(accounts)

    replay = replay_global_balance(records, accounts)
    stored_total = sum(
        (account.stored_balance for account in accounts),
        Decimal("0"),
    )

    expected = replay_account_balances(records, accounts, categories, settings)
    discrepancies = []
    for account in accounts:
        key = cash_ledger_key(account.id)
        replayed = expected.pop(key, account.opening_balance)
        if replayed != account.stored_balance:
            discrepancies.append(AccountDiscrepancy(
                ledger_key=key,
                account_name=account.name,
                replayed_balance=replayed,
                stored_balance=account.stored_balance,
            ))

    # Anything left belongs to the unclassified cash bucket
    for key, replayed in sorted(expected.items()):
        if replayed != 0:
            discrepancies.append(AccountDiscrepancy(
                ledger_key=key,
                account_name=settings.unclassified_cash_name,
                replayed_balance=replayed,
                stored_balance=Decimal("0"),
            ))

    result = ReconciliationResult(
        replayed_total=replay.final_balance,
        stored_total=stored_total,
        discrepancies=discrepancies,
    )

    if not result.is_balanced:
        logger.warning(
            "reconciliation_mismatch",
            replayed_total=str(result.replayed_total),
            stored_total=str(result.stored_total),
            discrepancy_count=len(discrepancies),
        )

    return result
