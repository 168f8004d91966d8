"""Headline totals for the records of one period."""

from typing import Iterable

from ledgerbook.models.ledger import PeriodSummary
from ledgerbook.models.records import (
    CashMovementRecord,
    ReportingPeriod,
    TransactionType,
)


def summarize_period(
    records: Iterable[CashMovementRecord],
    period: ReportingPeriod,
) -> PeriodSummary:
    """
    Income, expense (fees included), transfer volume and fees for a period.

    An invalid period summarizes nothing.
    """
    summary = PeriodSummary(period=period)
    if not period.is_valid:
        return summary

    for record in records:
        if not period.contains(record.transaction_date):
            continue
        summary.count += 1
        summary.fees += record.effective_fee
        if record.type == TransactionType.INCOME:
            summary.income += record.amount
        elif record.type == TransactionType.EXPENSE:
            summary.expense += record.amount + record.effective_fee
        else:
            summary.transfer += record.amount

    return summary
