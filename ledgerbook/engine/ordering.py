"""
Record Ordering

Every record gets an ingestion sequence number, and all chronological
walks sort on (transaction_date, sequence). The sequence depends only on
the record set, never on the order the records were handed in:

    created_at ascending (records without one sort after those with one),
    then record id.

Aware timestamps are compared in UTC; naive timestamps are taken as UTC.
"""

from datetime import datetime, timezone
from typing import Iterable, NamedTuple

from ledgerbook.models.records import CashMovementRecord


class SequencedRecord(NamedTuple):
    sequence: int
    record: CashMovementRecord

    @property
    def sort_key(self) -> tuple:
        return (self.record.transaction_date, self.sequence)


def _creation_key(record: CashMovementRecord) -> tuple:
    created = record.created_at
    if created is None:
        return (1, datetime.min, record.id)
    if created.tzinfo is not None:
        created = created.astimezone(timezone.utc).replace(tzinfo=None)
    return (0, created, record.id)


def assign_sequence(records: Iterable[CashMovementRecord]) -> list[SequencedRecord]:
    """Number records in creation order. Output is in sequence order."""
    ordered = sorted(records, key=_creation_key)
    return [SequencedRecord(index, record) for index, record in enumerate(ordered)]


def chronological(records: Iterable[CashMovementRecord]) -> list[SequencedRecord]:
    """Records sorted by (transaction_date, sequence)."""
    return sorted(assign_sequence(records), key=lambda item: item.sort_key)
