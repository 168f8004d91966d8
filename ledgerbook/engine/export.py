"""
Tabular Export Rows

Flattens ledger reports and balance replays into rows of text cells.
The file format (CSV, spreadsheet, print) belongs to whoever writes the
rows out; this module only guarantees every field fits in a flat cell.

Ledger layout, per ledger:
    opening row    code, name, "", "Opening balance", type, "", "", opening
    entry rows     "", "", date, description, type, debit, credit, balance
    closing row    "", "", "", "Closing balance", "", total DR, total CR, closing
    blank row
"""

from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Iterable, Optional

from ledgerbook.config import LedgerSettings, get_settings
from ledgerbook.models.ledger import GlobalBalanceReplay, LedgerReport
from ledgerbook.models.records import CashMovementRecord


LEDGER_HEADERS = [
    "code",
    "name",
    "date",
    "description",
    "type",
    "debit",
    "credit",
    "balance",
]

REPLAY_HEADERS = [
    "record_id",
    "date",
    "type",
    "amount",
    "fee",
    "description",
    "balance_after",
]


def format_amount(value: Decimal, places: int = 2) -> str:
    """Fixed-point text for an amount, e.g. Decimal('1234.5') -> '1234.50'."""
    quantum = Decimal(1).scaleb(-places)
    with localcontext() as ctx:
        # Amounts are unbounded; widen precision to fit every quantized digit
        ctx.prec = max(ctx.prec, value.adjusted() + places + 2)
        return str(value.quantize(quantum, rounding=ROUND_HALF_UP))


def _amount_or_blank(value: Decimal, places: int) -> str:
    return format_amount(value, places) if value else ""


def ledger_rows(
    report: LedgerReport,
    settings: Optional[LedgerSettings] = None,
    include_header: bool = True,
) -> list[list[str]]:
    """Rows for a ledger report. An invalid period exports only the header."""
    settings = settings or get_settings().ledger
    places = settings.amount_decimal_places

    rows = [list(LEDGER_HEADERS)] if include_header else []
    for ledger in report.ledgers:
        rows.append([
            ledger.code, ledger.name, "", "Opening balance", ledger.type_label,
            "", "",
            format_amount(ledger.opening_balance, places),
        ])
        for entry in ledger.entries:
            rows.append([
                "",
                "",
                entry.transaction_date.isoformat(),
                entry.description,
                entry.movement.value,
                _amount_or_blank(entry.debit, places),
                _amount_or_blank(entry.credit, places),
                format_amount(entry.balance, places),
            ])
        rows.append([
            "", "", "", "Closing balance", "",
            format_amount(ledger.total_debit, places),
            format_amount(ledger.total_credit, places),
            format_amount(ledger.closing_balance, places),
        ])
        rows.append([""] * len(LEDGER_HEADERS))
    return rows


def replay_rows(
    replay: GlobalBalanceReplay,
    records: Iterable[CashMovementRecord],
    settings: Optional[LedgerSettings] = None,
    include_header: bool = True,
) -> list[list[str]]:
    """One row per record, in replay order, ending with its combined balance."""
    settings = settings or get_settings().ledger
    places = settings.amount_decimal_places
    by_id = {record.id: record for record in records}

    rows = [list(REPLAY_HEADERS)] if include_header else []
    for snap in replay.snapshots:
        record = by_id.get(snap.record_id)
        rows.append([
            snap.record_id,
            snap.transaction_date.isoformat(),
            snap.type.value,
            format_amount(record.amount, places) if record else "",
            _amount_or_blank(record.effective_fee, places) if record else "",
            record.description if record else "",
            format_amount(snap.balance_after, places),
        ])
    return rows
