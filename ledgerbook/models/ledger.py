"""
Derived Ledger Models

Everything in this module is produced by the engine and thrown away after
use. Nothing here is persisted; a report is rebuilt from the record set
on every request.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ledgerbook.models.records import (
    CategoryKind,
    PostingSide,
    ReportingPeriod,
    TransactionType,
)


class MovementKind(str, Enum):
    """Label shown on a ledger line."""
    RECEIPT = "receipt"
    PAYMENT = "payment"
    TRANSFER = "transfer"


def type_label(kind: CategoryKind, is_cash_account: bool) -> str:
    """Type column text for a ledger."""
    if is_cash_account:
        return "cash account"
    return kind.value


class LedgerRef(BaseModel):
    """Identity of one ledger bucket (a cash account or a category)."""
    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Stable bucket key, e.g. 'cash:bank-1'")
    code: str
    name: str
    kind: CategoryKind
    is_cash_account: bool = False

    @property
    def type_label(self) -> str:
        return type_label(self.kind, self.is_cash_account)


class Posting(BaseModel):
    """A single debit or credit applied to one ledger by one record."""
    model_config = ConfigDict(frozen=True)

    record_id: str
    ledger: LedgerRef
    side: PostingSide
    amount: Decimal = Field(..., ge=0)
    movement: MovementKind
    description: str = ""
    is_fee_leg: bool = Field(
        default=False,
        description="Auxiliary posting generated for a fee"
    )

    @property
    def debit(self) -> Decimal:
        return self.amount if self.side == PostingSide.DEBIT else Decimal("0")

    @property
    def credit(self) -> Decimal:
        return self.amount if self.side == PostingSide.CREDIT else Decimal("0")

    @property
    def signed_amount(self) -> Decimal:
        """Effect on the ledger balance under the ledger's normal side."""
        return self.ledger.kind.balance_change(self.debit, self.credit)


class LedgerEntry(BaseModel):
    """One visible line in a ledger."""

    transaction_date: date
    description: str
    movement: MovementKind
    debit: Decimal = Decimal("0")
    credit: Decimal = Decimal("0")
    balance: Decimal = Field(
        default=Decimal("0"),
        description="Running balance immediately after this entry"
    )
    record_id: str
    sequence: int = Field(
        ...,
        ge=0,
        description="Ingestion sequence, breaks same-day ties"
    )


class LedgerAccount(BaseModel):
    """One account book for the requested period."""

    key: str
    code: str
    name: str
    kind: CategoryKind
    is_cash_account: bool = False
    opening_balance: Decimal = Decimal("0")
    entries: list[LedgerEntry] = Field(default_factory=list)
    closing_balance: Decimal = Decimal("0")
    total_debit: Decimal = Decimal("0")
    total_credit: Decimal = Decimal("0")

    @property
    def type_label(self) -> str:
        return type_label(self.kind, self.is_cash_account)

    @property
    def is_empty(self) -> bool:
        return not self.entries and self.opening_balance == 0


class LedgerReport(BaseModel):
    """
    Result of building ledgers for a period.

    An invalid period (start after end) yields period_valid=False and no
    ledgers, so a report screen always has something to render.
    """

    period: ReportingPeriod
    period_valid: bool = True
    message: Optional[str] = None
    ledgers: list[LedgerAccount] = Field(default_factory=list)

    def get(self, key: str) -> Optional[LedgerAccount]:
        for ledger in self.ledgers:
            if ledger.key == key:
                return ledger
        return None

    def by_code(self, code: str) -> list[LedgerAccount]:
        return [ledger for ledger in self.ledgers if ledger.code == code]


class BalanceSnapshot(BaseModel):
    """Combined cash balance right after one record."""
    model_config = ConfigDict(frozen=True)

    record_id: str
    transaction_date: date
    type: TransactionType
    sequence: int
    delta: Decimal
    balance_after: Decimal


class GlobalBalanceReplay(BaseModel):
    """Combined balance across all cash accounts, after every record."""

    starting_balance: Decimal = Decimal("0")
    snapshots: list[BalanceSnapshot] = Field(default_factory=list)

    @property
    def final_balance(self) -> Decimal:
        if not self.snapshots:
            return self.starting_balance
        return self.snapshots[-1].balance_after

    @property
    def balances(self) -> dict[str, Decimal]:
        """Record id -> combined balance immediately after that record."""
        return {snap.record_id: snap.balance_after for snap in self.snapshots}

    def balance_after(self, record_id: str) -> Optional[Decimal]:
        return self.balances.get(record_id)


class AccountDiscrepancy(BaseModel):
    """A cash account whose stored balance disagrees with the replay."""

    ledger_key: str
    account_name: str
    replayed_balance: Decimal
    stored_balance: Decimal

    @property
    def difference(self) -> Decimal:
        return self.stored_balance - self.replayed_balance


class ReconciliationResult(BaseModel):
    """Replayed history vs. balances the record store maintained."""

    replayed_total: Decimal
    stored_total: Decimal
    discrepancies: list[AccountDiscrepancy] = Field(default_factory=list)

    @property
    def difference(self) -> Decimal:
        return self.stored_total - self.replayed_total

    @property
    def is_balanced(self) -> bool:
        return self.difference == 0 and not self.discrepancies


class PeriodSummary(BaseModel):
    """Headline totals for a period (the transaction list's summary cards)."""

    period: ReportingPeriod
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")
    transfer: Decimal = Decimal("0")
    fees: Decimal = Decimal("0")
    count: int = 0

    @property
    def net(self) -> Decimal:
        return self.income - self.expense
