"""
Input Data Models for Ledgerbook

These models describe what the record store hands to the ledger engine:
cash-movement records, cash accounts and account categories.

DESIGN DECISION: Input models are frozen. The engine reads them, never
writes them, and a frozen model makes that a runtime guarantee rather
than a convention.

A record without a valid date cannot be constructed. Undated records are
rejected at intake, so the engine never has to decide where they sort.
"""

from calendar import monthrange
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Kind of cash movement."""
    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"


class PostingSide(str, Enum):
    """Side of the ledger a posting lands on."""
    DEBIT = "debit"
    CREDIT = "credit"


class CategoryKind(str, Enum):
    """
    Account category type, tagged with its normal balance side.

    Asset, cost and expense accounts grow on the debit side.
    Liability, equity and revenue accounts grow on the credit side.
    """
    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    COST = "cost"
    EXPENSE = "expense"

    @property
    def normal_side(self) -> PostingSide:
        if self in (CategoryKind.ASSET, CategoryKind.COST, CategoryKind.EXPENSE):
            return PostingSide.DEBIT
        return PostingSide.CREDIT

    def balance_change(self, debit: Decimal, credit: Decimal) -> Decimal:
        """Change in balance for a debit/credit pair on a ledger of this kind."""
        if self.normal_side == PostingSide.DEBIT:
            return debit - credit
        return credit - debit


class CashAccountType(str, Enum):
    """
    Kinds of cash account.

    All of them are asset-normal in the ledger, credit cards included.
    """
    CASH = "cash"
    BANK = "bank"
    PETTY_CASH = "petty_cash"
    CREDIT_CARD = "credit_card"


# =============================================================================
# REFERENCE DATA
# =============================================================================

class AccountCategory(BaseModel):
    """An entry in the chart of accounts (e.g. Sales, Rent)."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=200)
    type: CategoryKind
    company_id: Optional[str] = None


class CashAccount(BaseModel):
    """
    A cash, bank, petty cash or credit card account.

    current_balance is the value the record store maintains incrementally
    as records are created. The engine never trusts it for reports; it is
    only read by reconciliation.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    account_type: CashAccountType = CashAccountType.BANK
    opening_balance: Decimal = Field(
        default=Decimal("0"),
        description="Balance when the account was created"
    )
    current_balance: Optional[Decimal] = Field(
        default=None,
        description="Balance as maintained by the record store"
    )
    company_id: Optional[str] = None

    @property
    def stored_balance(self) -> Decimal:
        """Stored balance, or the opening balance if the store never set one."""
        if self.current_balance is None:
            return self.opening_balance
        return self.current_balance


# =============================================================================
# CASH MOVEMENT RECORD
# =============================================================================

class CashMovementRecord(BaseModel):
    """
    One income, expense or transfer as entered by the user.

    Income and expense records point at one cash account through
    bank_account_id and (optionally) at a category. Transfers use
    from_account_id/to_account_id and have no category.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: str = Field(..., min_length=1)
    transaction_date: date = Field(
        ...,
        description="Calendar day of the movement (required)"
    )
    type: TransactionType
    amount: Decimal = Field(..., ge=0)
    fee_amount: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Bank/handling fee, meaningful for expense and transfer"
    )
    category_id: Optional[str] = None
    bank_account_id: Optional[str] = None
    from_account_id: Optional[str] = None
    to_account_id: Optional[str] = None
    description: str = Field(default="", max_length=500)
    created_at: Optional[datetime] = Field(
        default=None,
        description="Creation timestamp, only used to order same-day records"
    )
    company_id: Optional[str] = None

    @property
    def effective_fee(self) -> Decimal:
        """Fee that actually leaves cash. Income never carries a fee."""
        if self.type == TransactionType.INCOME or not self.fee_amount:
            return Decimal("0")
        return self.fee_amount

    @property
    def has_fee(self) -> bool:
        return self.effective_fee > 0


# =============================================================================
# REPORTING PERIOD
# =============================================================================

class ReportingPeriod(BaseModel):
    """
    Inclusive date range for a ledger report.

    start > end is representable on purpose: the builder answers it with
    an explicit invalid-period report instead of an exception.
    """
    model_config = ConfigDict(frozen=True)

    start: date
    end: date

    @property
    def is_valid(self) -> bool:
        return self.start <= self.end

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    @classmethod
    def month_of(cls, day: date) -> "ReportingPeriod":
        """The calendar month containing day."""
        last_day = monthrange(day.year, day.month)[1]
        return cls(
            start=day.replace(day=1),
            end=day.replace(day=last_day),
        )

    def describe(self) -> str:
        return f"{self.start.isoformat()} to {self.end.isoformat()}"
