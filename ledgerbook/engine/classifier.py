"""
Account Classifier

Turns one cash-movement record into its ledger postings.

    income    category      CR amount
              cash account  DR amount
    expense   category      DR amount
              cash account  CR amount + fee
              fees          DR fee            (only when fee > 0)
    transfer  from account  CR amount + fee
              to account    DR amount
              fees          DR fee            (only when fee > 0)

The fee leg is a posting of its own, so every record's debits equal its
credits by construction.

Unresolved references never fail classification:
- a missing or unknown category goes to an uncategorized bucket, revenue
  for income and expense for expense (same kind as a categorized record
  of that type would normally have)
- a missing or unknown cash account goes to a single asset bucket for
  unclassified cash
"""

from decimal import Decimal
from typing import Iterable, Optional

import structlog

from ledgerbook.config import LedgerSettings, get_settings
from ledgerbook.models.ledger import LedgerRef, MovementKind, Posting
from ledgerbook.models.records import (
    AccountCategory,
    CashAccount,
    CashMovementRecord,
    CategoryKind,
    PostingSide,
    TransactionType,
)


logger = structlog.get_logger(__name__)

CASH_KEY_PREFIX = "cash:"
CATEGORY_KEY_PREFIX = "category:"

# Buckets without a backing account or category; cash_ledger_key and
# category_ledger_key never produce this prefix.
SYNTHETIC_KEY_PREFIX = "synthetic:"
FEES_KEY = f"{SYNTHETIC_KEY_PREFIX}fees"
UNCATEGORIZED_INCOME_KEY = f"{SYNTHETIC_KEY_PREFIX}uncategorized-income"
UNCATEGORIZED_EXPENSE_KEY = f"{SYNTHETIC_KEY_PREFIX}uncategorized-expense"
UNCLASSIFIED_CASH_KEY = f"{SYNTHETIC_KEY_PREFIX}unclassified-cash"


def cash_ledger_key(account_id: str) -> str:
    return f"{CASH_KEY_PREFIX}{account_id}"


def category_ledger_key(category_code: str) -> str:
    return f"{CATEGORY_KEY_PREFIX}{category_code}"


def record_is_balanced(postings: Iterable[Posting]) -> bool:
    """Double-entry check for the postings of one record."""
    debits = Decimal("0")
    credits = Decimal("0")
    for posting in postings:
        debits += posting.debit
        credits += posting.credit
    return debits == credits


class AccountClassifier:
    """
    Resolves records against a fixed set of cash accounts and categories.

    Build one per request; it holds only lookup tables.
    """

    def __init__(
        self,
        accounts: Iterable[CashAccount],
        categories: Iterable[AccountCategory],
        settings: Optional[LedgerSettings] = None,
    ):
        self._settings = settings or get_settings().ledger
        self._accounts = {account.id: account for account in accounts}
        self._categories = {category.id: category for category in categories}

    # -------------------------------------------------------------------------
    # Ledger resolution
    # -------------------------------------------------------------------------

    def cash_ledger(self, account_id: Optional[str]) -> LedgerRef:
        account = self._accounts.get(account_id) if account_id else None
        if account is None:
            logger.debug("cash_account_unresolved", account_id=account_id)
            return self.unclassified_cash_ledger()
        return LedgerRef(
            key=cash_ledger_key(account.id),
            code=self._settings.cash_ledger_code,
            name=account.name,
            kind=CategoryKind.ASSET,
            is_cash_account=True,
        )

    def unclassified_cash_ledger(self) -> LedgerRef:
        return LedgerRef(
            key=UNCLASSIFIED_CASH_KEY,
            code=self._settings.cash_ledger_code,
            name=self._settings.unclassified_cash_name,
            kind=CategoryKind.ASSET,
            is_cash_account=True,
        )

    def category_ledger(self, record: CashMovementRecord) -> LedgerRef:
        category = (
            self._categories.get(record.category_id)
            if record.category_id
            else None
        )
        if category is not None:
            return LedgerRef(
                key=category_ledger_key(category.code),
                code=category.code,
                name=category.name,
                kind=category.type,
            )

        if record.category_id:
            logger.debug(
                "category_unresolved",
                record_id=record.id,
                category_id=record.category_id,
            )

        if record.type == TransactionType.INCOME:
            return LedgerRef(
                key=UNCATEGORIZED_INCOME_KEY,
                code=self._settings.uncategorized_code,
                name=self._settings.uncategorized_income_name,
                kind=CategoryKind.REVENUE,
            )
        return LedgerRef(
            key=UNCATEGORIZED_EXPENSE_KEY,
            code=self._settings.uncategorized_code,
            name=self._settings.uncategorized_expense_name,
            kind=CategoryKind.EXPENSE,
        )

    def fee_ledger(self) -> LedgerRef:
        return LedgerRef(
            key=FEES_KEY,
            code=self._settings.fee_ledger_code,
            name=self._settings.fee_ledger_name,
            kind=CategoryKind.EXPENSE,
        )

    def account_name(self, account_id: Optional[str]) -> str:
        account = self._accounts.get(account_id) if account_id else None
        return account.name if account else ""

    # -------------------------------------------------------------------------
    # Classification
    # -------------------------------------------------------------------------

    def classify(self, record: CashMovementRecord) -> list[Posting]:
        """All postings generated by one record."""
        if record.type == TransactionType.INCOME:
            return self._classify_income(record)
        if record.type == TransactionType.EXPENSE:
            return self._classify_expense(record)
        return self._classify_transfer(record)

    def _classify_income(self, record: CashMovementRecord) -> list[Posting]:
        return [
            Posting(
                record_id=record.id,
                ledger=self.category_ledger(record),
                side=PostingSide.CREDIT,
                amount=record.amount,
                movement=MovementKind.RECEIPT,
                description=record.description,
            ),
            Posting(
                record_id=record.id,
                ledger=self.cash_ledger(record.bank_account_id),
                side=PostingSide.DEBIT,
                amount=record.amount,
                movement=MovementKind.RECEIPT,
                description=record.description,
            ),
        ]

    def _classify_expense(self, record: CashMovementRecord) -> list[Posting]:
        fee = record.effective_fee
        postings = [
            Posting(
                record_id=record.id,
                ledger=self.category_ledger(record),
                side=PostingSide.DEBIT,
                amount=record.amount,
                movement=MovementKind.PAYMENT,
                description=record.description,
            ),
            Posting(
                record_id=record.id,
                ledger=self.cash_ledger(record.bank_account_id),
                side=PostingSide.CREDIT,
                amount=record.amount + fee,
                movement=MovementKind.PAYMENT,
                description=record.description,
            ),
        ]
        if fee > 0:
            postings.append(Posting(
                record_id=record.id,
                ledger=self.fee_ledger(),
                side=PostingSide.DEBIT,
                amount=fee,
                movement=MovementKind.PAYMENT,
                description=f"{record.description} fee".strip(),
                is_fee_leg=True,
            ))
        return postings

    def _classify_transfer(self, record: CashMovementRecord) -> list[Posting]:
        fee = record.effective_fee
        from_name = self.account_name(record.from_account_id)
        to_name = self.account_name(record.to_account_id)
        postings = [
            Posting(
                record_id=record.id,
                ledger=self.cash_ledger(record.from_account_id),
                side=PostingSide.CREDIT,
                amount=record.amount + fee,
                movement=MovementKind.TRANSFER,
                description=record.description or f"Transfer to {to_name}".strip(),
            ),
            Posting(
                record_id=record.id,
                ledger=self.cash_ledger(record.to_account_id),
                side=PostingSide.DEBIT,
                amount=record.amount,
                movement=MovementKind.TRANSFER,
                description=record.description or f"Transfer from {from_name}".strip(),
            ),
        ]
        if fee > 0:
            postings.append(Posting(
                record_id=record.id,
                ledger=self.fee_ledger(),
                side=PostingSide.DEBIT,
                amount=fee,
                movement=MovementKind.TRANSFER,
                description="Transfer fee",
                is_fee_leg=True,
            ))
        return postings
