"""Shared fixtures: a small chart of accounts and a record factory."""

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from ledgerbook.config import LedgerSettings
from ledgerbook.models import (
    AccountCategory,
    CashAccount,
    CashAccountType,
    CashMovementRecord,
    CategoryKind,
    ReportingPeriod,
)


@pytest.fixture
def settings():
    return LedgerSettings()


@pytest.fixture
def accounts():
    return [
        CashAccount(
            id="cash-1",
            name="Company cash",
            account_type=CashAccountType.CASH,
            opening_balance=Decimal("50000"),
        ),
        CashAccount(
            id="bank-1",
            name="Operating account",
            account_type=CashAccountType.BANK,
            opening_balance=Decimal("500000"),
        ),
        CashAccount(
            id="bank-2",
            name="Savings account",
            account_type=CashAccountType.BANK,
            opening_balance=Decimal("50000"),
        ),
    ]


@pytest.fixture
def categories():
    return [
        AccountCategory(id="cat-sales", code="4101", name="Sales", type=CategoryKind.REVENUE),
        AccountCategory(id="cat-rent", code="6100", name="Rent", type=CategoryKind.EXPENSE),
        AccountCategory(id="cat-supplies", code="6200", name="Supplies", type=CategoryKind.EXPENSE),
    ]


@pytest.fixture
def january():
    return ReportingPeriod(start=date(2024, 1, 1), end=date(2024, 1, 31))


@pytest.fixture
def make_record():
    """Factory for records; created_at follows call order unless given."""
    counter = {"n": 0}
    base = datetime(2024, 1, 1, 9, 0, 0)

    def _make(record_id, day, type, amount, **fields):
        counter["n"] += 1
        fields.setdefault("created_at", base + timedelta(minutes=counter["n"]))
        return CashMovementRecord(
            id=record_id,
            transaction_date=day,
            type=type,
            amount=Decimal(str(amount)),
            **fields,
        )

    return _make
