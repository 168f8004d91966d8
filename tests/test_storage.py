"""Tests for the in-memory record source and audit storage."""

import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from ledgerbook.models import AuditEventBuilder, CashAccount
from ledgerbook.services.storage import (
    DuplicateError,
    InMemoryAuditStorage,
    InMemoryRecordSource,
    NotFoundError,
    RecordRejectedError,
)


FIXED_NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def store(accounts, categories, settings):
    source = InMemoryRecordSource(settings, clock=lambda: FIXED_NOW)
    for account in accounts:
        source.add_account(account)
    for category in categories:
        source.add_category(category)
    return source


def _accounts_by_id(store):
    return {a.id: a for a in asyncio.run(store.list_cash_accounts())}


class TestDefaultClock:

    def test_stamp_is_timezone_aware(self, accounts, settings):
        store = InMemoryRecordSource(settings)
        store.add_account(accounts[0])
        record = asyncio.run(store.ingest({
            "id": "r1", "transaction_date": "2024-01-05", "type": "income",
            "amount": "10", "bank_account_id": "cash-1",
        }))
        assert record.created_at.utcoffset() == timedelta(0)


class TestReferenceData:

    def test_current_balance_starts_at_opening(self, store):
        assert _accounts_by_id(store)["bank-1"].current_balance == Decimal("500000")

    def test_duplicate_account(self, store, accounts):
        with pytest.raises(DuplicateError):
            store.add_account(accounts[0])

    def test_duplicate_category(self, store, categories):
        with pytest.raises(DuplicateError):
            store.add_category(categories[0])


class TestIngest:

    def test_stamps_created_at(self, store):
        record = asyncio.run(store.ingest({
            "id": "r1", "transaction_date": "2024-01-05", "type": "income",
            "amount": "10", "bank_account_id": "cash-1",
        }))
        assert record.created_at == FIXED_NOW

    def test_keeps_given_created_at(self, store):
        stamp = datetime(2024, 1, 5, 9, 30)
        record = asyncio.run(store.ingest({
            "id": "r1", "transaction_date": "2024-01-05", "type": "income",
            "amount": "10", "bank_account_id": "cash-1", "created_at": stamp,
        }))
        assert record.created_at == stamp

    def test_transfer_moves_stored_balances(self, store):
        asyncio.run(store.ingest({
            "id": "r1", "transaction_date": "2024-01-05", "type": "transfer",
            "amount": "20000", "fee_amount": "30",
            "from_account_id": "bank-1", "to_account_id": "bank-2",
        }))
        accounts = _accounts_by_id(store)
        assert accounts["bank-1"].current_balance == Decimal("479970")
        assert accounts["bank-2"].current_balance == Decimal("70000")

    def test_unknown_account_leaves_balances_alone(self, store):
        asyncio.run(store.ingest({
            "id": "r1", "transaction_date": "2024-01-05", "type": "income",
            "amount": "10", "bank_account_id": "bank-closed",
        }))
        balances = {k: a.current_balance for k, a in _accounts_by_id(store).items()}
        assert balances == {
            "cash-1": Decimal("50000"),
            "bank-1": Decimal("500000"),
            "bank-2": Decimal("50000"),
        }

    def test_rejects_malformed_date(self, store):
        with pytest.raises(RecordRejectedError) as exc_info:
            asyncio.run(store.ingest({
                "id": "r1", "transaction_date": "not a date", "type": "income",
                "amount": "10",
            }))
        assert exc_info.value.issues
        assert asyncio.run(store.list_records()) == []

    def test_rejects_duplicate_id(self, store):
        raw = {"id": "r1", "transaction_date": "2024-01-05", "type": "income",
               "amount": "10", "bank_account_id": "cash-1"}
        asyncio.run(store.ingest(raw))
        with pytest.raises(DuplicateError):
            asyncio.run(store.ingest(raw))
        assert _accounts_by_id(store)["cash-1"].current_balance == Decimal("50010")


class TestDelete:

    def test_delete_reverses_balance(self, store):
        asyncio.run(store.ingest({
            "id": "r1", "transaction_date": "2024-01-05", "type": "expense",
            "amount": "100", "fee_amount": "1", "bank_account_id": "cash-1",
        }))
        assert _accounts_by_id(store)["cash-1"].current_balance == Decimal("49899")

        assert asyncio.run(store.delete_record("r1")) is True
        assert _accounts_by_id(store)["cash-1"].current_balance == Decimal("50000")
        assert asyncio.run(store.get_record("r1")) is None

    def test_delete_unknown(self, store):
        with pytest.raises(NotFoundError):
            asyncio.run(store.delete_record("missing"))


class TestCompanyFilter:

    def test_lists_filter_by_company(self, settings):
        store = InMemoryRecordSource(settings)
        store.add_account(CashAccount(id="a", name="A", company_id="company-a"))
        store.add_account(CashAccount(id="b", name="B", company_id="company-b"))

        only_a = asyncio.run(store.list_cash_accounts("company-a"))
        everything = asyncio.run(store.list_cash_accounts())

        assert [a.id for a in only_a] == ["a"]
        assert len(everything) == 2


class TestAuditStorage:

    def test_queries(self):
        storage = InMemoryAuditStorage()
        correlation_id = uuid4()
        first = AuditEventBuilder.invalid_period_requested(
            period="2024-02-01..2024-01-01", correlation_id=correlation_id,
        )
        second = AuditEventBuilder.system_error(error_type="X", error_message="boom")
        asyncio.run(storage.append_event(first))
        asyncio.run(storage.append_event(second))

        by_id = asyncio.run(storage.get_events_by_correlation_id(correlation_id))
        recent = asyncio.run(storage.get_recent_events(limit=1))

        assert [e.event_id for e in by_id] == [first.event_id]
        assert [e.event_id for e in recent] == [second.event_id]
