"""Tests for the account classifier."""

from datetime import date
from decimal import Decimal

import pytest

from ledgerbook.engine import (
    FEES_KEY,
    UNCATEGORIZED_EXPENSE_KEY,
    UNCATEGORIZED_INCOME_KEY,
    UNCLASSIFIED_CASH_KEY,
    AccountClassifier,
    apply_sign,
    cash_ledger_key,
    category_ledger_key,
    record_is_balanced,
)
from ledgerbook.models import CategoryKind, MovementKind, PostingSide


DAY = date(2024, 1, 15)


@pytest.fixture
def classifier(accounts, categories, settings):
    return AccountClassifier(accounts, categories, settings)


def _by_key(postings):
    return {posting.ledger.key: posting for posting in postings}


class TestIncome:

    def test_income_postings(self, classifier, make_record):
        """Category is credited, cash account debited."""
        record = make_record(
            "tx-1", DAY, "income", 80000,
            category_id="cat-sales", bank_account_id="cash-1",
        )
        postings = _by_key(classifier.classify(record))

        assert set(postings) == {"category:4101", "cash:cash-1"}
        assert postings["category:4101"].side == PostingSide.CREDIT
        assert postings["category:4101"].amount == Decimal("80000")
        assert postings["cash:cash-1"].side == PostingSide.DEBIT
        assert postings["cash:cash-1"].movement == MovementKind.RECEIPT

    def test_income_fee_is_not_posted(self, classifier, make_record):
        record = make_record(
            "tx-1", DAY, "income", 100,
            fee_amount="5", category_id="cat-sales", bank_account_id="cash-1",
        )
        postings = classifier.classify(record)
        assert len(postings) == 2
        assert FEES_KEY not in _by_key(postings)

    def test_both_ledgers_increase(self, classifier, make_record):
        """Income raises cash and revenue at the same time."""
        record = make_record(
            "tx-1", DAY, "income", 500,
            category_id="cat-sales", bank_account_id="cash-1",
        )
        for posting in classifier.classify(record):
            assert posting.signed_amount == Decimal("500")


class TestExpense:

    def test_expense_with_fee(self, classifier, make_record):
        """Cash is credited amount + fee and the fee gets its own leg."""
        record = make_record(
            "tx-1", DAY, "expense", 25000,
            fee_amount="15", category_id="cat-rent", bank_account_id="bank-1",
            description="January rent",
        )
        postings = _by_key(classifier.classify(record))

        assert postings["category:6100"].side == PostingSide.DEBIT
        assert postings["category:6100"].amount == Decimal("25000")
        assert postings["cash:bank-1"].side == PostingSide.CREDIT
        assert postings["cash:bank-1"].amount == Decimal("25015")

        fee = postings[FEES_KEY]
        assert fee.is_fee_leg is True
        assert fee.side == PostingSide.DEBIT
        assert fee.amount == Decimal("15")
        assert fee.ledger.code == "6900"
        assert fee.ledger.kind == CategoryKind.EXPENSE
        assert fee.description == "January rent fee"

    def test_expense_without_fee_has_two_legs(self, classifier, make_record):
        record = make_record(
            "tx-1", DAY, "expense", 300,
            category_id="cat-supplies", bank_account_id="cash-1",
        )
        assert len(classifier.classify(record)) == 2

    def test_zero_fee_has_no_fee_leg(self, classifier, make_record):
        record = make_record(
            "tx-1", DAY, "expense", 300,
            fee_amount="0", category_id="cat-supplies", bank_account_id="cash-1",
        )
        assert FEES_KEY not in _by_key(classifier.classify(record))


class TestTransfer:

    def test_transfer_with_fee(self, classifier, make_record):
        record = make_record(
            "tx-1", DAY, "transfer", 20000,
            fee_amount="30", from_account_id="bank-1", to_account_id="bank-2",
        )
        postings = _by_key(classifier.classify(record))

        assert postings["cash:bank-1"].side == PostingSide.CREDIT
        assert postings["cash:bank-1"].amount == Decimal("20030")
        assert postings["cash:bank-2"].side == PostingSide.DEBIT
        assert postings["cash:bank-2"].amount == Decimal("20000")
        assert postings[FEES_KEY].amount == Decimal("30")
        assert postings[FEES_KEY].movement == MovementKind.TRANSFER

    def test_transfer_descriptions_name_the_other_account(self, classifier, make_record):
        record = make_record(
            "tx-1", DAY, "transfer", 20000,
            from_account_id="bank-1", to_account_id="bank-2",
        )
        postings = _by_key(classifier.classify(record))
        assert postings["cash:bank-1"].description == "Transfer to Savings account"
        assert postings["cash:bank-2"].description == "Transfer from Operating account"

    def test_transfer_ignores_category(self, classifier, make_record):
        record = make_record(
            "tx-1", DAY, "transfer", 100,
            category_id="cat-rent", from_account_id="bank-1", to_account_id="bank-2",
        )
        keys = set(_by_key(classifier.classify(record)))
        assert keys == {"cash:bank-1", "cash:bank-2"}


class TestUnresolvedReferences:

    def test_uncategorized_income_is_revenue(self, classifier, make_record):
        """Uncategorized income is credit-normal like categorized income."""
        record = make_record("tx-1", DAY, "income", 100, bank_account_id="cash-1")
        ledger = _by_key(classifier.classify(record))[UNCATEGORIZED_INCOME_KEY].ledger
        assert ledger.kind == CategoryKind.REVENUE
        assert ledger.name == "Uncategorized income"

    def test_uncategorized_expense_is_expense(self, classifier, make_record):
        record = make_record("tx-1", DAY, "expense", 100, bank_account_id="cash-1")
        ledger = _by_key(classifier.classify(record))[UNCATEGORIZED_EXPENSE_KEY].ledger
        assert ledger.kind == CategoryKind.EXPENSE

    def test_unknown_category_is_uncategorized(self, classifier, make_record):
        record = make_record(
            "tx-1", DAY, "expense", 100,
            category_id="cat-deleted", bank_account_id="cash-1",
        )
        assert UNCATEGORIZED_EXPENSE_KEY in _by_key(classifier.classify(record))

    def test_unknown_cash_account_is_unclassified(self, classifier, make_record):
        record = make_record(
            "tx-1", DAY, "income", 100,
            category_id="cat-sales", bank_account_id="bank-closed",
        )
        ledger = _by_key(classifier.classify(record))[UNCLASSIFIED_CASH_KEY].ledger
        assert ledger.is_cash_account is True
        assert ledger.kind == CategoryKind.ASSET

    @pytest.mark.parametrize("key", [
        FEES_KEY,
        UNCATEGORIZED_INCOME_KEY,
        UNCATEGORIZED_EXPENSE_KEY,
        UNCLASSIFIED_CASH_KEY,
    ])
    def test_synthetic_keys_never_match_real_keys(self, key):
        name = key.split(":", 1)[1]
        assert key != cash_ledger_key(name)
        assert key != category_ledger_key(name)
        assert not key.startswith(("cash:", "category:"))

    def test_missing_transfer_leg_is_unclassified(self, classifier, make_record):
        record = make_record(
            "tx-1", DAY, "transfer", 100, from_account_id="bank-1",
        )
        postings = _by_key(classifier.classify(record))
        assert postings[UNCLASSIFIED_CASH_KEY].side == PostingSide.DEBIT


class TestDoubleEntry:
    """Every record's debits equal its credits, fee leg included."""

    @pytest.mark.parametrize("type,fields", [
        ("income", {"category_id": "cat-sales", "bank_account_id": "cash-1"}),
        ("income", {"fee_amount": "9"}),
        ("expense", {"category_id": "cat-rent", "bank_account_id": "bank-1"}),
        ("expense", {"fee_amount": "15", "bank_account_id": "bank-1"}),
        ("expense", {"fee_amount": "15", "category_id": "cat-gone"}),
        ("transfer", {"from_account_id": "bank-1", "to_account_id": "bank-2"}),
        ("transfer", {"fee_amount": "30", "from_account_id": "bank-1", "to_account_id": "bank-2"}),
        ("transfer", {"fee_amount": "30"}),
    ])
    def test_record_balances(self, classifier, make_record, type, fields):
        record = make_record("tx-1", DAY, type, "1234.56", **fields)
        postings = classifier.classify(record)

        assert record_is_balanced(postings)
        for posting in postings:
            assert posting.signed_amount == apply_sign(
                posting.ledger.kind, posting.debit, posting.credit
            )
        debits = sum(p.debit for p in postings)
        credits = sum(p.credit for p in postings)
        assert debits == credits
