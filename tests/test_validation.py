"""Tests for record intake validation."""

from decimal import Decimal

import pytest

from ledgerbook.validation import RecordValidator


def _raw(**overrides):
    raw = {
        "id": "tx-1",
        "transaction_date": "2024-01-15",
        "type": "expense",
        "amount": "250",
        "category_id": "cat-rent",
        "bank_account_id": "bank-1",
    }
    raw.update(overrides)
    return raw


@pytest.fixture
def validator(accounts, categories):
    return RecordValidator(accounts, categories)


class TestSchemaStage:
    """Stage 1 rejects records the ledger cannot place."""

    def test_valid_record(self, validator):
        record, result = validator.validate(_raw())
        assert record is not None
        assert record.amount == Decimal("250")
        assert result.is_valid
        assert result.issues == []
        assert validator.get_user_friendly_summary(result) == "All checks passed."

    @pytest.mark.parametrize("value", [None, ""])
    def test_missing_date(self, validator, value):
        record, result = validator.validate(_raw(transaction_date=value))
        assert record is None
        assert not result.schema_valid
        assert result.issues[0].field == "transaction_date"
        assert result.issues[0].issue_type == "missing"

    def test_malformed_date(self, validator):
        record, result = validator.validate(_raw(transaction_date="15/01/2024"))
        assert record is None
        assert result.has_errors
        assert result.issues[0].field == "transaction_date"

    def test_negative_amount(self, validator):
        record, result = validator.validate(_raw(amount="-1"))
        assert record is None
        assert result.issues[0].field == "amount"

    def test_unknown_type(self, validator):
        record, result = validator.validate(_raw(type="refund"))
        assert record is None
        assert result.issues[0].field == "type"

    def test_summary_lists_errors(self, validator):
        _, result = validator.validate(_raw(transaction_date=None))
        summary = validator.get_user_friendly_summary(result)
        assert "could not be saved" in summary
        assert "Transaction date is required" in summary


class TestSemanticStage:
    """Stage 2 warns but never blocks."""

    def test_fee_on_income(self, validator):
        record, result = validator.validate(
            _raw(type="income", category_id="cat-sales", fee_amount="5")
        )
        assert record is not None
        assert result.is_valid
        assert result.warnings == ["Fees on income records are not posted"]

    def test_transfer_missing_leg(self, validator):
        _, result = validator.validate(_raw(
            type="transfer", category_id=None, bank_account_id=None,
            from_account_id="bank-1",
        ))
        assert result.is_valid
        assert result.issues[0].field == "to_account_id"

    def test_transfer_to_same_account(self, validator):
        _, result = validator.validate(_raw(
            type="transfer", category_id=None, bank_account_id=None,
            from_account_id="bank-1", to_account_id="bank-1",
        ))
        assert [i.issue_type for i in result.issues] == ["inconsistent"]

    def test_transfer_with_category(self, validator):
        _, result = validator.validate(_raw(
            type="transfer", bank_account_id=None,
            from_account_id="bank-1", to_account_id="bank-2",
        ))
        assert [i.field for i in result.issues] == ["category_id"]

    def test_missing_cash_account(self, validator):
        _, result = validator.validate(_raw(bank_account_id=None))
        assert result.issues[0].field == "bank_account_id"

    def test_unknown_references(self, validator):
        record, result = validator.validate(
            _raw(category_id="cat-gone", bank_account_id="bank-closed")
        )
        assert record is not None
        assert {i.issue_type for i in result.issues} == {"unresolved_reference"}
        assert {i.field for i in result.issues} == {"category_id", "bank_account_id"}

    def test_reference_checks_skipped_without_reference_data(self):
        _, result = RecordValidator().validate(_raw(category_id="cat-gone"))
        assert result.issues == []

    def test_summary_lists_warnings(self, validator):
        _, result = validator.validate(_raw(bank_account_id=None))
        summary = validator.get_user_friendly_summary(result)
        assert summary.startswith("Please check:")
        assert "No cash account selected" in summary
