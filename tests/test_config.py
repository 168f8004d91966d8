"""Tests for the configuration layer."""

import pytest
from pydantic import ValidationError

from ledgerbook.config import (
    AppSettings,
    LedgerSettings,
    get_settings,
    validate_all_settings,
)


class TestLedgerSettings:
    """Tests for LedgerSettings."""

    def test_defaults(self):
        settings = LedgerSettings()
        assert settings.cash_ledger_code == "1101"
        assert settings.fee_ledger_code == "6900"
        assert settings.fee_ledger_name == "Fees"
        assert settings.hide_empty_ledgers is True
        assert settings.amount_decimal_places == 2

    def test_environment_override(self, monkeypatch):
        """Test that LEDGER_-prefixed variables are picked up."""
        monkeypatch.setenv("LEDGER_FEE_LEDGER_CODE", "6950")
        monkeypatch.setenv("LEDGER_HIDE_EMPTY_LEDGERS", "false")
        settings = LedgerSettings()
        assert settings.fee_ledger_code == "6950"
        assert settings.hide_empty_ledgers is False

    def test_codes_are_stripped(self):
        assert LedgerSettings(cash_ledger_code=" 1102 ").cash_ledger_code == "1102"

    def test_blank_code_rejected(self):
        with pytest.raises(ValidationError):
            LedgerSettings(fee_ledger_code="   ")

    def test_decimal_places_bounds(self):
        with pytest.raises(ValidationError):
            LedgerSettings(amount_decimal_places=9)


class TestAppSettings:

    def test_retry_attempts_bounds(self):
        with pytest.raises(ValidationError):
            AppSettings(source_retry_attempts=0)

    def test_root_settings(self):
        get_settings.cache_clear()
        settings = get_settings()
        assert settings is get_settings()
        assert isinstance(settings.ledger, LedgerSettings)
        assert settings.app.source_retry_attempts >= 1

    def test_validate_all_settings(self):
        results = validate_all_settings()
        assert results["ledger"] is True
        assert results["app"] is True
