"""Tests for configuration loading."""

from decimal import Decimal

from finance_tracker.config import get_settings, validate_all_settings


class TestSettings:
    """Tests for environment-driven settings."""

    def test_ledger_defaults(self, monkeypatch):
        """Test the ledger defaults."""
        monkeypatch.delenv("FINANCE_CURRENCY_CODE", raising=False)
        ledger = get_settings().ledger
        assert ledger.initial_balance == Decimal("0")
        assert ledger.currency_code == "TRY"
        assert ledger.recent_transactions_limit == 10

    def test_currency_code_is_upper_cased(self, monkeypatch):
        """Test normalisation of the currency code."""
        monkeypatch.setenv("FINANCE_CURRENCY_CODE", "eur")
        assert get_settings().ledger.currency_code == "EUR"

    def test_validate_all_settings_reports_missing_sheets(self, monkeypatch, tmp_path):
        """Test that an unconfigured spreadsheet is reported, not raised."""
        monkeypatch.delenv("GOOGLE_SHEETS_CREDENTIALS_PATH", raising=False)
        monkeypatch.delenv("GOOGLE_SHEETS_SPREADSHEET_ID", raising=False)
        # No .env file to pick values up from
        monkeypatch.chdir(tmp_path)

        results = validate_all_settings()

        assert results["ledger"] is True
        assert results["profile"] is True
        assert results["google_sheets"] is False
        assert "google_sheets_error" in results
