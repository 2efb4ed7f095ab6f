"""Tests for settings loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from expense_tracker.config import (
    AppSettings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)


class TestDefaults:
    """Defaults with no environment or .env file."""

    def test_storage_defaults(self):
        storage = get_settings().storage
        assert storage.data_file == Path("expenses.txt")
        assert storage.encoding == "utf-8"
        assert storage.write_retry_attempts == 3

    def test_app_defaults(self):
        app = get_settings().app
        assert app.log_level == "INFO"
        assert app.log_format == "json"
        assert app.currency_symbol == "$"
        assert app.audit_history_size == 200


class TestEnvironment:
    """Overrides through EXPENSES_* variables."""

    def test_data_file_override(self, monkeypatch):
        monkeypatch.setenv("EXPENSES_DATA_FILE", "/tmp/ledger.txt")
        get_settings.cache_clear()
        assert get_settings().storage.data_file == Path("/tmp/ledger.txt")

    def test_dotenv_file(self, tmp_path):
        """A .env file in the working directory is read."""
        (tmp_path / ".env").write_text("EXPENSES_CURRENCY_SYMBOL=€\n", encoding="utf-8")
        assert AppSettings().currency_symbol == "€"

    def test_log_level_is_normalized(self, monkeypatch):
        monkeypatch.setenv("EXPENSES_LOG_LEVEL", " debug ")
        assert AppSettings().log_level == "DEBUG"

    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("EXPENSES_LOG_LEVEL", "LOUD"),
            ("EXPENSES_LOG_FORMAT", "xml"),
            ("EXPENSES_AUDIT_HISTORY_SIZE", "0"),
        ],
    )
    def test_invalid_app_values(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(ValidationError):
            AppSettings()

    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("EXPENSES_ENCODING", "no-such-codec"),
            ("EXPENSES_WRITE_RETRY_ATTEMPTS", "0"),
        ],
    )
    def test_invalid_storage_values(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(ValidationError):
            StorageSettings()


class TestValidateAllSettings:
    """Tests for validate_all_settings."""

    def test_all_valid(self):
        assert validate_all_settings() == {"storage": True, "app": True}

    def test_broken_group_is_reported(self, monkeypatch):
        """One invalid group does not hide the other."""
        monkeypatch.setenv("EXPENSES_LOG_FORMAT", "xml")
        results = validate_all_settings()
        assert results["storage"] is True
        assert results["app"] is False
        assert "app_error" in results


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
