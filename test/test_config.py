"""
Tests for environment-driven settings.
"""

import pytest
from pydantic import ValidationError

from kushl.config import Settings, get_settings


class TestSettings:
    def test_declared_defaults(self) -> None:
        # Environment variables may override runtime values; check declared defaults.
        fields = Settings.model_fields
        assert fields["storage_url"].default == "sqlite+pysqlite:///./kushl.db"
        assert fields["recurring_sweep_interval_seconds"].default == 60
        assert fields["reviews_page_size"].default == 6
        assert fields["recurring_sweep_enabled"].default is True

    def test_log_level_is_normalized(self) -> None:
        settings = Settings(log_level=" debug ")
        assert settings.log_level == "DEBUG"

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RECURRING_SWEEP_INTERVAL_SECONDS", "120")
        monkeypatch.setenv("APP_ENV", "qa")

        settings = Settings()

        assert settings.recurring_sweep_interval_seconds == 120
        assert settings.app_env == "qa"

    @pytest.mark.parametrize("interval", [0, 4, 3601])
    def test_rejects_out_of_range_interval(self, interval: int) -> None:
        with pytest.raises(ValidationError):
            Settings(recurring_sweep_interval_seconds=interval)

    def test_rejects_unknown_environment(self) -> None:
        with pytest.raises(ValidationError):
            Settings(app_env="staging")

    def test_is_sqlite(self) -> None:
        assert Settings(storage_url="sqlite+pysqlite:///:memory:").is_sqlite
        assert not Settings(storage_url="postgresql+psycopg://u:p@db/kushl").is_sqlite

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()
