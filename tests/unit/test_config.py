"""Tests for application settings."""

from membership.config import Settings


class TestSettings:
    """Test settings defaults and environment overrides."""

    def test_ledger_policy_defaults(self, monkeypatch):
        """Default cutoff, due day and reference length match the ledger policy."""
        monkeypatch.delenv("DELINQUENCY_CUTOFF_DAYS", raising=False)
        monkeypatch.delenv("DUES_DUE_DAY", raising=False)
        monkeypatch.delenv("REFERENCE_LENGTH", raising=False)
        settings = Settings(_env_file=None)

        assert settings.delinquency_cutoff_days == 30
        assert settings.dues_due_day == 10
        assert settings.reference_length == 8

    def test_environment_overrides(self, monkeypatch):
        """Environment variables override defaults."""
        monkeypatch.setenv("DATABASE_URL", "postgresql://user:pw@db:5432/members")
        monkeypatch.setenv("DELINQUENCY_CUTOFF_DAYS", "45")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        settings = Settings(_env_file=None)

        assert settings.database_url == "postgresql://user:pw@db:5432/members"
        assert settings.delinquency_cutoff_days == 45
        assert settings.log_level == "DEBUG"
