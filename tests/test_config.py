"""Tests for settings loading."""

import pytest

from post_tracker.config import ConfigurationError, TrackerSettings, load_settings
from post_tracker.infrastructure.errors import ErrorKind

ENV_NAMES = (
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "TRACKER_SUPABASE_URL",
    "TRACKER_SUPABASE_ANON_KEY",
    "VITE_SUPABASE_URL",
    "VITE_SUPABASE_ANON_KEY",
    "TRACKER_REQUEST_TIMEOUT",
    "TRACKER_DEFAULT_CAMPAIGN_ID",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestLoadSettings:

    def test_missing_values_fail_fast(self, clean_env):
        with pytest.raises(ConfigurationError) as excinfo:
            load_settings(env_file=None)

        error = excinfo.value
        assert error.kind is ErrorKind.CONFIGURATION
        assert error.missing == ["SUPABASE_URL", "SUPABASE_ANON_KEY"]
        assert "Copy .env.example to .env" in error.message

    def test_reads_plain_names(self, clean_env):
        clean_env.setenv("SUPABASE_URL", "https://p.supabase.co")
        clean_env.setenv("SUPABASE_ANON_KEY", "key")

        settings = load_settings(env_file=None)

        assert settings.supabase_url == "https://p.supabase.co"
        assert settings.supabase_anon_key == "key"
        assert settings.request_timeout == 10.0
        assert settings.default_campaign_id is None

    def test_reads_frontend_names(self, clean_env):
        clean_env.setenv("VITE_SUPABASE_URL", "https://v.supabase.co")
        clean_env.setenv("VITE_SUPABASE_ANON_KEY", "vkey")

        settings = load_settings(env_file=None)

        assert settings.supabase_url == "https://v.supabase.co"

    def test_env_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "SUPABASE_URL=https://f.supabase.co\n"
            "SUPABASE_ANON_KEY=fkey\n"
            "TRACKER_DEFAULT_CAMPAIGN_ID=c1\n"
            "TRACKER_REQUEST_TIMEOUT=3\n"
        )

        settings = load_settings(env_file=str(env_file))

        assert settings.supabase_anon_key == "fkey"
        assert settings.default_campaign_id == "c1"
        assert settings.request_timeout == 3.0

    def test_overrides(self, clean_env):
        settings = load_settings(
            env_file=None,
            supabase_url="https://o.supabase.co",
            supabase_anon_key="okey",
        )

        assert settings.missing_connection_settings() == []
        assert isinstance(settings, TrackerSettings)
