"""Unit tests for settings loading."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest

from keyissuer.config import SecurityConfig, Settings, get_settings


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestDefaults:
    def test_security_defaults(self):
        settings = Settings()

        assert settings.security.key_ttl_seconds == 3600
        assert settings.security.key_ttl == timedelta(hours=1)
        assert settings.security.bcrypt_rounds == 10
        assert settings.security.serialize_issuance is True

    def test_database_default_is_sqlite(self):
        assert Settings().database.url.startswith("sqlite+aiosqlite://")

    def test_ttl_must_be_positive(self):
        with pytest.raises(ValueError):
            SecurityConfig(key_ttl_seconds=0)


class TestSources:
    def test_env_var_override(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("KEYISSUER_SECURITY__KEY_TTL_SECONDS", "120")

        settings = Settings()

        assert settings.security.key_ttl == timedelta(minutes=2)

    def test_yaml_config_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "server:\n"
            "  port: 9100\n"
            "security:\n"
            "  bcrypt_rounds: 4\n"
            "  serialize_issuance: false\n"
        )
        monkeypatch.setenv("KEYISSUER_CONFIG_FILE", str(config_file))

        settings = get_settings()

        assert settings.server.port == 9100
        assert settings.security.bcrypt_rounds == 4
        assert settings.security.serialize_issuance is False

    def test_missing_config_file_uses_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("KEYISSUER_CONFIG_FILE", str(tmp_path / "absent.yaml"))

        settings = get_settings()

        assert settings.security.key_ttl_seconds == 3600
