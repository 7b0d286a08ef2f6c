"""Unit tests for settings loading."""

import pytest
from pydantic import ValidationError

from skyfare.search.config import Settings, get_settings
from skyfare.search.models import Airline


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in [
        "SKYFARE_ENABLED_SOURCES",
        "SKYFARE_REQUEST_TIMEOUT",
        "SKYFARE_LOG_LEVEL",
        "SKYFARE_VIETJET_BASE_URL",
    ]:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.enabled_sources == [Airline.VJ, Airline.VNA]
        assert settings.request_timeout == 30.0
        assert settings.log_level == "INFO"

    def test_env_overrides(self, monkeypatch) -> None:
        monkeypatch.setenv("SKYFARE_ENABLED_SOURCES", "vna, vj")
        monkeypatch.setenv("SKYFARE_REQUEST_TIMEOUT", "12.5")
        monkeypatch.setenv("SKYFARE_LOG_LEVEL", "debug")
        monkeypatch.setenv("SKYFARE_VIETJET_BASE_URL", "https://vj.test")

        settings = get_settings()

        assert settings.enabled_sources == [Airline.VNA, Airline.VJ]
        assert settings.request_timeout == 12.5
        assert settings.log_level == "DEBUG"
        assert settings.vietjet_base_url == "https://vj.test"

    def test_env_file(self, tmp_path) -> None:
        (tmp_path / ".env").write_text("SKYFARE_ENABLED_SOURCES=VJ\n", encoding="utf-8")
        assert Settings().enabled_sources == [Airline.VJ]

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()

    def test_invalid_values_raise(self) -> None:
        with pytest.raises(ValidationError, match="greater than 0"):
            Settings(request_timeout=0)
        with pytest.raises(ValidationError, match="Unknown log level"):
            Settings(log_level="loud")
        with pytest.raises(ValidationError):
            Settings(enabled_sources="VJ,QH")
