"""
Unit tests for environment-driven settings.
"""
from config import Settings


class TestSettings:
    """Tests for Settings"""

    def test_defaults(self, monkeypatch):
        for var in ("TRACKING_TECHNOLOGY", "API_BASE_URL", "CACHE_TTL_SECONDS", "CACHE_TTL_MS", "PORT",
                    "FETCH_TIMEOUT_SECONDS", "LATEST_LIMIT", "TIMEZONE"):
            monkeypatch.delenv(var, raising=False)

        config = Settings()

        assert config.technology == "rfid"
        assert config.api_base_url == "https://smart-id.adant.com/api/v0"
        assert config.cache_ttl_seconds == 300
        assert config.fetch_timeout_seconds == 5
        assert config.port == 3025
        assert config.validate() == []

    def test_ble_defaults(self, monkeypatch):
        monkeypatch.setenv("TRACKING_TECHNOLOGY", "BLE")
        monkeypatch.delenv("API_BASE_URL", raising=False)
        monkeypatch.delenv("PORT", raising=False)

        config = Settings()

        assert config.technology == "ble"
        assert config.api_base_url == "https://point-demo.adant.com/api/v0"
        assert config.port == 3026

    def test_ttl_in_milliseconds_is_accepted(self, monkeypatch):
        monkeypatch.delenv("CACHE_TTL_SECONDS", raising=False)
        monkeypatch.setenv("CACHE_TTL_MS", "120000")

        assert Settings().cache_ttl_seconds == 120

    def test_validate_reports_problems(self, monkeypatch):
        monkeypatch.setenv("TRACKING_TECHNOLOGY", "nfc")
        monkeypatch.setenv("TIMEZONE", "Mars/Olympus_Mons")
        monkeypatch.setenv("FETCH_TIMEOUT_SECONDS", "0")

        problems = Settings().validate()

        assert len(problems) == 3
        assert any("TRACKING_TECHNOLOGY" in p for p in problems)
        assert any("TIMEZONE" in p for p in problems)
