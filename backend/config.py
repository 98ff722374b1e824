"""Centralized configuration — all env vars in one place."""

import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

load_dotenv()

TECHNOLOGIES = ("rfid", "ble")

# Each technology talks to its own upstream deployment on its own port.
_DEFAULT_BASE_URLS = {
    "rfid": "https://smart-id.adant.com/api/v0",
    "ble": "https://point-demo.adant.com/api/v0",
}
_DEFAULT_PORTS = {"rfid": 3025, "ble": 3026}


def _ttl_from_env() -> float:
    if os.getenv("CACHE_TTL_SECONDS"):
        return float(os.environ["CACHE_TTL_SECONDS"])
    if os.getenv("CACHE_TTL_MS"):
        return int(os.environ["CACHE_TTL_MS"]) / 1000
    return 300.0


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.technology: str = os.getenv("TRACKING_TECHNOLOGY", "rfid").lower()
        self.api_base_url: str = os.getenv(
            "API_BASE_URL", _DEFAULT_BASE_URLS.get(self.technology, _DEFAULT_BASE_URLS["rfid"])
        ).rstrip("/")
        self.cache_ttl_seconds: float = _ttl_from_env()
        self.fetch_timeout_seconds: float = float(os.getenv("FETCH_TIMEOUT_SECONDS", "5"))
        self.latest_limit: int = int(os.getenv("LATEST_LIMIT", "60"))
        self.timezone: str = os.getenv("TIMEZONE", "Europe/Rome")
        self.port: int = int(os.getenv("PORT", str(_DEFAULT_PORTS.get(self.technology, 3025))))

        self.cors_origins: list[str] = os.getenv(
            "CORS_ORIGINS", "http://localhost:3030,http://127.0.0.1:3030"
        ).split(",")
        self.git_sha: str = os.getenv("GIT_SHA", "unknown")
        self.environment: str = os.getenv("ENVIRONMENT", "local")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> list[str]:
        """Return list of configuration problems, empty when usable."""
        problems = []
        if self.technology not in TECHNOLOGIES:
            problems.append(
                f"TRACKING_TECHNOLOGY={self.technology!r} (expected one of {', '.join(TECHNOLOGIES)})"
            )
        if self.cache_ttl_seconds <= 0:
            problems.append("cache TTL must be positive")
        if self.fetch_timeout_seconds <= 0:
            problems.append("FETCH_TIMEOUT_SECONDS must be positive")
        if self.latest_limit <= 0:
            problems.append("LATEST_LIMIT must be positive")
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            problems.append(f"TIMEZONE={self.timezone!r} is not a known IANA zone")
        return problems


settings = Settings()
