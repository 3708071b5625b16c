# cryptodash/config/settings.py
from __future__ import annotations

import os
from dataclasses import dataclass


def parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def parse_int(value: str | None, default: int) -> int:
    if value is None or value.strip() == "":
        return default
    return int(value)


def parse_float(value: str | None, default: float) -> float:
    if value is None or value.strip() == "":
        return default
    return float(value)


@dataclass(frozen=True)
class Settings:
    COINGECKO_BASE_URL: str
    HTTP_TIMEOUT_SECONDS: float
    POLL_INTERVAL_SECONDS: int
    POLL_ENABLED: bool
    LOG_LEVEL: str

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            COINGECKO_BASE_URL=os.getenv("COINGECKO_BASE_URL", "https://api.coingecko.com/api/v3").rstrip("/"),
            HTTP_TIMEOUT_SECONDS=parse_float(os.getenv("HTTP_TIMEOUT_SECONDS"), 10.0),
            POLL_INTERVAL_SECONDS=parse_int(os.getenv("POLL_INTERVAL_SECONDS"), 60),
            POLL_ENABLED=parse_bool(os.getenv("POLL_ENABLED"), True),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings
