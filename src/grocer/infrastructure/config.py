"""Runtime settings, read from the environment once per process."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

# When installed in editable mode the project root is the repo root.
_DATA_DIR = Path(__file__).resolve().parents[3] / "data"

DEFAULT_DATABASE_URL = f"sqlite:///{_DATA_DIR / 'grocer.db'}"

_TRUE = {"1", "true", "yes", "on"}


def _int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    database_url: str = DEFAULT_DATABASE_URL
    db_echo: bool = False
    auto_cancel_minutes: int = 60
    direct_shipping_fee: int = 10000
    tx_retries: int = 3
    page_limit_max: int = 100
    env: str = "development"
    log_level: str | None = None

    @property
    def auto_cancel_after(self) -> timedelta:
        return timedelta(minutes=self.auto_cancel_minutes)

    @staticmethod
    def from_env() -> Settings:
        return Settings(
            database_url=os.getenv("GROCER_DATABASE_URL", DEFAULT_DATABASE_URL),
            db_echo=os.getenv("GROCER_DB_ECHO", "false").lower() in _TRUE,
            auto_cancel_minutes=_int("GROCER_AUTO_CANCEL_MINUTES", 60),
            direct_shipping_fee=_int("GROCER_DIRECT_SHIPPING_FEE", 10000),
            tx_retries=_int("GROCER_TX_RETRIES", 3),
            page_limit_max=_int("GROCER_PAGE_LIMIT_MAX", 100),
            env=os.getenv("GROCER_ENV", "development").lower(),
            log_level=os.getenv("LOG_LEVEL") or None,
        )
