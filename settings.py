from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_STORE_PATH_ENV = "AQ_STORE_PATH"
_TIMEZONE_ENV = "AQ_TIMEZONE"
_PERIOD_LIMIT_ENV = "AQ_PERIOD_ROW_LIMIT"
_RANGE_LIMIT_ENV = "AQ_RANGE_ROW_LIMIT"
_ROSE_POLLUTANT_ENV = "AQ_ROSE_POLLUTANT"
_PENDING_HOURS_ENV = "AQ_PENDING_AFTER_HOURS"
_FAIL_SOFT_ENV = "AQ_FAIL_SOFT"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    store_path: Optional[str]
    timezone: str
    period_row_limit: int
    range_row_limit: int
    rose_pollutant: str
    pending_after_hours: Optional[float]
    fail_soft: bool
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_optional_hours(name: str) -> Optional[float]:
    value = os.getenv(name)
    if value is None:
        return None
    candidate = value.strip()
    if not candidate:
        return None
    try:
        parsed = float(candidate)
    except ValueError:
        return None
    return parsed if parsed > 0 else None


def _read_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip().lower()
    if candidate in _TRUE_VALUES:
        return True
    if candidate in _FALSE_VALUES:
        return False
    return default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        store_path=_read_optional_env(_STORE_PATH_ENV, None),
        timezone=_read_str_env(_TIMEZONE_ENV, "America/Sao_Paulo"),
        period_row_limit=_read_positive_int(_PERIOD_LIMIT_ENV, 500),
        range_row_limit=_read_positive_int(_RANGE_LIMIT_ENV, 2000),
        rose_pollutant=_read_str_env(_ROSE_POLLUTANT_ENV, "MP10"),
        pending_after_hours=_read_optional_hours(_PENDING_HOURS_ENV),
        fail_soft=_read_bool(_FAIL_SOFT_ENV, True),
        log_level=_read_log_level("INFO"),
    )
