"""Time zone, display format and rounding helpers shared by the services."""

from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta, timezone
from typing import Tuple
from zoneinfo import ZoneInfo

DISPLAY_FORMAT = "%d/%m/%Y %H:%M"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def local_zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def ensure_aware(value: datetime, zone: ZoneInfo) -> datetime:
    """Attach ``zone`` to naive datetimes; aware ones are left as they are."""
    if value.tzinfo is None:
        return value.replace(tzinfo=zone)
    return value


def format_local(value: datetime, zone: ZoneInfo) -> str:
    return value.astimezone(zone).strftime(DISPLAY_FORMAT)


def parse_local(text: str) -> datetime:
    """Parse a ``DD/MM/YYYY HH:MM`` display string into a naive datetime."""
    return datetime.strptime(text.strip(), DISPLAY_FORMAT)


def day_window(day: date, zone: ZoneInfo) -> Tuple[datetime, datetime]:
    """Half-open ``[local midnight, next local midnight)`` for ``day``."""
    start = datetime.combine(day, time.min, tzinfo=zone)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=zone)
    return start, end


def round_half_up(value: float, digits: int = 0) -> float:
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor
