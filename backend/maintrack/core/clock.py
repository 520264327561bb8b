# backend/maintrack/core/clock.py
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    # DB'de naive UTC saklıyoruz (SQLite/MSSQL DATETIME tz taşımaz)
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
