"""시각 정규화 유틸리티 모듈.

Timestamp normalization helpers.
All timestamps are stored in UTC. Drivers that drop tzinfo on read (SQLite)
hand back naive values, so anything read from the database passes through
ensure_utc() before it is compared with request data.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """현재 UTC 시각 (Current time, timezone-aware UTC)."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime | None) -> datetime | None:
    """시각을 UTC aware 값으로 정규화합니다.

    Normalize a timestamp to timezone-aware UTC.
    Naive values are taken to already be UTC; aware values are converted.

    Args:
        value: 정규화할 시각 또는 None (Timestamp or None)

    Returns:
        datetime | None: UTC aware 시각 (UTC-aware timestamp, None passes through)
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def minutes_between(start: datetime, end: datetime) -> int:
    """두 시각 사이의 분(반올림) — Whole minutes between two timestamps."""
    return round((ensure_utc(end) - ensure_utc(start)).total_seconds() / 60)
