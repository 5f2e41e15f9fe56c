from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Any) -> datetime | None:
    """Accept a datetime, an ISO-8601 string or an epoch number (s or ms)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, (int, float)):
        timestamp = float(value)
        if timestamp > 1_000_000_000_000:
            timestamp = timestamp / 1000.0
        return datetime.fromtimestamp(timestamp, tz=timezone.utc)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        return ensure_utc(parsed)
    return None


def epoch_seconds_ceil(value: datetime) -> int:
    return math.ceil(ensure_utc(value).timestamp())


def seconds_until_ceil(target: datetime, now: datetime) -> int:
    return max(0, math.ceil((ensure_utc(target) - ensure_utc(now)).total_seconds()))
