from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from warranty_tracker.utils.time import parse_timestamp, utc_now


@dataclass(frozen=True)
class Countdown:
    days: int
    hours: int
    minutes: int
    seconds: int
    is_expired: bool


def _coerce(value: datetime | str) -> datetime:
    parsed = parse_timestamp(value)
    if parsed is None:
        raise ValueError(f"Unrecognised date: {value!r}")
    return parsed


def format_date(value: datetime | str) -> str:
    moment = _coerce(value)
    return f"{moment:%B} {moment.day}, {moment.year} at {moment:%I:%M %p}"


def format_relative_date(value: datetime | str, now: datetime | None = None) -> str:
    moment = _coerce(value)
    now = now or utc_now()
    diff_days = int((now - moment).total_seconds() // 86400)
    if diff_days == 0:
        return "Today"
    if diff_days == 1:
        return "Yesterday"
    if diff_days < 7:
        return f"{diff_days} days ago"
    return format_date(moment)


def calculate_countdown(target: datetime | str, now: datetime | None = None) -> Countdown:
    remaining = (_coerce(target) - (now or utc_now())).total_seconds()
    if remaining <= 0:
        return Countdown(0, 0, 0, 0, is_expired=True)
    total = int(remaining)
    days, total = divmod(total, 86400)
    hours, total = divmod(total, 3600)
    minutes, seconds = divmod(total, 60)
    return Countdown(days, hours, minutes, seconds, is_expired=False)


def format_countdown(countdown: Countdown) -> str:
    if countdown.is_expired:
        return "Appointment time has passed"
    parts = []
    if countdown.days > 0:
        parts.append(f"{countdown.days}d")
    if countdown.hours > 0:
        parts.append(f"{countdown.hours}h")
    if countdown.minutes > 0:
        parts.append(f"{countdown.minutes}m")
    if countdown.seconds > 0 and countdown.days == 0:
        parts.append(f"{countdown.seconds}s")
    return " ".join(parts) if parts else "Less than a minute"
