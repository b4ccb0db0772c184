"""File-time tick conversion and build date formatting."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

# 100-nanosecond intervals since 1601-01-01 UTC.
FILETIME_EPOCH = datetime(1601, 1, 1, tzinfo=timezone.utc)

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def from_file_time(ticks: int) -> datetime:
    if ticks < 0:
        raise ValueError(f"File time must be non-negative: {ticks}")
    return FILETIME_EPOCH + timedelta(microseconds=ticks // 10)


def to_file_time(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    delta = moment.astimezone(timezone.utc) - FILETIME_EPOCH
    return (delta // timedelta(microseconds=1)) * 10


def format_build_date(moment: datetime) -> str:
    """Format as `YYYY Mon DD @ HH:MM:SS` (24-hour clock, locale independent)."""

    return (
        f"{moment.year:04d} {_MONTHS[moment.month - 1]} {moment.day:02d} "
        f"@ {moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )
