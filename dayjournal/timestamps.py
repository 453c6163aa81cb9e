from __future__ import annotations

from datetime import date, datetime
from typing import Union

from .errors import InvalidTimestamp

TimestampInput = Union[int, float, str, datetime]

DAY_FORMAT = "%Y-%m-%d"
LEGACY_FORMAT = "%Y-%m-%d %H:%M:%S"


def to_unix_timestamp(value: TimestampInput) -> int:
    """Normalize a timestamp input to whole unix seconds.

    Accepts unix seconds, a ``datetime`` (naive values are local time) or an
    RFC-3339 string such as ``2024-01-15T10:00:00Z``.
    """
    if isinstance(value, bool):
        raise InvalidTimestamp(f"Invalid timestamp: {value!r}")
    if isinstance(value, datetime):
        return _datetime_seconds(value)
    if isinstance(value, (int, float)):
        try:
            seconds = int(value)
        except (OverflowError, ValueError) as exc:
            raise InvalidTimestamp(f"Invalid timestamp: {value!r}") from exc
        local_date(seconds)
        return seconds
    if isinstance(value, str):
        text = value.strip()
        if text.lstrip("-").isdigit():
            return to_unix_timestamp(int(text))
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise InvalidTimestamp(f"Invalid timestamp: {value!r}") from exc
        return _datetime_seconds(parsed)
    raise InvalidTimestamp(f"Invalid timestamp: {value!r}")


def _datetime_seconds(value: datetime) -> int:
    try:
        return int(value.timestamp())
    except (OverflowError, OSError, ValueError) as exc:
        raise InvalidTimestamp(f"Invalid timestamp: {value!r}") from exc


def _local(seconds: int) -> datetime:
    try:
        return datetime.fromtimestamp(seconds)
    except (OverflowError, OSError, ValueError) as exc:
        raise InvalidTimestamp(f"Timestamp out of range: {seconds}") from exc


def local_date(seconds: int) -> str:
    """Local calendar day of a unix timestamp as ``YYYY-MM-DD``."""
    return _local(seconds).strftime(DAY_FORMAT)


def clock_time(seconds: int) -> str:
    return _local(seconds).strftime("%H:%M")


def normalize_day(value: Union[str, date]) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    text = str(value).strip()
    try:
        return datetime.strptime(text, DAY_FORMAT).strftime(DAY_FORMAT)
    except ValueError as exc:
        raise InvalidTimestamp(f"Invalid date (expected YYYY-MM-DD): {value!r}") from exc


def parse_legacy_datetime(text: str) -> int | None:
    try:
        return int(datetime.strptime(text.strip(), LEGACY_FORMAT).timestamp())
    except (ValueError, OverflowError, OSError):
        return None
