"""
Row mapping for the journal tables.

Each mapper reads named columns straight into a model. A missing column,
NULL or malformed value falls back to a safe default for that field only, so
one damaged row never fails a whole listing.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime
from typing import Any

from .models import DoneTask, Idea, Prompt
from .timestamps import parse_legacy_datetime

logger = logging.getLogger(__name__)

_MISSING = object()


def _value(row: sqlite3.Row, key: str) -> Any:
    if key not in row.keys():
        return _MISSING
    return row[key]


def _str_field(row: sqlite3.Row, key: str) -> str:
    value = _value(row, key)
    if value is _MISSING or value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _int_field(row: sqlite3.Row, key: str) -> int:
    value = _value(row, key)
    if value is _MISSING or value is None or isinstance(value, bytes):
        return 0
    text = str(value).strip()
    try:
        return int(value) if isinstance(value, (int, float)) else int(float(text))
    except (OverflowError, ValueError):
        pass
    legacy = parse_legacy_datetime(text)
    if legacy is not None:
        return legacy
    logger.warning("Defaulting unreadable %s=%r to 0", key, value)
    return 0


def _timestamp_field(row: sqlite3.Row, key: str) -> int:
    seconds = _int_field(row, key)
    try:
        datetime.fromtimestamp(seconds)
    except (OverflowError, OSError, ValueError):
        logger.warning("Defaulting out-of-range %s=%r to 0", key, seconds)
        return 0
    return seconds


def _attachments_field(row: sqlite3.Row, key: str = "attachments") -> list[str]:
    raw = _value(row, key)
    if raw is _MISSING or raw is None:
        return []
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Defaulting unreadable attachments %r to []", raw)
        return []
    if not isinstance(parsed, list):
        return []
    return [item for item in parsed if isinstance(item, str)]


def serialize_attachments(attachments: list[str] | None) -> str:
    return json.dumps([str(item) for item in (attachments or [])], ensure_ascii=False)


def idea_from_row(row: sqlite3.Row) -> Idea:
    return Idea(
        id=_int_field(row, "id"),
        content=_str_field(row, "content"),
        attachments=_attachments_field(row),
        created_at=_timestamp_field(row, "created_at"),
        date=_str_field(row, "date"),
    )


def task_from_row(row: sqlite3.Row) -> DoneTask:
    return DoneTask(
        id=_int_field(row, "id"),
        content=_str_field(row, "content"),
        start_time=_timestamp_field(row, "start_time"),
        end_time=_timestamp_field(row, "end_time"),
        attachments=_attachments_field(row),
        created_at=_timestamp_field(row, "created_at"),
        date=_str_field(row, "date"),
    )


def prompt_from_row(row: sqlite3.Row) -> Prompt:
    return Prompt(
        id=_int_field(row, "id"),
        name=_str_field(row, "name"),
        content=_str_field(row, "content"),
        created_at=_timestamp_field(row, "created_at"),
        updated_at=_timestamp_field(row, "updated_at"),
    )
