from __future__ import annotations

import logging
from datetime import date
from typing import Union

from .database import JournalDatabase
from .models import TodayRecords
from .rows import idea_from_row, serialize_attachments, task_from_row
from .timestamps import TimestampInput, local_date, normalize_day, to_unix_timestamp

logger = logging.getLogger(__name__)

DayInput = Union[str, date]

_IDEA_COLUMNS = "id, content, attachments, created_at, date"
_TASK_COLUMNS = "id, content, start_time, end_time, attachments, created_at, date"


class RecordStore:
    """Ideas and completed tasks, partitioned by local calendar day."""

    def __init__(self, database: JournalDatabase):
        self._db = database

    def add_idea(
        self,
        content: str,
        attachments: list[str] | None,
        created_at: TimestampInput,
    ) -> int:
        created = to_unix_timestamp(created_at)
        result = self._db.write(
            """
            INSERT INTO ideas(content, attachments, created_at, date)
            VALUES (?, ?, ?, ?)
            """,
            (content or "", serialize_attachments(attachments), created, local_date(created)),
        )
        logger.debug("Added idea %d", result.lastrowid)
        return result.lastrowid

    def add_done_task(
        self,
        content: str,
        start_time: TimestampInput,
        end_time: TimestampInput,
        attachments: list[str] | None,
        created_at: TimestampInput,
    ) -> int:
        start = to_unix_timestamp(start_time)
        end = to_unix_timestamp(end_time)
        created = to_unix_timestamp(created_at)
        result = self._db.write(
            """
            INSERT INTO done_tasks(content, start_time, end_time, attachments, created_at, date)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                content or "",
                start,
                end,
                serialize_attachments(attachments),
                created,
                local_date(start),
            ),
        )
        logger.debug("Added task %d", result.lastrowid)
        return result.lastrowid

    def get_today_records(self, today: DayInput | None = None) -> TodayRecords:
        day = normalize_day(today if today is not None else date.today())
        ideas = self._db.query(
            f"""
            SELECT {_IDEA_COLUMNS}
            FROM ideas
            WHERE date = ?
            ORDER BY created_at DESC, id DESC
            """,
            (day,),
        )
        tasks = self._db.query(
            f"""
            SELECT {_TASK_COLUMNS}
            FROM done_tasks
            WHERE date = ?
            ORDER BY start_time ASC, id ASC
            """,
            (day,),
        )
        return TodayRecords(
            ideas=[idea_from_row(row) for row in ideas],
            tasks=[task_from_row(row) for row in tasks],
        )

    def get_records_by_date_range(self, start_date: DayInput, end_date: DayInput) -> TodayRecords:
        # Fixed-width YYYY-MM-DD strings compare correctly as text.
        start = normalize_day(start_date)
        end = normalize_day(end_date)
        ideas = self._db.query(
            f"""
            SELECT {_IDEA_COLUMNS}
            FROM ideas
            WHERE date >= ? AND date <= ?
            ORDER BY date DESC, created_at DESC, id DESC
            """,
            (start, end),
        )
        tasks = self._db.query(
            f"""
            SELECT {_TASK_COLUMNS}
            FROM done_tasks
            WHERE date >= ? AND date <= ?
            ORDER BY date DESC, start_time DESC, id DESC
            """,
            (start, end),
        )
        return TodayRecords(
            ideas=[idea_from_row(row) for row in ideas],
            tasks=[task_from_row(row) for row in tasks],
        )

    def delete_idea(self, idea_id: int) -> None:
        self._db.write("DELETE FROM ideas WHERE id = ?", (int(idea_id),))

    def delete_task(self, task_id: int) -> None:
        self._db.write("DELETE FROM done_tasks WHERE id = ?", (int(task_id),))
