from __future__ import annotations

import time
from typing import Callable

from .database import JournalDatabase
from .models import Prompt
from .rows import prompt_from_row

_PROMPT_COLUMNS = "id, name, content, created_at, updated_at"


def _now() -> int:
    return int(time.time())


class PromptStore:
    def __init__(self, database: JournalDatabase, clock: Callable[[], int] = _now):
        self._db = database
        self._clock = clock

    def add_prompt(self, name: str, content: str) -> int:
        now = self._clock()
        result = self._db.write(
            """
            INSERT INTO prompts(name, content, created_at, updated_at)
            VALUES (?, ?, ?, ?)
            """,
            (name, content, now, now),
            duplicate_message=f"Prompt name already exists: {name}",
        )
        return result.lastrowid

    def update_prompt(self, prompt_id: int, name: str, content: str) -> None:
        """Overwrite name and content; unknown ids are ignored."""
        self._db.write(
            """
            UPDATE prompts
            SET name = ?, content = ?, updated_at = ?
            WHERE id = ?
            """,
            (name, content, self._clock(), int(prompt_id)),
            duplicate_message=f"Prompt name already exists: {name}",
        )

    def get_prompts(self) -> list[Prompt]:
        rows = self._db.query(
            f"""
            SELECT {_PROMPT_COLUMNS}
            FROM prompts
            ORDER BY updated_at DESC, id DESC
            """
        )
        return [prompt_from_row(row) for row in rows]

    def get_prompt_by_name(self, name: str) -> Prompt | None:
        rows = self._db.query(
            f"SELECT {_PROMPT_COLUMNS} FROM prompts WHERE name = ?",
            (name,),
        )
        if not rows:
            return None
        return prompt_from_row(rows[0])

    def delete_prompt(self, prompt_id: int) -> None:
        self._db.write("DELETE FROM prompts WHERE id = ?", (int(prompt_id),))
