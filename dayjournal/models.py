from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class Idea:
    id: int
    content: str
    attachments: list[str]
    created_at: int
    date: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DoneTask:
    id: int
    content: str
    start_time: int
    end_time: int
    attachments: list[str]
    created_at: int
    date: str

    @property
    def duration_seconds(self) -> int:
        # Not clamped: end_time before start_time is stored as given.
        return self.end_time - self.start_time

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Prompt:
    id: int
    name: str
    content: str
    created_at: int
    updated_at: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ApiConfig:
    api_key: str
    api_url: str
    model: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class TodayRecords:
    ideas: list[Idea] = field(default_factory=list)
    tasks: list[DoneTask] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.ideas and not self.tasks

    def to_dict(self) -> dict[str, Any]:
        return {
            "ideas": [idea.to_dict() for idea in self.ideas],
            "tasks": [task.to_dict() for task in self.tasks],
        }
