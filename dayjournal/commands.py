"""
Command surface exposed to the host UI.

Every command is looked up by name and returns a ``CommandResult``: either
the JSON-ready value or the error message meant for display.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Optional

from .ai import AIBridge, history_data
from .config import ConfigStore
from .errors import DayJournalError
from .models import ApiConfig
from .prompts import PromptStore
from .records import RecordStore
from .timestamps import normalize_day

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    ok: bool
    data: Any = None
    error: str = ""

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            return {"ok": True, "data": self.data}
        return {"ok": False, "error": self.error}


class JournalCommands:
    """Name-to-handler registry over the journal services"""

    def __init__(
        self,
        records: RecordStore,
        prompts: PromptStore,
        config_store: ConfigStore,
        ai: AIBridge,
    ):
        self.records = records
        self.prompts = prompts
        self.config_store = config_store
        self.ai = ai
        self._handlers: dict[str, Callable[..., Any]] = {}
        self._register_handlers()

    def _register_handlers(self) -> None:
        self._handlers.update({
            "save_api_config": self.save_api_config,
            "get_api_config": self.get_api_config,
            "add_idea": self.records.add_idea,
            "delete_idea": self.records.delete_idea,
            "add_done_task": self.records.add_done_task,
            "delete_task": self.records.delete_task,
            "get_today_records": self.get_today_records,
            "get_records_by_date_range": self.get_records_by_date_range,
            "add_prompt": self.prompts.add_prompt,
            "get_prompts": self.get_prompts,
            "update_prompt": self.prompts.update_prompt,
            "delete_prompt": self.prompts.delete_prompt,
            "send_ai_message": self.ai.send_message,
            "generate_daily_report": self.ai.generate_daily_report,
            "generate_range_report": self.ai.generate_range_report,
            "get_history_data": self.get_history_data,
        })

    def list_commands(self) -> list[str]:
        return sorted(self._handlers)

    def dispatch(self, command: str, **kwargs: Any) -> CommandResult:
        handler = self._handlers.get(command)
        if handler is None:
            return CommandResult(ok=False, error=f"Unknown command: {command}")
        try:
            inspect.signature(handler).bind(**kwargs)
        except TypeError as exc:
            return CommandResult(ok=False, error=f"Invalid arguments for {command}: {exc}")
        try:
            return CommandResult(ok=True, data=handler(**kwargs))
        except DayJournalError as exc:
            logger.debug("Command %s failed: %s", command, exc)
            return CommandResult(ok=False, error=str(exc))

    def save_api_config(self, api_key: str, api_url: str, model: str) -> None:
        self.config_store.save_config(ApiConfig(api_key=api_key, api_url=api_url, model=model))

    def get_api_config(self) -> Optional[dict[str, str]]:
        config = self.config_store.load_config()
        return config.to_dict() if config is not None else None

    def get_today_records(self, today: Optional[str] = None) -> dict[str, Any]:
        return self.records.get_today_records(today).to_dict()

    def get_records_by_date_range(self, start_date: str, end_date: str) -> dict[str, Any]:
        return self.records.get_records_by_date_range(start_date, end_date).to_dict()

    def get_prompts(self) -> list[dict[str, Any]]:
        return [prompt.to_dict() for prompt in self.prompts.get_prompts()]

    def get_history_data(self, start_date: str, end_date: Optional[str] = None) -> dict[str, Any]:
        start = normalize_day(start_date)
        end = normalize_day(end_date) if end_date else date.today().isoformat()
        records = self.records.get_records_by_date_range(start, end)
        return history_data(records, start, end)
