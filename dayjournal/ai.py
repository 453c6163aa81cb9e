from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional, Union

import requests

from .config import ConfigStore
from .errors import ConfigMissing, NetworkError, PromptNotFound, ResponseParseError
from .models import ApiConfig, TodayRecords
from .prompts import PromptStore
from .records import RecordStore
from .timestamps import clock_time, normalize_day

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "你是一个专业的日报助手，擅长用简洁、专业的语言总结工作内容。"
NO_REPLY = "未获取到回复"

DAILY_HEADER = "请根据以下内容生成一份日报:\n\n"
IDEAS_HEADING = "【今日想法】\n"
TASKS_HEADING = "【已完成事项】\n"
DAILY_FOOTER = "\n请以专业、简洁的格式生成日报。"


class AIBridge:
    """Sends journal content to an OpenAI-compatible chat completion endpoint."""

    def __init__(
        self,
        config_store: ConfigStore,
        records: RecordStore,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        prompts: Optional[PromptStore] = None,
    ):
        self._config_store = config_store
        self._records = records
        self._session = session
        self._timeout = timeout
        self._prompts = prompts

    def send_message(
        self,
        text: str,
        history: Optional[list[dict[str, str]]] = None,
        system_prompt: Optional[str] = None,
    ) -> str:
        config = self._config_store.load_config()
        if config is None:
            raise ConfigMissing("AI is not configured: save an API key, URL and model first.")

        messages = [{"role": "system", "content": system_prompt or SYSTEM_PROMPT}]
        for turn in history or []:
            role = str(turn.get("role", "")).strip()
            content = str(turn.get("content", ""))
            if role in {"user", "assistant"}:
                messages.append({"role": role, "content": content})
        messages.append({"role": "user", "content": text})

        payload = {"model": config.model, "messages": messages, "stream": False}
        data = self._post_chat_completion(config, payload)
        return _extract_reply(data)

    def generate_daily_report(
        self,
        today: Union[str, date, None] = None,
        prompt_name: Optional[str] = None,
    ) -> str:
        system_prompt = self._stored_prompt(prompt_name)
        records = self._records.get_today_records(today)
        return self.send_message(build_daily_report_prompt(records), system_prompt=system_prompt)

    def generate_range_report(
        self,
        start_date: Union[str, date],
        end_date: Union[str, date],
        prompt_name: Optional[str] = None,
    ) -> str:
        system_prompt = self._stored_prompt(prompt_name)
        records = self._records.get_records_by_date_range(start_date, end_date)
        prompt = build_range_report_prompt(records, normalize_day(start_date), normalize_day(end_date))
        return self.send_message(prompt, system_prompt=system_prompt)

    def _stored_prompt(self, prompt_name: Optional[str]) -> Optional[str]:
        """Content of the named prompt, or None to use the built-in one."""
        if not prompt_name:
            return None
        stored = self._prompts.get_prompt_by_name(prompt_name) if self._prompts is not None else None
        if stored is None:
            raise PromptNotFound(f"No stored prompt named: {prompt_name}")
        return stored.content

    def _post_chat_completion(self, config: ApiConfig, payload: dict[str, Any]) -> Any:
        url = _completions_url(config.api_url)
        post = self._session.post if self._session is not None else requests.post
        logger.debug("POST %s model=%s", url, config.model)
        try:
            response = post(
                url,
                json=payload,
                headers=_auth_headers(config.api_key),
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise NetworkError(f"AI request failed: {exc}") from exc

        if not response.ok:
            body = response.text[:500]
            raise NetworkError(f"AI request failed ({response.status_code}): {body}")

        try:
            return response.json()
        except ValueError as exc:
            raise ResponseParseError("AI provider returned non-JSON response.") from exc


def build_daily_report_prompt(records: TodayRecords) -> str:
    prompt = DAILY_HEADER

    if records.ideas:
        prompt += IDEAS_HEADING
        for idea in records.ideas:
            prompt += f"- {idea.content}\n"
        prompt += "\n"

    if records.tasks:
        prompt += TASKS_HEADING
        for task in records.tasks:
            prompt += f"- [{_time_range(task.start_time, task.end_time)}] {task.content}\n"

    return prompt + DAILY_FOOTER


def build_range_report_prompt(records: TodayRecords, start_date: str, end_date: str) -> str:
    prompt = f"请根据以下内容生成 {start_date} 至 {end_date} 的工作总结:\n\n"

    if records.ideas:
        prompt += "【想法】\n"
        for idea in records.ideas:
            prompt += f"- [{idea.date}] {idea.content}\n"
        prompt += "\n"

    if records.tasks:
        prompt += TASKS_HEADING
        for task in records.tasks:
            prompt += (
                f"- [{task.date} {_time_range(task.start_time, task.end_time)}] {task.content}\n"
            )

    return prompt + "\n请以专业、简洁的格式生成总结。"


def history_data(records: TodayRecords, start_date: str, end_date: str) -> dict[str, Any]:
    """Structured view of a date range, as handed to the chat model."""
    return {
        "ideas": [
            {
                "id": idea.id,
                "content": idea.content,
                "date": idea.date,
                "created_at": idea.created_at,
                "attachments": list(idea.attachments),
            }
            for idea in records.ideas
        ],
        "tasks": [
            {
                "id": task.id,
                "content": task.content,
                "date": task.date,
                "start_time": task.start_time,
                "end_time": task.end_time,
                "duration": task.duration_seconds,
                "attachments": list(task.attachments),
            }
            for task in records.tasks
        ],
        "summary": {
            "total_ideas": len(records.ideas),
            "total_tasks": len(records.tasks),
            "date_range": f"{start_date} 至 {end_date}",
        },
    }


def _time_range(start: int, end: int) -> str:
    return f"{clock_time(start)}-{clock_time(end)}"


def _completions_url(api_url: str) -> str:
    return f"{api_url.strip().rstrip('/')}/chat/completions"


def _auth_headers(api_key: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {api_key.strip()}"}


def _extract_reply(data: Any) -> str:
    if not isinstance(data, dict):
        return NO_REPLY
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return NO_REPLY
    message = choices[0].get("message")
    if not isinstance(message, dict):
        return NO_REPLY
    content = message.get("content")
    if isinstance(content, str):
        return content
    return NO_REPLY
