from __future__ import annotations

import argparse
import json
import logging
import time
from pathlib import Path
from typing import Any

from . import __version__
from .ai import AIBridge
from .commands import CommandResult, JournalCommands
from .config import BACKEND_DATABASE, BACKEND_FILE, open_config_store
from .database import JournalDatabase
from .errors import DayJournalError
from .paths import config_file_path, database_path, ensure_directories
from .prompts import PromptStore
from .records import RecordStore


def build_commands(
    db_file: Path | None = None,
    config_backend: str = BACKEND_FILE,
    config_file: Path | None = None,
    timeout: float | None = None,
) -> JournalCommands:
    if db_file is None:
        ensure_directories()
        db_file = database_path()
    database = JournalDatabase(db_file)
    records = RecordStore(database)
    prompts = PromptStore(database)
    config_store = open_config_store(
        config_backend,
        database=database,
        config_file=config_file or config_file_path(),
    )
    return JournalCommands(
        records=records,
        prompts=prompts,
        config_store=config_store,
        ai=AIBridge(config_store, records, timeout=timeout, prompts=prompts),
    )


def _print_result(result: CommandResult) -> int:
    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    return 0 if result.ok else 1


def _command_arguments(args: argparse.Namespace) -> tuple[str, dict[str, Any]]:
    now = int(time.time())
    command = args.command
    if command == "config-set":
        return "save_api_config", {"api_key": args.api_key, "api_url": args.api_url, "model": args.model}
    if command == "config-show":
        return "get_api_config", {}
    if command == "idea":
        return "add_idea", {
            "content": args.content,
            "attachments": args.attach or [],
            "created_at": args.at or now,
        }
    if command == "task":
        return "add_done_task", {
            "content": args.content,
            "start_time": args.start,
            "end_time": args.end,
            "attachments": args.attach or [],
            "created_at": args.at or now,
        }
    if command == "delete-idea":
        return "delete_idea", {"idea_id": args.id}
    if command == "delete-task":
        return "delete_task", {"task_id": args.id}
    if command == "today":
        return "get_today_records", {}
    if command == "range":
        return "get_records_by_date_range", {"start_date": args.start, "end_date": args.end}
    if command == "history":
        return "get_history_data", {"start_date": args.start, "end_date": args.end}
    if command == "prompt-add":
        return "add_prompt", {"name": args.name, "content": args.content}
    if command == "prompt-update":
        return "update_prompt", {"prompt_id": args.id, "name": args.name, "content": args.content}
    if command == "prompt-delete":
        return "delete_prompt", {"prompt_id": args.id}
    if command == "prompts":
        return "get_prompts", {}
    if command == "chat":
        return "send_ai_message", {"text": args.message}
    if command == "report":
        if args.start:
            return "generate_range_report", {
                "start_date": args.start,
                "end_date": args.end or args.start,
                "prompt_name": args.prompt,
            }
        return "generate_daily_report", {"prompt_name": args.prompt}
    raise ValueError(f"Unsupported command: {command}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dayjournal")
    parser.add_argument("--version", action="store_true", help="Print version and exit")
    parser.add_argument("--db", type=Path, help="Database file (defaults to the user config directory)")
    parser.add_argument(
        "--config-backend",
        choices=[BACKEND_FILE, BACKEND_DATABASE],
        default=BACKEND_FILE,
        help="Where AI credentials are stored",
    )
    parser.add_argument("--config-file", type=Path, help="JSON config file for the file backend")
    parser.add_argument("--timeout", type=float, help="AI request timeout in seconds")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    config_set = sub.add_parser("config-set", help="Save AI credentials")
    config_set.add_argument("--api-key", required=True)
    config_set.add_argument("--api-url", required=True)
    config_set.add_argument("--model", required=True)
    sub.add_parser("config-show", help="Show saved AI credentials")

    idea = sub.add_parser("idea", help="Add an idea")
    idea.add_argument("content")
    idea.add_argument("--attach", action="append", help="Attachment path (repeatable)")
    idea.add_argument("--at", help="Timestamp (unix seconds or RFC-3339), defaults to now")

    task = sub.add_parser("task", help="Add a completed task")
    task.add_argument("content")
    task.add_argument("--start", required=True, help="Start time (unix seconds or RFC-3339)")
    task.add_argument("--end", required=True, help="End time (unix seconds or RFC-3339)")
    task.add_argument("--attach", action="append", help="Attachment path (repeatable)")
    task.add_argument("--at", help="Creation timestamp, defaults to now")

    for name in ("delete-idea", "delete-task", "prompt-delete"):
        deleter = sub.add_parser(name)
        deleter.add_argument("id", type=int)

    sub.add_parser("today", help="List today's ideas and tasks")
    for name in ("range", "history"):
        ranged = sub.add_parser(name, help="List records between two dates (YYYY-MM-DD)")
        ranged.add_argument("start")
        ranged.add_argument("end")

    prompt_add = sub.add_parser("prompt-add", help="Store a named prompt")
    prompt_add.add_argument("name")
    prompt_add.add_argument("content")
    prompt_update = sub.add_parser("prompt-update", help="Edit a stored prompt")
    prompt_update.add_argument("id", type=int)
    prompt_update.add_argument("name")
    prompt_update.add_argument("content")
    sub.add_parser("prompts", help="List stored prompts")

    chat = sub.add_parser("chat", help="Send a message to the AI endpoint")
    chat.add_argument("message")
    report = sub.add_parser("report", help="Generate an AI report for today or a date range")
    report.add_argument("--start", help="First day of the range (YYYY-MM-DD)")
    report.add_argument("--end", help="Last day of the range (YYYY-MM-DD)")
    report.add_argument("--prompt", help="Name of a stored prompt to use as the system prompt")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.version:
        print(__version__)
        return 0
    if not args.command:
        parser.print_help()
        return 2

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        commands = build_commands(
            db_file=args.db,
            config_backend=args.config_backend,
            config_file=args.config_file,
            timeout=args.timeout,
        )
    except DayJournalError as exc:
        return _print_result(CommandResult(ok=False, error=str(exc)))
    name, kwargs = _command_arguments(args)
    return _print_result(commands.dispatch(name, **kwargs))
