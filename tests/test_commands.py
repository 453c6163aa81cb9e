from __future__ import annotations

import contextlib
import io
import json
import tempfile
import unittest
from datetime import datetime
from pathlib import Path
from unittest import mock

from dayjournal.app import build_commands, main


def _ts(*parts: int) -> int:
    return int(datetime(*parts).timestamp())


class CommandDispatchTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        root = Path(self._tmp.name)
        self.commands = build_commands(
            db_file=root / "data.db",
            config_backend="database",
        )

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_lists_every_command(self) -> None:
        self.assertEqual(
            self.commands.list_commands(),
            sorted([
                "save_api_config", "get_api_config", "add_idea", "delete_idea",
                "add_done_task", "delete_task", "get_today_records",
                "get_records_by_date_range", "add_prompt", "get_prompts",
                "update_prompt", "delete_prompt", "send_ai_message",
                "generate_daily_report", "generate_range_report", "get_history_data",
            ]),
        )

    def test_records_flow_returns_json_ready_values(self) -> None:
        added = self.commands.dispatch(
            "add_idea", content="buy milk", attachments=["list.txt"], created_at="2024-01-15T10:00:00"
        )
        self.assertTrue(added.ok)
        result = self.commands.dispatch(
            "get_records_by_date_range", start_date="2024-01-15", end_date="2024-01-15"
        )
        self.assertTrue(result.ok)
        idea = result.data["ideas"][0]
        self.assertEqual(idea["id"], added.data)
        self.assertEqual(idea["attachments"], ["list.txt"])
        json.dumps(result.to_dict())

    def test_errors_become_messages(self) -> None:
        bad = self.commands.dispatch("add_idea", content="x", attachments=[], created_at="whenever")
        self.assertFalse(bad.ok)
        self.assertIn("Invalid timestamp", bad.error)

        self.commands.dispatch("add_prompt", name="daily", content="a")
        duplicate = self.commands.dispatch("add_prompt", name="daily", content="b")
        self.assertEqual(duplicate.to_dict(), {"ok": False, "error": "Prompt name already exists: daily"})

        self.assertFalse(self.commands.dispatch("no_such_command").ok)
        self.assertFalse(self.commands.dispatch("delete_idea").ok)

    def test_config_round_trip_and_missing_config_message(self) -> None:
        self.assertIsNone(self.commands.dispatch("get_api_config").data)
        with mock.patch("dayjournal.ai.requests.post") as post:
            result = self.commands.dispatch("send_ai_message", text="hello")
            post.assert_not_called()
        self.assertFalse(result.ok)
        self.assertIn("not configured", result.error)

        saved = self.commands.dispatch(
            "save_api_config", api_key="k", api_url="http://localhost:1234/v1", model="m"
        )
        self.assertTrue(saved.ok)
        self.assertEqual(
            self.commands.dispatch("get_api_config").data,
            {"api_key": "k", "api_url": "http://localhost:1234/v1", "model": "m"},
        )

    def test_history_data(self) -> None:
        self.commands.dispatch(
            "add_done_task",
            content="review",
            start_time=_ts(2024, 2, 1, 9, 0),
            end_time=_ts(2024, 2, 1, 9, 45),
            attachments=[],
            created_at=_ts(2024, 2, 1, 9, 45),
        )
        result = self.commands.dispatch("get_history_data", start_date="2024-02-01", end_date="2024-02-01")
        self.assertTrue(result.ok)
        self.assertEqual(result.data["tasks"][0]["duration"], 45 * 60)
        self.assertEqual(result.data["summary"]["total_tasks"], 1)

    def test_report_commands_accept_stored_prompt_name(self) -> None:
        self.commands.dispatch("save_api_config", api_key="k", api_url="http://localhost:1234/v1", model="m")
        self.commands.dispatch("add_prompt", name="weekly", content="Summarise as a weekly digest.")
        reply = mock.Mock(ok=True, status_code=200)
        reply.json.return_value = {"choices": [{"message": {"content": "digest"}}]}
        with mock.patch("dayjournal.ai.requests.post", return_value=reply) as post:
            result = self.commands.dispatch(
                "generate_range_report", start_date="2024-01-08", end_date="2024-01-14", prompt_name="weekly"
            )
        self.assertEqual(result.to_dict(), {"ok": True, "data": "digest"})
        system = post.call_args.kwargs["json"]["messages"][0]
        self.assertEqual(system["content"], "Summarise as a weekly digest.")

        with mock.patch("dayjournal.ai.requests.post") as post:
            missing = self.commands.dispatch("generate_daily_report", prompt_name="nope")
            post.assert_not_called()
        self.assertEqual(missing.to_dict(), {"ok": False, "error": "No stored prompt named: nope"})

    def test_argument_mismatch_is_reported(self) -> None:
        result = self.commands.dispatch("delete_prompt", prompt_id=1, extra=True)
        self.assertFalse(result.ok)
        self.assertIn("Invalid arguments for delete_prompt", result.error)

    def test_handler_bugs_are_not_reported_as_bad_arguments(self) -> None:
        with mock.patch.object(self.commands.records, "get_today_records", side_effect=TypeError("boom")):
            with self.assertRaises(TypeError):
                self.commands.dispatch("get_today_records", today="2024-01-15")


class CliTests(unittest.TestCase):
    def _run(self, *argv: str) -> tuple[int, str]:
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = main(list(argv))
        return code, out.getvalue()

    def test_add_and_list_from_cli(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            db = str(Path(tmp_dir) / "data.db")
            code, _ = self._run("--db", db, "idea", "buy milk", "--at", "2024-01-15T10:00:00")
            self.assertEqual(code, 0)
            code, output = self._run("--db", db, "range", "2024-01-15", "2024-01-15")
            self.assertEqual(code, 0)
            payload = json.loads(output)
            self.assertEqual(payload["data"]["ideas"][0]["content"], "buy milk")

    def test_failure_exit_code(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            db = str(Path(tmp_dir) / "data.db")
            code, output = self._run("--db", db, "range", "yesterday", "2024-01-15")
            self.assertEqual(code, 1)
            self.assertFalse(json.loads(output)["ok"])

    def test_report_prompt_option(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            root = Path(tmp_dir)
            base = ["--db", str(root / "data.db"), "--config-file", str(root / "ai.json")]
            self._run(*base, "config-set", "--api-key", "k", "--api-url", "http://localhost:1234/v1", "--model", "m")
            self._run(*base, "prompt-add", "brief", "Keep it to one line.")
            reply = mock.Mock(ok=True, status_code=200)
            reply.json.return_value = {"choices": [{"message": {"content": "one line"}}]}
            with mock.patch("dayjournal.ai.requests.post", return_value=reply) as post:
                code, output = self._run(*base, "report", "--prompt", "brief")
            self.assertEqual(code, 0)
            self.assertEqual(json.loads(output)["data"], "one line")
            self.assertEqual(post.call_args.kwargs["json"]["messages"][0]["content"], "Keep it to one line.")

    def test_unopenable_database_prints_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            code, output = self._run("--db", tmp_dir, "today")
            self.assertEqual(code, 1)
            payload = json.loads(output)
            self.assertFalse(payload["ok"])
            self.assertIn("Database initialization failed", payload["error"])

    def test_version(self) -> None:
        code, output = self._run("--version")
        self.assertEqual(code, 0)
        self.assertEqual(output.strip(), "0.1.0")


if __name__ == "__main__":
    unittest.main()
