from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from dayjournal import paths
from dayjournal.config import (
    JsonFileConfigStore,
    SettingsConfigStore,
    open_config_store,
)
from dayjournal.database import JournalDatabase
from dayjournal.errors import ConfigCorrupt
from dayjournal.models import ApiConfig

CONFIG = ApiConfig(api_key="sk-test", api_url="https://api.example.com/v1", model="gpt-4o-mini")


class SettingsConfigStoreTests(unittest.TestCase):
    def test_round_trip_and_overwrite(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            store = SettingsConfigStore(JournalDatabase(Path(tmp_dir) / "data.db"))
            self.assertIsNone(store.load_config())
            store.save_config(CONFIG)
            self.assertEqual(store.load_config(), CONFIG)

            replacement = ApiConfig(api_key="sk-new", api_url="http://localhost:1234/v1", model="local")
            store.save_config(replacement)
            self.assertEqual(store.load_config(), replacement)

    def test_partial_rows_count_as_absent(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            db = JournalDatabase(Path(tmp_dir) / "data.db")
            db.write("INSERT INTO configs(key, value) VALUES ('api_key', 'sk-only')")
            self.assertIsNone(SettingsConfigStore(db).load_config())


class JsonFileConfigStoreTests(unittest.TestCase):
    def test_round_trip(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            store = JsonFileConfigStore(Path(tmp_dir) / "conf" / "ai_config.json")
            self.assertIsNone(store.load_config())
            store.save_config(CONFIG)
            self.assertEqual(store.load_config(), CONFIG)
            on_disk = json.loads(store.config_file.read_text(encoding="utf-8"))
            self.assertEqual(on_disk, CONFIG.to_dict())

    def test_unparseable_file_is_corrupt(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = Path(tmp_dir) / "ai_config.json"
            path.write_text("{not json", encoding="utf-8")
            with self.assertRaises(ConfigCorrupt):
                JsonFileConfigStore(path).load_config()

    def test_missing_field_is_corrupt(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            path = Path(tmp_dir) / "ai_config.json"
            path.write_text(json.dumps({"api_key": "k", "api_url": "u"}), encoding="utf-8")
            with self.assertRaises(ConfigCorrupt):
                JsonFileConfigStore(path).load_config()

    def test_default_location_uses_config_directory(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            with mock.patch.dict("os.environ", {paths.HOME_ENV: tmp_dir}):
                store = JsonFileConfigStore()
            self.assertEqual(store.config_file, Path(tmp_dir) / "ai_config.json")


class OpenConfigStoreTests(unittest.TestCase):
    def test_selects_backend(self) -> None:
        with tempfile.TemporaryDirectory() as tmp_dir:
            db = JournalDatabase(Path(tmp_dir) / "data.db")
            self.assertIsInstance(open_config_store("database", database=db), SettingsConfigStore)
            self.assertIsInstance(
                open_config_store("file", config_file=Path(tmp_dir) / "c.json"),
                JsonFileConfigStore,
            )
            with self.assertRaises(ValueError):
                open_config_store("database")
            with self.assertRaises(ValueError):
                open_config_store("cloud")


if __name__ == "__main__":
    unittest.main()
