"""
AI credential storage.

Two interchangeable backends share one contract; a deployment picks one of
them with ``open_config_store``:

* ``SettingsConfigStore`` keeps three key/value rows in the ``configs`` table.
* ``JsonFileConfigStore`` keeps one JSON document in the user config directory.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from .database import JournalDatabase
from .errors import ConfigCorrupt
from .models import ApiConfig
from . import paths

logger = logging.getLogger(__name__)

CONFIG_KEYS = ("api_key", "api_url", "model")

BACKEND_DATABASE = "database"
BACKEND_FILE = "file"


class ConfigStore(ABC):
    """Saves and loads the single ApiConfig instance."""

    @abstractmethod
    def save_config(self, config: ApiConfig) -> None:
        """Replace the stored configuration wholesale."""

    @abstractmethod
    def load_config(self) -> Optional[ApiConfig]:
        """Return the stored configuration, or None when nothing is saved."""


class SettingsConfigStore(ConfigStore):
    def __init__(self, database: JournalDatabase):
        self._db = database

    def save_config(self, config: ApiConfig) -> None:
        values = config.to_dict()
        self._db.write_many(
            """
            INSERT INTO configs(key, value)
            VALUES(?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value
            """,
            [(key, values[key]) for key in CONFIG_KEYS],
        )

    def load_config(self) -> Optional[ApiConfig]:
        placeholders = ", ".join("?" for _ in CONFIG_KEYS)
        rows = self._db.query(
            f"SELECT key, value FROM configs WHERE key IN ({placeholders})",
            CONFIG_KEYS,
        )
        values = {str(row["key"]): str(row["value"]) for row in rows if row["value"] is not None}
        if any(key not in values for key in CONFIG_KEYS):
            return None
        return ApiConfig(**{key: values[key] for key in CONFIG_KEYS})


class JsonFileConfigStore(ConfigStore):
    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = Path(config_file) if config_file else paths.config_file_path()

    def save_config(self, config: ApiConfig) -> None:
        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w", encoding="utf-8") as f:
            json.dump(config.to_dict(), f, indent=2, ensure_ascii=False)
        logger.debug("Saved AI config to %s", self.config_file)

    def load_config(self) -> Optional[ApiConfig]:
        if not self.config_file.exists():
            return None
        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            raise ConfigCorrupt(f"Cannot read AI config {self.config_file}: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigCorrupt(f"AI config {self.config_file} is not a JSON object")
        missing = [key for key in CONFIG_KEYS if not isinstance(data.get(key), str)]
        if missing:
            raise ConfigCorrupt(
                f"AI config {self.config_file} is missing: {', '.join(missing)}"
            )
        return ApiConfig(**{key: data[key] for key in CONFIG_KEYS})


def open_config_store(
    backend: str,
    database: Optional[JournalDatabase] = None,
    config_file: Optional[Path] = None,
) -> ConfigStore:
    if backend == BACKEND_DATABASE:
        if database is None:
            raise ValueError("The database config backend needs a database handle.")
        return SettingsConfigStore(database)
    if backend == BACKEND_FILE:
        return JsonFileConfigStore(config_file)
    raise ValueError(f"Unsupported config backend: {backend}")
