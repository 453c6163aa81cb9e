from __future__ import annotations

import os
from pathlib import Path

APP_DIR_NAME = "DayJournal"
HOME_ENV = "DAYJOURNAL_HOME"


def config_directory() -> Path:
    override = os.environ.get(HOME_ENV)
    if override:
        return Path(override)
    if os.name == "nt":
        local_appdata = os.environ.get("LOCALAPPDATA")
        if local_appdata:
            base = Path(local_appdata)
        else:
            base = Path.home() / "AppData" / "Local"
        return base / APP_DIR_NAME
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / APP_DIR_NAME.lower()


def database_path() -> Path:
    return config_directory() / "data.db"


def config_file_path() -> Path:
    return config_directory() / "ai_config.json"


def ensure_directories() -> None:
    config_directory().mkdir(parents=True, exist_ok=True)
