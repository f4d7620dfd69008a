"""User-configurable settings persisted locally."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any


SETTINGS_DIRNAME = ".wad_setup"
SETTINGS_FILENAME = "settings.json"


def default_settings_path() -> Path:
    return Path.home() / SETTINGS_DIRNAME / SETTINGS_FILENAME


@dataclass
class UserSettings:
    wad_path: str = ""
    download_timeout: float | None = None
    log_file: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "wad_path": self.wad_path,
            "download_timeout": self.download_timeout,
            "log_file": self.log_file,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserSettings":
        def _get(key: str) -> str:
            value = data.get(key, "")
            return str(value) if value is not None else ""

        timeout: float | None
        try:
            timeout = float(data["download_timeout"])
        except (KeyError, TypeError, ValueError):
            timeout = None
        if timeout is not None and timeout <= 0:
            timeout = None
        return cls(
            wad_path=_get("wad_path"),
            download_timeout=timeout,
            log_file=_get("log_file"),
        )

    def wad_path_override(self) -> Path | None:
        path_str = self.wad_path.strip()
        if not path_str:
            return None
        return Path(path_str)


class SettingsStore:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path or default_settings_path()

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def load(self) -> UserSettings:
        if not self._path.exists():
            return UserSettings()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            return UserSettings()
        if not isinstance(data, dict):
            return UserSettings()
        return UserSettings.from_dict(data)

    def save(self, settings: UserSettings) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(settings.to_dict(), indent=2, sort_keys=True)
        self._path.write_text(payload, encoding="utf-8")
