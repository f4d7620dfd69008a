from __future__ import annotations

from pathlib import Path

from wad_setup.user_settings import SettingsStore, UserSettings


def test_missing_file_yields_defaults(tmp_path: Path) -> None:
    store = SettingsStore(tmp_path / "settings.json")
    assert not store.exists()
    assert store.load() == UserSettings()


def test_round_trip(tmp_path: Path) -> None:
    store = SettingsStore(tmp_path / "nested" / "settings.json")
    store.save(UserSettings(wad_path="D:\\Tools\\WinAppDriver.exe", download_timeout=120.0, log_file="wad.log"))
    loaded = store.load()
    assert loaded.wad_path == "D:\\Tools\\WinAppDriver.exe"
    assert loaded.download_timeout == 120.0
    assert loaded.log_file == "wad.log"


def test_malformed_file_yields_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    assert SettingsStore(path).load() == UserSettings()
    path.write_text("[1, 2]", encoding="utf-8")
    assert SettingsStore(path).load() == UserSettings()


def test_invalid_timeout_is_ignored() -> None:
    assert UserSettings.from_dict({"download_timeout": "soon"}).download_timeout is None
    assert UserSettings.from_dict({"download_timeout": -5}).download_timeout is None
    assert UserSettings.from_dict({"download_timeout": None, "wad_path": None}).wad_path == ""


def test_wad_path_override() -> None:
    assert UserSettings().wad_path_override() is None
    assert UserSettings(wad_path="  C:\\wad.exe ").wad_path_override() == Path("C:\\wad.exe")
