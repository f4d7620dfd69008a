from __future__ import annotations

import hashlib
import subprocess
from dataclasses import replace
from pathlib import Path
from typing import Sequence

import pytest

from services.downloader import WadDownloader
from services.errors import (
    ChecksumMismatchError,
    InstallationFailure,
    InsufficientPrivilegeError,
    UnsupportedPlatformError,
    WadNotFoundError,
)
from services.installer import SetupStage, WadInstaller
from wad_setup.constants import WAD_RELEASE
from wad_setup.environment import HostEnvironment

PAYLOAD = b"MZ installer"


class FakeLocator:
    def __init__(self, path: Path | None, roots: list[Path] | None = None) -> None:
        self.path = path
        self.roots = roots or []
        self.calls = 0

    def locate(self) -> Path:
        self.calls += 1
        if self.path is None:
            raise WadNotFoundError("WinAppDriver.exe", self.roots)
        return self.path

    def default_install_paths(self) -> list[Path]:
        return list(self.roots)


class FakePrivilege:
    def __init__(self, elevated: bool) -> None:
        self.elevated = elevated
        self.calls = 0

    def has_elevated_privileges(self) -> bool:
        self.calls += 1
        return self.elevated


class FakeFetcher:
    def __init__(self) -> None:
        self.destinations: list[Path] = []

    def __call__(self, url: str, destination: Path, timeout: float) -> None:
        self.destinations.append(destination)
        destination.write_bytes(PAYLOAD)


class InstallerRunner:
    def __init__(self, returncode: int = 0) -> None:
        self.returncode = returncode
        self.commands: list[tuple[str, ...]] = []
        self.installer_present: list[bool] = []

    def run(self, command: Sequence[str]) -> subprocess.CompletedProcess[str]:
        self.commands.append(tuple(command))
        self.installer_present.append(Path(command[0]).exists())
        return subprocess.CompletedProcess(command, self.returncode, "", "Error 1603")


WINDOWS = HostEnvironment(variables={"ProgramFiles(x86)": "C:\\Program Files (x86)"}, machine="AMD64", platform="win32")


def _downloader(tmp_path: Path, fetcher: FakeFetcher, checksum: str | None = None) -> WadDownloader:
    md5 = checksum or hashlib.md5(PAYLOAD).hexdigest()
    release = replace(WAD_RELEASE, md5_checksums={"x64": md5})
    return WadDownloader(WINDOWS, release=release, download_dir=tmp_path, fetcher=fetcher)


def _installer(
    tmp_path: Path,
    *,
    locator: FakeLocator,
    privilege: FakePrivilege,
    fetcher: FakeFetcher | None = None,
    runner: InstallerRunner | None = None,
    checksum: str | None = None,
    environment: HostEnvironment = WINDOWS,
) -> WadInstaller:
    return WadInstaller(
        environment,
        locator=locator,  # type: ignore[arg-type]
        privilege=privilege,  # type: ignore[arg-type]
        downloader=_downloader(tmp_path, fetcher or FakeFetcher(), checksum),
        command_runner=runner or InstallerRunner(),
    )


def test_existing_install_is_returned(tmp_path: Path) -> None:
    exe = tmp_path / "WinAppDriver.exe"
    privilege = FakePrivilege(True)
    fetcher = FakeFetcher()
    installer = _installer(tmp_path, locator=FakeLocator(exe), privilege=privilege, fetcher=fetcher)

    result = installer.setup()

    assert result.stage is SetupStage.FOUND
    assert result.executable == exe
    assert not result.freshly_installed
    assert privilege.calls == 0
    assert fetcher.destinations == []


def test_unprivileged_caller_never_downloads(tmp_path: Path) -> None:
    fetcher = FakeFetcher()
    installer = _installer(tmp_path, locator=FakeLocator(None), privilege=FakePrivilege(False), fetcher=fetcher)

    with pytest.raises(InsufficientPrivilegeError) as excinfo:
        installer.setup()

    assert "administrator" in str(excinfo.value)
    assert fetcher.destinations == []
    assert installer.stage is SetupStage.UNPRIVILEGED


def test_install_runs_silently_and_cleans_up(tmp_path: Path) -> None:
    expected = Path("C:\\Program Files (x86)") / "Windows Application Driver" / "WinAppDriver.exe"
    locator = FakeLocator(None, roots=[expected])
    runner = InstallerRunner()
    fetcher = FakeFetcher()
    installer = _installer(tmp_path, locator=locator, privilege=FakePrivilege(True), fetcher=fetcher, runner=runner)

    result = installer.setup()

    installer_path = fetcher.destinations[0]
    assert runner.commands == [(str(installer_path), "/install", "/quiet", "/norestart")]
    assert runner.installer_present == [True]
    assert not installer_path.exists()
    assert result.stage is SetupStage.INSTALLED
    assert result.executable == expected
    assert locator.calls == 1


def test_failed_install_still_removes_installer(tmp_path: Path) -> None:
    runner = InstallerRunner(returncode=1603)
    fetcher = FakeFetcher()
    installer = _installer(tmp_path, locator=FakeLocator(None), privilege=FakePrivilege(True), fetcher=fetcher, runner=runner)

    with pytest.raises(InstallationFailure) as excinfo:
        installer.setup()

    assert excinfo.value.returncode == 1603
    assert "Error 1603" in str(excinfo.value)
    assert not fetcher.destinations[0].exists()
    assert installer.stage is SetupStage.FAILED


def test_checksum_failure_skips_installer(tmp_path: Path) -> None:
    runner = InstallerRunner()
    installer = _installer(
        tmp_path,
        locator=FakeLocator(None),
        privilege=FakePrivilege(True),
        runner=runner,
        checksum="f" * 32,
    )

    with pytest.raises(ChecksumMismatchError):
        installer.setup()

    assert runner.commands == []
    assert list(tmp_path.iterdir()) == []
    assert installer.stage is SetupStage.FAILED


def test_non_windows_host_is_rejected(tmp_path: Path) -> None:
    locator = FakeLocator(tmp_path / "WinAppDriver.exe")
    linux = HostEnvironment(variables={}, machine="x86_64", platform="linux")
    installer = _installer(tmp_path, locator=locator, privilege=FakePrivilege(True), environment=linux)

    with pytest.raises(UnsupportedPlatformError):
        installer.setup()
    assert locator.calls == 0
