"""WinAppDriver installation orchestration."""
from __future__ import annotations

import enum
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from services.downloader import DownloadedArtifact, WadDownloader
from services.errors import (
    InstallationFailure,
    InsufficientPrivilegeError,
    UnsupportedPlatformError,
    WadNotFoundError,
    WadSetupError,
)
from services.locator import WadLocator
from services.privilege import PrivilegeCheck
from services.process import CommandRunner, SubprocessRunner
from wad_setup.constants import WAD_PRODUCT, WAD_RELEASE, WadRelease
from wad_setup.environment import HostEnvironment

logger = logging.getLogger(__name__)


class SetupStage(enum.Enum):
    IDLE = "idle"
    LOCATING = "locating"
    FOUND = "found"
    CHECKING_PRIVILEGE = "checking_privilege"
    UNPRIVILEGED = "unprivileged"
    DOWNLOADING = "downloading"
    VERIFYING = "verifying"
    INSTALLING = "installing"
    CLEANING_UP = "cleaning_up"
    INSTALLED = "installed"
    FAILED = "failed"


@dataclass(frozen=True)
class SetupResult:
    stage: SetupStage
    executable: Path | None

    @property
    def freshly_installed(self) -> bool:
        return self.stage is SetupStage.INSTALLED


class WadInstaller:
    def __init__(
        self,
        environment: HostEnvironment | None = None,
        *,
        locator: WadLocator | None = None,
        privilege: PrivilegeCheck | None = None,
        downloader: WadDownloader | None = None,
        command_runner: CommandRunner | None = None,
        release: WadRelease = WAD_RELEASE,
    ) -> None:
        self._environment = environment or HostEnvironment.current()
        self._runner = command_runner or SubprocessRunner()
        self._locator = locator or WadLocator(self._environment)
        self._privilege = privilege or PrivilegeCheck(self._environment, command_runner=self._runner)
        self._downloader = downloader or WadDownloader(self._environment, release=release)
        self._release = release
        self.stage = SetupStage.IDLE

    def _enter(self, stage: SetupStage) -> None:
        logger.debug("Setup stage: %s -> %s", self.stage.value, stage.value)
        self.stage = stage

    def setup(self) -> SetupResult:
        """Return the WinAppDriver location, installing it first when missing."""
        if not self._environment.is_windows:
            raise UnsupportedPlatformError("Can only download WinAppDriver on Windows!")

        self._enter(SetupStage.LOCATING)
        try:
            executable = self._locator.locate()
        except WadNotFoundError:
            logger.info("WinAppDriver doesn't exist, setting up")
        else:
            self._enter(SetupStage.FOUND)
            return SetupResult(SetupStage.FOUND, executable)

        self._enter(SetupStage.CHECKING_PRIVILEGE)
        if not self._privilege.has_elevated_privileges():
            self._enter(SetupStage.UNPRIVILEGED)
            raise InsufficientPrivilegeError(
                "You are not running as an administrator so WinAppDriver cannot be installed for you; "
                "please re-run as administrator"
            )

        try:
            self._enter(SetupStage.DOWNLOADING)
            installer_path = self._downloader.fetch()
            self._enter(SetupStage.VERIFYING)
            artifact = self._downloader.verify(installer_path)
            logger.debug("Installer checksum verified: %s", artifact.checksum)
            with artifact:
                self._run_installer(artifact)
                self._enter(SetupStage.CLEANING_UP)
        except WadSetupError:
            self._enter(SetupStage.FAILED)
            raise

        self._enter(SetupStage.INSTALLED)
        return SetupResult(SetupStage.INSTALLED, self._expected_install_path())

    def _run_installer(self, artifact: DownloadedArtifact) -> None:
        self._enter(SetupStage.INSTALLING)
        logger.info("Running installer")
        cmd = [str(artifact.path), *self._release.installer_args]
        try:
            completed: subprocess.CompletedProcess[str] = self._runner.run(cmd)
        except OSError as exc:
            raise InstallationFailure(cmd, None, message=f"Cannot start the installer: {exc}") from exc
        if completed.returncode != 0:
            raise InstallationFailure(cmd, completed.returncode, completed.stdout or "", completed.stderr or "")

    def _expected_install_path(self) -> Path | None:
        candidates = self._locator.default_install_paths()
        if not candidates:
            return None
        logger.debug("Assuming %s was installed under %s", WAD_PRODUCT.executable_name, candidates[0].parent)
        return candidates[0]
