"""Error kinds raised while locating or installing WinAppDriver."""
from __future__ import annotations

from pathlib import Path
from typing import Sequence


class WadSetupError(RuntimeError):
    pass


class WadNotFoundError(WadSetupError):
    def __init__(self, executable_name: str, candidates: Sequence[Path]) -> None:
        self.candidates = tuple(candidates)
        listed = ", ".join(str(path) for path in self.candidates) or "(none)"
        super().__init__(f"{executable_name} has not been found in any of these locations: {listed}. Is it installed?")


class UnsupportedPlatformError(WadSetupError):
    pass


class UnsupportedArchitectureError(WadSetupError):
    def __init__(self, architecture: str, supported: Sequence[str]) -> None:
        self.architecture = architecture
        self.supported = tuple(supported)
        super().__init__(
            f"System architecture '{architecture}' is not supported by Windows Application Driver. "
            f"The only supported architectures are: {', '.join(self.supported)}"
        )


class DownloadError(WadSetupError):
    pass


class ChecksumMismatchError(WadSetupError):
    def __init__(self, expected: str, actual: str, path: Path | None = None) -> None:
        self.expected = expected
        self.actual = actual
        self.path = path
        super().__init__(f"Installer executable checksum validation error: expected {expected} but got {actual}")


class InsufficientPrivilegeError(WadSetupError):
    pass


class SubprocessFailure(WadSetupError):
    def __init__(
        self,
        command: Sequence[str],
        returncode: int | None,
        stdout: str = "",
        stderr: str = "",
        *,
        message: str | None = None,
    ) -> None:
        self.command = tuple(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        if message is None:
            detail = (stderr or stdout).strip()
            message = f"'{' '.join(self.command)}' exited with code {returncode}"
            if detail:
                message = f"{message}: {detail}"
        super().__init__(message)


class InstallationFailure(SubprocessFailure):
    pass
