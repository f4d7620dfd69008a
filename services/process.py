"""Subprocess seam shared by the setup services."""
from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import Protocol, Sequence

from services.errors import SubprocessFailure


@dataclass
class CommandExecutionResult:
    command: Sequence[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0


class CommandRunner(Protocol):
    def run(self, command: Sequence[str]) -> subprocess.CompletedProcess[str]:  # pragma: no cover - protocol
        ...


class SubprocessRunner:
    def run(self, command: Sequence[str]) -> subprocess.CompletedProcess[str]:
        return subprocess.run(list(command), capture_output=True, text=True, check=False)


def run_checked(runner: CommandRunner, command: Sequence[str]) -> CommandExecutionResult:
    """Run ``command`` and raise :class:`SubprocessFailure` unless it exits with 0."""
    try:
        completed = runner.run(command)
    except OSError as exc:
        raise SubprocessFailure(command, None, message=f"Cannot run '{command[0]}': {exc}") from exc
    result = CommandExecutionResult(command, completed.returncode, completed.stdout or "", completed.stderr or "")
    if not result.succeeded:
        raise SubprocessFailure(command, result.returncode, result.stdout, result.stderr)
    return result
