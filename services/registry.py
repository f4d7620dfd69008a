"""Registry enumeration through ``reg.exe query``."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable

from services.errors import SubprocessFailure
from services.process import CommandRunner, SubprocessRunner, run_checked

logger = logging.getLogger(__name__)

REG_EXECUTABLE = "reg.exe"
ENTRY_PATTERN = re.compile(r"^\s+(\w+)\s+([A-Z_]+)\s*(.*)")


@dataclass(frozen=True)
class RegistryEntry:
    """One value under a registry branch.

    ``root`` is the full branch path, for example
    ``HKEY_LOCAL_MACHINE\\SOFTWARE\\Microsoft\\Windows\\CurrentVersion\\Uninstall\\DirectDrawEx``;
    ``type`` is the value type tag such as ``REG_SZ`` or ``REG_DWORD``;
    ``value`` may be empty.
    """

    root: str
    key: str
    type: str
    value: str = ""


@dataclass(frozen=True)
class RegistryQueryResult:
    root: str
    entries: list[RegistryEntry] = field(default_factory=list)
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


def _parse_block(root: str | None, block: Iterable[str]) -> list[RegistryEntry]:
    if not root:
        return []
    entries: list[RegistryEntry] = []
    for line in block:
        match = ENTRY_PATTERN.match(line)
        if match:
            entries.append(RegistryEntry(root, match.group(1), match.group(2), match.group(3) or ""))
    return entries


def parse_reg_query_output(output: str) -> list[RegistryEntry]:
    """Flatten ``reg query /s`` output into a list of entries.

    Zero-indent lines name a branch; the indented lines after it hold
    ``<key> <TYPE> <value>`` triples. Lines of any other shape are dropped.
    """
    result: list[RegistryEntry] = []
    root: str | None = None
    block: list[str] = []
    for raw_line in output.split("\n"):
        line = raw_line.rstrip()
        if not line:
            continue
        indent = len(line) - len(line.lstrip())
        if indent == 0:
            result.extend(_parse_block(root, block))
            root = line
            block = []
        else:
            block.append(line)
    result.extend(_parse_block(root, block))
    return result


class RegistryClient:
    """Lists a registry tree recursively under a root such as ``HKLM\\Software\\Microsoft``.

    The lookup happens in the registry view matching the current process
    architecture. Failures never escape: a missing root, a missing ``reg.exe``
    and a permission problem all produce an empty, failed result.
    """

    def __init__(self, *, command_runner: CommandRunner | None = None) -> None:
        self._runner = command_runner or SubprocessRunner()

    def query(self, root: str) -> RegistryQueryResult:
        try:
            completed = run_checked(self._runner, [REG_EXECUTABLE, "query", root, "/s"])
        except SubprocessFailure as exc:
            logger.debug("Registry query of %s failed: %s", root, exc)
            return RegistryQueryResult(root, [], str(exc))
        return RegistryQueryResult(root, parse_reg_query_output(completed.stdout))

    def entries(self, root: str) -> list[RegistryEntry]:
        return self.query(root).entries
