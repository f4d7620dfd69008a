"""Snapshot of the host process state consumed by the setup services."""
from __future__ import annotations

import os
import platform
import sys
from dataclasses import dataclass, field
from typing import Mapping


@dataclass(frozen=True)
class HostEnvironment:
    variables: Mapping[str, str] = field(default_factory=dict)
    machine: str = ""
    platform: str = ""

    @classmethod
    def current(cls) -> "HostEnvironment":
        return cls(variables=dict(os.environ), machine=platform.machine(), platform=sys.platform)

    def get(self, name: str) -> str | None:
        value = self.variables.get(name)
        if value is None or not value.strip():
            return None
        return value

    @property
    def is_windows(self) -> bool:
        return self.platform.startswith("win")

    @property
    def system_drive(self) -> str:
        return self.get("SystemDrive") or "C:"

    def program_roots(self) -> list[str]:
        """Program Files style roots in lookup order, unset ones skipped."""
        candidates = [
            self.get("ProgramFiles(x86)"),
            self.get("ProgramFiles"),
            f"{self.system_drive}\\Program Files",
        ]
        roots: list[str] = []
        for candidate in candidates:
            if candidate and candidate not in roots:
                roots.append(candidate)
        return roots
