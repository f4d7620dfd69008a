"""Admin privilege helpers for Windows."""
from __future__ import annotations

import ctypes
import logging
import sys
import threading
from typing import Sequence

from services.errors import SubprocessFailure
from services.process import CommandRunner, SubprocessRunner, run_checked
from wad_setup.environment import HostEnvironment

logger = logging.getLogger(__name__)


class PrivilegeCheck:
    """Memoized elevation probe.

    ``fsutil dirty query`` on the system drive only succeeds for elevated
    processes. The answer is computed once; a privilege change later in the
    same process is not noticed.
    """

    def __init__(
        self,
        environment: HostEnvironment | None = None,
        *,
        command_runner: CommandRunner | None = None,
    ) -> None:
        self._environment = environment or HostEnvironment.current()
        self._runner = command_runner or SubprocessRunner()
        self._lock = threading.Lock()
        self._elevated: bool | None = None

    def has_elevated_privileges(self) -> bool:
        with self._lock:
            if self._elevated is None:
                self._elevated = self._probe()
            return self._elevated

    def _probe(self) -> bool:
        try:
            run_checked(self._runner, ["fsutil.exe", "dirty", "query", self._environment.system_drive])
        except SubprocessFailure:
            return False
        logger.debug("Running with elevated privileges")
        return True


def relaunch_as_admin(argv: Sequence[str]) -> bool:
    """Start ``argv`` again through the ``runas`` verb; ``argv[0]`` is the program."""
    if not sys.platform.startswith("win"):
        return False
    args = list(argv)
    executable = sys.executable
    if getattr(sys, "frozen", False):
        params = " ".join(f'"{arg}"' for arg in args[1:])
    else:
        params = " ".join(f'"{arg}"' for arg in args)
    result = ctypes.windll.shell32.ShellExecuteW(None, "runas", executable, params, None, 1)  # type: ignore[attr-defined]
    return result > 32
