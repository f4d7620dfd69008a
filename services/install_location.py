"""Ask Windows Installer where an MSI product was installed."""
from __future__ import annotations

import logging
import tempfile
from pathlib import Path

from services.process import CommandRunner, SubprocessRunner, run_checked

logger = logging.getLogger(__name__)

SCRIPT_HOST = "cscript.exe"
SCRIPT_NAME = "get_wad_inst_location.vbs"

# The WAD MSI leaves InstallLocation empty, so the folder has to be costed.
_SCRIPT_TEMPLATE = """Set installer = CreateObject("WindowsInstaller.Installer")
Set session = installer.OpenProduct("{{{guid}}}")
session.DoAction("CostInitialize")
session.DoAction("CostFinalize")
WScript.Echo session.Property("INSTALLFOLDER")
"""


def normalize_guid(installer_guid: str) -> str:
    return installer_guid.strip().strip("{}")


def build_install_location_script(installer_guid: str) -> str:
    script = _SCRIPT_TEMPLATE.format(guid=normalize_guid(installer_guid))
    return script.replace("\n", "\r\n")


class InstallLocationResolver:
    def __init__(self, *, command_runner: CommandRunner | None = None) -> None:
        self._runner = command_runner or SubprocessRunner()

    def resolve(self, installer_guid: str) -> str:
        """Return the INSTALLFOLDER of the product; raises SubprocessFailure."""
        with tempfile.TemporaryDirectory(prefix="wad_setup_") as tmp_root:
            script_path = Path(tmp_root) / SCRIPT_NAME
            script_path.write_bytes(build_install_location_script(installer_guid).encode("latin-1"))
            result = run_checked(self._runner, [SCRIPT_HOST, "//NoLogo", str(script_path)])
        folder = result.stdout.strip()
        logger.debug("Install folder of product %s: %r", installer_guid, folder)
        return folder
