"""Immutable settings for the Windows Application Driver release we install."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class WadProduct:
    display_name: str
    executable_name: str
    override_env_var: str


@dataclass(frozen=True)
class UninstallSignature:
    root: str
    key: str
    value_type: str
    value: str


@dataclass(frozen=True)
class WadRelease:
    version: str
    arch_mapping: Dict[str, str]
    md5_checksums: Dict[str, str]
    download_timeout: float
    url_template: str
    installer_args: Tuple[str, ...]

    def supported_architectures(self) -> Tuple[str, ...]:
        return tuple(sorted(machine for machine, arch in self.arch_mapping.items() if arch in self.md5_checksums))

    def download_url(self, wad_arch: str) -> str:
        return self.url_template.format(version=self.version, arch=wad_arch)


# https://github.com/microsoft/WinAppDriver/releases
WAD_VERSION = "1.2.99"

WAD_PRODUCT = WadProduct(
    display_name="Windows Application Driver",
    executable_name="WinAppDriver.exe",
    override_env_var="APPIUM_WAD_PATH",
)

WAD_UNINSTALL_SIGNATURE = UninstallSignature(
    root=r"HKLM\Software\Microsoft\Windows\CurrentVersion\Uninstall",
    key="DisplayName",
    value_type="REG_SZ",
    value=WAD_PRODUCT.display_name,
)

# Keys are lowercased platform.machine() values.
ARCH_MAPPING: Dict[str, str] = {
    "x86": "x86",
    "i386": "x86",
    "i686": "x86",
    "amd64": "x64",
    "x86_64": "x64",
    "x64": "x64",
    "arm64": "arm64",
    "aarch64": "arm64",
}

WAD_DOWNLOAD_MD5: Dict[str, str] = {
    "x86": "23745e6ed373bc969ff7c4493e32756a",
    "x64": "2923fc539f389d47754a7521ee50108e",
    "arm64": "b9af4222a3fb0d688ecfbf605d1c4500",
}

WAD_RELEASE = WadRelease(
    version=WAD_VERSION,
    arch_mapping=ARCH_MAPPING,
    md5_checksums=WAD_DOWNLOAD_MD5,
    download_timeout=60.0,
    url_template=(
        "https://github.com/Microsoft/WinAppDriver"
        "/releases/download/v{version}/WindowsApplicationDriver-{version}-win-{arch}.exe"
    ),
    installer_args=("/install", "/quiet", "/norestart"),
)
