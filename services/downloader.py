"""Download and checksum verification of the WinAppDriver installer."""
from __future__ import annotations

import hashlib
import http.client
import logging
import urllib.error
import urllib.request
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from services.errors import ChecksumMismatchError, DownloadError, UnsupportedArchitectureError
from wad_setup.constants import WAD_RELEASE, WadRelease
from wad_setup.environment import HostEnvironment
from wad_setup.paths import get_static_temp_directory

logger = logging.getLogger(__name__)

Fetcher = Callable[[str, Path, float], None]


@dataclass(frozen=True)
class DownloadedArtifact:
    """Installer file on disk; removed when used as a context manager exits."""

    path: Path
    checksum: str

    def discard(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass

    def __enter__(self) -> "DownloadedArtifact":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.discard()


def download_file(url: str, destination: Path, timeout: float) -> None:
    request = urllib.request.Request(url, headers={"User-Agent": "Mozilla/5.0"})
    destination.parent.mkdir(parents=True, exist_ok=True)
    with urllib.request.urlopen(request, timeout=timeout) as response, destination.open("wb") as handle:
        while True:
            chunk = response.read(256 * 1024)
            if not chunk:
                break
            handle.write(chunk)


def md5_file(path: Path) -> str:
    digest = hashlib.md5()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


class WadDownloader:
    def __init__(
        self,
        environment: HostEnvironment | None = None,
        *,
        release: WadRelease = WAD_RELEASE,
        download_dir: Path | None = None,
        timeout: float | None = None,
        fetcher: Fetcher | None = None,
    ) -> None:
        self._environment = environment or HostEnvironment.current()
        self._release = release
        self._download_dir = download_dir
        self._timeout = timeout or release.download_timeout
        self._fetch = fetcher or download_file

    def architecture(self) -> str:
        """Map the host machine to a WAD release architecture or raise."""
        machine = self._environment.machine.strip().lower()
        wad_arch = self._release.arch_mapping.get(machine)
        if not wad_arch or wad_arch not in self._release.md5_checksums:
            raise UnsupportedArchitectureError(
                self._environment.machine or "unknown",
                self._release.supported_architectures(),
            )
        return wad_arch

    def download_link(self) -> str:
        return self._release.download_url(self.architecture())

    def download(self) -> DownloadedArtifact:
        return self.verify(self.fetch())

    def fetch(self) -> Path:
        """Download the installer to a unique path in the static temp directory."""
        url = self.download_link()
        target_dir = self._download_dir or get_static_temp_directory()
        installer_path = target_dir / f"wad_installer_{self._release.version}_{uuid.uuid4()}.exe"
        logger.info("Downloading %s to '%s'", url, installer_path)
        try:
            self._fetch(url, installer_path, self._timeout)
        except (urllib.error.URLError, http.client.HTTPException, OSError) as exc:
            installer_path.unlink(missing_ok=True)
            raise DownloadError(f"Cannot download {url}: {exc}") from exc
        return installer_path

    def verify(self, installer_path: Path) -> DownloadedArtifact:
        """Check the MD5 of a downloaded installer; the file is deleted on mismatch."""
        expected = self._release.md5_checksums[self.architecture()]
        try:
            actual = md5_file(installer_path)
        except OSError as exc:
            installer_path.unlink(missing_ok=True)
            raise DownloadError(f"Cannot read the downloaded installer '{installer_path}': {exc}") from exc
        if actual != expected:
            installer_path.unlink(missing_ok=True)
            raise ChecksumMismatchError(expected, actual, installer_path)
        return DownloadedArtifact(installer_path, actual)
