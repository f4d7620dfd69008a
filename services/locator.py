"""Discovery of an installed WinAppDriver executable."""
from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Callable

from services.errors import SubprocessFailure, WadNotFoundError
from services.install_location import InstallLocationResolver
from services.registry import RegistryClient, RegistryEntry
from wad_setup.constants import WAD_PRODUCT, WAD_UNINSTALL_SIGNATURE, UninstallSignature, WadProduct
from wad_setup.environment import HostEnvironment
from wad_setup.user_settings import UserSettings

logger = logging.getLogger(__name__)

_UNSET = object()


def _path_exists(path: Path) -> bool:
    return os.path.exists(path)


class WadLocator:
    """Resolves the WinAppDriver path once and serves the cached answer afterwards.

    Sources are tried in order: the override setting, the default install
    roots, then the uninstall registry branch combined with the MSI install
    folder. A not-found outcome is cached as well, so a later manual install
    is only picked up by a new locator.
    """

    def __init__(
        self,
        environment: HostEnvironment | None = None,
        *,
        settings: UserSettings | None = None,
        registry: RegistryClient | None = None,
        install_location: InstallLocationResolver | None = None,
        path_exists: Callable[[Path], bool] | None = None,
        product: WadProduct = WAD_PRODUCT,
        signature: UninstallSignature = WAD_UNINSTALL_SIGNATURE,
    ) -> None:
        self._environment = environment or HostEnvironment.current()
        self._settings = settings or UserSettings()
        self._registry = registry or RegistryClient()
        self._install_location = install_location or InstallLocationResolver()
        self._exists = path_exists or _path_exists
        self._product = product
        self._signature = signature
        self._lock = threading.Lock()
        self._outcome: object = _UNSET

    @property
    def resolved(self) -> bool:
        return self._outcome is not _UNSET

    def default_install_paths(self) -> list[Path]:
        return [
            Path(root) / self._product.display_name / self._product.executable_name
            for root in self._environment.program_roots()
        ]

    def locate(self) -> Path:
        with self._lock:
            if self._outcome is _UNSET:
                try:
                    self._outcome = self._discover()
                except WadNotFoundError as exc:
                    self._outcome = exc
            outcome = self._outcome
        if isinstance(outcome, WadNotFoundError):
            raise outcome
        return outcome  # type: ignore[return-value]

    def _discover(self) -> Path:
        override = self._override_path()
        if override is not None:
            return override

        candidates = self.default_install_paths()
        for candidate in candidates:
            if self._exists(candidate):
                logger.debug("Found %s at %s", self._product.executable_name, candidate)
                return candidate
        logger.debug("Did not detect the WAD executable at any of the default install locations")

        logger.debug("Checking the system registry for the corresponding MSI entry")
        from_registry = self._path_from_registry()
        if from_registry is not None:
            return from_registry
        raise WadNotFoundError(self._product.executable_name, candidates)

    def _override_path(self) -> Path | None:
        env_var = self._product.override_env_var
        env_value = self._environment.get(env_var)
        sources = (
            (f"the {env_var} environment variable", Path(env_value) if env_value else None),
            ("the user settings", self._settings.wad_path_override()),
        )
        for label, path in sources:
            if path is None:
                continue
            if self._exists(path):
                logger.debug("Loaded WinAppDriver path from %s: %s", label, path)
                return path
            logger.debug("WinAppDriver path from %s does not exist: %s", label, path)
        return None

    def _find_uninstall_entry(self) -> RegistryEntry | None:
        result = self._registry.query(self._signature.root)
        if not result.succeeded:
            logger.debug("Registry lookup contributed nothing: %s", result.error)
            return None
        for entry in result.entries:
            if (
                entry.key == self._signature.key
                and entry.type == self._signature.value_type
                and entry.value == self._signature.value
            ):
                return entry
        return None

    def _path_from_registry(self) -> Path | None:
        entry = self._find_uninstall_entry()
        if entry is None:
            logger.debug("No WAD MSI entries have been found")
            return None
        logger.debug("Found MSI entry: %s", entry)
        installer_guid = entry.root.split("\\")[-1].strip("{}")
        try:
            install_folder = self._install_location.resolve(installer_guid)
        except (SubprocessFailure, OSError, ValueError) as exc:
            logger.debug("Cannot resolve the install folder of %s: %s", installer_guid, exc)
            return None
        if not install_folder:
            logger.debug("Empty install folder reported for %s", installer_guid)
            return None
        result = Path(install_folder) / self._product.executable_name
        logger.debug("Checking if WAD exists at '%s'", result)
        if self._exists(result):
            return result
        return None
