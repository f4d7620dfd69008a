"""Command line entrypoint for locating and installing WinAppDriver."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from services.downloader import WadDownloader
from services.errors import InsufficientPrivilegeError, WadSetupError
from services.installer import WadInstaller
from services.locator import WadLocator
from services.privilege import PrivilegeCheck, relaunch_as_admin
from wad_setup.environment import HostEnvironment
from wad_setup.logging_setup import configure_logging
from wad_setup.user_settings import SettingsStore, UserSettings

logger = logging.getLogger("wad_setup.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Locate or install Windows Application Driver")
    parser.add_argument("command", help="Operation to run", choices=["locate", "setup", "download", "configure"])
    parser.add_argument("--settings", type=Path, default=None, help="Path to the settings JSON file")
    parser.add_argument("--log-file", default=None, help="Also write logs to this file")
    parser.add_argument("--wad-path", default=None, help="configure: WinAppDriver.exe path to remember")
    parser.add_argument("--download-timeout", type=float, default=None, help="configure: download timeout in seconds")
    parser.add_argument("--elevate", action="store_true", help="Relaunch as administrator when installation needs it")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def _configure(store: SettingsStore, settings: UserSettings, args: argparse.Namespace) -> int:
    if args.wad_path is not None:
        settings.wad_path = args.wad_path
    if args.download_timeout is not None:
        settings.download_timeout = args.download_timeout if args.download_timeout > 0 else None
    if args.log_file is not None:
        settings.log_file = args.log_file
    logger.info("%s settings file %s", "Updating" if store.exists() else "Creating", store.path)
    store.save(settings)
    print(store.path)
    return 0


def main(argv: list[str] | None = None, environment: HostEnvironment | None = None) -> int:
    args = build_parser().parse_args(argv)
    store = SettingsStore(args.settings)
    settings = store.load()
    configure_logging(verbose=args.verbose, log_file=args.log_file or settings.log_file or None)
    if args.command == "configure":
        return _configure(store, settings, args)
    environment = environment or HostEnvironment.current()

    locator = WadLocator(environment, settings=settings)
    downloader = WadDownloader(environment, timeout=settings.download_timeout)
    try:
        if args.command == "locate":
            print(locator.locate())
        elif args.command == "download":
            artifact = downloader.download()
            print(f"{artifact.path} {artifact.checksum}")
        else:
            installer = WadInstaller(
                environment,
                locator=locator,
                privilege=PrivilegeCheck(environment),
                downloader=downloader,
            )
            result = installer.setup()
            if result.executable is not None:
                print(result.executable)
    except InsufficientPrivilegeError as exc:
        relaunch_argv = sys.argv if argv is None else [sys.argv[0], *argv]
        if args.elevate and relaunch_as_admin(relaunch_argv):
            logger.info("Relaunched elevated to finish the installation")
            return 0
        logger.error("%s", exc)
        return 1
    except WadSetupError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
