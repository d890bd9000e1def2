"""Command-line entry point for ralph."""

import argparse
import logging
import sys
from typing import Optional, Sequence

from . import __version__
from .core.errors import PermissionDeniedError, UpgradeError
from .updater.service import AutoUpdater, UpToDate, permission_denied_suggestions
from .utils.config import UpgradeConfig
from .utils.logger import configure_logging

logger = logging.getLogger(__name__)


def _print_status(message: str) -> None:
    print(message, file=sys.stderr)


def _print_download_progress(downloaded: int, total: int) -> None:
    sys.stderr.write(f"\rDownloaded {downloaded}/{total} bytes…")
    if downloaded >= total:
        sys.stderr.write("\n")
    sys.stderr.flush()


def run_upgrade_command(updater: Optional[AutoUpdater] = None) -> int:
    updater = updater or AutoUpdater(
        __version__,
        config=UpgradeConfig.from_env(),
        status_callback=_print_status,
        download_callback=_print_download_progress,
    )
    try:
        outcome = updater.run_upgrade()
    except PermissionDeniedError as e:
        logger.error("Upgrade failed: %s", e)
        sys.stderr.write(permission_denied_suggestions(e.path))
        return 1
    except UpgradeError as e:
        logger.error("Upgrade failed: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if isinstance(outcome, UpToDate):
        print(f"ralph is already up to date (v{outcome.current})")
    else:
        print(f"Upgraded ralph from v{outcome.from_version} to v{outcome.to_version}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ralph", description="Ralph CLI - A dispatcher for AI provider agents")
    parser.add_argument("--version", action="version", version=f"ralph {__version__}")
    parser.add_argument("--debug", action="store_true", help="Verbose logging to the console and log file.")
    subparsers = parser.add_subparsers(dest="command")
    subparsers.add_parser("version", help="Display version information")
    subparsers.add_parser("upgrade", help="Upgrade ralph to the latest release")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.debug)

    if args.command == "version":
        print(f"ralph {__version__}")
        return 0
    if args.command == "upgrade":
        return run_upgrade_command()

    print(f"ralph {__version__} - A dispatcher for AI provider agents")
    print()
    print("Use 'ralph --help' for more information.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
