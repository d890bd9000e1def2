"""Self-upgrade of the ralph binary from GitHub Releases.

Flow: probe install dir -> latest release -> version check -> target triple
-> download .sha256 then archive -> verify SHA-256 -> extract -> swap ->
confirm with ``--version``.

Everything before the swap works inside a per-attempt temporary directory,
so any failure up to that point leaves the installed binary untouched.
"""

from __future__ import annotations

import logging
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

import requests  # type: ignore[import-untyped]

from .. import __version__
from ..core.errors import ChecksumMismatchError, InstallIOError, NotABinaryError
from ..core.target import TargetTriple, resolve_target
from ..core.version import PRODUCT_NAME, SemanticVersion, VersionStatus, compare, parse_release_tag, parse_version
from ..utils.config import UpgradeConfig
from .archive import extract_executable
from .download import Downloader, ProgressCallback
from .integrity import compute_digest, digests_match, read_expected_digest
from .release_client import ReleaseClient
from .swap import BinarySwapper, confirm_version

logger = logging.getLogger(__name__)

StatusCallback = Callable[[str], None]


@dataclass(frozen=True)
class UpToDate:
    current: SemanticVersion


@dataclass(frozen=True)
class Upgraded:
    from_version: SemanticVersion
    to_version: SemanticVersion


UpgradeOutcome = Union[UpToDate, Upgraded]


_SCRIPT_SUFFIXES = (".py", ".pyc", ".pyw")


def current_executable() -> Path:
    """Path of the binary to replace; refuses when launched through a Python script."""
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve()
    launcher = sys.argv[0] if sys.argv else ""
    if not launcher or launcher == "-c" or Path(launcher).suffix.lower() in _SCRIPT_SUFFIXES:
        raise NotABinaryError(launcher or sys.executable)
    return Path(launcher).resolve()


def permission_denied_suggestions(path, product: str = PRODUCT_NAME) -> str:
    lines = [
        f"Error: Cannot write to {path} (permission denied)",
        "",
        "Solutions:",
        f"1. Run with elevated permissions: sudo {product} upgrade",
        "2. Reinstall to a user-writable location (e.g. ~/.local/bin)",
        "3. Download manually from GitHub Releases and replace the binary",
        "",
    ]
    return "\n".join(lines)


class AutoUpdater:
    def __init__(
        self,
        current_version: Union[str, SemanticVersion] = __version__,
        executable=None,
        session: Optional[requests.Session] = None,
        config: Optional[UpgradeConfig] = None,
        target: Optional[TargetTriple] = None,
        status_callback: Optional[StatusCallback] = None,
        download_callback: Optional[ProgressCallback] = None,
        confirm: bool = True,
    ):
        if isinstance(current_version, SemanticVersion):
            self.current_version = current_version
        else:
            self.current_version = parse_version(current_version)
        self.executable = Path(executable) if executable is not None else None
        self.config = config or UpgradeConfig()
        self.target = target
        self.status_callback = status_callback
        self.confirm = confirm

        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()
        user_agent = f"{self.config.product}/{self.current_version}"
        self.release_client = ReleaseClient(
            self.session,
            self.config.api_url,
            user_agent,
            timeout=self.config.request_timeout,
            token=self.config.github_token,
        )
        self.downloader = Downloader(
            self.session,
            user_agent,
            chunk_size=self.config.chunk_size,
            connect_timeout=self.config.download_connect_timeout,
            progress_callback=download_callback,
        )

    def _report(self, message: str) -> None:
        logger.info(message)
        if self.status_callback:
            self.status_callback(message)

    def run_upgrade(self) -> UpgradeOutcome:
        try:
            return self._run_upgrade()
        except OSError as e:
            raise InstallIOError(e) from e
        finally:
            if self._owns_session:
                self.session.close()

    def _run_upgrade(self) -> UpgradeOutcome:
        product = self.config.product
        if self.executable is None:
            self.executable = current_executable()
        swapper = BinarySwapper(self.executable)
        # Fails before any network traffic when the binary cannot be replaced.
        swapper.verify_writable()

        self._report("Checking for updates…")
        release = self.release_client.fetch_latest_release()
        latest = parse_release_tag(release.tag, product)

        self._report(f"Current version: v{self.current_version}")
        self._report(f"Latest version:  v{latest}")

        if compare(self.current_version, latest) is VersionStatus.UP_TO_DATE:
            return UpToDate(current=self.current_version)

        target = self.target or resolve_target()
        archive_name = target.archive_name(product)
        checksum_name = f"{archive_name}.sha256"
        archive_asset = release.find_asset(archive_name)
        checksum_asset = release.find_asset(checksum_name)

        self._report(f"Downloading: {archive_name} ({archive_asset.size_bytes} bytes)")

        with tempfile.TemporaryDirectory(prefix="ralph_upgrade_") as temp_root:
            temp_dir = Path(temp_root)
            archive_path = temp_dir / archive_name
            checksum_path = temp_dir / checksum_name

            self.downloader.download(checksum_asset.download_url, checksum_path)
            self.downloader.download(archive_asset.download_url, archive_path)

            expected = read_expected_digest(checksum_path)
            actual = compute_digest(archive_path)
            if not digests_match(expected, actual):
                raise ChecksumMismatchError(expected, actual)
            self._report("Verified SHA256 checksum.")

            executable_name = target.executable_name(product)
            extracted_path = temp_dir / "extracted" / executable_name
            extracted_path.parent.mkdir()
            extract_executable(archive_path, target.archive_format, extracted_path, executable_name)

            self._report(f"Replacing current binary: {self.executable}")
            swapper.swap(extracted_path)

        if self.confirm:
            confirmed = confirm_version(self.executable)
            if confirmed:
                self._report(f"Now running: {confirmed}")

        return Upgraded(from_version=self.current_version, to_version=latest)
