"""Replace the running executable on disk.

Some platforms refuse to overwrite an executable that is in use, so the
running binary is first renamed aside to ``<name>.old`` and the new binary
is renamed into its place. The old binary is only deleted once the new one
is installed; every failure after the backup rename restores it.
"""

from __future__ import annotations

import enum
import errno
import logging
import os
import shutil
import signal
import subprocess
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from ..core.errors import InstallIOError, PermissionDeniedError, RollbackError
from .archive import ensure_executable

logger = logging.getLogger(__name__)

VERSION_CONFIRM_TIMEOUT_SEC = 15


class SwapState(enum.Enum):
    IDLE = "idle"
    VERIFYING_WRITABLE = "verifying_writable"
    BACKING_UP = "backing_up"
    INSTALLING = "installing"
    CLEANING_UP = "cleaning_up"
    ROLLED_BACK = "rolled_back"


class BinarySwapper:
    def __init__(self, current_exe):
        self.current_exe = Path(current_exe)
        self.install_dir = self.current_exe.parent
        self.backup_path = self.install_dir / f"{self.current_exe.name}.old"
        self.state = SwapState.IDLE

    def verify_writable(self) -> None:
        """Probe the installation directory with a throwaway file."""
        self.state = SwapState.VERIFYING_WRITABLE
        try:
            with tempfile.NamedTemporaryFile(dir=str(self.install_dir), prefix=".ralph_write_probe_", delete=True):
                pass
        except PermissionError as e:
            raise PermissionDeniedError(self.current_exe) from e
        except OSError as e:
            raise InstallIOError(e) from e

    def swap(self, new_exe) -> None:
        new_exe = Path(new_exe)
        with _interrupts_deferred():
            self._back_up()
            self._install(new_exe)
            self._clean_up()

    def _back_up(self) -> None:
        self.state = SwapState.BACKING_UP
        try:
            os.remove(self.backup_path)
            logger.debug("Removed stale backup %s", self.backup_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.debug("Could not remove stale backup %s: %s", self.backup_path, e)

        try:
            os.rename(self.current_exe, self.backup_path)
        except PermissionError as e:
            raise PermissionDeniedError(self.current_exe) from e
        except OSError as e:
            raise InstallIOError(e) from e
        logger.info("Moved current binary aside: %s", self.backup_path)

    def _install(self, new_exe: Path) -> None:
        self.state = SwapState.INSTALLING
        try:
            os.rename(new_exe, self.current_exe)
            logger.info("Installed new binary: %s", self.current_exe)
            return
        except OSError as e:
            if e.errno != errno.EXDEV:
                self._roll_back(e)

        logger.info("New binary is on another volume, copying into place")
        try:
            shutil.copyfile(new_exe, self.current_exe)
            ensure_executable(self.current_exe)
        except InstallIOError as e:
            self._discard_partial_copy()
            self._roll_back(e.error)
        except OSError as e:
            self._discard_partial_copy()
            self._roll_back(e)

        try:
            os.remove(new_exe)
        except OSError as e:
            logger.debug("Could not remove extracted binary %s: %s", new_exe, e)

    def _discard_partial_copy(self) -> None:
        try:
            os.remove(self.current_exe)
        except OSError:
            logger.debug("No partial copy to remove at %s", self.current_exe)

    def _roll_back(self, install_error: OSError) -> None:
        logger.error("Installing new binary failed, restoring backup: %s", install_error)
        try:
            os.replace(self.backup_path, self.current_exe)
        except OSError as rollback_error:
            raise RollbackError(install_error, rollback_error, self.backup_path) from rollback_error
        self.state = SwapState.ROLLED_BACK
        raise InstallIOError(install_error) from install_error

    def _clean_up(self) -> None:
        self.state = SwapState.CLEANING_UP
        try:
            os.remove(self.backup_path)
        except OSError as e:
            logger.debug("Leaving stale backup %s: %s", self.backup_path, e)


def confirm_version(executable) -> Optional[str]:
    """Run ``<executable> --version`` and return its trimmed stdout, if any."""
    try:
        result = subprocess.run(
            [str(executable), "--version"],
            capture_output=True,
            text=True,
            timeout=VERSION_CONFIRM_TIMEOUT_SEC,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("Could not confirm version of %s: %s", executable, e)
        return None
    output = (result.stdout or "").strip()
    return output or None


@contextmanager
def _interrupts_deferred():
    """Keep Ctrl-C from landing between the backup and install renames."""
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    received = []
    previous = signal.signal(signal.SIGINT, lambda signum, frame: received.append(signum))
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)
        if received:
            logger.warning("Interrupt ignored while the binary was being replaced")
