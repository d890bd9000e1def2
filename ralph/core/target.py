"""Mapping of the running OS/CPU to a release target triple."""

from __future__ import annotations

import enum
import platform
from dataclasses import dataclass
from typing import Optional

from .errors import UnsupportedPlatformError


class ArchiveFormat(enum.Enum):
    TAR_GZ = "tar.gz"
    ZIP = "zip"


@dataclass(frozen=True)
class TargetTriple:
    identifier: str
    archive_format: ArchiveFormat

    @property
    def is_windows(self) -> bool:
        return "windows" in self.identifier

    def executable_name(self, product: str) -> str:
        return f"{product}.exe" if self.is_windows else product

    def archive_name(self, product: str) -> str:
        return f"{product}-{self.identifier}.{self.archive_format.value}"


KNOWN_TARGETS = {
    ("macos", "x86_64"): TargetTriple("x86_64-apple-darwin", ArchiveFormat.TAR_GZ),
    ("macos", "aarch64"): TargetTriple("aarch64-apple-darwin", ArchiveFormat.TAR_GZ),
    ("linux", "x86_64"): TargetTriple("x86_64-unknown-linux-gnu", ArchiveFormat.TAR_GZ),
    ("linux", "aarch64"): TargetTriple("aarch64-unknown-linux-gnu", ArchiveFormat.TAR_GZ),
    ("windows", "x86_64"): TargetTriple("x86_64-pc-windows-msvc", ArchiveFormat.ZIP),
}

_OS_ALIASES = {
    "darwin": "macos",
    "linux": "linux",
    "windows": "windows",
}

_ARCH_ALIASES = {
    "amd64": "x86_64",
    "x86_64": "x86_64",
    "x64": "x86_64",
    "arm64": "aarch64",
    "aarch64": "aarch64",
}


def current_platform() -> tuple[str, str]:
    """Return the running ``(os, arch)`` pair in the names used by KNOWN_TARGETS."""
    system = platform.system()
    machine = platform.machine()
    os_name = _OS_ALIASES.get(system.lower(), system.lower())
    arch = _ARCH_ALIASES.get(machine.lower(), machine.lower())
    return os_name, arch


def resolve_target(os_name: Optional[str] = None, arch: Optional[str] = None) -> TargetTriple:
    if os_name is None or arch is None:
        detected_os, detected_arch = current_platform()
        os_name = detected_os if os_name is None else os_name
        arch = detected_arch if arch is None else arch

    target = KNOWN_TARGETS.get((os_name, arch))
    if target is None:
        raise UnsupportedPlatformError(os_name, arch)
    return target
