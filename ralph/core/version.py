"""Semantic version parsing for release tags.

Ordering follows semantic-versioning precedence. The ``major.minor.patch``
core is compared with ``packaging.version``; pre-release identifiers are
compared field by field (numeric ones as integers and below alphanumeric
ones, alphanumeric ones in ASCII order, a shorter list first when all
shared fields are equal). Build metadata is kept only for display.
"""

from __future__ import annotations

import enum
import functools
import re
from dataclasses import dataclass
from typing import Optional, Tuple

from packaging import version

from .errors import VersionParseError

PRODUCT_NAME = "ralph"

_SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)


def _identifier_key(identifier: str) -> Tuple[int, int, str]:
    if identifier.isdigit():
        return (0, int(identifier), "")
    return (1, 0, identifier)


class VersionStatus(enum.Enum):
    UP_TO_DATE = "up_to_date"
    NEWER_AVAILABLE = "newer_available"


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class SemanticVersion:
    major: int
    minor: int
    patch: int
    prerelease: Optional[str] = None
    build: Optional[str] = None

    @property
    def core(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    @property
    def precedence_key(self) -> tuple:
        # A release sorts above every pre-release of the same core.
        if not self.prerelease:
            return (version.Version(self.core), 1, ())
        identifiers = tuple(_identifier_key(part) for part in self.prerelease.split("."))
        return (version.Version(self.core), 0, identifiers)

    def __eq__(self, other):
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self.precedence_key == other.precedence_key

    def __lt__(self, other):
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self.precedence_key < other.precedence_key

    def __hash__(self):
        return hash(self.precedence_key)

    def __str__(self) -> str:
        text = self.core
        if self.prerelease:
            text += f"-{self.prerelease}"
        if self.build:
            text += f"+{self.build}"
        return text


def parse_version(text: str) -> SemanticVersion:
    """Parse a strict ``MAJOR.MINOR.PATCH[-PRE][+BUILD]`` string."""
    candidate = (text or "").strip()
    match = _SEMVER_RE.match(candidate)
    if not match:
        raise VersionParseError(text)
    major, minor, patch, prerelease, build = match.groups()
    return SemanticVersion(int(major), int(minor), int(patch), prerelease, build)


def parse_release_tag(tag: str, product: str = PRODUCT_NAME) -> SemanticVersion:
    """Normalise a registry tag (``ralph-v1.2.3``, ``v1.2.3``, ``1.2.3``) to a version.

    The product prefix is tried before the bare ``v`` prefix; the raw tag is the
    last candidate. The raised error always names the tag as received.
    """
    trimmed = (tag or "").strip()
    candidates = []
    for prefix in (f"{product}-v", "v"):
        if trimmed.startswith(prefix):
            candidates.append(trimmed[len(prefix):])
            break
    candidates.append(trimmed)

    for candidate in candidates:
        try:
            return parse_version(candidate)
        except VersionParseError:
            continue
    raise VersionParseError(tag)


def compare(current: SemanticVersion, latest: SemanticVersion) -> VersionStatus:
    if latest > current:
        return VersionStatus.NEWER_AVAILABLE
    return VersionStatus.UP_TO_DATE
