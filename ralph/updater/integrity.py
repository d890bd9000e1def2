"""SHA-256 verification of downloaded release archives."""

from __future__ import annotations

import hashlib
import re
from pathlib import Path

from ..core.errors import ChecksumParseError, InstallIOError

_SHA256_HEX_RE = re.compile(r"^[0-9a-fA-F]{64}$")


def read_expected_digest(checksum_path) -> str:
    """Return the first whitespace-delimited token of a ``.sha256`` file."""
    path = Path(checksum_path)
    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ChecksumParseError(path) from e
    except OSError as e:
        raise InstallIOError(e) from e

    tokens = content.split()
    if not tokens or not _SHA256_HEX_RE.match(tokens[0]):
        raise ChecksumParseError(path)
    return tokens[0]


def compute_digest(file_path) -> str:
    hasher = hashlib.sha256()
    try:
        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(64 * 1024), b""):
                hasher.update(chunk)
    except OSError as e:
        raise InstallIOError(e) from e
    return hasher.hexdigest().lower()


def digests_match(expected: str, actual: str) -> bool:
    return expected.strip().lower() == actual.strip().lower()
