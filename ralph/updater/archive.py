"""Pull the ralph executable out of a release archive.

Only the single executable entry is ever written; other members (README,
LICENSE, directories, links) are skipped, so archive paths never reach the
filesystem.
"""

from __future__ import annotations

import gzip
import logging
import os
import posixpath
import shutil
import stat
import tarfile
import zipfile
import zlib
from pathlib import Path

from ..core.errors import ArchiveContentError, InstallIOError
from ..core.target import ArchiveFormat

logger = logging.getLogger(__name__)


def _entry_basename(name: str) -> str:
    return posixpath.basename(name.replace("\\", "/").rstrip("/"))


def _extract_from_tar_gz(archive_path: Path, output_path: Path, executable_name: str) -> None:
    with tarfile.open(archive_path, "r:gz") as tar:
        for member in tar:
            if not member.isfile():
                continue
            if _entry_basename(member.name) != executable_name:
                continue
            source = tar.extractfile(member)
            if source is None:
                continue
            with source, open(output_path, "wb") as dst:
                shutil.copyfileobj(source, dst)
            logger.debug("Extracted %s from %s", member.name, archive_path)
            return
    raise ArchiveContentError(f"Downloaded archive did not contain '{executable_name}' binary")


def _extract_from_zip(archive_path: Path, output_path: Path, executable_name: str) -> None:
    wanted = executable_name.lower()
    with zipfile.ZipFile(archive_path, "r") as zf:
        for member in zf.infolist():
            if member.is_dir():
                continue
            unix_mode = (member.external_attr >> 16) & 0o170000
            if unix_mode == stat.S_IFLNK:
                continue
            if _entry_basename(member.filename).lower() != wanted:
                continue
            with zf.open(member, "r") as src, open(output_path, "wb") as dst:
                shutil.copyfileobj(src, dst)
            logger.debug("Extracted %s from %s", member.filename, archive_path)
            return
    raise ArchiveContentError(f"Downloaded archive did not contain '{executable_name}'")


_EXTRACTORS = {
    ArchiveFormat.TAR_GZ: _extract_from_tar_gz,
    ArchiveFormat.ZIP: _extract_from_zip,
}


def extract_executable(archive_path, archive_format: ArchiveFormat, output_path, executable_name: str) -> None:
    if not isinstance(archive_format, ArchiveFormat):
        raise ValueError(f"Unknown archive format: {archive_format!r}")
    extractor = _EXTRACTORS[archive_format]

    archive_path = Path(archive_path)
    output_path = Path(output_path)
    logger.info("Extracting %s from %s", executable_name, archive_path.name)
    try:
        extractor(archive_path, output_path, executable_name)
    except (tarfile.TarError, zipfile.BadZipFile, gzip.BadGzipFile, zlib.error, EOFError) as e:
        raise ArchiveContentError(f"Could not read {archive_format.value} archive: {e}") from e
    except OSError as e:
        raise InstallIOError(e) from e
    ensure_executable(output_path)


def ensure_executable(path) -> None:
    if os.name == "nt":
        return
    try:
        os.chmod(path, 0o755)
    except OSError as e:
        raise InstallIOError(e) from e
