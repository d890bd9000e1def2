"""
Release packaging script for ralph.

Flow:
1) Take a built ralph binary and the target triple it was built for
2) Pack it as dist/ralph-<triple>.tar.gz (or .zip for Windows targets)
3) Write the matching .sha256 file ("<digest>  <archive name>")

These are the two assets `ralph upgrade` looks for on a GitHub release.
"""

from __future__ import annotations

import argparse
import sys
import tarfile
import zipfile
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from ralph.core.target import KNOWN_TARGETS, ArchiveFormat  # noqa: E402
from ralph.core.version import PRODUCT_NAME  # noqa: E402
from ralph.updater.integrity import compute_digest  # noqa: E402

DIST_DIR = ROOT / "dist"
CHECKSUM_SUFFIX = ".sha256"


def find_target(identifier: str):
    for target in KNOWN_TARGETS.values():
        if target.identifier == identifier:
            return target
    known = ", ".join(sorted(t.identifier for t in KNOWN_TARGETS.values()))
    raise RuntimeError(f"Unknown target '{identifier}'. Known targets: {known}")


def build_archive(binary: Path, target, out_dir: Path) -> Path:
    out_dir.mkdir(parents=True, exist_ok=True)
    archive_path = out_dir / target.archive_name(PRODUCT_NAME)
    entry_name = target.executable_name(PRODUCT_NAME)

    if target.archive_format is ArchiveFormat.TAR_GZ:
        with tarfile.open(archive_path, "w:gz") as tar:
            info = tar.gettarinfo(str(binary), arcname=entry_name)
            info.mode = 0o755
            with binary.open("rb") as f:
                tar.addfile(info, f)
    else:
        with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            zf.write(binary, arcname=entry_name)
    return archive_path


def write_checksum(archive_path: Path) -> Path:
    checksum = compute_digest(archive_path)
    checksum_path = archive_path.with_name(archive_path.name + CHECKSUM_SUFFIX)
    checksum_path.write_text(f"{checksum}  {archive_path.name}\n", encoding="utf-8")
    return checksum_path


def main() -> int:
    parser = argparse.ArgumentParser(description="Package a ralph binary as release assets")
    parser.add_argument("binary", help="Path to the built ralph executable")
    parser.add_argument("--target", required=True, help="Target triple, e.g. x86_64-unknown-linux-gnu")
    parser.add_argument("--out-dir", default=str(DIST_DIR), help="Output directory (default: dist/)")
    args = parser.parse_args()

    binary = Path(args.binary)
    if not binary.is_file():
        print(f"Binary not found: {binary}", file=sys.stderr)
        return 1

    try:
        target = find_target(args.target)
    except RuntimeError as e:
        print(str(e), file=sys.stderr)
        return 1

    archive_path = build_archive(binary, target, Path(args.out_dir))
    checksum_path = write_checksum(archive_path)
    print(f"Archive:  {archive_path}")
    print(f"Checksum: {checksum_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
