import errno
import json

import pytest

from conftest import FakeResponse, FakeSession, NoNetworkSession, make_tar_gz, release_payload, sha256_hex
from ralph.core import target as target_module
from ralph.core.errors import (
    AssetNotFoundError,
    ChecksumMismatchError,
    ChecksumParseError,
    NotABinaryError,
    PermissionDeniedError,
    UnsupportedPlatformError,
    VersionParseError,
)
from ralph.core.target import resolve_target
from ralph.core.version import parse_version
from ralph.updater import service as service_module
from ralph.updater import swap as swap_module
from ralph.updater.service import AutoUpdater, UpToDate, Upgraded
from ralph.utils.config import UpgradeConfig

API_URL = UpgradeConfig().api_url
ARCHIVE_NAME = "ralph-x86_64-unknown-linux-gnu.tar.gz"
CHECKSUM_NAME = f"{ARCHIVE_NAME}.sha256"
ARCHIVE_URL = f"https://github.com/lyonbot/ralph-cli/releases/download/ralph-v1.0.0/{ARCHIVE_NAME}"
CHECKSUM_URL = f"{ARCHIVE_URL}.sha256"
NEW_BINARY = b"#!/bin/sh\necho 'ralph 1.0.0'\n"


def _publish(tmp_path, tag="ralph-v1.0.0", digest=None, include_checksum=True):
    assets_dir = tmp_path / "assets"
    assets_dir.mkdir()
    archive = make_tar_gz(assets_dir / ARCHIVE_NAME, {"ralph-1.0.0/ralph": NEW_BINARY, "ralph-1.0.0/LICENSE": b"MIT"})
    archive_bytes = archive.read_bytes()
    digest = digest or sha256_hex(archive)

    assets = [(ARCHIVE_NAME, ARCHIVE_URL, len(archive_bytes))]
    if include_checksum:
        assets.append((CHECKSUM_NAME, CHECKSUM_URL, 100))
    return FakeSession({
        API_URL: FakeResponse(200, json.dumps(release_payload(tag, assets))),
        CHECKSUM_URL: FakeResponse(200, f"{digest}  {ARCHIVE_NAME}\n"),
        ARCHIVE_URL: FakeResponse(200, archive_bytes, headers={"Content-Length": str(len(archive_bytes))}),
    })


def _updater(exe, session, current="0.9.0", **kwargs):
    kwargs.setdefault("target", resolve_target("linux", "x86_64"))
    kwargs.setdefault("confirm", False)
    return AutoUpdater(current, executable=exe, session=session, **kwargs)


def _requested_urls(session):
    return [call["url"] for call in session.calls]


def test_newer_release_is_installed(installed_exe, tmp_path):
    session = _publish(tmp_path)

    outcome = _updater(installed_exe, session).run_upgrade()

    assert outcome == Upgraded(from_version=parse_version("0.9.0"), to_version=parse_version("1.0.0"))
    assert installed_exe.read_bytes() == NEW_BINARY
    assert sorted(p.name for p in installed_exe.parent.iterdir()) == ["ralph"]
    assert _requested_urls(session) == [API_URL, CHECKSUM_URL, ARCHIVE_URL]
    assert not session.closed


def test_same_version_is_up_to_date_without_downloads(installed_exe, tmp_path):
    session = _publish(tmp_path, tag="v1.0.0")
    original = installed_exe.read_bytes()

    outcome = _updater(installed_exe, session, current="1.0.0").run_upgrade()

    assert outcome == UpToDate(current=parse_version("1.0.0"))
    assert _requested_urls(session) == [API_URL]
    assert installed_exe.read_bytes() == original


def test_checksum_mismatch_leaves_binary_untouched(installed_exe, tmp_path):
    session = _publish(tmp_path, digest="0" * 64)
    original = installed_exe.read_bytes()

    with pytest.raises(ChecksumMismatchError) as excinfo:
        _updater(installed_exe, session).run_upgrade()

    assert excinfo.value.expected == "0" * 64
    assert installed_exe.read_bytes() == original
    assert sorted(p.name for p in installed_exe.parent.iterdir()) == ["ralph"]


def test_unparsable_checksum_file_aborts(installed_exe, tmp_path):
    session = _publish(tmp_path)
    session.routes[CHECKSUM_URL] = FakeResponse(200, "\n")
    original = installed_exe.read_bytes()

    with pytest.raises(ChecksumParseError):
        _updater(installed_exe, session).run_upgrade()
    assert installed_exe.read_bytes() == original


def test_permission_denied_before_any_network_request(installed_exe, monkeypatch):
    def _denied(*_args, **_kwargs):
        raise PermissionError(errno.EACCES, "Permission denied")

    monkeypatch.setattr(swap_module.tempfile, "NamedTemporaryFile", _denied)
    session = NoNetworkSession()

    with pytest.raises(PermissionDeniedError) as excinfo:
        _updater(installed_exe, session).run_upgrade()

    assert excinfo.value.path == installed_exe
    assert session.calls == []


def test_missing_checksum_asset_fails_before_download(installed_exe, tmp_path):
    session = _publish(tmp_path, include_checksum=False)

    with pytest.raises(AssetNotFoundError) as excinfo:
        _updater(installed_exe, session).run_upgrade()

    assert excinfo.value.asset == CHECKSUM_NAME
    assert _requested_urls(session) == [API_URL]


def test_unsupported_platform_fails_before_download(installed_exe, tmp_path, monkeypatch):
    monkeypatch.setattr(target_module.platform, "system", lambda: "Windows")
    monkeypatch.setattr(target_module.platform, "machine", lambda: "ARM")
    session = _publish(tmp_path)

    with pytest.raises(UnsupportedPlatformError) as excinfo:
        AutoUpdater("0.9.0", executable=installed_exe, session=session, confirm=False).run_upgrade()

    assert (excinfo.value.os_name, excinfo.value.arch) == ("windows", "arm")
    assert _requested_urls(session) == [API_URL]


def test_unrecognised_release_tag_is_version_parse_error(installed_exe, tmp_path):
    session = _publish(tmp_path, tag="nightly-2024-01-01")

    with pytest.raises(VersionParseError):
        _updater(installed_exe, session).run_upgrade()
    assert _requested_urls(session) == [API_URL]


def test_new_binary_version_is_confirmed(installed_exe, tmp_path, monkeypatch):
    monkeypatch.setattr(service_module, "confirm_version", lambda _exe: "ralph 1.0.0")
    messages = []
    session = _publish(tmp_path)

    _updater(installed_exe, session, confirm=True, status_callback=messages.append).run_upgrade()

    assert messages[0] == "Checking for updates…"
    assert "Verified SHA256 checksum." in messages
    assert messages[-1] == "Now running: ralph 1.0.0"


def test_invalid_current_version_is_rejected(installed_exe):
    with pytest.raises(VersionParseError):
        AutoUpdater("not-a-version", executable=installed_exe, session=FakeSession())


def test_permission_denied_suggestions_lists_remedies(tmp_path):
    text = service_module.permission_denied_suggestions(tmp_path / "ralph")
    assert text.startswith(f"Error: Cannot write to {tmp_path / 'ralph'} (permission denied)")
    assert "sudo ralph upgrade" in text
    assert "~/.local/bin" in text
    assert "GitHub Releases" in text


@pytest.mark.parametrize("launcher", ["/site-packages/ralph/main.py", "/src/ralph-cli/run.py", "-c"])
def test_python_launcher_is_never_replaced(monkeypatch, launcher):
    monkeypatch.delattr(service_module.sys, "frozen", raising=False)
    monkeypatch.setattr(service_module.sys, "argv", [launcher, "upgrade"])

    with pytest.raises(NotABinaryError):
        service_module.current_executable()


def test_python_launcher_fails_upgrade_without_network(monkeypatch):
    monkeypatch.delattr(service_module.sys, "frozen", raising=False)
    monkeypatch.setattr(service_module.sys, "argv", ["/site-packages/ralph/main.py", "upgrade"])
    session = NoNetworkSession()

    with pytest.raises(NotABinaryError) as excinfo:
        AutoUpdater("0.9.0", session=session, confirm=False).run_upgrade()

    assert excinfo.value.path.name == "main.py"
    assert session.calls == []


def test_installed_binary_is_resolved_from_argv(installed_exe, monkeypatch):
    monkeypatch.delattr(service_module.sys, "frozen", raising=False)
    monkeypatch.setattr(service_module.sys, "argv", [str(installed_exe), "upgrade"])

    assert service_module.current_executable() == installed_exe.resolve()


def test_frozen_build_replaces_its_own_executable(installed_exe, monkeypatch):
    monkeypatch.setattr(service_module.sys, "frozen", True, raising=False)
    monkeypatch.setattr(service_module.sys, "executable", str(installed_exe))
    monkeypatch.setattr(service_module.sys, "argv", ["ralph.py"])

    assert service_module.current_executable() == installed_exe.resolve()
