"""Shared fakes for the upgrade tests: an in-memory HTTP session and archive builders."""

import hashlib
import io
import json
import tarfile
import zipfile

import pytest


class FakeResponse:
    def __init__(self, status_code=200, body=b"", headers=None):
        self.status_code = status_code
        self.content = body if isinstance(body, bytes) else body.encode("utf-8")
        self.headers = {k.lower(): v for k, v in (headers or {}).items()}

    @property
    def text(self):
        return self.content.decode("utf-8", errors="replace")

    def json(self):
        return json.loads(self.text)

    def iter_content(self, chunk_size=1):
        for start in range(0, len(self.content), chunk_size):
            yield self.content[start:start + chunk_size]

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


class FakeSession:
    """Serve canned responses by URL and record every request."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []
        self.closed = False

    def get(self, url, headers=None, timeout=None, stream=False):
        self.calls.append({"url": url, "headers": dict(headers or {}), "timeout": timeout, "stream": stream})
        route = self.routes.get(url)
        if route is None:
            return FakeResponse(404, b"Not Found")
        if isinstance(route, Exception):
            raise route
        return route

    def close(self):
        self.closed = True


class NoNetworkSession(FakeSession):
    def get(self, url, headers=None, timeout=None, stream=False):
        raise AssertionError(f"unexpected network request to {url}")


def make_tar_gz(path, entries):
    with tarfile.open(path, "w:gz") as tar:
        for name, data in entries.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return path


def make_zip(path, entries):
    with zipfile.ZipFile(path, "w") as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return path


def sha256_hex(path):
    return hashlib.sha256(path.read_bytes()).hexdigest()


def release_payload(tag, assets):
    return {
        "tag_name": tag,
        "assets": [
            {"name": name, "browser_download_url": url, "size": size}
            for name, url, size in assets
        ],
    }


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def installed_exe(tmp_path):
    """A stand-in for the running binary inside its own install directory."""
    install_dir = tmp_path / "bin"
    install_dir.mkdir()
    exe = install_dir / "ralph"
    exe.write_bytes(b"#!/bin/sh\necho 'ralph 0.9.0'\n")
    exe.chmod(0o755)
    return exe
