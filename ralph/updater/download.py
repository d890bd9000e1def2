from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Optional

import requests  # type: ignore[import-untyped]

from ..core.errors import InstallIOError, NetworkError

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


def _content_length(headers) -> int:
    """Announced body size, or 0 when the header is absent or unusable."""
    raw = headers.get("content-length")
    if not raw:
        return 0
    try:
        return max(int(raw), 0)
    except (TypeError, ValueError):
        logger.debug("Ignoring malformed Content-Length %r", raw)
        return 0


class Downloader:
    """Stream release assets to local files."""

    def __init__(
        self,
        session: requests.Session,
        user_agent: str,
        chunk_size: int = 64 * 1024,
        connect_timeout: Optional[float] = 60,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        self.session = session
        self.user_agent = user_agent
        self.chunk_size = chunk_size
        self.connect_timeout = connect_timeout
        self.progress_callback = progress_callback

    def download(self, url: str, destination) -> int:
        """Write the body of ``url`` to ``destination`` and return the byte count.

        ``progress_callback(downloaded, total)`` is called after every chunk when the
        server announces a content length.
        """
        destination = Path(destination)
        logger.info("Downloading %s -> %s", url, destination)
        headers = {"User-Agent": self.user_agent}
        # (connect, read); the read side stays unbounded for large archives
        timeout = (self.connect_timeout, None)
        try:
            with self.session.get(url, headers=headers, stream=True, timeout=timeout) as r:
                status = int(r.status_code)
                if not 200 <= status < 300:
                    raise NetworkError(f"Download failed (HTTP {status}): {url}")

                total = _content_length(r.headers)
                downloaded = 0
                with open(destination, "wb") as f:
                    for chunk in r.iter_content(chunk_size=self.chunk_size):
                        if not chunk:
                            continue
                        f.write(chunk)
                        downloaded += len(chunk)
                        if self.progress_callback and total > 0:
                            self.progress_callback(downloaded, total)
                    f.flush()
                    os.fsync(f.fileno())
        except requests.RequestException as e:
            raise NetworkError(f"{e} ({url})") from e
        except OSError as e:
            raise InstallIOError(e) from e

        logger.info("Downloaded %d bytes to %s", downloaded, destination)
        return downloaded
