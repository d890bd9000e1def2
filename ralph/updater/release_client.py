from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

import requests  # type: ignore[import-untyped]

from ..core.errors import AssetNotFoundError, GithubApiError, NetworkError, RateLimitError

logger = logging.getLogger(__name__)

GITHUB_ACCEPT = "application/vnd.github+json"


@dataclass(frozen=True)
class ReleaseAsset:
    name: str
    download_url: str
    size_bytes: int


@dataclass(frozen=True)
class Release:
    tag: str
    assets: Tuple[ReleaseAsset, ...]

    def find_asset(self, name: str) -> ReleaseAsset:
        for asset in self.assets:
            if asset.name == name:
                return asset
        raise AssetNotFoundError(name)


def _release_from_payload(payload: Any) -> Release:
    if not isinstance(payload, dict):
        raise GithubApiError("Release payload is not a JSON object")
    try:
        tag = payload["tag_name"]
        raw_assets = payload["assets"]
        if not isinstance(tag, str) or not isinstance(raw_assets, list):
            raise TypeError("unexpected field types")
        assets = tuple(
            ReleaseAsset(
                name=str(asset["name"]),
                download_url=str(asset["browser_download_url"]),
                size_bytes=int(asset["size"]),
            )
            for asset in raw_assets
        )
    except (KeyError, TypeError, ValueError) as e:
        raise GithubApiError(f"Unexpected release metadata: {e}") from e
    return Release(tag=tag, assets=assets)


class ReleaseClient:
    """Fetch release metadata from the GitHub Releases API."""

    def __init__(
        self,
        session: requests.Session,
        api_url: str,
        user_agent: str,
        timeout: float = 60,
        token: Optional[str] = None,
    ):
        self.session = session
        self.api_url = api_url
        self.user_agent = user_agent
        self.timeout = timeout
        self.token = token

    def _headers(self) -> Dict[str, str]:
        headers = {
            "User-Agent": self.user_agent,
            "Accept": GITHUB_ACCEPT,
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def fetch_latest_release(self) -> Release:
        logger.info("Querying latest release: %s", self.api_url)
        try:
            response = self.session.get(self.api_url, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as e:
            raise NetworkError(str(e)) from e

        status = int(response.status_code)
        if not 200 <= status < 300:
            raise self._error_for_status(response, status)

        try:
            payload = response.json()
        except ValueError as e:
            raise GithubApiError(f"Invalid JSON in release response: {e}") from e
        release = _release_from_payload(payload)
        logger.info("Latest release tag %s with %d assets", release.tag, len(release.assets))
        return release

    def _error_for_status(self, response, status: int) -> GithubApiError:
        remaining = str(response.headers.get("x-ratelimit-remaining", "")).strip()
        if status in (403, 429) and remaining == "0":
            message = "GitHub rate limit exceeded. Please try again in an hour."
            reset_at = _format_reset(response.headers.get("x-ratelimit-reset"))
            if reset_at:
                message += f" (limit resets at {reset_at})"
            logger.warning("Release query rate limited (HTTP %s)", status)
            return RateLimitError(message)

        body = (response.text or "").strip()
        logger.warning("Release query failed with HTTP %s", status)
        return GithubApiError(f"Request failed (HTTP {status}): {body}")


def _format_reset(raw: Optional[str]) -> Optional[str]:
    if not raw:
        return None
    try:
        reset = datetime.fromtimestamp(int(str(raw).strip()), tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        return None
    return reset.strftime("%H:%M UTC")
