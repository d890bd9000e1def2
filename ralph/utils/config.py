import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from ..core.version import PRODUCT_NAME

logger = logging.getLogger(__name__)

GITHUB_OWNER = "lyonbot"
GITHUB_REPO = "ralph-cli"


def _default_api_url() -> str:
    return f"https://api.github.com/repos/{GITHUB_OWNER}/{GITHUB_REPO}/releases/latest"


@dataclass
class UpgradeConfig:
    product: str = PRODUCT_NAME
    api_url: str = field(default_factory=_default_api_url)
    request_timeout: float = 60.0
    # Connect timeout only; archive transfers are bounded by completion.
    download_connect_timeout: float = 60.0
    chunk_size: int = 64 * 1024
    github_token: Optional[str] = None

    @classmethod
    def from_env(cls) -> "UpgradeConfig":
        config = cls()

        api_url = os.getenv("RALPH_UPGRADE_API_URL", "").strip()
        if api_url:
            config.api_url = api_url

        timeout_raw = os.getenv("RALPH_UPGRADE_TIMEOUT", "").strip()
        if timeout_raw:
            try:
                timeout = float(timeout_raw)
                if timeout <= 0:
                    raise ValueError(timeout_raw)
                config.request_timeout = timeout
            except ValueError:
                logger.warning("Ignoring invalid RALPH_UPGRADE_TIMEOUT=%r", timeout_raw)

        token = os.getenv("RALPH_GITHUB_TOKEN", "").strip() or os.getenv("GITHUB_TOKEN", "").strip()
        if token:
            config.github_token = token

        return config
