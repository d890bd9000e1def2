"""Self-upgrade engine for the ralph binary."""

from .release_client import Release, ReleaseAsset, ReleaseClient
from .service import AutoUpdater, UpToDate, Upgraded, permission_denied_suggestions
from .swap import BinarySwapper, SwapState

__all__ = [
    "AutoUpdater",
    "BinarySwapper",
    "Release",
    "ReleaseAsset",
    "ReleaseClient",
    "SwapState",
    "UpToDate",
    "Upgraded",
    "permission_denied_suggestions",
]
