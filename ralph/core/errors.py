from pathlib import Path


class UpgradeError(Exception):
    """Base class for every failure of a self-upgrade attempt."""


class UnsupportedPlatformError(UpgradeError):
    def __init__(self, os_name: str, arch: str):
        self.os_name = os_name
        self.arch = arch
        super().__init__(f"Unsupported platform: {os_name} {arch}")


class NetworkError(UpgradeError):
    """Transport failure or non-success HTTP status while fetching."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"Network error: {message}")


class GithubApiError(UpgradeError):
    """Malformed or unexpected release registry response."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"GitHub API error: {message}")


class RateLimitError(GithubApiError):
    """The registry refused the request because the quota is exhausted."""


class VersionParseError(UpgradeError):
    def __init__(self, tag: str):
        self.tag = tag
        super().__init__(f"Failed to parse version tag: {tag}")


class AssetNotFoundError(UpgradeError):
    def __init__(self, asset: str):
        self.asset = asset
        super().__init__(f"Release asset not found: {asset}")


class ChecksumParseError(UpgradeError):
    def __init__(self, path=None):
        self.path = Path(path) if path is not None else None
        super().__init__("Failed to parse checksum file")


class ChecksumMismatchError(UpgradeError):
    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Download verification failed (expected {expected}, got {actual})")


class PermissionDeniedError(UpgradeError):
    def __init__(self, path):
        self.path = Path(path)
        super().__init__(f"Cannot write to installation path: {self.path} (permission denied)")


class ArchiveContentError(UpgradeError):
    """Downloaded archive is unreadable or lacks the executable."""


class InstallIOError(UpgradeError):
    """Generic filesystem failure; the original OSError is kept as ``error``."""

    def __init__(self, error: OSError):
        self.error = error
        super().__init__(str(error))


class RollbackError(UpgradeError):
    """Installing failed and restoring the backup failed as well."""

    def __init__(self, install_error: OSError, rollback_error: OSError, backup_path):
        self.install_error = install_error
        self.rollback_error = rollback_error
        self.backup_path = Path(backup_path)
        super().__init__(
            f"Install failed ({install_error}) and restoring the backup failed ({rollback_error}); "
            f"the previous binary is kept at {self.backup_path}"
        )


class NotABinaryError(UpgradeError):
    """The running program is a Python script, not a replaceable release binary."""

    def __init__(self, path):
        self.path = Path(path)
        super().__init__(
            f"Cannot upgrade {self.path}: ralph is running from Python sources, not an installed release binary"
        )
