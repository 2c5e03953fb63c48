"""
Defines custom exceptions for the launcher to allow for more specific error handling.
"""


class LauncherError(Exception):
    """Base exception for all launcher-specific errors."""


class NetworkError(LauncherError):
    """Raised on connectivity, DNS, TLS or malformed-response failures."""


class HttpStatusError(NetworkError):
    """Raised when a server answers with a non-200, non-redirect status."""

    def __init__(self, status: int, url: str = ""):
        self.status = status
        self.url = url
        super().__init__(f"HTTP {status}" + (f" for {url}" if url else ""))


class NoAssetFoundError(LauncherError):
    """Raised when the latest release does not contain a usable .jar asset."""


class InstallError(LauncherError):
    """Raised when the Java runtime cannot be downloaded or extracted."""


class AlreadyRunningError(LauncherError):
    """Raised when a launch is requested while a session is active."""


class SpawnError(LauncherError):
    """Raised when the child process cannot be started."""


class ConfigurationError(LauncherError):
    """Raised for issues related to configuration loading or validation."""
