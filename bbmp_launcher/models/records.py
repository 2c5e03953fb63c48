"""
Plain records exchanged between the launcher components and the UI boundary.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ReleaseDescriptor:
    """A downloadable .jar asset of a published release."""

    tag: str
    asset_url: str
    asset_name: str


@dataclass(frozen=True)
class ArtifactRecord:
    """A .jar file present on local storage."""

    local_path: str
    version_tag: str
    name: str = ""


@dataclass(frozen=True)
class RuntimeHandle:
    """A located Java executable. ``executable_path`` is None when nothing usable was found."""

    executable_path: str | None = None

    @property
    def found(self) -> bool:
        return self.executable_path is not None


@dataclass(frozen=True)
class RuntimeStatus:
    """Result of probing a Java executable with ``-version``."""

    available: bool
    executable: str = ""
    banner: str = ""


@dataclass(frozen=True)
class LaunchResult:
    """What was started: the full command line and the artifact version."""

    cmd: str
    version: str
    argv: list[str] = field(default_factory=list)


@dataclass
class OperationResult:
    """
    Structured answer of a boundary operation. Failures are carried in ``error``
    instead of being raised across the boundary.
    """

    ok: bool
    value: Any = None
    error: str | None = None

    @classmethod
    def success(cls, value: Any = None) -> "OperationResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: BaseException) -> "OperationResult":
        return cls(ok=False, error=f"{type(error).__name__}: {error}")
