"""
Data Models Layer.

This package contains the Pydantic configuration models and the plain records
passed between the launcher components.
"""

from .config import LaunchOptions, LauncherConfig
from .records import (
    ArtifactRecord,
    LaunchResult,
    OperationResult,
    ReleaseDescriptor,
    RuntimeHandle,
    RuntimeStatus,
)

__all__ = [
    "ArtifactRecord",
    "LaunchOptions",
    "LaunchResult",
    "LauncherConfig",
    "OperationResult",
    "ReleaseDescriptor",
    "RuntimeHandle",
    "RuntimeStatus",
]
