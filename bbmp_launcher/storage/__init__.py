"""
Storage Layer.

This package handles everything kept on disk: the launcher's INI settings and
the cached proxy jars in the user-data directory.
"""

from .artifacts import ArtifactStore
from .config_manager import ConfigManager

__all__ = ["ArtifactStore", "ConfigManager"]
