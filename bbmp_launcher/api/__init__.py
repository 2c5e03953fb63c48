"""
Release API Layer.

This package talks to the release-metadata endpoint and picks the jar to run.
"""

from .releases import ReleaseResolver, select_jar_asset

__all__ = ["ReleaseResolver", "select_jar_asset"]
