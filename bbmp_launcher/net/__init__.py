"""
Network Layer.

This package performs every HTTP request the launcher makes: JSON metadata
queries and streaming downloads with progress reporting.
"""

from .transport import ProgressCallback, Transport

__all__ = ["ProgressCallback", "Transport"]
