"""
Core launcher engine.

The `LaunchOrchestrator` is the context object owning every component and the
single process session; the `BoundaryDispatcher` exposes its operations to a
UI as error-free results, and the `EventBus` carries progress, log and exit
notifications back.
"""

from .dispatcher import BoundaryDispatcher
from .events import EventBus
from .orchestrator import LaunchOrchestrator

__all__ = ["BoundaryDispatcher", "EventBus", "LaunchOrchestrator"]
