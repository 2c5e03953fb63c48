"""
Runtime Layer.

This package provisions the Java runtime and supervises the proxy process
started with it.
"""

from .provisioner import RuntimeProvisioner
from .supervisor import ProcessSession, ProcessSupervisor, SupervisorState

__all__ = ["ProcessSession", "ProcessSupervisor", "RuntimeProvisioner", "SupervisorState"]
