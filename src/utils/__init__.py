"""
Utility helpers for the LFS integrity checker.
"""

from .instance_guard import InstanceLock, InstanceLockError, acquire_instance_lock, concurrency_allowed
from .logging_setup import setup_logging
from .resource_monitor import ResourceMonitor

__all__ = [
    "setup_logging",
    "ResourceMonitor",
    "InstanceLock",
    "InstanceLockError",
    "acquire_instance_lock",
    "concurrency_allowed",
]
