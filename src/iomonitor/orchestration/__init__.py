"""
Orchestration of the periodic storage health chores.

Components:
- PeriodicWorker: interruptible fixed-interval thread
- StorageHealthService: owns the state machines and their readers
- SignalHandler: SIGINT/SIGTERM to shutdown-request bridge
"""

from .chores import PeriodicWorker, StorageHealthService
from .signal_handler import SignalHandler

__all__ = [
    "PeriodicWorker",
    "SignalHandler",
    "StorageHealthService",
]
