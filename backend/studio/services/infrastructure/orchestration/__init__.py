"""
Orchestration - the creation job state machine and its periodic driver.
"""

from .assembly import MediaAssembler, validate_payload
from .orchestrator import (
    CreationOrchestrator,
    SweepReport,
    NO_OUTPUT_MESSAGE,
    INTERRUPTED_MESSAGE,
)
from .scheduler import SweepScheduler
from .lifecycle import ServiceContainer, StartupManager, build_container

__all__ = [
    "MediaAssembler",
    "validate_payload",
    "CreationOrchestrator",
    "SweepReport",
    "NO_OUTPUT_MESSAGE",
    "INTERRUPTED_MESSAGE",
    "SweepScheduler",
    "ServiceContainer",
    "StartupManager",
    "build_container",
]
