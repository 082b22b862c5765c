"""
Infrastructure layer for the phase/handoff protocol.

Contains adapters for external concerns (persistence of sessions and the
session journal).
"""

from phasegate.infrastructure.persistence import (
    FilesystemSessionEventStore,
    FilesystemSessionRepository,
    InMemorySessionEventStore,
    InMemorySessionRepository,
)

__all__ = [
    "InMemorySessionRepository",
    "FilesystemSessionRepository",
    "InMemorySessionEventStore",
    "FilesystemSessionEventStore",
]
