"""
Persistence adapters for sessions and the session journal.
"""

from phasegate.infrastructure.persistence.filesystem import FilesystemSessionRepository
from phasegate.infrastructure.persistence.memory import InMemorySessionRepository
from phasegate.infrastructure.persistence.session_events import (
    FilesystemSessionEventStore,
    InMemorySessionEventStore,
)

__all__ = [
    "InMemorySessionRepository",
    "FilesystemSessionRepository",
    "InMemorySessionEventStore",
    "FilesystemSessionEventStore",
]
