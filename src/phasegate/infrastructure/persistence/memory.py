"""
In-memory implementation of the session repository.

Useful for testing and ephemeral orchestrators.
"""

import copy
import threading
import weakref
from collections.abc import Iterator
from contextlib import contextmanager

from phasegate.domain.exceptions import UnknownSession
from phasegate.domain.interfaces import SessionRepositoryInterface
from phasegate.domain.models import WorkflowSession


class InMemorySessionRepository(SessionRepositoryInterface):
    """Simple in-memory store; hands out copies so callers cannot alias state."""

    def __init__(self) -> None:
        self._sessions: dict[str, WorkflowSession] = {}
        self._archived: set[str] = set()
        # A lock lives only while some caller holds or waits on it
        self._locks: weakref.WeakValueDictionary[str, threading.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._locks_guard = threading.Lock()

    def save(self, session: WorkflowSession) -> None:
        self._sessions[session.session_id] = copy.deepcopy(session)

    def get(self, session_id: str) -> WorkflowSession:
        if session_id not in self._sessions:
            raise UnknownSession(session_id)
        return copy.deepcopy(self._sessions[session_id])

    def list_ids(self, include_archived: bool = False) -> list[str]:
        return [
            sid
            for sid in self._sessions
            if include_archived or sid not in self._archived
        ]

    def archive(self, session_id: str) -> None:
        if session_id not in self._sessions:
            raise UnknownSession(session_id)
        self._archived.add(session_id)

    @contextmanager
    def locked(self, session_id: str) -> Iterator[None]:
        if session_id not in self._sessions:
            raise UnknownSession(session_id)
        with self._locks_guard:
            lock = self._locks.get(session_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[session_id] = lock
        with lock:
            yield
