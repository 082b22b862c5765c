"""
Domain interfaces (Ports) for the phase/handoff protocol.

These abstract base classes define the persistence contracts the
application layer depends on. They have no external dependencies.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from contextlib import AbstractContextManager

    from phasegate.domain.models import WorkflowSession
    from phasegate.domain.session_event import SessionEvent, SessionEventType


class SessionRepositoryInterface(ABC):
    """
    Port for session persistence.

    Sessions that reach DONE or HALTED are archived, never deleted.
    """

    @abstractmethod
    def save(self, session: "WorkflowSession") -> None:
        """
        Store the current state of a session, replacing any previous state.

        Args:
            session: The session to store
        """
        pass

    @abstractmethod
    def get(self, session_id: str) -> "WorkflowSession":
        """
        Retrieve a session by ID, active or archived.

        The returned object is a private copy; mutating it does not affect
        the stored state until it is saved.

        Raises:
            UnknownSession: If no session has this id
        """
        pass

    @abstractmethod
    def list_ids(self, include_archived: bool = False) -> list[str]:
        """
        List stored session ids in creation order.

        Args:
            include_archived: Also list DONE/HALTED sessions
        """
        pass

    @abstractmethod
    def archive(self, session_id: str) -> None:
        """
        Move a session to the archive.

        Raises:
            UnknownSession: If no session has this id
        """
        pass

    @abstractmethod
    def locked(self, session_id: str) -> "AbstractContextManager[None]":
        """
        Exclusive access to one session for a load-modify-save cycle.

        Every caller sharing the same storage, in this process or another,
        is held off until the context exits.

        Raises:
            UnknownSession: If no session has this id
        """
        pass


class SessionEventStoreInterface(ABC):
    """Port for the append-only session journal."""

    @abstractmethod
    def store_event(self, event: "SessionEvent") -> str:
        """
        Append an event.

        Returns:
            The event_id
        """
        pass

    @abstractmethod
    def get_events(
        self,
        session_id: str,
        event_type: "SessionEventType | None" = None,
    ) -> list["SessionEvent"]:
        """
        Events for a session, oldest first, optionally filtered by type.
        """
        pass

    @abstractmethod
    def get_escalation_events(self, session_id: str) -> list["SessionEvent"]:
        pass
