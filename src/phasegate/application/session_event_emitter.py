"""Session journal emission service."""

import uuid

from phasegate.domain.interfaces import SessionEventStoreInterface
from phasegate.domain.models import (
    HandoffRecord,
    HandoffRequest,
    HandoffRule,
    PhaseTransition,
    WorkflowSession,
    utc_now,
)
from phasegate.domain.session_event import SessionEvent, SessionEventType


class SessionEventEmitter:
    """Emits session events to a store.

    Provides convenience methods for the events the orchestrator records,
    handling ID generation and timestamps.
    """

    def __init__(self, event_store: SessionEventStoreInterface) -> None:
        self._store = event_store

    def _emit(self, event: SessionEvent) -> str:
        return self._store.store_event(event)

    def _event(
        self, event_type: SessionEventType, session: WorkflowSession, **fields: object
    ) -> SessionEvent:
        return SessionEvent(
            event_id=str(uuid.uuid4()),
            event_type=event_type,
            session_id=session.session_id,
            phase=session.phase.value,
            role=session.active_role,
            created_at=utc_now(),
            **fields,  # type: ignore[arg-type]
        )

    def session_created(self, session: WorkflowSession) -> None:
        self._emit(self._event(SessionEventType.SESSION_CREATED, session))

    def phase_changed(self, session: WorkflowSession, transition: PhaseTransition) -> None:
        """Emit PHASE_CHANGED after an accepted phase event."""
        self._emit(
            self._event(
                SessionEventType.PHASE_CHANGED,
                session,
                summary=(
                    f"#{transition.sequence} {transition.event.value}: "
                    f"{transition.from_phase.value} -> {transition.to_phase.value}"
                ),
            )
        )

    def transition_refused(
        self,
        session: WorkflowSession,
        event: str,
        reason: str,
        rule: HandoffRule | None = None,
    ) -> None:
        """Emit TRANSITION_REFUSED when a phase event is rejected."""
        self._emit(
            self._event(
                SessionEventType.TRANSITION_REFUSED,
                session,
                rule=rule.value if rule else None,
                summary=f"{event}: {reason}"[:500],
            )
        )

    def handoff_accepted(self, session: WorkflowSession, record: HandoffRecord) -> None:
        self._emit(
            self._event(
                SessionEventType.HANDOFF_ACCEPTED,
                session,
                summary=f"{record.from_role} -> {record.to_role}",
            )
        )

    def handoff_rejected(
        self, session: WorkflowSession, request: HandoffRequest, rule: HandoffRule, reason: str
    ) -> None:
        """Emit HANDOFF_REJECTED with the violated rule."""
        self._emit(
            self._event(
                SessionEventType.HANDOFF_REJECTED,
                session,
                rule=rule.value,
                summary=f"{request.from_role} -> {request.to_role}: {reason}"[:500],
            )
        )

    def operation_failed(
        self, session: WorkflowSession, operation: str, count: int, error_text: str
    ) -> None:
        self._emit(
            self._event(
                SessionEventType.OPERATION_FAILED,
                session,
                operation=operation,
                failure_count=count,
                summary=error_text[:500],
            )
        )

    def operation_succeeded(self, session: WorkflowSession, operation: str) -> None:
        self._emit(
            self._event(
                SessionEventType.OPERATION_SUCCEEDED,
                session,
                operation=operation,
                failure_count=0,
            )
        )

    def escalate(
        self, session: WorkflowSession, operation: str, count: int, error_text: str
    ) -> None:
        """Emit ESCALATE the first time an operation crosses the threshold."""
        self._emit(
            self._event(
                SessionEventType.ESCALATE,
                session,
                operation=operation,
                failure_count=count,
                summary=error_text[:500],
            )
        )

    def archived(self, session: WorkflowSession) -> None:
        self._emit(
            self._event(
                SessionEventType.ARCHIVED,
                session,
                summary=f"archived in {session.phase.value}",
            )
        )
