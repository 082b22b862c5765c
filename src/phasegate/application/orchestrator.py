"""
Orchestrator: the synchronous API the operator (or a CLI) drives.

Owns no thread of execution. Every mutating call loads the session, applies
one domain operation under the repository's per-session lock, persists the result and only
then journals it. Sessions share nothing mutable except the read-only roster,
so calls on different sessions never wait on each other.
"""

import logging
import uuid

from phasegate.application.session_event_emitter import SessionEventEmitter
from phasegate.domain.escalation import FailureEscalationTracker
from phasegate.domain.exceptions import HandoffRejected, InvalidTransition, ReviewRequired
from phasegate.domain.handoffs import HandoffValidator
from phasegate.domain.interfaces import (
    SessionEventStoreInterface,
    SessionRepositoryInterface,
)
from phasegate.domain.models import (
    HandoffRecord,
    HandoffRequest,
    OperationOutcome,
    Phase,
    PhaseEvent,
    SessionSnapshot,
    WorkflowSession,
)
from phasegate.domain.phases import PhaseStateMachine
from phasegate.domain.protocol import ProtocolConfig
from phasegate.domain.roles import RoleRegistry
from phasegate.domain.session_event import SessionEvent

logger = logging.getLogger(__name__)


class Orchestrator:
    """
    Coordinates the phase machine, handoff validator and failure tracker.

    Example usage:
        orchestrator = Orchestrator(InMemorySessionRepository())
        sid = orchestrator.create_session()
        orchestrator.request_handoff(sid, "operator", "researcher")
        orchestrator.submit_event(sid, "approve")  # Phase.PLAN
    """

    def __init__(
        self,
        repository: SessionRepositoryInterface,
        event_store: SessionEventStoreInterface | None = None,
        config: ProtocolConfig | None = None,
    ):
        """
        Args:
            repository: Where sessions live between calls
            event_store: Optional journal of accepted and refused operations
            config: Protocol parameters (defaults to the built-in roster)
        """
        self._config = config or ProtocolConfig.default()
        self._repository = repository
        self._event_store = event_store
        self._emitter = SessionEventEmitter(event_store) if event_store else None

        self._registry = RoleRegistry(self._config.roles)
        self._validator = HandoffValidator(self._registry, self._config)
        self._machine = PhaseStateMachine(done_gate=self._validator.review_decision)
        self._tracker = FailureEscalationTracker(self._config.escalate_after)

    @property
    def roles(self) -> RoleRegistry:
        return self._registry

    @property
    def config(self) -> ProtocolConfig:
        return self._config

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def create_session(self) -> str:
        """Start a new session in ANALYZE, controlled by the initial role."""
        session = WorkflowSession(
            session_id=str(uuid.uuid4()),
            active_role=self._config.initial_role,
        )
        self._repository.save(session)
        if self._emitter:
            self._emitter.session_created(session)
        logger.info("Session %s created", session.session_id)
        return session.session_id

    def submit_event(self, session_id: str, event: PhaseEvent | str) -> Phase:
        """
        Apply a phase event.

        Raises:
            UnknownSession: No such session
            InvalidTransition: The event does not apply to the current phase
            ReviewRequired: DONE refused until an approving review happened
        """
        with self._repository.locked(session_id):
            session = self._repository.get(session_id)
            try:
                phase = self._machine.submit_event(session, event)
            except InvalidTransition as e:
                rule = e.rule if isinstance(e, ReviewRequired) else None
                logger.warning("Session %s: %s", session_id, e)
                if self._emitter:
                    self._emitter.transition_refused(
                        session, e.event, e.reason or str(e), rule
                    )
                raise

            self._repository.save(session)
            transition = session.transitions[-1]
            if self._emitter:
                self._emitter.phase_changed(session, transition)
            logger.info(
                "Session %s: %s -> %s (%s)",
                session_id,
                transition.from_phase.value,
                transition.to_phase.value,
                transition.event.value,
            )

            if session.is_terminal:
                self._archive(session)
            return phase

    def request_handoff(
        self, session_id: str, from_role: str, to_role: str, context: str = ""
    ) -> HandoffRecord:
        """
        Transfer active status between roles.

        Raises:
            UnknownSession: No such session
            HandoffRejected: A handoff rule was violated (carries the rule id)
        """
        request = HandoffRequest(
            session_id=session_id,
            from_role=from_role,
            to_role=to_role,
            context=context,
        )
        with self._repository.locked(session_id):
            session = self._repository.get(session_id)
            try:
                record = self._validator.accept(session, request)
            except HandoffRejected as e:
                logger.warning("Session %s: handoff rejected %s", session_id, e)
                if self._emitter:
                    self._emitter.handoff_rejected(session, request, e.rule, e.reason)
                raise

            self._repository.save(session)
            if self._emitter:
                self._emitter.handoff_accepted(session, record)
            logger.info(
                "Session %s: handoff #%d %s -> %s",
                session_id,
                record.sequence,
                record.from_role,
                record.to_role,
            )
            return record

    def record_operation_result(
        self,
        session_id: str,
        operation: str,
        success: bool,
        error_text: str = "",
    ) -> OperationOutcome:
        """
        Record the result of a named operation.

        Returns:
            OK on success, otherwise RETRY or ESCALATE. Escalation is advisory:
            the phase is not changed.

        Raises:
            UnknownSession: No such session
            InvalidTransition: The session is DONE or HALTED
        """
        with self._repository.locked(session_id):
            session = self._repository.get(session_id)

            if session.is_terminal:
                logger.warning(
                    "Session %s: result for %s refused, session is %s",
                    session_id,
                    operation,
                    session.phase.value,
                )
                if self._emitter:
                    self._emitter.transition_refused(
                        session, "record-result", "session is closed"
                    )
                raise InvalidTransition(session.phase, "record-result", "session is closed")

            if success:
                self._tracker.record_success(session, operation)
                self._repository.save(session)
                if self._emitter:
                    self._emitter.operation_succeeded(session, operation)
                logger.debug("Session %s: %s succeeded", session_id, operation)
                return OperationOutcome.OK

            already_escalated = self._tracker.is_escalated(session, operation)
            outcome = self._tracker.record_failure(session, operation, error_text)
            self._repository.save(session)
            count = session.failure(operation).count
            if self._emitter:
                self._emitter.operation_failed(session, operation, count, error_text)

            if outcome is OperationOutcome.ESCALATE and not already_escalated:
                if self._emitter:
                    self._emitter.escalate(session, operation, count, error_text)
                logger.warning(
                    "Session %s: %s failed %d times, escalating to a human",
                    session_id,
                    operation,
                    count,
                )
            else:
                logger.debug(
                    "Session %s: %s failed (%d), %s",
                    session_id,
                    operation,
                    count,
                    outcome.value,
                )
            return outcome

    def get_state(self, session_id: str) -> SessionSnapshot:
        """Read-only snapshot of a session."""
        return self._repository.get(session_id).snapshot()

    def list_sessions(self, include_archived: bool = False) -> list[SessionSnapshot]:
        return [
            self._repository.get(sid).snapshot()
            for sid in self._repository.list_ids(include_archived=include_archived)
        ]

    def events(self, session_id: str) -> list[SessionEvent]:
        """Journal trace of a session (empty without an event store)."""
        self._repository.get(session_id)
        if self._event_store is None:
            return []
        return self._event_store.get_events(session_id)

    def _archive(self, session: WorkflowSession) -> None:
        session.archived = True
        self._repository.save(session)
        self._repository.archive(session.session_id)
        if self._emitter:
            self._emitter.archived(session)
        logger.info(
            "Session %s archived in %s", session.session_id, session.phase.value
        )
