"""Shared pytest fixtures for phasegate tests."""

import pytest

from phasegate.application.orchestrator import Orchestrator
from phasegate.domain.escalation import FailureEscalationTracker
from phasegate.domain.handoffs import HandoffValidator
from phasegate.domain.models import HandoffRequest, WorkflowSession
from phasegate.domain.phases import PhaseStateMachine
from phasegate.domain.roles import OPERATOR, RoleRegistry
from phasegate.infrastructure.persistence.memory import InMemorySessionRepository
from phasegate.infrastructure.persistence.session_events import (
    InMemorySessionEventStore,
)


@pytest.fixture
def registry() -> RoleRegistry:
    """The built-in 14-role roster."""
    return RoleRegistry()


@pytest.fixture
def session() -> WorkflowSession:
    """A fresh session in ANALYZE, controlled by the operator."""
    return WorkflowSession(session_id="sess-001", active_role=OPERATOR)


@pytest.fixture
def validator(registry: RoleRegistry) -> HandoffValidator:
    return HandoffValidator(registry)


@pytest.fixture
def machine(validator: HandoffValidator) -> PhaseStateMachine:
    """Phase machine with the review-before-done gate wired in."""
    return PhaseStateMachine(done_gate=validator.review_decision)


@pytest.fixture
def tracker() -> FailureEscalationTracker:
    return FailureEscalationTracker()


@pytest.fixture
def researched_session(
    session: WorkflowSession, validator: HandoffValidator
) -> WorkflowSession:
    """Session where the operator has already handed off to the researcher."""
    validator.accept(session, HandoffRequest("sess-001", OPERATOR, "researcher"))
    return session


@pytest.fixture
def event_store() -> InMemorySessionEventStore:
    return InMemorySessionEventStore()


@pytest.fixture
def orchestrator(event_store: InMemorySessionEventStore) -> Orchestrator:
    """In-memory orchestrator with a journal."""
    return Orchestrator(InMemorySessionRepository(), event_store=event_store)


@pytest.fixture
def handoff_chain(validator: HandoffValidator):  # noqa: ANN201
    """Accept handoffs from the current active role through each role in turn."""

    def _chain(session: WorkflowSession, *roles: str) -> None:
        for role in roles:
            validator.accept(
                session,
                HandoffRequest(session.session_id, session.active_role, role),
            )

    return _chain
