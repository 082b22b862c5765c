"""
Phase state machine.

ANALYZE -> PLAN -> IMPLEMENT -> DONE, every step gated on an explicit event.
"Stop and wait for approval" is simply the absence of a submit_event call.
"""

from collections.abc import Callable
from types import MappingProxyType

from phasegate.domain.exceptions import InvalidTransition, ReviewRequired
from phasegate.domain.models import (
    HandoffDecision,
    Phase,
    PhaseEvent,
    PhaseTransition,
    WorkflowSession,
    utc_now,
)

TRANSITIONS: MappingProxyType[tuple[Phase, PhaseEvent], Phase] = MappingProxyType(
    {
        (Phase.ANALYZE, PhaseEvent.APPROVE): Phase.PLAN,
        (Phase.ANALYZE, PhaseEvent.HALT): Phase.HALTED,
        (Phase.PLAN, PhaseEvent.APPROVE): Phase.IMPLEMENT,
        (Phase.PLAN, PhaseEvent.REJECT): Phase.ANALYZE,
        (Phase.PLAN, PhaseEvent.HALT): Phase.HALTED,
        (Phase.IMPLEMENT, PhaseEvent.ALL_EDITS_CONFIRMED): Phase.DONE,
        (Phase.IMPLEMENT, PhaseEvent.REJECT): Phase.PLAN,
        (Phase.IMPLEMENT, PhaseEvent.HALT): Phase.HALTED,
        **{
            (phase, PhaseEvent.RESET): Phase.ANALYZE
            for phase in Phase
            if not phase.is_terminal
        },
    }
)

# Decides whether a session may enter DONE; wired to the review handoff rule.
DoneGate = Callable[[WorkflowSession], HandoffDecision]


def parse_event(phase: Phase, event: PhaseEvent | str) -> PhaseEvent:
    """Coerce an event name, reporting unknown names as invalid transitions."""
    if isinstance(event, PhaseEvent):
        return event
    try:
        return PhaseEvent(event)
    except ValueError:
        raise InvalidTransition(phase, str(event), "unknown event") from None


def permitted_events(phase: Phase) -> tuple[PhaseEvent, ...]:
    """Events with a row for phase, in table order (empty for terminal phases)."""
    return tuple(event for (source, event) in TRANSITIONS if source == phase)


def next_phase(phase: Phase, event: PhaseEvent | str) -> Phase:
    """
    Look up the transition table.

    Raises:
        InvalidTransition: If no row matches (phase, event)
    """
    parsed = parse_event(phase, event)
    if phase.is_terminal:
        raise InvalidTransition(phase, parsed.value, "session is closed")
    try:
        return TRANSITIONS[(phase, parsed)]
    except KeyError:
        raise InvalidTransition(phase, parsed.value) from None


class PhaseStateMachine:
    """Applies phase events to a session, one log entry per accepted event."""

    def __init__(self, done_gate: DoneGate | None = None):
        """
        Args:
            done_gate: Optional check consulted before any transition into DONE
        """
        self._done_gate = done_gate

    def permitted_events(self, phase: Phase) -> tuple[PhaseEvent, ...]:
        return permitted_events(phase)

    def submit_event(
        self, session: WorkflowSession, event: PhaseEvent | str
    ) -> Phase:
        """
        Transition the session or fail explicitly.

        Args:
            session: Session to mutate
            event: Event (or its wire name)

        Returns:
            The new phase

        Raises:
            InvalidTransition: No row matches (phase, event)
            ReviewRequired: The DONE gate refused the transition
        """
        parsed = parse_event(session.phase, event)
        target = next_phase(session.phase, parsed)

        if target is Phase.DONE and self._done_gate is not None:
            decision = self._done_gate(session)
            if decision.rule is not None:
                raise ReviewRequired(
                    session.phase,
                    parsed.value,
                    decision.rule,
                    decision.reason,
                )

        session.transitions.append(
            PhaseTransition(
                sequence=session.next_transition_sequence(),
                event=parsed,
                from_phase=session.phase,
                to_phase=target,
                at=utc_now(),
            )
        )
        session.phase = target
        return target
