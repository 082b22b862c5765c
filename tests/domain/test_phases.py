"""Tests for the phase state machine."""

import itertools

import pytest

from phasegate.domain.exceptions import InvalidTransition, ReviewRequired
from phasegate.domain.models import (
    HandoffDecision,
    HandoffRule,
    Phase,
    PhaseEvent,
    WorkflowSession,
)
from phasegate.domain.phases import (
    TRANSITIONS,
    PhaseStateMachine,
    next_phase,
    permitted_events,
)
from phasegate.domain.roles import OPERATOR


def _session(phase: Phase = Phase.ANALYZE) -> WorkflowSession:
    return WorkflowSession(session_id="s", active_role=OPERATOR, phase=phase)


class TestTransitionTable:
    """The table is the only source of permitted edges."""

    @pytest.mark.parametrize(
        ("phase", "event", "expected"),
        [
            (Phase.ANALYZE, PhaseEvent.APPROVE, Phase.PLAN),
            (Phase.ANALYZE, PhaseEvent.HALT, Phase.HALTED),
            (Phase.PLAN, PhaseEvent.APPROVE, Phase.IMPLEMENT),
            (Phase.PLAN, PhaseEvent.REJECT, Phase.ANALYZE),
            (Phase.PLAN, PhaseEvent.HALT, Phase.HALTED),
            (Phase.IMPLEMENT, PhaseEvent.ALL_EDITS_CONFIRMED, Phase.DONE),
            (Phase.IMPLEMENT, PhaseEvent.REJECT, Phase.PLAN),
            (Phase.IMPLEMENT, PhaseEvent.HALT, Phase.HALTED),
            (Phase.ANALYZE, PhaseEvent.RESET, Phase.ANALYZE),
            (Phase.PLAN, PhaseEvent.RESET, Phase.ANALYZE),
            (Phase.IMPLEMENT, PhaseEvent.RESET, Phase.ANALYZE),
        ],
    )
    def test_permitted_edges(self, phase, event, expected):
        assert next_phase(phase, event) is expected

    def test_table_has_exactly_eleven_rows(self):
        assert len(TRANSITIONS) == 11

    @pytest.mark.parametrize(
        ("phase", "event"),
        [
            (Phase.ANALYZE, PhaseEvent.REJECT),
            (Phase.ANALYZE, PhaseEvent.ALL_EDITS_CONFIRMED),
            (Phase.PLAN, PhaseEvent.ALL_EDITS_CONFIRMED),
            (Phase.IMPLEMENT, PhaseEvent.APPROVE),
        ],
    )
    def test_unlisted_edges_raise(self, phase, event):
        with pytest.raises(InvalidTransition) as exc_info:
            next_phase(phase, event)
        assert exc_info.value.phase is phase
        assert exc_info.value.event == event.value

    def test_string_event_names_accepted(self):
        assert next_phase(Phase.IMPLEMENT, "all-edits-confirmed") is Phase.DONE

    def test_unknown_event_name_raises(self):
        with pytest.raises(InvalidTransition, match="unknown event"):
            next_phase(Phase.ANALYZE, "merge")

    def test_terminal_phases_have_no_events(self):
        assert permitted_events(Phase.DONE) == ()
        assert permitted_events(Phase.HALTED) == ()

    def test_permitted_events_in_analyze(self):
        assert set(permitted_events(Phase.ANALYZE)) == {
            PhaseEvent.APPROVE,
            PhaseEvent.HALT,
            PhaseEvent.RESET,
        }


class TestPhaseStateMachine:
    def test_submit_event_transitions_and_logs(self):
        session = _session()
        machine = PhaseStateMachine()

        phase = machine.submit_event(session, PhaseEvent.APPROVE)

        assert phase is Phase.PLAN
        assert session.phase is Phase.PLAN
        assert len(session.transitions) == 1
        entry = session.transitions[0]
        assert entry.sequence == 1
        assert entry.event is PhaseEvent.APPROVE
        assert entry.from_phase is Phase.ANALYZE
        assert entry.to_phase is Phase.PLAN
        assert entry.at

    def test_sequence_numbers_increase(self):
        session = _session()
        machine = PhaseStateMachine()

        for event in ("approve", "reject", "approve", "approve", "reset"):
            machine.submit_event(session, event)

        assert [t.sequence for t in session.transitions] == [1, 2, 3, 4, 5]
        assert session.phase is Phase.ANALYZE

    def test_invalid_event_leaves_session_untouched(self):
        session = _session()
        machine = PhaseStateMachine()

        with pytest.raises(InvalidTransition):
            machine.submit_event(session, PhaseEvent.REJECT)

        assert session.phase is Phase.ANALYZE
        assert session.transitions == []

    @pytest.mark.parametrize("terminal", [Phase.DONE, Phase.HALTED])
    @pytest.mark.parametrize("event", list(PhaseEvent))
    def test_terminal_phases_absorb(self, terminal, event):
        """No event changes a DONE or HALTED session."""
        session = _session(terminal)
        machine = PhaseStateMachine()

        with pytest.raises(InvalidTransition):
            machine.submit_event(session, event)

        assert session.phase is terminal
        assert session.transitions == []

    def test_every_event_sequence_stays_in_defined_phases(self):
        """Exhaustive walk over short event sequences: phase is always defined."""
        machine = PhaseStateMachine()
        for events in itertools.product(list(PhaseEvent), repeat=4):
            session = _session()
            for event in events:
                try:
                    machine.submit_event(session, event)
                except InvalidTransition:
                    pass
                assert session.phase in Phase

    def test_halt_from_any_non_terminal_phase(self):
        machine = PhaseStateMachine()
        for phase in (Phase.ANALYZE, Phase.PLAN, Phase.IMPLEMENT):
            session = _session(phase)
            assert machine.submit_event(session, "halt") is Phase.HALTED


class TestDoneGate:
    """The DONE edge consults the gate; other edges do not."""

    def test_gate_refusal_raises_review_required(self):
        session = _session(Phase.IMPLEMENT)
        machine = PhaseStateMachine(
            done_gate=lambda s: HandoffDecision.reject(
                HandoffRule.REVIEW_BEFORE_DONE, "not reviewed"
            )
        )

        with pytest.raises(ReviewRequired) as exc_info:
            machine.submit_event(session, PhaseEvent.ALL_EDITS_CONFIRMED)

        assert exc_info.value.rule is HandoffRule.REVIEW_BEFORE_DONE
        assert "not reviewed" in str(exc_info.value)
        assert session.phase is Phase.IMPLEMENT
        assert session.transitions == []

    def test_review_required_is_an_invalid_transition(self):
        assert issubclass(ReviewRequired, InvalidTransition)

    def test_gate_acceptance_allows_done(self):
        session = _session(Phase.IMPLEMENT)
        machine = PhaseStateMachine(done_gate=lambda s: HandoffDecision.ok())

        assert machine.submit_event(session, "all-edits-confirmed") is Phase.DONE

    def test_gate_not_consulted_for_other_edges(self):
        calls = []

        def gate(session):
            calls.append(session)
            return HandoffDecision.ok()

        machine = PhaseStateMachine(done_gate=gate)
        session = _session(Phase.IMPLEMENT)
        machine.submit_event(session, "reject")

        assert calls == []
