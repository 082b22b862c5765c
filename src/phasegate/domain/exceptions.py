"""
Domain exceptions for the phase/handoff protocol.

These represent protocol rule violations in the domain layer. All of them
are local, recoverable conditions: the caller surfaces them to the operator
and the session is left exactly as it was.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from phasegate.domain.models import HandoffRule, Phase


class PhaseGateError(Exception):
    """Base class for every protocol error."""


class UnknownRole(PhaseGateError):
    """Raised when a role name outside the fixed roster is queried."""

    def __init__(self, name: str):
        super().__init__(f"Unknown role: {name!r}")
        self.name = name


class UnknownSession(PhaseGateError):
    """Raised when no session exists for the given id."""

    def __init__(self, session_id: str):
        super().__init__(f"Unknown session: {session_id!r}")
        self.session_id = session_id


class InvalidTransition(PhaseGateError):
    """
    Raised when no transition row matches (current phase, event).

    There is no implicit default: an event that does not apply to the
    current phase is always reported, never ignored.
    """

    def __init__(self, phase: "Phase", event: str, reason: str = ""):
        """
        Args:
            phase: Phase the session was in when the event arrived
            event: Event name as submitted by the caller
            reason: Optional detail appended to the message
        """
        message = f"Event {event!r} is not permitted in phase {phase.value!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.phase = phase
        self.event = event
        self.reason = reason


class ReviewRequired(InvalidTransition):
    """
    Raised when a session tries to reach DONE without an approving review.

    The transition row exists, but the review-before-done handoff rule
    refuses it until an approve-capable role has been handed control after
    the most recent write.
    """

    def __init__(self, phase: "Phase", event: str, rule: "HandoffRule", reason: str):
        super().__init__(phase, event, reason)
        self.rule = rule


class HandoffRejected(PhaseGateError):
    """Raised when a proposed handoff violates a handoff rule."""

    def __init__(self, rule: "HandoffRule", reason: str):
        """
        Args:
            rule: Identifier of the violated rule
            reason: Actionable, human-readable explanation
        """
        super().__init__(f"[{rule.value}] {reason}")
        self.rule = rule
        self.reason = reason


class ConfigurationError(PhaseGateError):
    """Raised when a protocol table is missing or invalid."""


class CorruptSession(PhaseGateError):
    """Raised when a stored session document cannot be read back."""

    def __init__(self, session_id: str, detail: str):
        super().__init__(f"Stored session {session_id!r} is corrupt: {detail}")
        self.session_id = session_id
        self.detail = detail
