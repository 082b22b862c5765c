"""
Domain models for the phase/handoff protocol.

Roles, phases and records are immutable (frozen dataclasses) so they can be
shared freely. WorkflowSession is the one mutable aggregate: it exclusively
owns its transition log, handoff history, active-role pointer and failure
counters.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

# =============================================================================
# ROLES
# =============================================================================


class Tier(int, Enum):
    """Ordinal grouping of roles, in roster order."""

    INPUT = 1
    RESEARCH = 2
    MANAGEMENT = 3
    DESIGN = 4
    BUILD = 5
    QUALITY = 6
    FIX_MAINTAIN = 7


class Capability(str, Enum):
    """What a role is allowed to do."""

    READ = "read"
    WEB = "web"
    WRITE_NEW = "write-new"
    WRITE_EXISTING = "write-existing"
    APPROVE = "approve"


WRITE_CAPABILITIES = frozenset({Capability.WRITE_NEW, Capability.WRITE_EXISTING})


@dataclass(frozen=True)
class Role:
    """A named participant with a fixed capability set and one job."""

    name: str
    tier: Tier
    capabilities: frozenset[Capability]
    job: str
    does: tuple[str, ...] = ()
    does_not: tuple[str, ...] = ()

    def has(self, capability: Capability) -> bool:
        return capability in self.capabilities

    @property
    def can_write(self) -> bool:
        return bool(self.capabilities & WRITE_CAPABILITIES)

    @property
    def can_approve(self) -> bool:
        return Capability.APPROVE in self.capabilities

    @property
    def is_researcher(self) -> bool:
        """READ + WEB: the capability pair that counts as research."""
        return {Capability.READ, Capability.WEB} <= self.capabilities


# =============================================================================
# PHASES
# =============================================================================


class Phase(str, Enum):
    """Stage of the Analyze/Plan/Implement/Done workflow."""

    ANALYZE = "analyze"
    PLAN = "plan"
    IMPLEMENT = "implement"
    DONE = "done"
    HALTED = "halted"

    @property
    def is_terminal(self) -> bool:
        return self in (Phase.DONE, Phase.HALTED)


class PhaseEvent(str, Enum):
    """External signals that drive the phase machine."""

    APPROVE = "approve"
    REJECT = "reject"
    HALT = "halt"
    RESET = "reset"
    ALL_EDITS_CONFIRMED = "all-edits-confirmed"


@dataclass(frozen=True)
class PhaseTransition:
    """One accepted entry of a session's transition log."""

    sequence: int  # Monotonic per session, starts at 1
    event: PhaseEvent
    from_phase: Phase
    to_phase: Phase
    at: str  # ISO 8601


# =============================================================================
# HANDOFFS
# =============================================================================


class HandoffRule(str, Enum):
    """Identifiers of the handoff rules, reported on rejection."""

    SESSION_CLOSED = "session-closed"
    NOT_ACTIVE_ROLE = "not-active-role"
    UNKNOWN_TARGET = "unknown-target"
    SELF_HANDOFF = "self-handoff"
    FIRST_HANDOFF_TARGET = "first-handoff-target"
    RESEARCH_BEFORE_WRITE = "research-before-write"
    REVIEW_BEFORE_DONE = "review-before-done"


@dataclass(frozen=True)
class HandoffRequest:
    """A proposed transfer of control. Ephemeral."""

    session_id: str
    from_role: str
    to_role: str
    context: str = ""


@dataclass(frozen=True)
class HandoffRecord:
    """An accepted handoff, as kept in the session history."""

    sequence: int
    from_role: str
    to_role: str
    context: str
    at: str


@dataclass(frozen=True)
class HandoffDecision:
    """Outcome of validating a HandoffRequest."""

    accepted: bool
    rule: HandoffRule | None = None
    reason: str = ""

    def __post_init__(self) -> None:
        if self.accepted == (self.rule is not None):
            raise ValueError("Rejected decisions carry a rule, accepted ones do not")

    @classmethod
    def ok(cls) -> "HandoffDecision":
        return cls(accepted=True)

    @classmethod
    def reject(cls, rule: HandoffRule, reason: str) -> "HandoffDecision":
        return cls(accepted=False, rule=rule, reason=reason)


# =============================================================================
# FAILURES
# =============================================================================


class OperationOutcome(str, Enum):
    """Classification returned for an operation result."""

    OK = "ok"
    RETRY = "retry"
    ESCALATE = "escalate"


@dataclass(frozen=True)
class FailureRecord:
    """Consecutive-failure counter for one (session, operation)."""

    operation: str
    count: int = 0
    last_error: str = ""
    escalated: bool = False


# =============================================================================
# SESSION
# =============================================================================


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class WorkflowSession:
    """Mutable state of one task being shepherded through the protocol."""

    session_id: str
    active_role: str
    phase: Phase = Phase.ANALYZE
    transitions: list[PhaseTransition] = field(default_factory=list)
    handoffs: list[HandoffRecord] = field(default_factory=list)
    failures: dict[str, FailureRecord] = field(default_factory=dict)
    created_at: str = field(default_factory=utc_now)
    archived: bool = False

    @property
    def is_terminal(self) -> bool:
        return self.phase.is_terminal

    def next_transition_sequence(self) -> int:
        return self.transitions[-1].sequence + 1 if self.transitions else 1

    def next_handoff_sequence(self) -> int:
        return self.handoffs[-1].sequence + 1 if self.handoffs else 1

    def failure(self, operation: str) -> FailureRecord:
        return self.failures.get(operation, FailureRecord(operation=operation))

    def snapshot(self) -> "SessionSnapshot":
        return SessionSnapshot(
            session_id=self.session_id,
            phase=self.phase,
            active_role=self.active_role,
            transitions=tuple(self.transitions),
            handoffs=tuple(self.handoffs),
            failures=tuple(self.failures.values()),
            created_at=self.created_at,
            archived=self.archived,
        )


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a WorkflowSession."""

    session_id: str
    phase: Phase
    active_role: str
    transitions: tuple[PhaseTransition, ...]
    handoffs: tuple[HandoffRecord, ...]
    failures: tuple[FailureRecord, ...]
    created_at: str
    archived: bool
