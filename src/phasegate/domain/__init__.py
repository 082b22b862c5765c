"""
Domain layer for the phase/handoff protocol.

Contains the decision core with no external dependencies.
"""

from phasegate.domain.escalation import FailureEscalationTracker
from phasegate.domain.exceptions import (
    ConfigurationError,
    CorruptSession,
    HandoffRejected,
    InvalidTransition,
    PhaseGateError,
    ReviewRequired,
    UnknownRole,
    UnknownSession,
)
from phasegate.domain.handoffs import HandoffValidator
from phasegate.domain.interfaces import (
    SessionEventStoreInterface,
    SessionRepositoryInterface,
)
from phasegate.domain.models import (
    Capability,
    FailureRecord,
    HandoffDecision,
    HandoffRecord,
    HandoffRequest,
    HandoffRule,
    OperationOutcome,
    Phase,
    PhaseEvent,
    PhaseTransition,
    Role,
    SessionSnapshot,
    Tier,
    WorkflowSession,
)
from phasegate.domain.phases import TRANSITIONS, PhaseStateMachine
from phasegate.domain.protocol import ProtocolConfig
from phasegate.domain.roles import DEFAULT_ROLES, OPERATOR, RoleRegistry
from phasegate.domain.session_event import SessionEvent, SessionEventType

__all__ = [
    # Models
    "Capability",
    "Tier",
    "Role",
    "Phase",
    "PhaseEvent",
    "PhaseTransition",
    "HandoffRule",
    "HandoffRequest",
    "HandoffRecord",
    "HandoffDecision",
    "OperationOutcome",
    "FailureRecord",
    "WorkflowSession",
    "SessionSnapshot",
    "SessionEvent",
    "SessionEventType",
    # Core components
    "RoleRegistry",
    "DEFAULT_ROLES",
    "OPERATOR",
    "ProtocolConfig",
    "PhaseStateMachine",
    "TRANSITIONS",
    "HandoffValidator",
    "FailureEscalationTracker",
    # Interfaces
    "SessionRepositoryInterface",
    "SessionEventStoreInterface",
    # Exceptions
    "PhaseGateError",
    "UnknownRole",
    "UnknownSession",
    "InvalidTransition",
    "ReviewRequired",
    "HandoffRejected",
    "ConfigurationError",
    "CorruptSession",
]
