"""
PhaseGate: phase-gated, role-handoff workflow orchestration.

A synchronous decision core that enforces a human-directed multi-role
protocol: Analyze -> Plan -> Implement -> Done with explicit approval,
validated handoffs between a fixed roster of roles, and advisory failure
escalation.

Example:
    from phasegate import Orchestrator
    from phasegate.infrastructure import InMemorySessionRepository

    orchestrator = Orchestrator(InMemorySessionRepository())
    sid = orchestrator.create_session()
    orchestrator.request_handoff(sid, "operator", "researcher")
    orchestrator.submit_event(sid, "approve")  # Phase.PLAN
"""

# Application layer (orchestration)
from phasegate.application.orchestrator import Orchestrator

# Core components
from phasegate.domain.escalation import FailureEscalationTracker

# Domain exceptions
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

# Domain models (most commonly used)
from phasegate.domain.models import (
    Capability,
    HandoffDecision,
    HandoffRecord,
    HandoffRequest,
    HandoffRule,
    OperationOutcome,
    Phase,
    PhaseEvent,
    Role,
    SessionSnapshot,
    Tier,
    WorkflowSession,
)
from phasegate.domain.phases import PhaseStateMachine
from phasegate.domain.protocol import ProtocolConfig
from phasegate.domain.roles import RoleRegistry

# Infrastructure (explicit import encouraged for dependency injection)
from phasegate.infrastructure.persistence import (
    FilesystemSessionEventStore,
    FilesystemSessionRepository,
    InMemorySessionEventStore,
    InMemorySessionRepository,
)

__version__ = "0.3.0"

__all__ = [
    # Version
    "__version__",
    # Application
    "Orchestrator",
    # Core components
    "RoleRegistry",
    "PhaseStateMachine",
    "HandoffValidator",
    "FailureEscalationTracker",
    "ProtocolConfig",
    # Models
    "Capability",
    "Tier",
    "Role",
    "Phase",
    "PhaseEvent",
    "HandoffRule",
    "HandoffRequest",
    "HandoffRecord",
    "HandoffDecision",
    "OperationOutcome",
    "WorkflowSession",
    "SessionSnapshot",
    # Exceptions
    "PhaseGateError",
    "UnknownRole",
    "UnknownSession",
    "InvalidTransition",
    "ReviewRequired",
    "HandoffRejected",
    "ConfigurationError",
    "CorruptSession",
    # Infrastructure
    "InMemorySessionRepository",
    "FilesystemSessionRepository",
    "InMemorySessionEventStore",
    "FilesystemSessionEventStore",
]
