"""Session audit trail models."""

from dataclasses import dataclass
from enum import Enum


class SessionEventType(str, Enum):
    """Types of session journal events."""

    SESSION_CREATED = "SESSION_CREATED"
    PHASE_CHANGED = "PHASE_CHANGED"
    TRANSITION_REFUSED = "TRANSITION_REFUSED"
    HANDOFF_ACCEPTED = "HANDOFF_ACCEPTED"
    HANDOFF_REJECTED = "HANDOFF_REJECTED"
    OPERATION_FAILED = "OPERATION_FAILED"
    OPERATION_SUCCEEDED = "OPERATION_SUCCEEDED"
    ESCALATE = "ESCALATE"
    ARCHIVED = "ARCHIVED"


@dataclass(frozen=True)
class SessionEvent:
    """Single journal entry.

    Records both accepted changes and refusals, so the trace shows
    exactly what the operator was told and when.
    """

    event_id: str
    event_type: SessionEventType
    session_id: str
    phase: str | None = None  # Phase after the event
    role: str | None = None  # Active role after the event
    rule: str | None = None  # Violated rule, for refusals
    operation: str | None = None
    failure_count: int | None = None
    summary: str = ""
    created_at: str = ""  # ISO 8601
