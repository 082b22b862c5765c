"""
Failure escalation tracking.

Advisory only: the tracker classifies a failure as RETRY or ESCALATE. It
never halts the session; submitting `halt` afterwards is the caller's call.
"""

from dataclasses import replace

from phasegate.domain.models import FailureRecord, OperationOutcome, WorkflowSession
from phasegate.domain.protocol import DEFAULT_ESCALATE_AFTER


class FailureEscalationTracker:
    """Counts consecutive failures per (session, operation)."""

    def __init__(self, escalate_after: int = DEFAULT_ESCALATE_AFTER):
        """
        Args:
            escalate_after: Failure count from which ESCALATE is returned
        """
        if escalate_after < 1:
            raise ValueError(f"escalate_after must be >= 1, got {escalate_after}")
        self._escalate_after = escalate_after

    @property
    def escalate_after(self) -> int:
        return self._escalate_after

    def record_failure(
        self, session: WorkflowSession, operation: str, error_text: str = ""
    ) -> OperationOutcome:
        """
        Increment the counter and classify.

        Once escalated, the record stays escalated until a success resets it;
        further failures re-report ESCALATE.
        """
        previous = session.failure(operation)
        count = previous.count + 1
        escalate = count >= self._escalate_after
        session.failures[operation] = replace(
            previous,
            count=count,
            last_error=error_text,
            escalated=previous.escalated or escalate,
        )
        return OperationOutcome.ESCALATE if escalate else OperationOutcome.RETRY

    def record_success(self, session: WorkflowSession, operation: str) -> None:
        session.failures[operation] = FailureRecord(operation=operation)

    def is_escalated(self, session: WorkflowSession, operation: str) -> bool:
        return session.failure(operation).escalated
