"""
Handoff validation.

A handoff moves "active" status from one role to another within a session.
Rules are checked in a fixed order and the first violation is reported with
its rule identifier, never as a generic failure.
"""

from phasegate.domain.exceptions import HandoffRejected
from phasegate.domain.models import (
    HandoffDecision,
    HandoffRecord,
    HandoffRequest,
    HandoffRule,
    Role,
    WorkflowSession,
    utc_now,
)
from phasegate.domain.protocol import ProtocolConfig
from phasegate.domain.roles import RoleRegistry


class HandoffValidator:
    """Checks handoff requests against the protocol rules."""

    def __init__(self, registry: RoleRegistry, config: ProtocolConfig | None = None):
        """
        Args:
            registry: Role roster used for target and capability checks
            config: Allowed cycles and first-handoff targets (defaults apply)
        """
        self._registry = registry
        self._config = config or ProtocolConfig.default()

    def validate(
        self, session: WorkflowSession, request: HandoffRequest
    ) -> HandoffDecision:
        """Return the decision for request without touching the session."""
        if session.is_terminal:
            return HandoffDecision.reject(
                HandoffRule.SESSION_CLOSED,
                f"Session is {session.phase.value}; no further handoffs are accepted",
            )

        if request.from_role != session.active_role:
            return HandoffDecision.reject(
                HandoffRule.NOT_ACTIVE_ROLE,
                f"'{request.from_role}' cannot hand off: "
                f"the active role is '{session.active_role}'",
            )

        if request.to_role not in self._registry:
            return HandoffDecision.reject(
                HandoffRule.UNKNOWN_TARGET,
                f"'{request.to_role}' is not a known role",
            )
        target = self._registry.lookup(request.to_role)

        pair = (request.from_role, request.to_role)
        if request.from_role == request.to_role and pair not in self._config.allowed_cycles:
            return HandoffDecision.reject(
                HandoffRule.SELF_HANDOFF,
                f"'{request.from_role}' cannot hand off to itself",
            )

        if not session.handoffs and target.name not in self._config.first_handoff_targets:
            allowed = ", ".join(sorted(self._config.first_handoff_targets))
            return HandoffDecision.reject(
                HandoffRule.FIRST_HANDOFF_TARGET,
                f"The first handoff must go to one of: {allowed} "
                f"(got '{target.name}')",
            )

        if target.can_write and not self._has_researched(session):
            return HandoffDecision.reject(
                HandoffRule.RESEARCH_BEFORE_WRITE,
                f"'{target.name}' can write files; hand off to a research role "
                "(read + web) first",
            )

        return HandoffDecision.ok()

    def accept(self, session: WorkflowSession, request: HandoffRequest) -> HandoffRecord:
        """
        Validate and apply a handoff.

        Returns:
            The record appended to the session history

        Raises:
            HandoffRejected: If any rule is violated (session unchanged)
        """
        decision = self.validate(session, request)
        if decision.rule is not None:
            raise HandoffRejected(decision.rule, decision.reason)

        record = HandoffRecord(
            sequence=session.next_handoff_sequence(),
            from_role=request.from_role,
            to_role=request.to_role,
            context=request.context,
            at=utc_now(),
        )
        session.handoffs.append(record)
        session.active_role = request.to_role
        return record

    def review_decision(self, session: WorkflowSession) -> HandoffDecision:
        """
        Whether the session may reach DONE.

        Requires an approve-capable handoff after the most recent
        write-capable one, and at least one approve-capable handoff overall.
        """
        roles = [self._role_or_none(h.to_role) for h in session.handoffs]
        last_write = max(
            (i for i, role in enumerate(roles) if role is not None and role.can_write),
            default=-1,
        )
        reviewed = any(
            role is not None and role.can_approve for role in roles[last_write + 1 :]
        )
        if reviewed:
            return HandoffDecision.ok()
        if last_write >= 0:
            reason = (
                f"'{session.handoffs[last_write].to_role}' wrote changes that no "
                "approve-capable role has reviewed since"
            )
        else:
            reason = "No approve-capable role has reviewed this session"
        return HandoffDecision.reject(HandoffRule.REVIEW_BEFORE_DONE, reason)

    def _has_researched(self, session: WorkflowSession) -> bool:
        for handoff in session.handoffs:
            role = self._role_or_none(handoff.to_role)
            if role is not None and role.is_researcher:
                return True
        return False

    def _role_or_none(self, name: str) -> Role | None:
        return self._registry.lookup(name) if name in self._registry else None
