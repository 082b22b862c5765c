"""Protocol parameters: roster, allowed cycles, first-handoff targets, threshold."""

from dataclasses import dataclass, field

from phasegate.domain.models import Role
from phasegate.domain.roles import DEFAULT_ROLES, OPERATOR

DEFAULT_ALLOWED_CYCLES: frozenset[tuple[str, str]] = frozenset(
    {("reviewer", "implementer"), ("implementer", "reviewer")}
)
DEFAULT_FIRST_HANDOFF_TARGETS: frozenset[str] = frozenset({"clarifier", "researcher"})
DEFAULT_ESCALATE_AFTER = 3


@dataclass(frozen=True)
class ProtocolConfig:
    """Everything that parameterises the validator and the tracker."""

    roles: tuple[Role, ...] = DEFAULT_ROLES
    allowed_cycles: frozenset[tuple[str, str]] = DEFAULT_ALLOWED_CYCLES
    first_handoff_targets: frozenset[str] = DEFAULT_FIRST_HANDOFF_TARGETS
    escalate_after: int = DEFAULT_ESCALATE_AFTER
    initial_role: str = OPERATOR
    name: str = field(default="default", compare=False)

    def __post_init__(self) -> None:
        if self.escalate_after < 1:
            raise ValueError(
                f"escalate_after must be >= 1, got {self.escalate_after}"
            )

    @classmethod
    def default(cls) -> "ProtocolConfig":
        return cls()
