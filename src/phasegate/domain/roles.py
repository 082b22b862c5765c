"""
Role roster and registry.

The roster is a closed set: it is loaded once, never mutated, and shared
read-only by every session.
"""

from collections.abc import Iterable, Iterator

from phasegate.domain.exceptions import UnknownRole
from phasegate.domain.models import Capability, Role, Tier

R = Capability.READ
W = Capability.WEB
NEW = Capability.WRITE_NEW
EXISTING = Capability.WRITE_EXISTING
APPROVE = Capability.APPROVE

# Pseudo-role holding control before the first handoff. Not part of the roster.
OPERATOR = "operator"

DEFAULT_ROLES: tuple[Role, ...] = (
    Role(
        name="clarifier",
        tier=Tier.INPUT,
        capabilities=frozenset({R}),
        job="Turn the operator's request into unambiguous requirements.",
        does=("asks targeted questions", "restates scope and acceptance criteria"),
        does_not=("propose solutions", "touch code"),
    ),
    Role(
        name="researcher",
        tier=Tier.RESEARCH,
        capabilities=frozenset({R, W}),
        job="Gather current documentation and prior art before anything is built.",
        does=("searches the web", "reads the existing code", "cites sources"),
        does_not=("write code", "make design decisions"),
    ),
    Role(
        name="explorer",
        tier=Tier.RESEARCH,
        capabilities=frozenset({R}),
        job="Map the existing codebase and report where a change will land.",
        does=("traces call paths", "lists affected files"),
        does_not=("search the web", "edit files"),
    ),
    Role(
        name="planner",
        tier=Tier.MANAGEMENT,
        capabilities=frozenset({R}),
        job="Break approved requirements into an ordered, reviewable plan.",
        does=("sequences steps", "names the files each step edits"),
        does_not=("implement steps", "approve its own plan"),
    ),
    Role(
        name="coordinator",
        tier=Tier.MANAGEMENT,
        capabilities=frozenset({R}),
        job="Route work between roles and keep the session on protocol.",
        does=("chooses the next role", "tracks open items"),
        does_not=("write code", "review code"),
    ),
    Role(
        name="architect",
        tier=Tier.DESIGN,
        capabilities=frozenset({R, W}),
        job="Decide module boundaries and data flow for the change.",
        does=("compares designs", "records trade-offs"),
        does_not=("write production code",),
    ),
    Role(
        name="interface_designer",
        tier=Tier.DESIGN,
        capabilities=frozenset({R}),
        job="Specify public APIs, types and user-facing behaviour.",
        does=("drafts signatures", "defines error cases"),
        does_not=("implement the interface",),
    ),
    Role(
        name="implementer",
        tier=Tier.BUILD,
        capabilities=frozenset({R, NEW, EXISTING}),
        job="Write the code the approved plan calls for, and nothing else.",
        does=("creates files", "edits files", "follows the style guides"),
        does_not=("expand scope", "approve its own work"),
    ),
    Role(
        name="scaffolder",
        tier=Tier.BUILD,
        capabilities=frozenset({R, NEW}),
        job="Create new project skeletons and boilerplate files.",
        does=("creates files",),
        does_not=("modify existing files",),
    ),
    Role(
        name="reviewer",
        tier=Tier.QUALITY,
        capabilities=frozenset({R, APPROVE}),
        job="Review every change and approve it or send it back with fixes.",
        does=("reads diffs", "requests specific fixes", "approves"),
        does_not=("edit files",),
    ),
    Role(
        name="tester",
        tier=Tier.QUALITY,
        capabilities=frozenset({R, NEW}),
        job="Write tests that pin down the requested behaviour.",
        does=("creates test files", "reports failures"),
        does_not=("change production code",),
    ),
    Role(
        name="security_auditor",
        tier=Tier.QUALITY,
        capabilities=frozenset({R, W, APPROVE}),
        job="Check changes against known vulnerability classes and advisories.",
        does=("looks up advisories", "approves or blocks on security grounds"),
        does_not=("edit files",),
    ),
    Role(
        name="debugger",
        tier=Tier.FIX_MAINTAIN,
        capabilities=frozenset({R, EXISTING}),
        job="Find the root cause of a failure and apply the minimal fix.",
        does=("reproduces failures", "edits existing files"),
        does_not=("create new features",),
    ),
    Role(
        name="refactorer",
        tier=Tier.FIX_MAINTAIN,
        capabilities=frozenset({R, EXISTING}),
        job="Restructure existing code without changing its behaviour.",
        does=("edits existing files",),
        does_not=("change behaviour", "create new files"),
    ),
)


class RoleRegistry:
    """
    Read-only lookup over the role roster.

    Example usage:
        registry = RoleRegistry()
        registry.lookup("reviewer").can_approve  # True
    """

    def __init__(self, roles: Iterable[Role] = DEFAULT_ROLES):
        """
        Args:
            roles: Roster in declared order (defaults to the built-in table)

        Raises:
            ValueError: If two roles share a name
        """
        declared = tuple(roles)
        self._by_name: dict[str, Role] = {}
        for role in declared:
            if role.name in self._by_name:
                raise ValueError(f"Duplicate role name: {role.name!r}")
            self._by_name[role.name] = role
        # sorted() is stable, so declared order is kept within a tier
        self._ordered = tuple(sorted(declared, key=lambda r: r.tier))

    def lookup(self, name: str) -> Role:
        """
        Get a role by name.

        Raises:
            UnknownRole: If the name is not in the roster
        """
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownRole(name) from None

    def capabilities_of(self, name: str) -> frozenset[Capability]:
        return self.lookup(name).capabilities

    def all(self) -> tuple[Role, ...]:
        """All roles, tier order then declared order."""
        return self._ordered

    def names(self) -> tuple[str, ...]:
        return tuple(role.name for role in self._ordered)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[Role]:
        return iter(self._ordered)

    def __len__(self) -> int:
        return len(self._ordered)
