"""Rich rendering of session snapshots, the roster and journal traces."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from phasegate.domain.models import Phase, SessionSnapshot
from phasegate.domain.roles import RoleRegistry
from phasegate.domain.session_event import SessionEvent, SessionEventType

# Shared console instances
console = Console()
error_console = Console(stderr=True)

PHASE_STYLES = {
    Phase.ANALYZE: "cyan",
    Phase.PLAN: "blue",
    Phase.IMPLEMENT: "magenta",
    Phase.DONE: "green",
    Phase.HALTED: "red",
}

EVENT_SYMBOLS = {
    SessionEventType.SESSION_CREATED: "[*]",
    SessionEventType.PHASE_CHANGED: "[>]",
    SessionEventType.TRANSITION_REFUSED: "[x]",
    SessionEventType.HANDOFF_ACCEPTED: "[+]",
    SessionEventType.HANDOFF_REJECTED: "[-]",
    SessionEventType.OPERATION_FAILED: "[!]",
    SessionEventType.OPERATION_SUCCEEDED: "[=]",
    SessionEventType.ESCALATE: "[^]",
    SessionEventType.ARCHIVED: "[#]",
}


def render_snapshot(snapshot: SessionSnapshot) -> Group:
    """Header panel plus transition, handoff and failure tables."""
    style = PHASE_STYLES[snapshot.phase]
    header = Text(f"Session {snapshot.session_id}", style="bold")
    header.append(f"\nPhase: {snapshot.phase.value}", style=f"bold {style}")
    header.append(f"\nActive role: {snapshot.active_role}")
    if snapshot.archived:
        header.append("\narchived", style="dim")

    parts: list[Panel | Table] = [Panel(header, expand=False)]

    if snapshot.transitions:
        transitions = Table(title="Transitions", show_header=True, box=None)
        transitions.add_column("#", style="cyan", justify="right")
        transitions.add_column("Event")
        transitions.add_column("From")
        transitions.add_column("To")
        transitions.add_column("At", style="dim")
        for t in snapshot.transitions:
            transitions.add_row(
                str(t.sequence), t.event.value, t.from_phase.value, t.to_phase.value, t.at
            )
        parts.append(transitions)

    if snapshot.handoffs:
        handoffs = Table(title="Handoffs", show_header=True, box=None)
        handoffs.add_column("#", style="cyan", justify="right")
        handoffs.add_column("From", style="magenta")
        handoffs.add_column("To", style="magenta")
        handoffs.add_column("Context")
        for h in snapshot.handoffs:
            handoffs.add_row(str(h.sequence), h.from_role, h.to_role, h.context[:60])
        parts.append(handoffs)

    failing = [f for f in snapshot.failures if f.count]
    if failing:
        failures = Table(title="Failing operations", show_header=True, box=None)
        failures.add_column("Operation", style="yellow")
        failures.add_column("Count", justify="right")
        failures.add_column("Escalated")
        failures.add_column("Last error", style="red")
        for f in failing:
            failures.add_row(
                f.operation,
                str(f.count),
                "yes" if f.escalated else "no",
                f.last_error.split("\n")[0][:80],
            )
        parts.append(failures)

    return Group(*parts)


def render_roles(registry: RoleRegistry) -> Table:
    """Roster table in tier order."""
    table = Table(title="Roles", show_header=True)
    table.add_column("Tier", style="cyan")
    table.add_column("Role", style="bold")
    table.add_column("Capabilities", style="yellow")
    table.add_column("Job")
    for role in registry.all():
        table.add_row(
            role.tier.name.lower(),
            role.name,
            ", ".join(sorted(c.value for c in role.capabilities)),
            role.job,
        )
    return table


def render_trace(events: Sequence[SessionEvent]) -> Table:
    """Journal as a table."""
    table = Table(show_header=True, box=None)
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Event", width=20)
    table.add_column("Phase")
    table.add_column("Role", style="magenta")
    table.add_column("Rule", style="red")
    table.add_column("Details")
    for i, event in enumerate(events, 1):
        table.add_row(
            str(i),
            event.event_type.value,
            event.phase or "-",
            event.role or "-",
            event.rule or "-",
            event.summary[:50] if event.summary else "",
        )
    return table


def format_timeline(events: Sequence[SessionEvent]) -> list[str]:
    """Journal as plain timeline lines."""
    lines = []
    for event in events:
        timestamp = event.created_at[:19] if event.created_at else "?"
        symbol = EVENT_SYMBOLS.get(event.event_type, "[?]")
        line = f"{timestamp} {symbol} {event.event_type.value}"
        if event.operation:
            line += f" ({event.operation})"
        if event.rule:
            line += f" [{event.rule}]"
        if event.summary:
            line += f": {event.summary[:50]}"
        lines.append(line)
    return lines


def print_error(message: str, hint: str | None = None) -> None:
    """Print formatted error message to stderr."""
    content = Text(f"ERROR: {message}", style="bold red")
    if hint:
        content.append(f"\n\nHint: {hint}", style="yellow")
    error_console.print(Panel(content, title="Error", border_style="red"))
