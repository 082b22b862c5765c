"""Click CLI for phasegate.

Every command loads the orchestrator from the state directory, applies one
operation and exits; "waiting for approval" is simply not running the next
command yet.

Usage:
    phasegate new
    phasegate handoff <session> operator researcher --context "scope the task"
    phasegate event <session> approve
    phasegate result <session> run-tests --failed --error "2 failures"
    phasegate show <session>
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click

from phasegate import __version__
from phasegate.application.orchestrator import Orchestrator
from phasegate.cli.logging_setup import setup_logging
from phasegate.config import load_protocol_config
from phasegate.domain.exceptions import (
    ConfigurationError,
    CorruptSession,
    HandoffRejected,
    InvalidTransition,
    PhaseGateError,
    UnknownSession,
)
from phasegate.domain.models import OperationOutcome, PhaseEvent
from phasegate.domain.phases import permitted_events
from phasegate.domain.protocol import ProtocolConfig
from phasegate.infrastructure.persistence import (
    FilesystemSessionEventStore,
    FilesystemSessionRepository,
)
from phasegate.visualization.console import (
    console,
    format_timeline,
    print_error,
    render_roles,
    render_snapshot,
    render_trace,
)

logger = logging.getLogger(__name__)

DEFAULT_STATE_DIR = ".phasegate"


def _hint_for(error: PhaseGateError) -> str | None:
    if isinstance(error, HandoffRejected):
        return f"Violated rule: {error.rule.value}"
    if isinstance(error, InvalidTransition):
        allowed = ", ".join(e.value for e in permitted_events(error.phase))
        return f"Permitted events in {error.phase.value}: {allowed or 'none'}"
    if isinstance(error, UnknownSession):
        return "Run 'phasegate list --all' to see known sessions"
    if isinstance(error, CorruptSession):
        return "Restore the session file from a backup or remove it from the state directory"
    return None


@contextmanager
def _reporting_errors(ctx: click.Context) -> Iterator[None]:
    """Render protocol errors verbatim and exit with status 1."""
    try:
        yield
    except PhaseGateError as e:
        print_error(str(e), _hint_for(e))
        ctx.exit(1)


@click.group()
@click.version_option(__version__, prog_name="phasegate")
@click.option(
    "--state-dir",
    default=DEFAULT_STATE_DIR,
    envvar="PHASEGATE_STATE_DIR",
    type=click.Path(file_okay=False),
    show_default=True,
    help="Directory holding sessions, archive and journal",
)
@click.option(
    "--protocol",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a protocol.json table (default: built-in roster)",
)
@click.option(
    "--log-file",
    default=None,
    type=click.Path(),
    help="Path to log file",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose (DEBUG) logging to console",
)
@click.pass_context
def cli(
    ctx: click.Context,
    state_dir: str,
    protocol: str | None,
    log_file: str | None,
    verbose: bool,
) -> None:
    """Phase-gated, role-handoff workflow orchestrator."""
    setup_logging(verbose=verbose, log_file=log_file)

    config = ProtocolConfig.default()
    if protocol:
        try:
            config = load_protocol_config(Path(protocol))
        except ConfigurationError as e:
            print_error(str(e), "Check the file against protocol.schema.json")
            ctx.exit(1)

    base = Path(state_dir)
    ctx.obj = Orchestrator(
        repository=FilesystemSessionRepository(base),
        event_store=FilesystemSessionEventStore(base),
        config=config,
    )
    logger.debug("Using state directory %s (protocol %s)", base, config.name)


@cli.command()
@click.pass_obj
def new(orchestrator: Orchestrator) -> None:
    """Create a session and print its id."""
    click.echo(orchestrator.create_session())


@cli.command()
@click.argument("session_id")
@click.argument("event", type=click.Choice([e.value for e in PhaseEvent]))
@click.pass_context
def event(ctx: click.Context, session_id: str, event: str) -> None:
    """Submit a phase EVENT to a session."""
    orchestrator: Orchestrator = ctx.obj
    with _reporting_errors(ctx):
        phase = orchestrator.submit_event(session_id, event)
        console.print(f"Phase: [bold]{phase.value}[/bold]")


@cli.command()
@click.argument("session_id")
@click.argument("from_role")
@click.argument("to_role")
@click.option("--context", "context_text", default="", help="Context handed to the next role")
@click.pass_context
def handoff(
    ctx: click.Context, session_id: str, from_role: str, to_role: str, context_text: str
) -> None:
    """Hand control from FROM_ROLE to TO_ROLE."""
    orchestrator: Orchestrator = ctx.obj
    with _reporting_errors(ctx):
        record = orchestrator.request_handoff(session_id, from_role, to_role, context_text)
        console.print(
            f"Handoff #{record.sequence}: {record.from_role} -> [bold]{record.to_role}[/bold]"
        )


@cli.command()
@click.argument("session_id")
@click.argument("operation")
@click.option("--ok/--failed", "success", required=True, help="Outcome of the operation")
@click.option("--error", "error_text", default="", help="Error text for a failure")
@click.pass_context
def result(
    ctx: click.Context, session_id: str, operation: str, success: bool, error_text: str
) -> None:
    """Record the result of OPERATION and print ok, retry or escalate."""
    orchestrator: Orchestrator = ctx.obj
    with _reporting_errors(ctx):
        outcome = orchestrator.record_operation_result(
            session_id, operation, success, error_text
        )
        style = {
            OperationOutcome.OK: "green",
            OperationOutcome.RETRY: "yellow",
            OperationOutcome.ESCALATE: "bold red",
        }[outcome]
        console.print(f"[{style}]{outcome.value}[/{style}]")
        if outcome is OperationOutcome.ESCALATE:
            console.print(
                "Automated retries exhausted; a human must intervene "
                f"(submit 'halt' with: phasegate event {session_id} halt)"
            )


@cli.command()
@click.argument("session_id")
@click.pass_context
def show(ctx: click.Context, session_id: str) -> None:
    """Show the state of a session."""
    orchestrator: Orchestrator = ctx.obj
    with _reporting_errors(ctx):
        console.print(render_snapshot(orchestrator.get_state(session_id)))


@cli.command(name="list")
@click.option("--all", "include_archived", is_flag=True, help="Include archived sessions")
@click.pass_context
def list_sessions(ctx: click.Context, include_archived: bool) -> None:
    """List sessions with their phase and active role."""
    orchestrator: Orchestrator = ctx.obj
    with _reporting_errors(ctx):
        for snapshot in orchestrator.list_sessions(include_archived=include_archived):
            marker = " (archived)" if snapshot.archived else ""
            click.echo(
                f"{snapshot.session_id}  {snapshot.phase.value:<9}  "
                f"{snapshot.active_role}{marker}"
            )


@cli.command()
@click.pass_obj
def roles(orchestrator: Orchestrator) -> None:
    """Show the role roster."""
    console.print(render_roles(orchestrator.roles))


@cli.command()
@click.argument("session_id")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["table", "timeline"]),
    default="table",
    show_default=True,
)
@click.pass_context
def trace(ctx: click.Context, session_id: str, fmt: str) -> None:
    """Show the journal of a session."""
    orchestrator: Orchestrator = ctx.obj
    with _reporting_errors(ctx):
        events = orchestrator.events(session_id)
        if fmt == "table":
            console.print(render_trace(events))
        else:
            for line in format_timeline(events):
                click.echo(line)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
