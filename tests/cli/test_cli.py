"""Tests for the click command line."""

import json
import logging

import pytest
from click.testing import CliRunner

from phasegate.cli.main import cli


@pytest.fixture(autouse=True)
def _reset_logging():
    """Drop handlers bound to CliRunner's captured streams."""
    yield
    logger = logging.getLogger("phasegate")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def run(tmp_path):  # noqa: ANN201
    """Invoke the CLI against a state directory under tmp_path."""
    runner = CliRunner()
    state_dir = str(tmp_path / "state")

    def _run(*args: str):
        return runner.invoke(cli, ["--state-dir", state_dir, *args])

    return _run


@pytest.fixture
def session_id(run) -> str:
    result = run("new")
    assert result.exit_code == 0, result.output
    return result.output.strip()


class TestSessionLifecycle:
    def test_new_prints_id(self, run, tmp_path):
        result = run("new")

        assert result.exit_code == 0
        sid = result.output.strip()
        assert (tmp_path / "state" / "sessions" / f"{sid}.json").exists()

    def test_handoff_and_approve(self, run, session_id):
        handoff = run("handoff", session_id, "operator", "researcher", "--context", "scope it")
        approve = run("event", session_id, "approve")

        assert handoff.exit_code == 0, handoff.output
        assert "Handoff #1" in handoff.output
        assert approve.exit_code == 0, approve.output
        assert "Phase: plan" in approve.output

    def test_state_survives_between_invocations(self, run, session_id):
        run("handoff", session_id, "operator", "researcher")
        run("event", session_id, "approve")

        result = run("show", session_id)

        assert result.exit_code == 0
        assert "Phase: plan" in result.output
        assert "Active role: researcher" in result.output

    def test_halt_archives(self, run, session_id):
        run("event", session_id, "halt")

        active = run("list")
        everything = run("list", "--all")

        assert session_id not in active.output
        assert session_id in everything.output
        assert "(archived)" in everything.output


class TestRefusals:
    def test_self_handoff_rejected(self, run, session_id):
        run("handoff", session_id, "operator", "researcher")

        result = run("handoff", session_id, "researcher", "researcher")

        assert result.exit_code == 1
        assert "self-handoff" in result.output

    def test_invalid_transition_lists_permitted_events(self, run, session_id):
        result = run("event", session_id, "reject")

        assert result.exit_code == 1
        assert "Permitted events in analyze" in result.output

    def test_unknown_event_name_is_usage_error(self, run, session_id):
        result = run("event", session_id, "skip")

        assert result.exit_code == 2

    def test_corrupt_session_file(self, run, session_id, tmp_path):
        path = tmp_path / "state" / "sessions" / f"{session_id}.json"
        path.write_text(json.dumps({"session_id": session_id}))

        result = run("show", session_id)

        assert result.exit_code == 1
        assert "corrupt" in result.output
        assert result.exception is None or isinstance(result.exception, SystemExit)

    def test_result_on_halted_session(self, run, session_id):
        run("event", session_id, "halt")

        result = run("result", session_id, "run-tests", "--failed")

        assert result.exit_code == 1
        assert "closed" in result.output

    def test_unknown_session(self, run):
        result = run("show", "nope")

        assert result.exit_code == 1
        assert "Unknown session" in result.output


class TestOperationResults:
    def test_retry_then_escalate(self, run, session_id):
        outcomes = [
            run("result", session_id, "run-tests", "--failed", "--error", "boom")
            for _ in range(3)
        ]

        assert [r.exit_code for r in outcomes] == [0, 0, 0]
        assert "retry" in outcomes[0].output
        assert "retry" in outcomes[1].output
        assert "escalate" in outcomes[2].output
        assert "halt" in outcomes[2].output

    def test_success_resets(self, run, session_id):
        run("result", session_id, "run-tests", "--failed")
        ok = run("result", session_id, "run-tests", "--ok")
        after = run("result", session_id, "run-tests", "--failed")

        assert "ok" in ok.output
        assert "retry" in after.output

    def test_outcome_flag_required(self, run, session_id):
        result = run("result", session_id, "run-tests")

        assert result.exit_code == 2


class TestReadCommands:
    def test_roles(self, run):
        result = run("roles")

        assert result.exit_code == 0
        assert "reviewer" in result.output
        assert "clarifier" in result.output

    def test_trace_timeline(self, run, session_id):
        run("handoff", session_id, "operator", "implementer")

        result = run("trace", session_id, "--format", "timeline")

        assert result.exit_code == 0
        assert "SESSION_CREATED" in result.output
        assert "HANDOFF_REJECTED [first-handoff-target]" in result.output

    def test_trace_table(self, run, session_id):
        result = run("trace", session_id)

        assert result.exit_code == 0
        assert "SESSION_CREATED" in result.output


class TestProtocolOption:
    def test_custom_threshold(self, run, session_id, tmp_path):
        protocol = tmp_path / "protocol.json"
        protocol.write_text(json.dumps({"escalate_after": 1}))

        result = run("--protocol", str(protocol), "result", session_id, "lint", "--failed")

        assert "escalate" in result.output

    def test_invalid_protocol_file(self, run, tmp_path):
        protocol = tmp_path / "protocol.json"
        protocol.write_text(json.dumps({"escalate_after": 0}))

        result = run("--protocol", str(protocol), "roles")

        assert result.exit_code == 1
        assert "escalate_after" in result.output
