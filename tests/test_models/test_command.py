"""Tests for command result models."""

from sshrun.models import CommandResult, ExecutionSummary, SessionState
from sshrun.models.session import can_transition
from sshrun.services.connection import NonZeroExitError


def test_command_result_defaults() -> None:
    result = CommandResult(command="ls")
    assert result.success is True
    assert result.exit_code is None
    assert result.stdout == ""
    assert result.stderr == ""
    assert result.error is None


def test_fail_sets_error() -> None:
    result = CommandResult(command="false", exit_code=1)
    error = NonZeroExitError(1)
    result.fail(error)
    assert result.success is False
    assert result.error is error


def test_summary_from_results_tallies() -> None:
    ok = CommandResult(command="true", exit_code=0)
    bad = CommandResult(command="false", exit_code=1)
    bad.fail(NonZeroExitError(1))

    summary = ExecutionSummary.from_results(5, [ok, bad])

    assert summary.command_count == 5
    assert summary.success_count == 1
    assert summary.failure_count == 1
    assert summary.failed is True
    assert summary.results == [ok, bad]


def test_summary_to_dict() -> None:
    bad = CommandResult(command="false", exit_code=1, stderr="nope")
    bad.fail(NonZeroExitError(1))
    summary = ExecutionSummary.from_results(1, [bad])

    data = summary.to_dict()

    assert data == {
        "command_count": 1,
        "success_count": 0,
        "failure_count": 1,
        "results": [
            {
                "command": "false",
                "success": False,
                "exit_code": 1,
                "stdout": "",
                "stderr": "nope",
                "error": "Program exited with non zero exit code",
            }
        ],
    }


def test_lifecycle_transitions() -> None:
    assert can_transition(SessionState.IDLE, SessionState.CONNECTING)
    assert can_transition(SessionState.CONNECTING, SessionState.FAILED)
    assert can_transition(SessionState.EXECUTING, SessionState.EXECUTING)
    assert can_transition(SessionState.EXECUTING, SessionState.FAILED)
    assert can_transition(SessionState.DRAINING, SessionState.CLOSED)
    assert not can_transition(SessionState.IDLE, SessionState.EXECUTING)
    assert not can_transition(SessionState.READY, SessionState.FAILED)
    assert not can_transition(SessionState.DRAINING, SessionState.FAILED)
