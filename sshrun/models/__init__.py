"""Data models for sshrun."""

from sshrun.models.command import CommandResult, ExecutionSummary
from sshrun.models.session import SessionState
from sshrun.models.ssh import ConnectionParameters

__all__ = [
    "CommandResult",
    "ConnectionParameters",
    "ExecutionSummary",
    "SessionState",
]
