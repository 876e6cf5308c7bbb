"""Sequential remote command execution over SSH."""

from sshrun.client import SshClient
from sshrun.config import ClientConfig, Settings
from sshrun.models import (
    CommandResult,
    ConnectionParameters,
    ExecutionSummary,
    SessionState,
)
from sshrun.services import (
    AsyncsshTransport,
    CommandRunner,
    NonZeroExitError,
    SessionError,
    SessionLostError,
)
from sshrun.utils.validation import ArgumentError

__all__ = [
    "ArgumentError",
    "AsyncsshTransport",
    "ClientConfig",
    "CommandResult",
    "CommandRunner",
    "ConnectionParameters",
    "ExecutionSummary",
    "NonZeroExitError",
    "SessionError",
    "SessionLostError",
    "SessionState",
    "Settings",
    "SshClient",
]
