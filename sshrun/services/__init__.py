"""Services for sshrun."""

from sshrun.services.connection import (
    NonZeroExitError,
    SessionError,
    SessionLostError,
)
from sshrun.services.runner import CommandRunner
from sshrun.services.transport import AsyncsshTransport

__all__ = [
    "AsyncsshTransport",
    "CommandRunner",
    "NonZeroExitError",
    "SessionError",
    "SessionLostError",
]
