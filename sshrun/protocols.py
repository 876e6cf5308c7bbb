"""Protocol interfaces for dependency inversion.

The command runner only talks to these interfaces, so tests can drive it
with a scripted fake transport and a stub parameter resolver.

Usage Example:

    from sshrun.protocols import ParameterResolver

    class StaticResolver:
        async def resolve(self) -> ConnectionParameters:
            return ConnectionParameters(host="h", username="u", password="p")

    runner = CommandRunner(StaticResolver(), transport_factory=FakeTransport)
"""

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from sshrun.models import ConnectionParameters

DataListener = Callable[[str | bytes], None]
CloseListener = Callable[[int | None, str | None], None]
StartCallback = Callable[[Exception | None, "CommandStream | None"], None]


@runtime_checkable
class ParameterResolver(Protocol):
    """Anything that can produce connection parameters."""

    async def resolve(self) -> ConnectionParameters:
        """Resolve connection parameters.

        Raises:
            OSError: If key material cannot be read
        """
        ...


@runtime_checkable
class OutputStream(Protocol):
    """A readable output stream of a running command."""

    def on_data(self, listener: DataListener) -> "OutputStream":
        """Register a listener for output chunks, in arrival order."""
        ...


@runtime_checkable
class CommandStream(OutputStream, Protocol):
    """Standard output of a started command plus its stderr and close events."""

    @property
    def stderr(self) -> OutputStream:
        """Standard error stream of the command."""
        ...

    def on_close(self, listener: CloseListener) -> "CommandStream":
        """Register a listener called with (exit_code, signal) on close.

        exit_code is None when the command ended without an exit status.
        """
        ...


@runtime_checkable
class Transport(Protocol):
    """Event driven SSH session.

    Callbacks are always invoked from the event loop, never from inside
    the call that triggered them.
    """

    def on_ready(self, callback: Callable[[], None]) -> None:
        """Register a callback for when the session is authenticated."""
        ...

    def on_error(self, callback: Callable[[Exception], None]) -> None:
        """Register a callback for connection level errors."""
        ...

    def on_continue(self, callback: Callable[[], None]) -> None:
        """Register a callback for when backpressure has cleared."""
        ...

    def connect(self, params: ConnectionParameters) -> None:
        """Start connecting; outcome is reported via ready/error callbacks."""
        ...

    def exec(self, command: str, callback: StartCallback) -> bool:
        """Submit a command for execution.

        Returns:
            False if the transport needs a continue event before more work
        """
        ...

    def end(self) -> None:
        """Close the session."""
        ...
