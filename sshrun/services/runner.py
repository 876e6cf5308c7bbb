"""Sequential command execution over an event driven SSH transport.

Execution Model:
- One command in flight at a time, submitted strictly in worklist order
- A command is final once its close event is processed; a non-zero exit
  or a start failure aborts the rest of the worklist
- When exec() reports the transport is not ready for more work, advancing
  to the next command waits for the next continue event
- The session is closed exactly once on every exit path after it was opened

State is only touched from the event loop thread, so no locking is needed.
"""

import asyncio
import codecs
import logging
from collections.abc import Awaitable, Callable
from functools import partial
from typing import Any

from sshrun.models import (
    CommandResult,
    ConnectionParameters,
    ExecutionSummary,
    SessionState,
)
from sshrun.models.session import can_transition
from sshrun.protocols import CommandStream, ParameterResolver, Transport
from sshrun.services.connection import (
    NonZeroExitError,
    SessionError,
    SessionLostError,
)
from sshrun.utils.validation import normalize_commands

logger = logging.getLogger(__name__)

TransportFactory = Callable[[], Transport]

_IDLE_STATES = frozenset(
    {SessionState.IDLE, SessionState.CLOSED, SessionState.FAILED}
)


class _CommandExecution:
    """Bookkeeping for one submitted command."""

    def __init__(self, command: str, done: "asyncio.Future[bool]") -> None:
        self.command = command
        # Resolves to True to advance to the next command, False to abort
        self.done = done
        self.ready_for_next = True
        self.closed = False
        self.result: CommandResult | None = None
        self._decoders = {
            "stdout": codecs.getincrementaldecoder("utf-8")(errors="replace"),
            "stderr": codecs.getincrementaldecoder("utf-8")(errors="replace"),
        }

    def append(self, stream_name: str, chunk: str | bytes) -> None:
        """Append an output chunk to the result."""
        if self.closed or self.result is None:
            return
        if isinstance(chunk, bytes):
            text = self._decoders[stream_name].decode(chunk)
        else:
            text = chunk
        setattr(self.result, stream_name, getattr(self.result, stream_name) + text)

    def close(self) -> None:
        """Flush partial multi-byte sequences and freeze the output."""
        if self.result is not None:
            for stream_name, decoder in self._decoders.items():
                tail = decoder.decode(b"", final=True)
                if tail:
                    setattr(
                        self.result,
                        stream_name,
                        getattr(self.result, stream_name) + tail,
                    )
        self.closed = True

    def finish(self, proceed: bool) -> None:
        if not self.done.done():
            self.done.set_result(proceed)


class CommandRunner:
    """Runs an ordered list of commands on a remote host, one at a time.

    Command failures are reported as data in the returned summary. Only
    connection level failures and malformed input are raised.

    Example:
        >>> runner = CommandRunner(ClientConfig(...), AsyncsshTransport)
        >>> summary = await runner.run(["uname -a", "uptime"])
        >>> summary.success_count
        2
    """

    def __init__(
        self,
        resolver: ParameterResolver,
        transport_factory: TransportFactory,
    ) -> None:
        """Initialize the runner.

        Args:
            resolver: Produces connection parameters for each run
            transport_factory: Creates a fresh, unconnected transport
        """
        self._resolver = resolver
        self._transport_factory = transport_factory
        self._state = SessionState.IDLE
        self._host = ""
        self._transport: Transport | None = None
        self._ready: asyncio.Future[None] | None = None
        self._current: _CommandExecution | None = None
        self._resume: Callable[[], None] | None = None
        self._results: list[CommandResult] = []

    @property
    def state(self) -> SessionState:
        """Current lifecycle state."""
        return self._state

    def _transition(self, target: SessionState) -> None:
        if not can_transition(self._state, target):
            raise RuntimeError(
                f"Invalid session transition: {self._state.value} -> {target.value}"
            )
        logger.debug("Session state %s -> %s", self._state.value, target.value)
        self._state = target

    def run(self, commands: Any) -> Awaitable[ExecutionSummary]:
        """Connect to the remote host and execute commands sequentially.

        Args:
            commands: A command string or an ordered sequence of command strings

        Returns:
            Awaitable resolving to the execution summary. It resolves even
            when a command fails; it only raises on connection failure.

        Raises:
            ArgumentError: Immediately, if commands is malformed
        """
        worklist = normalize_commands(commands)
        return self._run(worklist)

    async def _run(self, worklist: list[str]) -> ExecutionSummary:
        if self._state not in _IDLE_STATES:
            raise RuntimeError(
                f"Runner is busy (state={self._state.value}); "
                "overlapping runs are not supported"
            )
        self._transition(SessionState.CONNECTING)
        self._results = []
        self._resume = None
        self._current = None

        try:
            params = await self._resolver.resolve()
            transport = self._transport_factory()
        except BaseException:
            self._transition(SessionState.FAILED)
            raise

        self._host = params.host
        await self._open(transport, params)

        try:
            await self._execute_all(transport, worklist)
        except BaseException:
            logger.error("Command execution on %s interrupted", params.target)
            self._transition(SessionState.FAILED)
            self._end(transport)
            raise

        self._transition(SessionState.DRAINING)
        self._end(transport)
        self._transition(SessionState.CLOSED)

        summary = ExecutionSummary.from_results(len(worklist), self._results)
        logger.info(
            "Executed %d of %d command(s) on %s (succeeded=%d, failed=%d)",
            len(summary.results),
            summary.command_count,
            params.target,
            summary.success_count,
            summary.failure_count,
        )
        return summary

    async def _open(self, transport: Transport, params: ConnectionParameters) -> None:
        """Connect the transport and wait for it to become ready.

        Raises:
            SessionError: If the transport reports an error before ready
        """
        self._transport = transport
        self._ready = asyncio.get_running_loop().create_future()
        transport.on_ready(partial(self._handle_ready, transport))
        transport.on_error(partial(self._handle_error, transport))
        transport.on_continue(partial(self._handle_continue, transport))

        logger.info("Opening SSH session to %s", params.target)
        try:
            transport.connect(params)
            await self._ready
        except asyncio.CancelledError:
            self._transition(SessionState.FAILED)
            self._end(transport)
            raise
        except Exception as e:
            logger.error("Fatal error connecting to %s: %s", params.target, e)
            self._transition(SessionState.FAILED)
            self._end(transport)
            raise SessionError(params.host, e) from e

        self._transition(SessionState.READY)
        logger.info("Connected to remote host %s", params.target)

    def _end(self, transport: Transport) -> None:
        logger.debug("Closing SSH session to %s", self._host)
        self._transport = None
        self._resume = None
        self._current = None
        transport.end()

    async def _execute_all(self, transport: Transport, worklist: list[str]) -> None:
        for index, command in enumerate(worklist):
            self._transition(SessionState.EXECUTING)
            proceed = await self._execute_one(transport, index, command)
            if not proceed:
                logger.warning(
                    "Aborting command set on %s after command %d of %d",
                    self._host,
                    index + 1,
                    len(worklist),
                )
                return
        logger.debug("Command set executed successfully")

    async def _execute_one(
        self, transport: Transport, index: int, command: str
    ) -> bool:
        """Submit one command and wait until it is safe to move on.

        Returns:
            True to continue with the next command, False to abort
        """
        execution = _CommandExecution(
            command, asyncio.get_running_loop().create_future()
        )
        self._current = execution
        self._resume = None

        logger.debug("Executing command %d: %s", index + 1, command)
        try:
            execution.ready_for_next = transport.exec(
                command, partial(self._handle_start, execution)
            )
        except Exception as e:
            self._handle_start(execution, e, None)

        if not execution.ready_for_next:
            logger.debug("Transport not ready for more work after %r", command)

        try:
            return await execution.done
        finally:
            self._current = None

    def _handle_ready(self, transport: Transport) -> None:
        if transport is not self._transport:
            return
        if self._ready is not None and not self._ready.done():
            self._ready.set_result(None)

    def _handle_error(self, transport: Transport, error: Exception) -> None:
        if transport is not self._transport:
            logger.debug("Ignoring error from a closed session: %s", error)
            return
        if self._ready is not None and not self._ready.done():
            self._ready.set_exception(error)
            return

        execution = self._current
        if execution is None or execution.done.done():
            logger.debug("Ignoring session error with no command in flight: %s", error)
            return

        if execution.closed:
            # Command already final, only waiting for a continue event
            logger.warning(
                "Session to %s lost after %r completed: %s",
                self._host,
                execution.command,
                error,
            )
            self._resume = None
            execution.finish(False)
            return

        logger.error(
            "Session to %s lost while executing %r: %s",
            self._host,
            execution.command,
            error,
        )
        if execution.result is None:
            execution.result = CommandResult(command=execution.command)
            self._results.append(execution.result)
        execution.close()
        execution.result.fail(SessionLostError(self._host, error))
        execution.finish(False)

    def _handle_start(
        self,
        execution: _CommandExecution,
        error: Exception | None,
        stream: CommandStream | None,
    ) -> None:
        if execution.done.done() or execution.result is not None:
            logger.debug("Ignoring late start event for %r", execution.command)
            return

        result = CommandResult(command=execution.command)
        execution.result = result
        self._results.append(result)

        if error is None and stream is None:
            error = RuntimeError("Transport returned neither error nor stream")
        if error is not None:
            logger.warning("Error executing command %r: %s", execution.command, error)
            execution.close()
            result.fail(error)
            execution.finish(False)
            return

        # Output listeners first so buffered chunks land before a buffered close
        assert stream is not None
        stream.on_data(partial(execution.append, "stdout"))
        stream.stderr.on_data(partial(execution.append, "stderr"))
        stream.on_close(partial(self._handle_close, execution))

    def _handle_close(
        self,
        execution: _CommandExecution,
        exit_code: int | None,
        signal: str | None = None,
    ) -> None:
        if execution.closed or execution.done.done():
            return
        execution.close()
        result = execution.result
        assert result is not None
        result.exit_code = exit_code

        if exit_code != 0:
            logger.warning(
                "Command %r exited with exit_code=%s (signal=%s)",
                execution.command,
                exit_code,
                signal,
            )
            result.fail(NonZeroExitError(exit_code))
            execution.finish(False)
        elif execution.ready_for_next:
            logger.debug("Command execution successful, invoking next")
            execution.finish(True)
        else:
            logger.debug(
                "Command execution successful, but transport not ready. Waiting"
            )
            self._resume = partial(execution.finish, True)

    def _handle_continue(self, transport: Transport) -> None:
        if transport is not self._transport:
            return
        action = self._resume
        if action is None:
            logger.debug("Continue received with no pending command")
            return
        self._resume = None
        logger.debug("Continuing command execution")
        action()
