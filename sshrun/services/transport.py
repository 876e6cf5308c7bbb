"""Event driven SSH transport built on asyncssh.

Backpressure:
- Each exec() opens one session channel on the shared connection
- exec() returns False once the number of open channels reaches
  max_channels; the next channel close that brings the count back under
  the limit fires the continue callbacks
- Stream close listeners always run before the continue callbacks
"""

import asyncio
import logging
from collections.abc import Callable
from functools import partial
from typing import Any

import asyncssh

from sshrun.models import ConnectionParameters
from sshrun.protocols import CloseListener, DataListener, StartCallback

logger = logging.getLogger(__name__)


class BufferedOutput:
    """Output stream that holds chunks until the first listener attaches."""

    def __init__(self) -> None:
        self._listeners: list[DataListener] = []
        self._pending: list[str | bytes] = []

    def on_data(self, listener: DataListener) -> "BufferedOutput":
        self._listeners.append(listener)
        pending, self._pending = self._pending, []
        for chunk in pending:
            listener(chunk)
        return self

    def emit(self, chunk: str | bytes) -> None:
        if not self._listeners:
            self._pending.append(chunk)
            return
        for listener in list(self._listeners):
            listener(chunk)


class ExecStream(asyncssh.SSHClientSession):
    """asyncssh session for one exec channel, exposed as a command stream."""

    def __init__(self, on_finished: Callable[[], None]) -> None:
        self._on_finished = on_finished
        self._stdout = BufferedOutput()
        self._stderr = BufferedOutput()
        self._close_listeners: list[CloseListener] = []
        self._exit_status: int | None = None
        self._exit_signal: str | None = None
        self._close_args: tuple[int | None, str | None] | None = None

    @property
    def stderr(self) -> BufferedOutput:
        return self._stderr

    def on_data(self, listener: DataListener) -> "ExecStream":
        self._stdout.on_data(listener)
        return self

    def on_close(self, listener: CloseListener) -> "ExecStream":
        if self._close_args is not None:
            listener(*self._close_args)
        else:
            self._close_listeners.append(listener)
        return self

    # asyncssh.SSHClientSession callbacks

    def data_received(self, data: Any, datatype: Any) -> None:
        if datatype == asyncssh.EXTENDED_DATA_STDERR:
            self._stderr.emit(data)
        else:
            self._stdout.emit(data)

    def exit_status_received(self, status: int) -> None:
        self._exit_status = status

    def exit_signal_received(
        self, signal: str, core_dumped: bool, msg: str, lang: str
    ) -> None:
        self._exit_signal = signal

    def connection_lost(self, exc: Exception | None) -> None:
        # No exit status means the channel went away without the command
        # reporting one (signal, dropped connection)
        self._close_args = (self._exit_status, self._exit_signal)
        listeners, self._close_listeners = self._close_listeners, []
        for listener in listeners:
            listener(*self._close_args)
        self._on_finished()


class _ConnectionWatcher(asyncssh.SSHClient):
    """Reports connection loss back to the owning transport."""

    def __init__(self, transport: "AsyncsshTransport") -> None:
        self._transport = transport

    def connection_lost(self, exc: Exception | None) -> None:
        self._transport._handle_connection_lost(exc)


class AsyncsshTransport:
    """SSH session with a callback interface over an asyncssh connection."""

    def __init__(self, known_hosts: str | None = None, max_channels: int = 10) -> None:
        """Initialize transport.

        Args:
            known_hosts: Path to known_hosts file, or None to disable verification
            max_channels: Open channels allowed before exec() reports not ready

        Raises:
            ValueError: If max_channels is not positive
        """
        if max_channels <= 0:
            raise ValueError(f"max_channels must be > 0, got {max_channels}")

        self._known_hosts = known_hosts
        self._max_channels = max_channels
        self._host = ""
        self._conn: asyncssh.SSHClientConnection | None = None
        self._connect_task: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._open_channels = 0
        self._blocked = False
        self._ready_fired = False
        self._error_fired = False
        self._ended = False
        self._ready_callbacks: list[Callable[[], None]] = []
        self._error_callbacks: list[Callable[[Exception], None]] = []
        self._continue_callbacks: list[Callable[[], None]] = []

    def on_ready(self, callback: Callable[[], None]) -> None:
        self._ready_callbacks.append(callback)

    def on_error(self, callback: Callable[[Exception], None]) -> None:
        self._error_callbacks.append(callback)

    def on_continue(self, callback: Callable[[], None]) -> None:
        self._continue_callbacks.append(callback)

    @property
    def open_channels(self) -> int:
        """Number of exec channels currently open."""
        return self._open_channels

    @staticmethod
    def _credential_kwargs(params: ConnectionParameters) -> dict[str, Any]:
        """Build asyncssh authentication arguments.

        Raises:
            asyncssh.KeyImportError: If the key cannot be parsed
            asyncssh.KeyEncryptionError: If the passphrase does not unlock the key
        """
        if params.private_key is not None:
            key = asyncssh.import_private_key(params.private_key, params.passphrase)
            return {"client_keys": [key], "password": None}
        return {"client_keys": None, "password": params.password}

    def connect(self, params: ConnectionParameters) -> None:
        """Start connecting in the background."""
        if self._connect_task is not None:
            raise RuntimeError("Transport is already connecting or connected")
        self._host = params.host
        self._connect_task = asyncio.ensure_future(self._connect(params))

    async def _connect(self, params: ConnectionParameters) -> None:
        logger.debug(
            "Connecting to %s (known_hosts=%s)", params.target, self._known_hosts
        )
        try:
            conn = await asyncssh.connect(
                params.host,
                port=params.port,
                username=params.username,
                known_hosts=self._known_hosts,
                client_factory=partial(_ConnectionWatcher, self),
                **self._credential_kwargs(params),
            )
        except Exception as e:
            # Includes key import and passphrase errors raised before connecting
            self._fire_error(e)
            return

        if self._ended:
            conn.close()
            return

        self._conn = conn
        if not self._error_fired and not self._ready_fired:
            self._ready_fired = True
            for callback in list(self._ready_callbacks):
                callback()

    def exec(self, command: str, callback: StartCallback) -> bool:
        """Open an exec channel for command.

        Returns:
            False if the channel limit has been reached
        """
        loop = asyncio.get_running_loop()
        if self._conn is None or self._ended:
            loop.call_soon(
                callback, ConnectionError(f"Not connected to {self._host}"), None
            )
            return True

        self._open_channels += 1
        ready_for_next = self._open_channels < self._max_channels
        if not ready_for_next:
            self._blocked = True

        task = loop.create_task(self._open_channel(self._conn, command, callback))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return ready_for_next

    async def _open_channel(
        self,
        conn: asyncssh.SSHClientConnection,
        command: str,
        callback: StartCallback,
    ) -> None:
        created: list[ExecStream] = []

        def session_factory() -> ExecStream:
            session = ExecStream(self._channel_finished)
            created.append(session)
            return session

        try:
            _chan, stream = await conn.create_session(
                session_factory,
                command,
                encoding="utf-8",
                errors="replace",
            )
        except (OSError, asyncssh.Error) as e:
            logger.debug("Failed to open channel for %r: %s", command, e)
            callback(e, None)
            # A session that was already built releases its slot on close
            if not created:
                self._channel_finished()
            return
        callback(None, stream)

    def _channel_finished(self) -> None:
        self._open_channels -= 1
        if (
            self._blocked
            and not self._ended
            and self._open_channels < self._max_channels
        ):
            self._blocked = False
            for callback in list(self._continue_callbacks):
                callback()

    def _fire_error(self, error: Exception) -> None:
        if self._error_fired:
            return
        self._error_fired = True
        for callback in list(self._error_callbacks):
            callback(error)

    def _handle_connection_lost(self, exc: Exception | None) -> None:
        if self._ended:
            return
        error = exc or ConnectionResetError("Connection closed by remote host")
        logger.warning("Connection to %s lost: %s", self._host, error)
        self._fire_error(error)

    def end(self) -> None:
        """Close the connection and cancel pending channel opens."""
        if self._ended:
            return
        self._ended = True
        for task in list(self._tasks):
            task.cancel()
        if self._connect_task is not None and not self._connect_task.done():
            self._connect_task.cancel()
        if self._conn is not None:
            logger.debug("Closing connection to %s", self._host)
            self._conn.close()
