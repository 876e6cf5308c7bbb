"""Shared fixtures: a scripted in-memory transport and a stub resolver."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import pytest

from sshrun.models import ConnectionParameters
from sshrun.services.runner import CommandRunner


class FakeOutput:
    """Output stream whose chunks are pushed by the test."""

    def __init__(self) -> None:
        self.listeners: list[Callable[[Any], None]] = []

    def on_data(self, listener: Callable[[Any], None]) -> "FakeOutput":
        self.listeners.append(listener)
        return self

    def emit(self, chunk: str | bytes) -> None:
        for listener in list(self.listeners):
            listener(chunk)


class FakeStream(FakeOutput):
    """Command stream driven by the test."""

    def __init__(self) -> None:
        super().__init__()
        self.stderr = FakeOutput()
        self.close_listeners: list[Callable[..., None]] = []

    def on_close(self, listener: Callable[..., None]) -> "FakeStream":
        self.close_listeners.append(listener)
        return self

    def close(self, exit_code: int | None = 0, signal: str | None = None) -> None:
        for listener in list(self.close_listeners):
            listener(exit_code, signal)


class FakeTransport:
    """In-memory transport.

    With a ``script`` (command -> outcome dict) every exec plays its outcome
    on the next loop iterations. Without one, the test drives start and close
    events by hand through ``start()``.

    Outcome keys: exit_code, stdout, stderr (lists of chunks), start_error,
    signal.
    """

    def __init__(
        self,
        script: dict[str, dict[str, Any]] | None = None,
        connect_error: Exception | None = None,
        auto_ready: bool = True,
        ready_for_next: bool | Callable[[str], bool] = True,
        auto_continue: bool = False,
        exec_error: Exception | None = None,
    ) -> None:
        self.script = script
        self.connect_error = connect_error
        self.auto_ready = auto_ready
        self.ready_for_next = ready_for_next
        self.auto_continue = auto_continue
        self.exec_error = exec_error

        self.params: ConnectionParameters | None = None
        self.submitted: list[str] = []
        self.start_callbacks: list[Callable[..., None]] = []
        self.streams: list[FakeStream] = []
        self.end_count = 0
        self.ready_callbacks: list[Callable[[], None]] = []
        self.error_callbacks: list[Callable[[Exception], None]] = []
        self.continue_callbacks: list[Callable[[], None]] = []

    def on_ready(self, callback: Callable[[], None]) -> None:
        self.ready_callbacks.append(callback)

    def on_error(self, callback: Callable[[Exception], None]) -> None:
        self.error_callbacks.append(callback)

    def on_continue(self, callback: Callable[[], None]) -> None:
        self.continue_callbacks.append(callback)

    def connect(self, params: ConnectionParameters) -> None:
        self.params = params
        loop = asyncio.get_running_loop()
        if self.connect_error is not None:
            loop.call_soon(self.fire_error, self.connect_error)
        elif self.auto_ready:
            loop.call_soon(self.fire_ready)

    def exec(self, command: str, callback: Callable[..., None]) -> bool:
        if self.exec_error is not None:
            raise self.exec_error
        self.submitted.append(command)
        self.start_callbacks.append(callback)

        if callable(self.ready_for_next):
            ready = self.ready_for_next(command)
        else:
            ready = self.ready_for_next

        if self.script is not None:
            outcome = self.script.get(command, {})
            asyncio.get_running_loop().call_soon(self._play, callback, outcome, ready)
        return ready

    def end(self) -> None:
        self.end_count += 1

    # Test drivers

    def fire_ready(self) -> None:
        for callback in list(self.ready_callbacks):
            callback()

    def fire_error(self, error: Exception) -> None:
        for callback in list(self.error_callbacks):
            callback(error)

    def fire_continue(self) -> None:
        for callback in list(self.continue_callbacks):
            callback()

    def start(self, error: Exception | None = None) -> FakeStream | None:
        """Report the start of the most recently submitted command."""
        callback = self.start_callbacks[-1]
        if error is not None:
            callback(error, None)
            return None
        stream = FakeStream()
        self.streams.append(stream)
        callback(None, stream)
        return stream

    def _play(self, callback: Callable[..., None], outcome: dict[str, Any], ready: bool) -> None:
        if outcome.get("start_error") is not None:
            callback(outcome["start_error"], None)
            return
        stream = FakeStream()
        self.streams.append(stream)
        callback(None, stream)
        for chunk in outcome.get("stdout", []):
            stream.emit(chunk)
        for chunk in outcome.get("stderr", []):
            stream.stderr.emit(chunk)
        stream.close(outcome.get("exit_code", 0), outcome.get("signal"))
        if not ready and self.auto_continue:
            asyncio.get_running_loop().call_soon(self.fire_continue)


class StubResolver:
    """Parameter resolver returning fixed parameters."""

    def __init__(self, params: ConnectionParameters, error: Exception | None = None) -> None:
        self.params = params
        self.error = error
        self.calls = 0

    async def resolve(self) -> ConnectionParameters:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.params


@pytest.fixture
def params() -> ConnectionParameters:
    """Password based connection parameters."""
    return ConnectionParameters(
        host="build.example.com",
        port=2222,
        username="deploy",
        password="secret",
    )


@pytest.fixture
def resolver(params: ConnectionParameters) -> StubResolver:
    return StubResolver(params)


@pytest.fixture
def transports() -> list[FakeTransport]:
    """Every FakeTransport created by make_runner, in creation order."""
    return []


@pytest.fixture
def make_transport_factory(
    transports: list[FakeTransport],
) -> Callable[..., Callable[[], FakeTransport]]:
    def _make(**kwargs: Any) -> Callable[[], FakeTransport]:
        def factory() -> FakeTransport:
            transport = FakeTransport(**kwargs)
            transports.append(transport)
            return transport

        return factory

    return _make


@pytest.fixture
def make_runner(
    resolver: StubResolver,
    make_transport_factory: Callable[..., Callable[[], FakeTransport]],
) -> Callable[..., CommandRunner]:
    """Build a CommandRunner over a FakeTransport configured by kwargs."""

    def _make(**kwargs: Any) -> CommandRunner:
        return CommandRunner(resolver, make_transport_factory(**kwargs))

    return _make


@pytest.fixture
def settle() -> Callable[[], Awaitable[None]]:
    """Let pending loop callbacks and tasks run."""

    async def _settle(rounds: int = 10) -> None:
        for _ in range(rounds):
            await asyncio.sleep(0)

    return _settle
