"""Session lifecycle states."""

from enum import Enum


class SessionState(str, Enum):
    """Lifecycle of a single run() invocation."""

    IDLE = "idle"
    CONNECTING = "connecting"
    READY = "ready"
    EXECUTING = "executing"
    DRAINING = "draining"
    CLOSED = "closed"
    FAILED = "failed"


TRANSITIONS: dict[SessionState, frozenset[SessionState]] = {
    SessionState.IDLE: frozenset({SessionState.CONNECTING}),
    SessionState.CONNECTING: frozenset({SessionState.READY, SessionState.FAILED}),
    SessionState.READY: frozenset({SessionState.EXECUTING, SessionState.DRAINING}),
    SessionState.EXECUTING: frozenset(
        {SessionState.EXECUTING, SessionState.DRAINING, SessionState.FAILED}
    ),
    SessionState.DRAINING: frozenset({SessionState.CLOSED}),
    # A finished runner may be reused for a new run.
    SessionState.CLOSED: frozenset({SessionState.CONNECTING}),
    SessionState.FAILED: frozenset({SessionState.CONNECTING}),
}


def can_transition(current: SessionState, target: SessionState) -> bool:
    """Check whether ``current -> target`` is an allowed transition."""
    return target in TRANSITIONS[current]
