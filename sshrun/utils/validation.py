"""Caller input validation utilities."""

from collections.abc import Sequence
from typing import Any, Final


class ArgumentError(ValueError):
    """Invalid caller input (configuration record or command list)."""

    pass


# Characters that have no business in a host name
SUSPICIOUS_HOST_CHARS: Final[list[str]] = [
    "/",
    "\\",
    ";",
    "&",
    "|",
    "$",
    "`",
    " ",
    "\n",
    "\r",
    "\x00",
]


def is_non_empty_string(value: Any) -> bool:
    """Check that value is a str with at least one character."""
    return isinstance(value, str) and len(value) > 0


def validate_host(host: Any) -> str:
    """Validate a host name or address.

    Args:
        host: The host name to validate

    Returns:
        Validated host name

    Raises:
        ArgumentError: If host name is invalid
    """
    if not is_non_empty_string(host):
        raise ArgumentError("Invalid host (host)")

    if len(host) > 253:
        raise ArgumentError(f"Host name too long: {len(host)} chars")

    for char in SUSPICIOUS_HOST_CHARS:
        if char in host:
            raise ArgumentError(f"Host contains invalid character: {char!r}")

    return str(host)


def validate_username(username: Any) -> str:
    """Validate a login user name.

    Raises:
        ArgumentError: If username is not a non-empty string
    """
    if not is_non_empty_string(username):
        raise ArgumentError("Invalid username (username)")
    if "\x00" in username:
        raise ArgumentError("Username contains null byte")
    return str(username)


def validate_port(port: Any, default: int = 22) -> int:
    """Return port if it is a positive int, otherwise the default."""
    if isinstance(port, bool) or not isinstance(port, int) or port < 1:
        return default
    return port


def normalize_commands(commands: Any) -> list[str]:
    """Normalize the commands argument into an ordered worklist.

    A single non-empty string becomes a one element list. Any other
    sequence is accepted as long as every entry is a string.

    Args:
        commands: A command string or an ordered sequence of command strings

    Returns:
        List of commands in submission order

    Raises:
        ArgumentError: If commands is neither a string nor a sequence of strings
    """
    if is_non_empty_string(commands):
        return [commands]

    if isinstance(commands, (str, bytes)) or not isinstance(commands, Sequence):
        raise ArgumentError("Invalid command(s) (commands)")

    worklist = list(commands)
    for index, command in enumerate(worklist):
        if not isinstance(command, str):
            raise ArgumentError(f"Invalid command at index {index}: {command!r}")
    return worklist
