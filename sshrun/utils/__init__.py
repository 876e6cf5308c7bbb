"""Utility modules for sshrun."""

from sshrun.utils.validation import (
    ArgumentError,
    normalize_commands,
    validate_host,
    validate_port,
    validate_username,
)

__all__ = [
    "ArgumentError",
    "normalize_commands",
    "validate_host",
    "validate_port",
    "validate_username",
]
