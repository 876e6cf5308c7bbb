"""Connection and command failure types."""


class SessionError(Exception):
    """Failed to establish the SSH session."""

    def __init__(self, host: str, original_error: Exception):
        """Initialize session error.

        Args:
            host: Host the session was opened against
            original_error: Original exception that caused the failure
        """
        self.host = host
        self.original_error = original_error
        super().__init__(self._format(host, original_error))

    @staticmethod
    def _format(host: str, original_error: Exception) -> str:
        return f"Cannot connect to {host}: {original_error}"


class SessionLostError(SessionError):
    """The SSH session failed after it was established."""

    @staticmethod
    def _format(host: str, original_error: Exception) -> str:
        return f"Session to {host} lost: {original_error}"


class NonZeroExitError(Exception):
    """Command exited with a non-zero (or missing) exit status."""

    def __init__(self, exit_code: int | None):
        self.exit_code = exit_code
        super().__init__("Program exited with non zero exit code")
