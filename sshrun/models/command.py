"""Command execution data models."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class CommandResult:
    """Result of a single remote command.

    Created when the transport reports the command start, then mutated by the
    runner as output and close events arrive. Final once the close event has
    been processed.
    """

    command: str
    success: bool = True
    exit_code: int | None = None
    stdout: str = ""
    stderr: str = ""
    error: Exception | None = None

    def fail(self, error: Exception) -> None:
        """Mark the command as failed with the given failure record."""
        self.success = False
        self.error = error

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "command": self.command,
            "success": self.success,
            "exit_code": self.exit_code,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "error": str(self.error) if self.error is not None else None,
        }


@dataclass
class ExecutionSummary:
    """Aggregate result of one run() invocation.

    ``results`` is in submission order and stops at the first failure.
    """

    command_count: int
    success_count: int = 0
    failure_count: int = 0
    results: list[CommandResult] = field(default_factory=list)

    @classmethod
    def from_results(
        cls, command_count: int, results: list[CommandResult]
    ) -> "ExecutionSummary":
        """Tally successes and failures over ``results``."""
        success_count = sum(1 for result in results if result.success)
        return cls(
            command_count=command_count,
            success_count=success_count,
            failure_count=len(results) - success_count,
            results=list(results),
        )

    @property
    def failed(self) -> bool:
        """True if any attempted command failed."""
        return self.failure_count > 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "command_count": self.command_count,
            "success_count": self.success_count,
            "failure_count": self.failure_count,
            "results": [result.to_dict() for result in self.results],
        }
