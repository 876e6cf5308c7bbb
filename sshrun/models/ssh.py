"""SSH-related data models."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ConnectionParameters:
    """Resolved parameters for opening an SSH session.

    Exactly one credential is set: ``password`` or ``private_key``.
    ``passphrase`` only accompanies a private key.
    """

    host: str
    username: str
    port: int = 22
    password: str | None = field(default=None, repr=False)
    private_key: bytes | None = field(default=None, repr=False)
    passphrase: str | None = field(default=None, repr=False)

    @property
    def uses_key(self) -> bool:
        """Whether key based authentication is used."""
        return self.private_key is not None

    @property
    def target(self) -> str:
        """user@host:port string for log messages."""
        return f"{self.username}@{self.host}:{self.port}"
