"""Public SSH client: configuration plus sequential command execution."""

import logging
from collections.abc import Awaitable
from functools import partial
from typing import Any

from sshrun.config import ClientConfig, Settings, resolve_known_hosts
from sshrun.models import ExecutionSummary
from sshrun.services.runner import CommandRunner, TransportFactory
from sshrun.services.transport import AsyncsshTransport

logger = logging.getLogger(__name__)


class SshClient:
    """Runs commands on a remote host over SSH.

    Example:
        >>> client = SshClient("db1.example.com", "deploy", private_key="~/.ssh/id_ed25519")
        >>> summary = await client.run(["systemctl restart app", "systemctl is-active app"])
        >>> summary.failed
        False
    """

    def __init__(
        self,
        host: str,
        username: str,
        port: int = 22,
        password: str | None = None,
        private_key: str | None = None,
        settings: Settings | None = None,
        transport_factory: TransportFactory | None = None,
    ) -> None:
        """Validate configuration and prepare the runner.

        Args:
            host: Remote host name or address
            username: User to log in as
            port: SSH port (default 22)
            password: Password, or passphrase for private_key
            private_key: Path to a private key file
            settings: Host key and transport settings (default: from env)
            transport_factory: Override the transport (used by tests)

        Raises:
            ArgumentError: If the configuration is invalid
            FileNotFoundError: If host key checking is strict and known_hosts is missing
        """
        self.config = ClientConfig(
            host=host,
            username=username,
            port=port,
            password=password,
            private_key=private_key,
        )
        if transport_factory is None:
            settings = settings or Settings.from_env()
            transport_factory = partial(
                AsyncsshTransport,
                known_hosts=resolve_known_hosts(
                    settings.known_hosts, settings.strict_host_key_checking
                ),
                max_channels=settings.max_channels,
            )
        self._runner = CommandRunner(self.config, transport_factory)
        logger.debug("Created %r", self.config)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SshClient":
        """Create a client from environment settings.

        Raises:
            ArgumentError: If the settings lack host, username or credentials
        """
        return cls(
            host=settings.host,  # type: ignore[arg-type]
            username=settings.username,  # type: ignore[arg-type]
            port=settings.port,
            password=settings.password,
            private_key=settings.private_key,
            settings=settings,
        )

    @property
    def runner(self) -> CommandRunner:
        return self._runner

    def run(self, commands: Any) -> Awaitable[ExecutionSummary]:
        """Connect and execute commands sequentially, aborting on first failure.

        Args:
            commands: A command string or an ordered sequence of command strings

        Returns:
            Awaitable resolving to the execution summary

        Raises:
            ArgumentError: Immediately, if commands is malformed
            SessionError: When awaited, if the session cannot be established
            OSError: When awaited, if the private key cannot be read
        """
        return self._runner.run(commands)
