"""Credential record to connection parameter resolution."""

import asyncio
import logging
import os
from pathlib import Path

from sshrun.models import ConnectionParameters
from sshrun.utils.validation import (
    ArgumentError,
    is_non_empty_string,
    validate_host,
    validate_port,
    validate_username,
)

logger = logging.getLogger(__name__)


class ClientConfig:
    """Validated connection configuration for a remote host.

    When both a private key and a password are given, the key is used for
    authentication and the password unlocks it.
    """

    def __init__(
        self,
        host: str,
        username: str,
        port: int = 22,
        password: str | None = None,
        private_key: str | None = None,
    ) -> None:
        """Validate and store the credential record.

        Args:
            host: Host name or address of the remote host
            username: User to authenticate as
            port: SSH port; anything but a positive int falls back to 22
            password: Login password, or key passphrase when private_key is set
            private_key: Path to a private key file

        Raises:
            ArgumentError: If host/username are invalid or no credential given
        """
        self.host = validate_host(host)
        self.username = validate_username(username)
        self.port = validate_port(port)
        self._password = password if is_non_empty_string(password) else None
        self._private_key = (
            os.path.expanduser(private_key)
            if is_non_empty_string(private_key)
            else None
        )

        if self._password is None and self._private_key is None:
            raise ArgumentError(
                "Invalid password (password) or private key (private_key). "
                "Must provide at least one."
            )

        self._key_data: bytes | None = None
        self._key_lock = asyncio.Lock()

    def __repr__(self) -> str:
        auth = "key" if self._private_key else "password"
        return (
            f"ClientConfig(host={self.host!r}, port={self.port}, "
            f"username={self.username!r}, auth={auth})"
        )

    @property
    def private_key_path(self) -> str | None:
        return self._private_key

    async def _load_private_key(self) -> bytes:
        """Read the private key once and cache it on the instance.

        Raises:
            OSError: If the key file cannot be read
        """
        async with self._key_lock:
            if self._key_data is not None:
                logger.debug("Private key exists in cache, skipping file read")
                return self._key_data

            assert self._private_key is not None
            logger.debug("Loading private key from %s", self._private_key)
            try:
                data = await asyncio.to_thread(Path(self._private_key).read_bytes)
            except OSError as e:
                logger.error("Error loading private key %s: %s", self._private_key, e)
                raise
            self._key_data = data
            return data

    async def resolve(self) -> ConnectionParameters:
        """Resolve connection parameters, loading key material if needed.

        Returns:
            Parameters carrying exactly one credential

        Raises:
            OSError: If the private key cannot be read
        """
        if self._private_key is None:
            logger.info("Using password authentication for %s", self.host)
            return ConnectionParameters(
                host=self.host,
                port=self.port,
                username=self.username,
                password=self._password,
            )

        logger.info("Using private key authentication for %s", self.host)
        key_data = await self._load_private_key()
        return ConnectionParameters(
            host=self.host,
            port=self.port,
            username=self.username,
            private_key=key_data,
            passphrase=self._password,
        )

