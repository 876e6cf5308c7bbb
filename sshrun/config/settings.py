"""Application settings from environment variables.

Centralized environment variable parsing and validation.
"""

import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    """Application settings from environment.

    Handles parsing, validation, and defaults for all env vars.
    """

    # Connection (used by the command line entry point)
    host: str | None = field(default=None)
    port: int = field(default=22)
    username: str | None = field(default=None)
    password: str | None = field(default=None, repr=False)
    private_key: str | None = field(default=None)

    # Host key verification
    known_hosts: str | None = field(default=None)
    strict_host_key_checking: bool = field(default=True)

    # Transport
    max_channels: int = field(default=10)

    # Logging
    log_level: str = field(default="INFO")
    log_colors: bool = field(default=True)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from SSHRUN_* environment variables.

        Returns:
            Settings instance with values from environment
        """
        return cls(
            host=os.getenv("SSHRUN_HOST") or None,
            port=cls._get_int("SSHRUN_PORT", 22),
            username=os.getenv("SSHRUN_USERNAME") or None,
            password=os.getenv("SSHRUN_PASSWORD") or None,
            private_key=os.getenv("SSHRUN_PRIVATE_KEY") or None,
            known_hosts=os.getenv("SSHRUN_KNOWN_HOSTS", "").strip() or None,
            strict_host_key_checking=cls._get_bool(
                "SSHRUN_STRICT_HOST_KEY_CHECKING", True
            ),
            max_channels=cls._get_positive_int("SSHRUN_MAX_CHANNELS", 10),
            log_level=os.getenv("SSHRUN_LOG_LEVEL", "INFO").upper(),
            log_colors=cls._get_bool("SSHRUN_LOG_COLORS", True),
        )

    @staticmethod
    def _get_int(key: str, default: int) -> int:
        """Get integer from environment.

        Args:
            key: Environment variable key
            default: Default value if not set

        Returns:
            Integer value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default

        try:
            return int(value)
        except ValueError:
            logger.warning("Invalid int for %s: %s, using default %d", key, value, default)
            return default

    @classmethod
    def _get_positive_int(cls, key: str, default: int) -> int:
        value = cls._get_int(key, default)
        if value <= 0:
            logger.warning(
                "%s must be > 0, got %d. Using default: %d", key, value, default
            )
            return default
        return value

    @staticmethod
    def _get_bool(key: str, default: bool) -> bool:
        """Get boolean from environment.

        Args:
            key: Environment variable key
            default: Default value if not set

        Returns:
            Boolean value from environment or default
        """
        value = os.getenv(key)
        if value is None:
            return default
        return value.lower() in ("1", "true", "yes", "on")
