"""Entry point: run commands on the host described by SSHRUN_* variables.

    SSHRUN_HOST=db1 SSHRUN_USERNAME=deploy SSHRUN_PRIVATE_KEY=~/.ssh/id_ed25519 \\
        python -m sshrun "uname -a" "df -h"
"""

import asyncio
import json
import logging
import sys

from sshrun.client import SshClient
from sshrun.config import Settings
from sshrun.services.connection import SessionError
from sshrun.utils.console import ColorfulFormatter
from sshrun.utils.validation import ArgumentError

logger = logging.getLogger("sshrun")

EXIT_OK = 0
EXIT_COMMAND_FAILED = 1
EXIT_ERROR = 2


def configure_logging(settings: Settings) -> None:
    """Attach the console formatter to the sshrun logger."""
    use_colors = settings.log_colors and sys.stderr.isatty()

    logger.setLevel(getattr(logging, settings.log_level, logging.INFO))
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ColorfulFormatter(use_colors=use_colors))
        logger.addHandler(handler)
        logger.propagate = False

    logging.getLogger("asyncssh").setLevel(logging.WARNING)


def main(argv: list[str] | None = None) -> int:
    """Run commands and print the summary as JSON.

    Returns:
        Process exit status
    """
    commands = sys.argv[1:] if argv is None else argv
    settings = Settings.from_env()
    configure_logging(settings)

    if not commands:
        logger.error("No commands given")
        return EXIT_ERROR

    try:
        client = SshClient.from_settings(settings)
        summary = asyncio.run(client.run(commands))
    except (ArgumentError, FileNotFoundError) as e:
        logger.error("Invalid configuration: %s", e)
        return EXIT_ERROR
    except (SessionError, OSError) as e:
        logger.error("Connection failed: %s", e)
        return EXIT_ERROR

    print(json.dumps(summary.to_dict(), indent=2))
    return EXIT_COMMAND_FAILED if summary.failed else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
