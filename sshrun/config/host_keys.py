"""Selects the known_hosts file server keys are checked against.

SSHRUN_KNOWN_HOSTS:
- unset: ~/.ssh/known_hosts
- a path: that file (``~`` is expanded)
- ``none``: server keys are not checked
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

CHECKING_DISABLED = "none"


def resolve_known_hosts(value: str | None, strict: bool = True) -> str | None:
    """Return the known_hosts path to hand to asyncssh.connect.

    None means the server key is accepted without checking.

    Raises:
        FileNotFoundError: If strict and the selected file does not exist
    """
    if value is not None and value.strip().lower() == CHECKING_DISABLED:
        logger.critical(
            "Server host keys will not be checked (SSHRUN_KNOWN_HOSTS=none); "
            "any host answering on the target address is trusted"
        )
        return None

    candidate = (
        Path(value).expanduser() if value else Path.home() / ".ssh" / "known_hosts"
    )
    if candidate.is_file():
        return str(candidate)

    if strict:
        raise FileNotFoundError(
            f"known_hosts file not found: {candidate}. "
            f"Record the server key with 'ssh-keyscan -p <port> <host> >> {candidate}', "
            "point SSHRUN_KNOWN_HOSTS at another file, "
            "or set SSHRUN_STRICT_HOST_KEY_CHECKING=false"
        )

    logger.warning(
        "No known_hosts file at %s; server host keys will not be checked", candidate
    )
    return None
