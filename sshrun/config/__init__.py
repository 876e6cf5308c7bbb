"""Configuration module for sshrun.

- ClientConfig: Validated credential record, resolves connection parameters
- Settings: Environment variable configuration
- resolve_known_hosts: Picks the known_hosts file for host key checking
"""

from sshrun.config.credentials import ClientConfig
from sshrun.config.host_keys import resolve_known_hosts
from sshrun.config.settings import Settings

__all__ = ["ClientConfig", "Settings", "resolve_known_hosts"]
