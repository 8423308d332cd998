"""User configuration management for multi."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, TYPE_CHECKING

from vpd.next.util import read_yaml

if TYPE_CHECKING:
    from scitrera_app_framework.api.variables import Variables

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".config" / "multi"
DEFAULT_CONNECT_TIMEOUT = 60


def get_config_root(v: Variables | None = None) -> Path:
    """Config root from SAF stateful root, falling back to DEFAULT_CONFIG_DIR."""
    if v is not None:
        from scitrera_app_framework.core import is_stateful_ready
        stateful_root = is_stateful_ready(v)
        if stateful_root:
            return Path(stateful_root)
    return DEFAULT_CONFIG_DIR


class MultiConfig:
    """Manages multi user configuration.

    Example ``config.yaml``::

        ssh:
          user: deploy
          key: ~/.ssh/deploy_ed25519
          timeout: 30
          no_agent: false
          no_prefix: false
          options: ["-o", "StrictHostKeyChecking=accept-new"]
    """

    def __init__(self, config_path: Path | None = None):
        self.config_path = config_path or (DEFAULT_CONFIG_DIR / "config.yaml")
        self._data: dict[str, Any] = {}
        self._load()

    def _load(self):
        if self.config_path.exists():
            self._data = read_yaml(str(self.config_path)) or {}
            logger.debug("Loaded config from %s", self.config_path)
        else:
            self._data = {}

    @property
    def _ssh(self) -> dict[str, Any]:
        return self._data.get("ssh") or {}

    @property
    def ssh_user(self) -> str | None:
        return self._ssh.get("user")

    @property
    def ssh_key(self) -> str | None:
        key = self._ssh.get("key")
        return os.path.expanduser(key) if key else None

    @property
    def ssh_options(self) -> list[str]:
        return list(self._ssh.get("options", []))

    @property
    def ssh_timeout(self) -> int:
        return int(self._ssh.get("timeout", DEFAULT_CONNECT_TIMEOUT))

    @property
    def no_agent(self) -> bool:
        return bool(self._ssh.get("no_agent", False))

    @property
    def no_prefix(self) -> bool:
        return bool(self._ssh.get("no_prefix", False))

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value by dot-separated key path."""
        parts = key.split(".")
        current = self._data
        for part in parts:
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current
