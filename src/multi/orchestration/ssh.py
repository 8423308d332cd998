"""SSH remote execution through the system ``ssh`` client.

Each remote job runs ``ssh [options] <target> <command>`` as a local
subprocess.  Authentication is whatever the client negotiates from the
settings given here: an identity file, the ssh-agent, or a password
handed to ``sshpass`` via the environment.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass, field

from multi.errors import ConfigurationError
from multi.hosts import DEFAULT_SSH_PORT, split_endpoint

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 60

# Exit status the OpenSSH client uses for its own (connection/session) errors.
SSH_CLIENT_ERROR = 255


@dataclass(frozen=True)
class SSHSettings:
    """Immutable SSH connection parameters shared by every remote job."""

    user: str | None = None
    identity: str | None = None
    password: str | None = field(default=None, repr=False)
    use_agent: bool = True
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT
    options: tuple[str, ...] = ()

    @classmethod
    def build(
            cls,
            user: str | None = None,
            identity: str | None = None,
            password: str | None = None,
            use_agent: bool = True,
            connect_timeout: int = DEFAULT_CONNECT_TIMEOUT,
            options: list[str] | tuple[str, ...] | None = None,
    ) -> SSHSettings:
        """Validate credential inputs and return settings.

        Raises:
            ConfigurationError: If the identity file is unreadable or a
                password is given without ``sshpass`` installed.
        """
        if identity:
            identity = os.path.expanduser(identity)
            if not os.path.isfile(identity) or not os.access(identity, os.R_OK):
                raise ConfigurationError("unable to read private key: %s" % identity)
        if password and shutil.which("sshpass") is None:
            raise ConfigurationError("password authentication requires sshpass on PATH")
        if use_agent and not identity and not password and not os.environ.get("SSH_AUTH_SOCK"):
            logger.debug("No identity, password or SSH_AUTH_SOCK; relying on ssh client defaults")
        return cls(
            user=user or None,
            identity=identity or None,
            password=password or None,
            use_agent=use_agent,
            connect_timeout=connect_timeout,
            options=tuple(options or ()),
        )


def build_ssh_cmd(
        host: str,
        settings: SSHSettings | None = None,
        port: int = DEFAULT_SSH_PORT,
) -> list[str]:
    """Build the base SSH command for *host*.

    Args:
        host: Remote hostname or IP address (no port).
        settings: Connection settings; defaults if omitted.
        port: Remote SSH port.

    Returns:
        List of command parts suitable for subprocess.
    """
    settings = settings or SSHSettings()
    cmd = []
    if settings.password:
        cmd.extend(["sshpass", "-e"])
    cmd.append("ssh")
    if not settings.password:
        cmd.extend(["-o", "BatchMode=yes"])
    cmd.extend(["-o", f"ConnectTimeout={settings.connect_timeout}"])
    if port != DEFAULT_SSH_PORT:
        cmd.extend(["-p", str(port)])
    if settings.identity:
        cmd.extend(["-i", settings.identity])
    if not settings.use_agent:
        cmd.extend(["-o", "IdentityAgent=none"])
    cmd.extend(settings.options)
    target = f"{settings.user}@{host}" if settings.user else host
    cmd.append(target)
    return cmd


def open_remote_session(
        endpoint: str,
        command: str,
        settings: SSHSettings | None = None,
        capture: bool = True,
) -> subprocess.Popen:
    """Start *command* on the host at *endpoint* (``host:port``).

    stderr is always piped so client errors can be reported; stdout is
    piped only when *capture* is set.

    Raises:
        OSError: If the ssh client cannot be started.
    """
    settings = settings or SSHSettings()
    host, port = split_endpoint(endpoint)
    cmd = build_ssh_cmd(host, settings, port=port)
    cmd.append(command)

    env = None
    if settings.password:
        env = dict(os.environ, SSHPASS=settings.password)

    logger.debug("  SSH cmd -> %s: %s", endpoint, command[:80])
    logger.debug("SSH command: %s", " ".join(cmd))
    return subprocess.Popen(
        cmd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE if capture else subprocess.DEVNULL,
        stderr=subprocess.PIPE,
        env=env,
    )
