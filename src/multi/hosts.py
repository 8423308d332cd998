"""Host list parsing and job-to-host assignment for remote mode."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from multi.errors import ConfigurationError
from multi.inputs import Job, reconcile_jobs

logger = logging.getLogger(__name__)

DEFAULT_SSH_PORT = 22


class HostResolutionError(ConfigurationError):
    """Error while reading or validating the host list."""

    pass


def parse_hosts_file(path: str | Path) -> list[str]:
    """Parse hosts file with one ``host`` or ``host:port`` per line.

    Comments (#) and blank lines are ignored; a final line without a
    terminating newline is still an entry.

    Args:
        path: Path to hosts file

    Returns:
        List of host strings, as written in the file

    Raises:
        HostResolutionError: If the file is missing or unreadable
    """
    file_path = Path(path)
    if not file_path.exists():
        raise HostResolutionError("Hosts file not found: %s" % file_path)

    hosts = []
    try:
        with file_path.open("r") as f:
            for line in f:
                # Strip comments
                if "#" in line:
                    line = line[: line.index("#")]
                line = line.strip()
                if line:
                    hosts.append(line)
    except OSError as e:
        raise HostResolutionError("Could not read hosts file %s: %s" % (file_path, e)) from e

    logger.debug("Parsed %d hosts from file: %s", len(hosts), file_path)
    return hosts


def _check_port(raw: str, host: str) -> int:
    try:
        port = int(raw)
    except ValueError:
        raise HostResolutionError("Invalid port %r for host %s" % (raw, host)) from None
    if not 0 < port < 65536:
        raise HostResolutionError("Port out of range for host %s: %d" % (host, port))
    return port


def _join_endpoint(host: str, port: int) -> str:
    if ":" in host:
        return "[%s]:%d" % (host, port)
    return "%s:%d" % (host, port)


def normalize_host(host: str) -> str:
    """Normalize a host entry to ``host:port`` form.

    Examples::

        "web1"            -> "web1:22"
        "web1:2222"       -> "web1:2222"
        "[fe80::1]:2222"  -> "[fe80::1]:2222"
        "fe80::1"         -> "[fe80::1]:22"

    Raises:
        HostResolutionError: On an empty host or an invalid port.
    """
    entry = host.strip()
    if entry.startswith("["):
        end = entry.find("]")
        if end < 0:
            raise HostResolutionError("Unterminated IPv6 address: %s" % host)
        name, rest = entry[1:end], entry[end + 1:]
        if not rest:
            port = DEFAULT_SSH_PORT
        elif rest.startswith(":"):
            port = _check_port(rest[1:], host)
        else:
            raise HostResolutionError("Malformed host entry: %s" % host)
    elif entry.count(":") == 1:
        name, _, raw_port = entry.partition(":")
        port = _check_port(raw_port, host)
    else:
        # plain hostname, or a bare IPv6 literal
        name, port = entry, DEFAULT_SSH_PORT

    if not name:
        raise HostResolutionError("Empty host in entry: %r" % host)
    return _join_endpoint(name, port)


def split_endpoint(endpoint: str) -> tuple[str, int]:
    """Split a normalized endpoint into ``(host, port)``."""
    if endpoint.startswith("["):
        end = endpoint.index("]")
        return endpoint[1:end], int(endpoint[end + 2:])
    host, _, port = endpoint.rpartition(":")
    return host, int(port)


@dataclass(frozen=True)
class HostAssignment:
    """Maps job indices onto hosts, ``per_host`` consecutive jobs per host."""

    hosts: tuple[str, ...]
    per_host: int = 1

    @classmethod
    def build(cls, hosts: Sequence[str], per_host: int | None = None) -> HostAssignment:
        """Normalize *hosts* and validate the replication factor.

        Raises:
            HostResolutionError: If there are no hosts or an entry is invalid.
        """
        if not hosts:
            raise HostResolutionError("No hosts to run on")
        per_host = per_host or 1
        if per_host < 1:
            raise ConfigurationError("Per-host count must be at least 1, got %d" % per_host)
        return cls(hosts=tuple(normalize_host(h) for h in hosts), per_host=per_host)

    @property
    def job_count(self) -> int:
        return self.per_host * len(self.hosts)

    @property
    def multi_host(self) -> bool:
        return len(self.hosts) > 1

    def host_for(self, thread_id: int) -> str:
        """Return the endpoint for job *thread_id*."""
        if not 0 <= thread_id < self.job_count:
            raise IndexError("Job %d out of range for %d jobs" % (thread_id, self.job_count))
        return self.hosts[thread_id // self.per_host]

    def build_jobs(self, lines: Sequence[str] | None = None) -> list[Job]:
        """Build the remote job set, one item per job from *lines* if given.

        Raises:
            ConfigurationError: If there are more input lines than jobs.
        """
        if lines is not None and len(lines) > self.job_count:
            raise ConfigurationError(
                "Input has %d lines but only %d remote jobs (%d per host x %d hosts)"
                % (len(lines), self.job_count, self.per_host, len(self.hosts))
            )
        return reconcile_jobs(self.job_count, lines)
