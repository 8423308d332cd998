"""Exception types shared across multi."""

from __future__ import annotations


class MultiError(Exception):
    """Base class for multi errors."""

    pass


class ConfigurationError(MultiError):
    """Raised for setup problems detected before any job starts."""

    pass


class JobError(MultiError):
    """A single job failed.

    Raised inside a job and collected by :func:`multi.dispatch.run_all`;
    never propagated across job boundaries.
    """

    def __init__(self, message: str, thread_id: int | None = None,
                 command: str | None = None, host: str | None = None):
        super().__init__(message)
        self.thread_id = thread_id
        self.command = command
        self.host = host
