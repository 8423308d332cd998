"""Input reading and job-count reconciliation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import IO, Sequence

logger = logging.getLogger(__name__)

DEFAULT_COUNT = 1


@dataclass(frozen=True)
class Job:
    """One scheduled unit of work.

    ``thread_id`` is a dense zero-based index, not a stable identity:
    the same input line may get a different id on another run.
    """

    thread_id: int
    item: str = ""


def split_lines(text: str) -> list[str]:
    """Split newline-delimited *text* into stripped items.

    A final newline does not produce a trailing empty item, but blank
    lines in the middle are kept as ``""``.
    """
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line.strip() for line in lines]


def read_lines(stream: IO[str]) -> list[str]:
    """Read all of *stream* and return its lines (see :func:`split_lines`)."""
    lines = split_lines(stream.read())
    logger.debug("Read %d input lines", len(lines))
    return lines


def reconcile_jobs(count: int | None, lines: Sequence[str] | None = None) -> list[Job]:
    """Build the job set from an explicit count and optional input lines.

    Args:
        count: Requested job count; ``None`` or ``0`` means unspecified.
        lines: Input lines when input mode is enabled, else ``None``.

    Returns:
        Jobs ordered by thread id.  With input, the job count is the
        larger of *count* and ``len(lines)``; jobs past the end of the
        input get an empty item.
    """
    requested = count or DEFAULT_COUNT
    if lines is None:
        return [Job(thread_id=i) for i in range(requested)]

    total = max(requested, len(lines))
    if total > len(lines):
        logger.debug("Count %d exceeds %d input lines; padding with empty items",
                     total, len(lines))
    return [
        Job(thread_id=i, item=lines[i] if i < len(lines) else "")
        for i in range(total)
    ]
