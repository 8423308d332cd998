"""Local process start-up."""

from __future__ import annotations

import logging
import subprocess
from typing import Sequence

logger = logging.getLogger(__name__)


def start_process(argv: Sequence[str], capture: bool = True) -> subprocess.Popen:
    """Start *argv* as a child process.

    Args:
        argv: Program and arguments; ``argv[0]`` is looked up on PATH.
        capture: If True, stdout/stderr are byte pipes; otherwise both
            are discarded.

    Returns:
        The running process.

    Raises:
        OSError: If the program cannot be started.
    """
    target = subprocess.PIPE if capture else subprocess.DEVNULL
    logger.debug("Starting process: %s", " ".join(argv))
    return subprocess.Popen(
        list(argv),
        stdin=subprocess.DEVNULL,
        stdout=target,
        stderr=target,
    )
