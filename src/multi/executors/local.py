"""Local subprocess executor."""

from __future__ import annotations

import logging
import shlex

from multi.errors import JobError
from multi.executors.base import ExecutionContext, ExecutorPlugin
from multi.inputs import Job
from multi.orchestration.process import start_process
from multi.streams import copy_stream, start_copier
from multi.template import format_argv

logger = logging.getLogger(__name__)


class LocalExecutor(ExecutorPlugin):
    """Runs each job as a local process built from the formatted argv."""

    executor_name = "local"

    def execute(self, job: Job, ctx: ExecutionContext) -> None:
        argv = format_argv(ctx.command, job.thread_id, job.item)
        display = shlex.join(argv)

        if ctx.dry_run:
            logger.info("[dry-run] job %d: %s", job.thread_id, display)
            return

        logger.debug("job %d -> %s", job.thread_id, display)
        try:
            proc = start_process(argv, capture=not ctx.quiet)
        except (OSError, ValueError) as e:
            raise JobError("while running %s: %s" % (display, e),
                           thread_id=job.thread_id, command=display) from e

        copiers = []
        if not ctx.quiet:
            copiers = [
                start_copier(copy_stream, proc.stdout, ctx.out),
                start_copier(copy_stream, proc.stderr, ctx.err),
            ]
        returncode = proc.wait()
        for t in copiers:
            t.join()

        if returncode != 0:
            logger.warning("job %d <- exit status %d", job.thread_id, returncode)
            raise JobError("while running %s: exit status %d" % (display, returncode),
                           thread_id=job.thread_id, command=display)
