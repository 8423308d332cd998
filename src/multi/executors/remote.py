"""SSH executor: runs each job on its assigned remote host."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from multi.errors import JobError
from multi.executors.base import ExecutionContext, ExecutorPlugin
from multi.hosts import HostAssignment
from multi.inputs import Job
from multi.orchestration.ssh import SSH_CLIENT_ERROR, SSHSettings, open_remote_session
from multi.streams import copy_stream, new_tail, prefix_copy, start_copier, tail_text
from multi.template import format_template

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemoteContext(ExecutionContext):
    """Execution context for remote runs."""

    assignment: HostAssignment | None = None
    ssh: SSHSettings = field(default_factory=SSHSettings)
    prefix: bool = True

    @property
    def prefix_output(self) -> bool:
        """Prefix lines with the host only when more than one host is used."""
        return self.prefix and self.assignment is not None and self.assignment.multi_host


class SSHExecutor(ExecutorPlugin):
    """Runs the joined command line on ``hosts[thread_id // per_host]``."""

    executor_name = "ssh"

    def execute(self, job: Job, ctx: RemoteContext) -> None:
        if ctx.assignment is None:
            raise JobError("no host assignment for remote job %d" % job.thread_id,
                           thread_id=job.thread_id)

        host = ctx.assignment.host_for(job.thread_id)
        command = format_template(" ".join(ctx.command), job.thread_id, job.item)

        if ctx.dry_run:
            logger.info("[dry-run] job %d on %s: %s", job.thread_id, host, command)
            return

        try:
            proc = open_remote_session(host, command, ctx.ssh, capture=not ctx.quiet)
        except OSError as e:
            raise JobError("unable to connect to %s: %s" % (host, e),
                           thread_id=job.thread_id, command=command, host=host) from e

        stderr_tail = ""
        if ctx.quiet:
            _, err = proc.communicate()
            stderr_tail = err.decode("utf-8", errors="replace").strip()[-200:]
        else:
            tail = new_tail()
            if ctx.prefix_output:
                copiers = [
                    start_copier(prefix_copy, host, proc.stderr, ctx.err, tail),
                    start_copier(prefix_copy, host, proc.stdout, ctx.out),
                ]
            else:
                copiers = [
                    start_copier(copy_stream, proc.stderr, ctx.err, tail),
                    start_copier(copy_stream, proc.stdout, ctx.out),
                ]
            proc.wait()
            for t in copiers:
                t.join()
            stderr_tail = tail_text(tail)

        returncode = proc.returncode
        if returncode == 0:
            return

        if returncode == SSH_CLIENT_ERROR:
            detail = ": %s" % stderr_tail if stderr_tail else ""
            logger.warning("  SSH cmd <- %s FAILED to connect%s", host, detail)
            raise JobError("unable to connect to %s (ssh exit status %d)%s"
                           % (host, returncode, detail),
                           thread_id=job.thread_id, command=command, host=host)

        logger.warning("  SSH cmd <- %s FAILED rc=%d", host, returncode)
        raise JobError("executing %s on %s: exit status %d" % (command, host, returncode),
                       thread_id=job.thread_id, command=command, host=host)
