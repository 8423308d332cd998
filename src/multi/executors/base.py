"""Base class for multi executors."""

from __future__ import annotations

import logging
import sys
from abc import abstractmethod
from dataclasses import dataclass
from logging import Logger
from typing import IO, Sequence

from scitrera_app_framework import Plugin, Variables

from multi.dispatch import JobFn, PoolFactory, run_all, unbounded_pool
from multi.errors import JobError
from multi.inputs import Job

logger = logging.getLogger(__name__)

EXT_EXECUTOR = "multi.executor"


@dataclass(frozen=True)
class ExecutionContext:
    """Everything a job needs besides its own thread id and item.

    Built once per run and shared read-only by all jobs.  ``stdout`` and
    ``stderr`` default to the process streams at the time of writing.
    """

    command: tuple[str, ...]
    quiet: bool = False
    dry_run: bool = False
    stdout: IO | None = None
    stderr: IO | None = None

    @property
    def out(self) -> IO:
        return self.stdout if self.stdout is not None else sys.stdout

    @property
    def err(self) -> IO:
        return self.stderr if self.stderr is not None else sys.stderr


class ExecutorPlugin(Plugin):
    """Abstract base class for multi executors.

    Each executor is an SAF Plugin registered as a multi-extension under
    the 'multi.executor' extension point.

    Subclasses must define:
        - executor_name: str identifier (e.g. "local", "ssh")
        - execute(): run one job, raising JobError on failure
    """

    eager = False  # don't initialize until requested

    # --- Subclass must define ---
    executor_name: str = ""

    # --- SAF Plugin interface ---

    def name(self) -> str:
        return "multi.executor.%s" % self.executor_name

    def extension_point_name(self, v: Variables) -> str:
        return EXT_EXECUTOR

    def is_enabled(self, v: Variables) -> bool:
        # Must return False for multi-extension plugins to prevent SAF's
        # single-extension cache from short-circuiting subsequent plugin
        # initializations under the same extension point.
        return False

    def is_multi_extension(self, v: Variables) -> bool:
        return True

    def initialize(self, v: Variables, logger: Logger) -> ExecutorPlugin:
        return self

    # --- Executor interface ---

    @abstractmethod
    def execute(self, job: Job, ctx: ExecutionContext) -> None:
        """Run a single job to completion.

        Args:
            job: The job to run.
            ctx: Shared execution context for the run.

        Raises:
            JobError: If the job fails for any reason.
        """
        ...

    def job_fn(self, ctx: ExecutionContext) -> JobFn:
        """Bind *ctx* into a ``(thread_id, item)`` callable for the dispatcher."""

        def _fn(thread_id: int, item: str) -> None:
            self.execute(Job(thread_id=thread_id, item=item), ctx)

        return _fn

    def run(
            self,
            jobs: Sequence[Job],
            ctx: ExecutionContext,
            pool_factory: PoolFactory = unbounded_pool,
    ) -> list[JobError]:
        """Run every job concurrently; return the errors of failed jobs."""
        logger.debug("Running %d jobs with executor '%s'", len(jobs), self.executor_name)
        return run_all(jobs, self.job_fn(ctx), pool_factory=pool_factory)
