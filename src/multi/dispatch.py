"""Fan-out/fan-in job dispatch.

Every job gets its own task; the job count is the concurrency level.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor, as_completed
from typing import Callable, Sequence

from multi.errors import JobError
from multi.inputs import Job

logger = logging.getLogger(__name__)

JobFn = Callable[[int, str], None]  # (thread_id, item) -> None, raises on failure
PoolFactory = Callable[[int], Executor]


def unbounded_pool(job_count: int) -> Executor:
    """One worker thread per job, no queueing."""
    return ThreadPoolExecutor(max_workers=job_count, thread_name_prefix="multi-job")


def _run_job(fn: JobFn, job: Job) -> None:
    try:
        fn(job.thread_id, job.item)
    except JobError as e:
        if e.thread_id is None:
            e.thread_id = job.thread_id
        raise
    except Exception as e:
        raise JobError("job %d failed: %s" % (job.thread_id, e), thread_id=job.thread_id) from e


def run_all(
        jobs: Sequence[Job],
        fn: JobFn,
        pool_factory: PoolFactory = unbounded_pool,
) -> list[JobError]:
    """Run *fn* once per job concurrently and collect failures.

    Blocks until every job has completed.

    Args:
        jobs: The job set.
        fn: Callable invoked as ``fn(thread_id, item)``; raising marks
            the job failed.
        pool_factory: Builds the executor given the job count.

    Returns:
        One :class:`JobError` per failed job, in completion order (not
        job order).
    """
    if not jobs:
        return []

    logger.debug("Dispatching %d jobs", len(jobs))

    t0 = time.monotonic()
    errors: list[JobError] = []
    with pool_factory(len(jobs)) as pool:
        futures: dict[Future, Job] = {
            pool.submit(_run_job, fn, job): job
            for job in jobs
        }
        for future in as_completed(futures):
            exc = future.exception()
            if exc is None:
                continue
            if not isinstance(exc, JobError):
                # raised outside _run_job, e.g. by the pool itself
                job = futures[future]
                wrapped = JobError("job %d failed: %s" % (job.thread_id, exc), thread_id=job.thread_id)
                wrapped.__cause__ = exc
                exc = wrapped
            errors.append(exc)

    elapsed = time.monotonic() - t0
    logger.debug("Dispatch done: %d/%d OK (%.1fs total)",
                 len(jobs) - len(errors), len(jobs), elapsed)
    return errors
