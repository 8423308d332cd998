"""multi exec command."""

from __future__ import annotations

import logging

import click

from multi.errors import ConfigurationError
from ._common import _exit_on_config_error, _init_run, _read_input, _report_errors, common_options

logger = logging.getLogger(__name__)


@click.command("exec", context_settings={"allow_interspersed_args": False})
@common_options
@click.argument("command", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def exec_cmd(ctx, quiet, use_input, count, dry_run, command):
    """Execute a local command in parallel.

    Arguments after -- form the command; %t expands to the thread id,
    %i to the input item and %% to a literal percent sign.

    Examples:

      multi exec -c 4 -- echo worker %t

      seq 10 | multi exec -i -- sh -c 'sleep %i; echo done %i'
    """
    from multi.bootstrap import get_executor
    from multi.executors.base import ExecutionContext
    from multi.inputs import reconcile_jobs

    if not command:
        raise click.ClickException("must supply a command to run")

    v = _init_run(ctx)

    lines = _read_input(use_input)
    jobs = reconcile_jobs(count, lines)

    try:
        executor = get_executor("local", v)
    except ValueError as e:
        _exit_on_config_error(ConfigurationError(str(e)))

    run_ctx = ExecutionContext(command=tuple(command), quiet=quiet, dry_run=dry_run)
    logger.debug("Running %d local jobs: %s", len(jobs), " ".join(command))
    _report_errors(executor.run(jobs, run_ctx))
