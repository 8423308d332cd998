"""multi CLI: run many commands at once, locally or over ssh."""

from __future__ import annotations

import click

from multi import __version__
from ._common import _setup_logging
from ._exec import exec_cmd
from ._ssh import ssh_cmd


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose/debug output")
@click.version_option(__version__, prog_name="multi")
@click.pass_context
def main(ctx, verbose):
    """multi: execute many commands in parallel.

    A much simpler take on GNU parallel, with thread-based ssh fan-out.
    Each argument of the command may use:

    \b
      %t  the thread id (unique per job, not stable between runs)
      %i  the item, one line of stdin per job when -i is given
      %%  a literal percent sign

    If both -c and -i are given, the larger of the two wins and jobs
    without an input line get an empty item.  In ssh mode -c is the
    number of jobs per host.  There is no concurrency limit.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    _setup_logging(verbose)


main.add_command(exec_cmd)
main.add_command(ssh_cmd)


# ---------------------------------------------------------------------------
# Short aliases
# ---------------------------------------------------------------------------

main.add_command(exec_cmd, name="e")
main.add_command(ssh_cmd, name="s")
