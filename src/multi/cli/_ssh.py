"""multi ssh command."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import click

from multi.errors import ConfigurationError
from ._common import (_exit_on_config_error, _init_run, _load_config, _read_input, _report_errors,
                      common_options)

logger = logging.getLogger(__name__)


@click.command("ssh", context_settings={"allow_interspersed_args": False})
@click.option("-t", "--timeout", type=click.IntRange(min=1), default=None,
              help="Timeout for SSH connections in seconds (default 60)")
@click.option("-u", "--username", default=None, help="Username to connect as (default $USER)")
@click.option("-p", "--password", default=None, help="Password to connect with, if any (needs sshpass)")
@click.option("-d", "--identity", default=None, help="Identity file to connect with")
@click.option("-n", "--no-agent", is_flag=True, help="Do not attempt to use an ssh-agent")
@click.option("-r", "--no-prefix", is_flag=True, help="Do not prefix output with host information")
@click.option("-o", "--ssh-option", "ssh_options", multiple=True,
              help="Extra argument passed to ssh (repeatable)")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path),
              default=None, help="Path to config file")
@common_options
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def ssh_cmd(ctx, timeout, username, password, identity, no_agent, no_prefix, ssh_options,
            quiet, use_input, count, dry_run, config_path, args):
    """Execute a command in parallel over ssh.

    The first argument after -- is a host list file with one host or
    host:port per line (22 is the default port); the rest is the command.
    With -c N, N jobs run on every host, grouped by host.

    Examples:

      multi ssh -- hosts.txt uptime

      multi ssh -c 2 -u deploy -- hosts.txt 'echo %t on $(hostname)'
    """
    from multi.bootstrap import get_executor
    from multi.executors.remote import RemoteContext
    from multi.hosts import HostAssignment, parse_hosts_file
    from multi.orchestration.ssh import SSHSettings

    if len(args) < 2:
        raise click.ClickException("must supply a host list file and command to run")

    hosts_file, command = args[0], args[1:]
    v = _init_run(ctx)
    config = _load_config(v, config_path)

    try:
        assignment = HostAssignment.build(parse_hosts_file(hosts_file), count)
        lines = _read_input(use_input)
        jobs = assignment.build_jobs(lines)
        settings = SSHSettings.build(
            user=username or config.ssh_user or os.environ.get("USER"),
            identity=identity or config.ssh_key,
            password=password,
            use_agent=not (no_agent or config.no_agent),
            connect_timeout=timeout or config.ssh_timeout,
            options=list(ssh_options) or config.ssh_options,
        )
        executor = get_executor("ssh", v)
    except (ConfigurationError, ValueError) as e:
        _exit_on_config_error(e)

    run_ctx = RemoteContext(
        command=tuple(command),
        quiet=quiet,
        dry_run=dry_run,
        assignment=assignment,
        ssh=settings,
        prefix=not (no_prefix or config.no_prefix),
    )
    logger.debug("Running %d jobs on %d hosts (%d per host)",
                 len(jobs), len(assignment.hosts), assignment.per_host)
    _report_errors(executor.run(jobs, run_ctx))
