"""Shared CLI infrastructure: logging, common options, error reporting."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from multi.errors import JobError

logger = logging.getLogger(__name__)

SUMMARY_FAILURE = "some commands had errors"


def _setup_logging(verbose: bool):
    """Configure logging based on verbosity.

    Uses explicit handler setup instead of ``logging.basicConfig`` which
    is silently a no-op when the root logger already has handlers.
    """
    level = logging.DEBUG if verbose else logging.INFO
    fmt = ("%(asctime)s [%(levelname)s] %(threadName)s %(name)s: %(message)s" if verbose
           else "%(message)s")

    root = logging.getLogger()
    root.setLevel(level)
    # Remove any handlers that may have been added by library imports
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt="%H:%M:%S"))
    root.addHandler(handler)


def common_options(f):
    """Common options shared by exec and ssh: -q, -i, -c, --dry-run."""
    f = click.option("--dry-run", is_flag=True,
                     help="Show the formatted commands without running them")(f)
    f = click.option("-c", "--count", type=click.IntRange(min=0), default=None,
                     help="Perform COUNT items (default 1); with -i, the larger value wins")(f)
    f = click.option("-i", "--input", "use_input", is_flag=True,
                     help="Use standard input to work with a list of items by line; "
                          "the whole input is read up front. With -c, the larger value wins")(f)
    f = click.option("-q", "--quiet", is_flag=True, help="Do not display output from commands")(f)
    return f


def _init_run(ctx: click.Context):
    """Initialize plugins and re-apply logging."""
    from multi.bootstrap import init_multi

    v = init_multi()
    # SAF's init_framework_desktop reconfigures the root logger; re-apply ours
    _setup_logging(ctx.obj["verbose"])
    return v


def _load_config(v, config_path: Path | None):
    """Load the user config from *config_path* or the default location."""
    from multi.config import MultiConfig, get_config_root

    return MultiConfig(config_path or get_config_root(v) / "config.yaml")


def _read_input(enabled: bool) -> list[str] | None:
    """Read input lines from stdin when input mode is enabled."""
    if not enabled:
        return None
    from multi.inputs import read_lines
    try:
        return read_lines(click.get_text_stream("stdin"))
    except OSError as e:
        raise click.ClickException("reading input: %s" % e)


def _report_errors(errors: list[JobError]) -> None:
    """Print every job error, then fail once if there were any."""
    for err in errors:
        click.echo(str(err), err=True)
    if errors:
        raise click.ClickException(SUMMARY_FAILURE)
    logger.debug("All jobs succeeded")


def _exit_on_config_error(e: Exception):
    click.echo("Error: %s" % e, err=True)
    sys.exit(1)
