"""Bootstrap the multi executor plugin system on scitrera-app-framework."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from scitrera_app_framework import Variables, register_plugin, get_extensions
from scitrera_app_framework.util import find_types_in_modules

if TYPE_CHECKING:
    from multi.executors.base import ExecutorPlugin

logger = logging.getLogger(__name__)

EXT_EXECUTOR = "multi.executor"

# Module-level singleton for the multi Variables instance
_variables: Variables | None = None


def init_multi(v: Variables | None = None, log_level: str = "WARNING") -> Variables:
    """Initialize multi's plugin system.

    Args:
        v: Optional pre-existing Variables instance to reuse.
        log_level: SAF log level (default WARNING to reduce verbosity).

    Returns:
        The initialized Variables instance.
    """
    global _variables

    if _variables is not None and v is None:
        return _variables

    if v is None:
        from scitrera_app_framework import init_framework_desktop
        v = init_framework_desktop("multi", log_level=log_level, fault_handler=False,
                                   shutdown_hooks=False, fixed_logger=logger)

    _variables = v

    # Import here to avoid circular imports
    from multi.executors.base import ExecutorPlugin

    discovered = list(find_types_in_modules("multi.executors", ExecutorPlugin))
    for executor_cls in discovered:
        if not executor_cls.executor_name:
            continue
        try:
            register_plugin(executor_cls, v=v)
            logger.debug("Registered executor: %s", executor_cls.__name__)
        except (ValueError, TypeError) as e:
            logger.debug("Skipping executor %s: %s", executor_cls.__name__, e)

    return v


def get_executor(name: str, v: Variables | None = None) -> ExecutorPlugin:
    """Get a specific executor by name.

    Args:
        name: Executor name ("local" or "ssh")
        v: Optional Variables instance; uses singleton if not provided

    Raises:
        ValueError: If the executor is not found
    """
    if v is None:
        v = init_multi()

    all_executors = get_extensions(EXT_EXECUTOR, v=v)
    for _plugin_name, executor in all_executors.items():
        if executor.executor_name == name:
            return executor

    available = [e.executor_name for e in all_executors.values()]
    raise ValueError("Unknown executor: %r. Available: %s" % (name, available))
