"""Executor plugins: one per kind of execution target."""

from multi.executors.base import ExecutionContext, ExecutorPlugin
from multi.executors.local import LocalExecutor
from multi.executors.remote import RemoteContext, SSHExecutor

__all__ = [
    "ExecutionContext",
    "ExecutorPlugin",
    "LocalExecutor",
    "RemoteContext",
    "SSHExecutor",
]
