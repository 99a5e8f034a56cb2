"""buildhooks - Exec, HTTP request and Maven hooks for build pipelines."""

from buildhooks.errors import HookError, HookExecutionError, HookFailure
from buildhooks.pipeline import ExecutionContext, Hook, get_registry

__all__ = [
    "ExecutionContext",
    "Hook",
    "HookError",
    "HookExecutionError",
    "HookFailure",
    "get_registry",
]
