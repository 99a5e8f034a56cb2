"""Hook contract and execution context for buildhooks.

The host orchestrator owns ordering and rollback sequencing. This package
only defines what a hook receives and how it is registered:

    Hook h = (execute, rollback) where:
        execute:  ExecutionContext -> None   (forward data channel)
        rollback: ExecutionContext -> None   (rollback data channel)

Both raise HookFailure or HookExecutionError.
"""

from buildhooks.pipeline.context import DataChannel, ExecutionContext
from buildhooks.pipeline.hook import Hook, HookSpec, get_registry, hook

__all__ = [
    "DataChannel",
    "ExecutionContext",
    "Hook",
    "HookSpec",
    "get_registry",
    "hook",
]
