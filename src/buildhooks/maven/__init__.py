"""Nested Maven invocation support."""

from buildhooks.maven.invoker import (
    CommandLineError,
    DefaultInvoker,
    InvocationRequest,
    InvocationResult,
    Invoker,
    MavenInvocationError,
)

__all__ = [
    "CommandLineError",
    "DefaultInvoker",
    "InvocationRequest",
    "InvocationResult",
    "Invoker",
    "MavenInvocationError",
]
