"""Hook contract, specification and decorator.

Defines the Hook base class, the HookSpec registry entry and the @hook
decorator that registers hook classes under the id the host uses to
select them.
"""

from __future__ import annotations

import abc
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from buildhooks.config import BuildHooksConfig
    from buildhooks.pipeline.context import ExecutionContext


class Hook(abc.ABC):
    """A pluggable unit of work invoked by the host at a pipeline step.

    Both methods may raise HookFailure (recoverable, stops the pipeline and
    triggers rollback of earlier steps) or HookExecutionError (unexpected,
    wraps a lower-level cause).
    """

    @abc.abstractmethod
    def execute(self, context: ExecutionContext) -> None:
        """Run the hook's forward action."""

    def rollback(self, context: ExecutionContext) -> None:  # noqa: B027
        """Compensate for execute() after a later step failed. No-op by default."""


HookT = TypeVar("HookT", bound=type[Hook])


@dataclass(frozen=True)
class HookSpec:
    """Specification for a registered hook.

    Attributes:
        name: Unique hook identifier used by the host
        hook_class: Class implementing the hook
        description: Short human-readable description
    """

    name: str
    hook_class: type[Hook]
    description: str = ""

    def create(self, config: BuildHooksConfig | None = None) -> Hook:
        """Instantiate the hook.

        Uses the class's ``from_config`` factory when present so that
        collaborators can be wired from configuration.

        Args:
            config: Configuration to wire collaborators from (default: global config)

        Returns:
            Hook instance
        """
        factory = getattr(self.hook_class, "from_config", None)
        if factory is None:
            return self.hook_class()
        if config is None:
            from buildhooks.config import get_config

            config = get_config()
        return factory(config)


class _HookRegistry:
    """Global registry for hooks decorated with @hook."""

    def __init__(self) -> None:
        self._hooks: dict[str, HookSpec] = {}

    def register_spec(self, spec: HookSpec) -> None:
        """Register a hook specification."""
        self._hooks[spec.name] = spec

    def get_spec(self, name: str) -> HookSpec | None:
        """Get a hook specification by name."""
        return self._hooks.get(name)

    def get_all_specs(self) -> dict[str, HookSpec]:
        """Get all registered hook specifications."""
        return dict(self._hooks)

    def clear(self) -> None:
        """Clear all registered hooks (for testing)."""
        self._hooks.clear()


# Global registry
_registry = _HookRegistry()


def get_registry() -> _HookRegistry:
    """Get the global hook registry."""
    return _registry


def hook(*, id: str, description: str = "") -> Callable[[HookT], HookT]:  # noqa: A002
    """Decorator to register a class as a hook.

    Args:
        id: Identifier the host uses to select the hook
        description: Short description shown by ``buildhooks list``

    Returns:
        Decorator function

    Example:
        @hook(id="exec", description="Executes shell commands.")
        class ExecHook(Hook):
            def execute(self, context: ExecutionContext) -> None:
                ...
    """

    def decorator(cls: HookT) -> HookT:
        spec = HookSpec(name=id, hook_class=cls, description=description)
        _registry.register_spec(spec)

        # Attach spec to class for introspection
        cls._hook_spec = spec  # type: ignore[attr-defined]
        return cls

    return decorator
