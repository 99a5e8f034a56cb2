"""buildhooks CLI for running hooks outside a host pipeline - Tyro implementation."""

import logging
import sys
from pathlib import Path
from typing import Annotated

import attrs
import tyro
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from buildhooks.config import BuildHooksConfig, get_config
from buildhooks.errors import HookExecutionError, HookFailure
from buildhooks.pipeline.context import ExecutionContext
from buildhooks.pipeline.hook import get_registry

EXIT_FAILURE = 1
EXIT_EXECUTION_ERROR = 2


# Subcommand definitions using attrs
@attrs.define
class Run:
    """Run a single hook against a context file."""

    hook: Annotated[str, tyro.conf.Positional]
    """Hook id (see `buildhooks list`)."""

    context: Annotated[Path, tyro.conf.arg(aliases=["-c"])]
    """YAML file with step_id, data and rollback channels."""

    rollback: Annotated[bool, tyro.conf.arg(aliases=["-r"])] = False
    """Run the hook's rollback action instead of execute."""


@attrs.define
class ListHooks:
    """List the available hooks."""


Command = Annotated[Run, tyro.conf.subcommand(name="run")] | Annotated[ListHooks, tyro.conf.subcommand(name="list")]


def setup_logging(debug: bool = False) -> None:
    """Configure logging with 100-character text width."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)-20s - %(levelname)-8s - %(message).100s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def load_context(path: Path) -> ExecutionContext:
    """Load an execution context from a YAML file.

    Args:
        path: Context file

    Returns:
        ExecutionContext instance
    """
    with path.open() as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Context file {path} must contain a mapping, got {type(data).__name__}")
    return ExecutionContext.from_dict(data)


def load_config(config_dir: Path | None) -> BuildHooksConfig:
    if config_dir is None:
        return get_config()
    return BuildHooksConfig.from_yaml(config_dir / "buildhooks.yaml")


def run_hook(config: BuildHooksConfig, hook_id: str, context_path: Path, rollback: bool = False) -> int:
    """Run one hook and translate its outcome into an exit code.

    Args:
        config: Configuration to wire hook collaborators from
        hook_id: Registered hook id
        context_path: YAML context file
        rollback: Run rollback instead of execute

    Returns:
        0 on success, 1 on HookFailure, 2 on HookExecutionError
    """
    import buildhooks.hooks  # noqa: F401  # registers hooks

    console = Console(stderr=True, soft_wrap=True)
    spec = get_registry().get_spec(hook_id)
    if spec is None:
        available = ", ".join(sorted(get_registry().get_all_specs()))
        console.print(f"Error: Unknown hook '{escape(hook_id)}'. Available hooks: {available}")
        return EXIT_FAILURE

    if not context_path.exists():
        console.print(f"Error: Context file not found at {escape(str(context_path))}")
        return EXIT_FAILURE

    try:
        context = load_context(context_path)
    except (yaml.YAMLError, ValueError, OSError) as e:
        console.print(f"Error: Could not load context file {escape(str(context_path))}: {escape(str(e))}")
        return EXIT_FAILURE

    hook = spec.create(config)
    try:
        if rollback:
            hook.rollback(context)
        else:
            hook.execute(context)
    except HookFailure as e:
        console.print(f"[red]Hook '{hook_id}' failed:[/red] {escape(e.message)}")
        return EXIT_FAILURE
    except HookExecutionError as e:
        console.print(f"[red]Hook '{hook_id}' raised an unexpected error:[/red] {escape(e.message)}")
        return EXIT_EXECUTION_ERROR
    return 0


def list_hooks() -> None:
    """Print a table of registered hooks."""
    import buildhooks.hooks  # noqa: F401  # registers hooks

    console = Console()
    table = Table(show_header=True, header_style="bold")
    table.add_column("Hook", style="cyan")
    table.add_column("Class", style="green")
    table.add_column("Description")

    for name, spec in sorted(get_registry().get_all_specs().items()):
        table.add_row(name, spec.hook_class.__name__, spec.description or "-")

    console.print(table)


def main(
    cmd: Annotated[Command, tyro.conf.arg(name="")],
    *,
    config_dir: Annotated[Path | None, tyro.conf.arg(help="Directory containing buildhooks.yaml")] = None,
    debug: bool = False,
) -> None:
    """buildhooks - Exec, HTTP request and Maven hooks for build pipelines.

    Runs a hook's execute or rollback action the way a host pipeline would.
    """
    if isinstance(cmd, ListHooks):
        list_hooks()
        return

    config = load_config(config_dir)
    setup_logging(debug or config.debug)

    if isinstance(cmd, Run):
        sys.exit(run_hook(config, cmd.hook, cmd.context, rollback=cmd.rollback))


def entry_point() -> None:
    """Entry point for the buildhooks command."""
    tyro.cli(main)


if __name__ == "__main__":
    entry_point()
