"""Exec hook.

Runs shell commands (scripts, batch files, arbitrary programs) as child
processes that inherit the host's standard streams.
"""

from __future__ import annotations

import logging
import subprocess

from buildhooks.errors import HookExecutionError, HookFailure
from buildhooks.pipeline.context import ExecutionContext
from buildhooks.pipeline.hook import Hook, hook

logger = logging.getLogger(__name__)


def split_command(data: str) -> list[str]:
    """Split one unmapped value into program and arguments on single spaces."""
    return data.split(" ")


@hook(id="exec", description="Executes shell commands such as shell or batch script execution.")
class ExecHook(Hook):
    """Run each unmapped context value as a command, sequentially and fail-fast."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self.log = log or logger

    def execute(self, context: ExecutionContext) -> None:
        if not context.has_unmapped_data():
            self.log.warning(f"No commands to execute! Skipping hook '{context.step_id}'.")
            return

        commands = [split_command(data) for data in context.data.unmapped]
        self._log_setup(f"Executing hook {context.step_id} with the following setup:", commands)
        for command in commands:
            self.execute_command(command)

    def rollback(self, context: ExecutionContext) -> None:
        if not context.has_unmapped_rollback_data():
            self.log.debug(f"No rollback commands to execute! Skipping rollback of hook '{context.step_id}'.")
            return

        commands = [split_command(data) for data in context.rollback_data.unmapped]
        self._log_setup(f"Rolling back hook {context.step_id} with the following setup:", commands)
        for command in commands:
            self.execute_command(command)

    def _log_setup(self, title: str, commands: list[list[str]]) -> None:
        self.log.info(title)
        for i, command in enumerate(commands, start=1):
            self.log.info(f"\t\tCOMMAND {i}: {' '.join(command)}")

    def execute_command(self, command: list[str]) -> None:
        """Run one command and wait for it to finish.

        Args:
            command: Program followed by its arguments

        Raises:
            HookFailure: If the command exits with a non-zero return code
            HookExecutionError: If the process cannot be launched or awaited
        """
        self.log.debug(f"Running command: {' '.join(command)}")

        try:
            # S603: commands come from the build configuration; running them is the point
            result = subprocess.run(command)  # noqa: S603
        except (OSError, subprocess.SubprocessError, ValueError) as e:
            raise HookExecutionError(
                f"An unexpected exception was caught during the execution of a hook command: {e}", e
            ) from e

        if result.returncode != 0:
            raise HookFailure(
                f"An error occurred during the execution of a hook command. Return code was {result.returncode}"
            )
        self.log.debug("Command execution finished successfully.")
