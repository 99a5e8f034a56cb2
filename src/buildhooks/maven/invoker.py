"""Nested Maven build invocation.

Builds a ``mvn`` command line from an InvocationRequest and runs it as a
child process that inherits the host's standard streams.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


def mvn_executable_name() -> str:
    return "mvn.cmd" if sys.platform == "win32" else "mvn"


class MavenInvocationError(Exception):
    """Raised when a Maven invocation cannot be started."""

    pass


class CommandLineError(Exception):
    """Reported by an InvocationResult whose Maven process failed."""

    pass


@dataclass
class InvocationRequest:
    """Parameters of one nested Maven run.

    Attributes:
        pom_file: POM the build runs against
        goals: Goals and phases, in order
        profiles: Profiles to activate
        maven_opts: Value exported as MAVEN_OPTS
        shell_environment_inherited: Pass the current environment to Maven
        offline: Run with ``-o``
        interactive: Run without ``-B`` (batch mode)
        base_directory: Working directory (default: the POM's directory)
    """

    pom_file: Path | None = None
    goals: list[str] = field(default_factory=list)
    profiles: list[str] = field(default_factory=list)
    maven_opts: str = ""
    shell_environment_inherited: bool = True
    offline: bool = False
    interactive: bool = False
    base_directory: Path | None = None


@dataclass
class InvocationResult:
    """Outcome of a nested Maven run."""

    exit_code: int
    execution_exception: Exception | None = None


class Invoker(Protocol):
    maven_home: Path | None

    def execute(self, request: InvocationRequest) -> InvocationResult: ...


class DefaultInvoker:
    """Invoker that launches ``mvn`` as a child process.

    Attributes:
        maven_home: Maven installation to use; when None the ``mvn`` found on
            PATH is used
    """

    def __init__(self, maven_home: Path | None = None) -> None:
        self.maven_home = maven_home

    def find_executable(self) -> str:
        """Resolve the mvn executable."""
        if self.maven_home is not None:
            return str(Path(self.maven_home) / "bin" / mvn_executable_name())
        return shutil.which(mvn_executable_name()) or mvn_executable_name()

    def build_command(self, request: InvocationRequest) -> list[str]:
        """Build the mvn command line for a request.

        Args:
            request: Invocation parameters

        Returns:
            Executable followed by its arguments
        """
        command = [self.find_executable()]
        if request.pom_file is not None:
            command += ["-f", str(request.pom_file)]
        if request.offline:
            command.append("-o")
        if not request.interactive:
            command.append("-B")
        if request.profiles:
            command += ["-P", ",".join(request.profiles)]
        command += request.goals
        return command

    def build_environment(self, request: InvocationRequest) -> dict[str, str]:
        env = dict(os.environ) if request.shell_environment_inherited else {"PATH": os.environ.get("PATH", "")}
        if request.maven_opts:
            env["MAVEN_OPTS"] = request.maven_opts
        return env

    def working_directory(self, request: InvocationRequest) -> Path | None:
        if request.base_directory is not None:
            return request.base_directory
        if request.pom_file is not None:
            return Path(request.pom_file).absolute().parent
        return None

    def execute(self, request: InvocationRequest) -> InvocationResult:
        """Run Maven and wait for it to finish.

        Args:
            request: Invocation parameters

        Returns:
            InvocationResult; non-zero exit codes carry a CommandLineError

        Raises:
            MavenInvocationError: If the Maven process cannot be launched
        """
        command = self.build_command(request)
        logger.debug(f"Executing: {' '.join(command)}")

        try:
            # S603: goals come from the build configuration
            result = subprocess.run(  # noqa: S603
                command,
                env=self.build_environment(request),
                cwd=self.working_directory(request),
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise MavenInvocationError(f"Error while executing Maven: {e}") from e

        if result.returncode != 0:
            return InvocationResult(
                exit_code=result.returncode,
                execution_exception=CommandLineError(f"Maven invocation exited with code {result.returncode}"),
            )
        return InvocationResult(exit_code=0)
