"""Maven hook.

Invokes a separate Maven build from within a pipeline step. Each unmapped
context value is one invocation, e.g. ``clean install -P release -DskipTests``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from buildhooks.errors import HookFailure
from buildhooks.maven.invoker import (
    DefaultInvoker,
    InvocationRequest,
    Invoker,
    MavenInvocationError,
    mvn_executable_name,
)
from buildhooks.pipeline.context import ExecutionContext
from buildhooks.pipeline.hook import Hook, hook

if TYPE_CHECKING:
    from buildhooks.config import BuildHooksConfig

logger = logging.getLogger(__name__)

PROFILE_FLAGS = frozenset({"-P", "--activate-profiles"})
MAVEN_HOME_PROPERTY = "maven.home"
MAVEN_HOME_ENV = "M2_HOME"


@dataclass(frozen=True)
class MavenProject:
    """The project the host build runs for."""

    file: Path


@dataclass(frozen=True)
class MavenSettings:
    """Ambient settings of the running build."""

    offline: bool = False
    interactive_mode: bool = False


@dataclass
class InvocationSpec:
    """Tokens of one invocation, classified."""

    goals: list[str] = field(default_factory=list)
    profiles: list[str] = field(default_factory=list)
    options: list[str] = field(default_factory=list)


def tokenize(data: str) -> InvocationSpec:
    """Classify the space-separated tokens of an invocation string.

    ``-P``/``--activate-profiles`` consume the next token as a profile name,
    tokens starting with ``-D`` are options and everything else is a goal.

    Raises:
        HookFailure: If a profile flag is not followed by a profile name
    """
    spec = InvocationSpec()
    tokens = iter(data.split(" "))
    for token in tokens:
        if token in PROFILE_FLAGS:
            profile = next(tokens, None)
            if profile is None:
                raise HookFailure(f"Missing profile name after '{token}' in '{data}'")
            spec.profiles.append(profile)
        elif token.startswith("-D"):
            spec.options.append(token)
        else:
            spec.goals.append(token)
    return spec


def is_valid_maven_home(path: str | None) -> bool:
    """Check that a path is a directory containing the platform's bin/mvn launcher."""
    if not path:
        return False
    home = Path(path)
    return home.is_dir() and (home / "bin" / mvn_executable_name()).exists()


@hook(id="mvn", description="Invoke a separate Maven build process during your processing logic.")
class MavenHook(Hook):
    """Run nested Maven builds for each unmapped context value."""

    def __init__(
        self,
        project: MavenProject,
        settings: MavenSettings | None = None,
        maven_home: str | None = None,
        log: logging.Logger | None = None,
        system_properties: Mapping[str, str] | None = None,
        environ: Mapping[str, str] | None = None,
        invoker_factory: Callable[[], Invoker] = DefaultInvoker,
    ) -> None:
        """Initialize the hook with its host-provided collaborators.

        Args:
            project: Project whose POM nested builds run against
            settings: Ambient offline/interactive settings
            maven_home: Injected Maven home (highest priority)
            log: Logger to report to
            system_properties: Host system properties, checked for ``maven.home``
            environ: Environment, checked for ``M2_HOME`` (default os.environ)
            invoker_factory: Creates the invoker for each invocation
        """
        self.project = project
        self.settings = settings or MavenSettings()
        self.maven_home = maven_home
        self.log = log or logger
        self.system_properties = system_properties or {}
        self.environ = environ if environ is not None else os.environ
        self.invoker_factory = invoker_factory

    @classmethod
    def from_config(cls, config: BuildHooksConfig) -> MavenHook:
        return cls(
            project=MavenProject(file=config.pom_file),
            settings=MavenSettings(offline=config.offline, interactive_mode=config.interactive_mode),
            maven_home=config.maven_home,
            system_properties=config.system_properties,
        )

    def execute(self, context: ExecutionContext) -> None:
        if not context.has_unmapped_data():
            self.log.warning(f"No goals for Maven execution! Skipping hook '{context.step_id}'.")
            return

        for data in context.data.unmapped:
            self.execute_maven_call(data, context, rollback=False)

    def rollback(self, context: ExecutionContext) -> None:
        if not context.has_unmapped_rollback_data():
            self.log.debug(f"No rollback goals for Maven execution! Skipping rollback of hook '{context.step_id}'.")
            return

        for data in context.rollback_data.unmapped:
            self.execute_maven_call(data, context, rollback=True)

    def build_request(self, spec: InvocationSpec) -> InvocationRequest:
        return InvocationRequest(
            pom_file=self.project.file,
            goals=list(spec.goals),
            profiles=list(spec.profiles),
            maven_opts=" ".join(spec.options),
            shell_environment_inherited=True,
            offline=self.settings.offline,
            interactive=self.settings.interactive_mode,
        )

    def execute_maven_call(self, data: str, context: ExecutionContext, rollback: bool) -> None:
        """Run one nested Maven invocation.

        Raises:
            HookFailure: If the invocation cannot be started or exits non-zero
        """
        spec = tokenize(data)
        request = self.build_request(spec)

        self.log.info(f"{'Rolling back' if rollback else 'Executing'} hook {context.step_id} with the following setup:")
        self.log.info(f"\t\tGOALS: {' '.join(spec.goals)}")
        self.log.info(f"\t\tOPTIONS: {' '.join(spec.options)}")
        self.log.info(f"\t\tPROFILES: {' '.join(spec.profiles)}")

        invoker = self.invoker_factory()
        maven_home = self.resolve_maven_home()
        if maven_home is not None:
            self.log.debug(f"Using maven home: {maven_home}")
            invoker.maven_home = maven_home

        try:
            result = invoker.execute(request)
        except MavenInvocationError as e:
            raise HookFailure(str(e), e) from e

        if result.exit_code != 0:
            reason = result.execution_exception or f"exit code {result.exit_code}"
            raise HookFailure(f"Error during execution of hook: {reason}", result.execution_exception)

    def resolve_maven_home(self) -> Path | None:
        """Find the Maven home to use.

        Candidates in priority order: the injected value, the ``maven.home``
        system property, the ``M2_HOME`` environment variable. Returns None
        when no candidate is a valid Maven home.
        """
        candidates = (
            self.maven_home,
            self.system_properties.get(MAVEN_HOME_PROPERTY),
            self.environ.get(MAVEN_HOME_ENV),
        )
        for candidate in candidates:
            if is_valid_maven_home(candidate):
                return Path(candidate)  # type: ignore[arg-type]
        return None
