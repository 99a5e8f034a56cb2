"""Tests for the Maven hook."""

import logging
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from buildhooks.config import BuildHooksConfig
from buildhooks.errors import HookFailure
from buildhooks.hooks.maven import (
    MavenHook,
    MavenProject,
    MavenSettings,
    is_valid_maven_home,
    tokenize,
)
from buildhooks.maven.invoker import CommandLineError, InvocationResult, MavenInvocationError, mvn_executable_name


def make_maven_home(root: Path, launcher: str | None = None) -> Path:
    (root / "bin").mkdir(parents=True)
    (root / "bin" / (launcher or mvn_executable_name())).write_text("#!/bin/sh\n")
    return root


def foreign_launcher() -> str:
    """Launcher name of the other platform family (mvn.cmd on POSIX, mvn on Windows)."""
    return "mvn.cmd" if mvn_executable_name() == "mvn" else "mvn"


@pytest.fixture
def invoker():
    invoker = MagicMock()
    invoker.maven_home = None
    invoker.execute.return_value = InvocationResult(exit_code=0)
    return invoker


@pytest.fixture
def maven_hook(invoker, tmp_path):
    return MavenHook(
        project=MavenProject(file=tmp_path / "pom.xml"),
        settings=MavenSettings(offline=True, interactive_mode=False),
        environ={},
        invoker_factory=lambda: invoker,
    )


class TestTokenize:
    def test_goals_profiles_options(self):
        spec = tokenize("clean install -P prof1 -Dskip=true")

        assert spec.goals == ["clean", "install"]
        assert spec.profiles == ["prof1"]
        assert spec.options == ["-Dskip=true"]

    def test_long_profile_flag(self):
        spec = tokenize("deploy --activate-profiles release -P sign")

        assert spec.goals == ["deploy"]
        assert spec.profiles == ["release", "sign"]

    def test_order_preserved(self):
        spec = tokenize("-Da=1 validate -Db=2 verify")

        assert spec.goals == ["validate", "verify"]
        assert spec.options == ["-Da=1", "-Db=2"]

    def test_profile_flag_without_name(self):
        with pytest.raises(HookFailure, match="Missing profile name"):
            tokenize("install -P")


class TestMavenHome:
    def test_valid_home(self, tmp_path):
        assert is_valid_maven_home(str(make_maven_home(tmp_path / "maven")))

    def test_invalid_homes(self, tmp_path):
        (tmp_path / "empty").mkdir()
        assert not is_valid_maven_home(None)
        assert not is_valid_maven_home("")
        assert not is_valid_maven_home(str(tmp_path / "empty"))
        assert not is_valid_maven_home(str(tmp_path / "does-not-exist"))

    def test_injected_home_wins(self, tmp_path):
        injected = make_maven_home(tmp_path / "injected")
        env_home = make_maven_home(tmp_path / "env")
        hook = MavenHook(
            project=MavenProject(file=tmp_path / "pom.xml"),
            maven_home=str(injected),
            environ={"M2_HOME": str(env_home)},
        )

        assert hook.resolve_maven_home() == injected

    def test_system_property_before_environment(self, tmp_path):
        prop_home = make_maven_home(tmp_path / "prop")
        env_home = make_maven_home(tmp_path / "env")
        hook = MavenHook(
            project=MavenProject(file=tmp_path / "pom.xml"),
            maven_home=str(tmp_path / "invalid"),
            system_properties={"maven.home": str(prop_home)},
            environ={"M2_HOME": str(env_home)},
        )

        assert hook.resolve_maven_home() == prop_home

    def test_falls_back_to_m2_home(self, tmp_path):
        env_home = make_maven_home(tmp_path / "env")
        hook = MavenHook(
            project=MavenProject(file=tmp_path / "pom.xml"),
            maven_home=str(tmp_path / "invalid"),
            environ={"M2_HOME": str(env_home)},
        )

        assert hook.resolve_maven_home() == env_home

    def test_other_platform_launcher_is_not_a_home(self, tmp_path):
        foreign = make_maven_home(tmp_path / "foreign", launcher=foreign_launcher())
        env_home = make_maven_home(tmp_path / "env")
        hook = MavenHook(
            project=MavenProject(file=tmp_path / "pom.xml"),
            maven_home=str(foreign),
            environ={"M2_HOME": str(env_home)},
        )

        assert not is_valid_maven_home(str(foreign))
        assert hook.resolve_maven_home() == env_home

    def test_no_valid_home(self, tmp_path):
        hook = MavenHook(project=MavenProject(file=tmp_path / "pom.xml"), environ={})

        assert hook.resolve_maven_home() is None


class TestMavenHookExecute:
    """Test MavenHook.execute."""

    def test_no_goals_is_noop(self, maven_hook, invoker, context_factory, caplog):
        with caplog.at_level(logging.WARNING):
            maven_hook.execute(context_factory(step_id="mvn[none]"))

        invoker.execute.assert_not_called()
        assert "No goals for Maven execution! Skipping hook 'mvn[none]'." in caplog.text

    def test_builds_request(self, maven_hook, invoker, context_factory, tmp_path):
        maven_hook.execute(context_factory(unmapped=["clean install -P prof1 -Dskip=true -Dx=y"]))

        request = invoker.execute.call_args[0][0]
        assert request.pom_file == tmp_path / "pom.xml"
        assert request.goals == ["clean", "install"]
        assert request.profiles == ["prof1"]
        assert request.maven_opts == "-Dskip=true -Dx=y"
        assert request.shell_environment_inherited is True
        assert request.offline is True
        assert request.interactive is False

    def test_one_invocation_per_entry(self, maven_hook, invoker, context_factory):
        maven_hook.execute(context_factory(unmapped=["clean", "verify"]))

        goals = [c[0][0].goals for c in invoker.execute.call_args_list]
        assert goals == [["clean"], ["verify"]]

    def test_sets_resolved_maven_home(self, invoker, context_factory, tmp_path):
        home = make_maven_home(tmp_path / "maven")
        hook = MavenHook(
            project=MavenProject(file=tmp_path / "pom.xml"),
            maven_home=str(home),
            invoker_factory=lambda: invoker,
        )

        hook.execute(context_factory(unmapped=["install"]))

        assert invoker.maven_home == home

    def test_keeps_invoker_default_without_home(self, maven_hook, invoker, context_factory):
        maven_hook.execute(context_factory(unmapped=["install"]))

        assert invoker.maven_home is None

    def test_non_zero_exit_fails(self, maven_hook, invoker, context_factory):
        invoker.execute.return_value = InvocationResult(
            exit_code=1, execution_exception=CommandLineError("Maven invocation exited with code 1")
        )

        with pytest.raises(HookFailure) as exc_info:
            maven_hook.execute(context_factory(unmapped=["install", "deploy"]))

        assert exc_info.value.message == "Error during execution of hook: Maven invocation exited with code 1"
        assert invoker.execute.call_count == 1

    def test_invocation_error_fails(self, maven_hook, invoker, context_factory):
        error = MavenInvocationError("Error while executing Maven: not found")
        invoker.execute.side_effect = error

        with pytest.raises(HookFailure) as exc_info:
            maven_hook.execute(context_factory(unmapped=["install"]))

        assert exc_info.value.message == "Error while executing Maven: not found"
        assert exc_info.value.cause is error

    def test_logs_setup(self, maven_hook, context_factory, caplog):
        with caplog.at_level(logging.INFO):
            maven_hook.execute(context_factory(unmapped=["clean -P a -Db=c"], step_id="mvn[build]"))

        assert "Executing hook mvn[build] with the following setup:" in caplog.text
        assert "GOALS: clean" in caplog.text
        assert "OPTIONS: -Db=c" in caplog.text
        assert "PROFILES: a" in caplog.text


class TestMavenHookRollback:
    """Test MavenHook.rollback."""

    def test_no_rollback_goals_is_noop(self, maven_hook, invoker, context_factory):
        maven_hook.rollback(context_factory(unmapped=["install"]))

        invoker.execute.assert_not_called()

    def test_uses_rollback_channel(self, maven_hook, invoker, context_factory, caplog):
        with caplog.at_level(logging.INFO):
            maven_hook.rollback(context_factory(unmapped=["deploy"], rollback_unmapped=["clean"]))

        invoker.execute.assert_called_once()
        assert invoker.execute.call_args[0][0].goals == ["clean"]
        assert "Rolling back hook" in caplog.text


class TestFromConfig:
    def test_wires_collaborators(self, tmp_path):
        config = BuildHooksConfig(
            maven_home="/opt/maven",
            system_properties={"maven.home": "/usr/share/maven"},
            offline=True,
            interactive_mode=True,
            pom_file=tmp_path / "pom.xml",
        )

        hook = MavenHook.from_config(config)

        assert hook.project.file == tmp_path / "pom.xml"
        assert hook.settings == MavenSettings(offline=True, interactive_mode=True)
        assert hook.maven_home == "/opt/maven"
        assert hook.system_properties == {"maven.home": "/usr/share/maven"}
