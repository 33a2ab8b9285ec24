"""Tests for invocation building."""

from types import MappingProxyType

import pytest

from tfmk.config import TfmkConfig
from tfmk.invocation import Action, Invocation, docker_run


class TestInvocation:
    """Tests for the Invocation dataclass."""

    def test_argv_and_str(self) -> None:
        step = Invocation("git", ["tag", "-m", "Release 1.0.0"])
        assert step.args == ("tag", "-m", "Release 1.0.0")
        assert step.argv == ["git", "tag", "-m", "Release 1.0.0"]
        assert str(step) == "git tag -m 'Release 1.0.0'"

    def test_immutable(self) -> None:
        step = Invocation("git", env={"A": "1"})
        assert isinstance(step.env, MappingProxyType)
        with pytest.raises(AttributeError):
            step.program = "docker"  # type: ignore[misc]
        with pytest.raises(TypeError):
            step.env["B"] = "2"  # type: ignore[index]

    def test_label(self) -> None:
        assert Invocation("git").label == "git"
        assert Invocation("git", description="tag").label == "tag"
        assert Action("write", lambda c, p: None).label == "write"


class TestDockerRun:
    """Tests for docker_run."""

    def test_mount_and_forwarding(self, config: TfmkConfig) -> None:
        step = docker_run(
            "tmknom/yamllint",
            ["--strict", "."],
            config=config,
            forward_env=["AWS_DEFAULT_REGION"],
            container_env={"TF_LOG": "DEBUG"},
        )
        assert step.argv == [
            "docker",
            "run",
            "--rm",
            "-i",
            "-v",
            f"{config.project_dir}:/work",
            "-w",
            "/work",
            "-e",
            "AWS_DEFAULT_REGION",
            "-e",
            "TF_LOG=DEBUG",
            "tmknom/yamllint",
            "--strict",
            ".",
        ]
        assert step.label == "tmknom/yamllint"

    def test_non_interactive_with_workdir(self, config: TfmkConfig) -> None:
        step = docker_run("img", config=config, workdir="/work/examples/a", interactive=False, capture=True)
        assert "-i" not in step.argv
        assert step.argv[step.argv.index("-w") + 1] == "/work/examples/a"
        assert step.capture is True
