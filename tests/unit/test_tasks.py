"""Tests for the task catalogue."""

from pathlib import Path

import pytest

from tfmk.config import TfmkConfig
from tfmk.constants import TaskCategory
from tfmk.exceptions import ConfigurationError, TaskError, TaskNotFoundError, VersionFileError
from tfmk.invocation import Action, Invocation
from tfmk.tasks import build_registry, show_task_table
from tfmk.tasks.base import Task, TaskRegistry, composite
from tfmk.tasks.lint import lint_json, lint_shell
from tfmk.tasks.maintenance import images
from tfmk.tasks.release import release
from tfmk.tasks.terraform import fmt_args, terraform, version_tuple


def _noop(config: TfmkConfig) -> list:
    return []


class TestTaskRegistry:
    """Tests for TaskRegistry."""

    def test_get_unknown_suggests(self) -> None:
        registry = TaskRegistry([Task("lint", "Lint", _noop), Task("format", "Format", _noop)])
        with pytest.raises(TaskNotFoundError) as exc_info:
            registry.get("lnt")
        assert "No such task: lnt" in str(exc_info.value)
        assert exc_info.value.suggestions == ["lint"]

    def test_duplicate_rejected(self) -> None:
        registry = TaskRegistry([Task("lint", "Lint", _noop)])
        with pytest.raises(TaskError, match="already registered: lint"):
            registry.register(Task("lint", "Again", _noop))

    def test_order_and_membership(self) -> None:
        registry = TaskRegistry([Task("b", "", _noop), Task("a", "", _noop)])
        assert registry.names() == ["b", "a"]
        assert "a" in registry
        assert len(registry) == 2

    def test_task_is_immutable(self) -> None:
        task = Task("lint", "Lint", _noop)
        with pytest.raises(AttributeError):
            task.name = "other"  # type: ignore[misc]


class TestComposite:
    """Tests for composite tasks."""

    def test_steps_in_member_order(self, config: TfmkConfig) -> None:
        first = Task("a", "", lambda c: [Invocation("git", ("status",))], binaries=("git",))
        second = Task("b", "", lambda c: [Invocation("docker", ("info",))], env_vars=("X",))
        task = composite("ab", "Both", [first, second], TaskCategory.LINT)

        assert [step.program for step in task.build(config)] == ["git", "docker"]
        assert task.binaries == ("git", "docker")
        assert task.env_vars == ("X",)


class TestBuildRegistry:
    """Tests for the assembled catalogue."""

    def test_static_and_example_tasks(self, config: TfmkConfig) -> None:
        names = build_registry(config).names()

        assert names[0] == "help"
        for name in [
            "install",
            "check-requirements",
            "clean",
            "lint",
            "lint-terraform",
            "format",
            "docs",
            "bump-version",
            "release",
            "terraform-plan-minimal",
            "terraform-apply-complete",
            "terraform-destroy-complete",
        ]:
            assert name in names

    def test_no_examples(self, tmp_path: Path) -> None:
        names = build_registry(TfmkConfig(project_dir=tmp_path)).names()
        assert not [n for n in names if n.startswith("terraform-")]

    def test_colliding_example_names(self, project_dir: Path) -> None:
        """Test examples/a-b and examples/a/b cannot both be registered."""
        for rel in ("examples/a-b", "examples/a/b"):
            (project_dir / rel).mkdir(parents=True)
            (project_dir / rel / "main.tf").write_text("")

        with pytest.raises(ConfigurationError) as exc_info:
            build_registry(TfmkConfig(project_dir=project_dir))

        message = str(exc_info.value)
        assert "examples/a-b" in message
        assert "examples/a/b" in message


class TestHelpTable:
    """Tests for the grouped help output."""

    def test_grouped_by_category(self, config: TfmkConfig, capsys: pytest.CaptureFixture[str]) -> None:
        show_task_table(build_registry(config))
        out = capsys.readouterr().out

        assert "maintenance" in out
        assert "release" in out
        # clean is registered with the setup tasks but listed under maintenance
        assert out.index("clean") > out.index("bump-version") > out.index("terraform-plan-complete")
        assert out.index("check-requirements") < out.index("lint-terraform")


class TestTerraform:
    """Tests for terraform invocations."""

    @pytest.mark.parametrize(
        ("version", "expected"),
        [("0.11.9", (0, 11)), ("v1.5.7", (1, 5)), ("latest", None)],
    )
    def test_version_tuple(self, version: str, expected) -> None:
        assert version_tuple(version) == expected

    def test_fmt_recursive_only_after_0_12(self, config: TfmkConfig) -> None:
        assert "-recursive" not in fmt_args(config)
        assert "-recursive" in fmt_args(config.with_overrides({"TERRAFORM_VERSION": "1.5.7"}))
        assert "-recursive" in fmt_args(config.with_overrides({"TERRAFORM_VERSION": "latest"}))

    def test_invocation_shape(self, config: TfmkConfig, clean_env) -> None:
        step = terraform(config, Path("examples/complete"), "plan")

        argv = step.argv
        assert argv[:3] == ["docker", "run", "--rm"]
        assert f"{config.project_dir}:/work" in argv
        assert argv[argv.index("-w") + 1] == "/work/examples/complete"
        assert argv[argv.index("hashicorp/terraform:0.11.9") + 1 :] == ["plan"]
        for name in ("AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY", "AWS_DEFAULT_REGION"):
            assert argv[argv.index(name) - 1] == "-e"
        assert not any("plugin-cache" in arg for arg in argv)

    def test_plugin_cache_mounted(self, config: TfmkConfig, clean_env) -> None:
        clean_env.setenv("TF_PLUGIN_CACHE_DIR", "/home/me/.terraform.d/plugin-cache")
        argv = terraform(config, None, "init").argv

        assert "/home/me/.terraform.d/plugin-cache:/plugin-cache" in argv
        assert "TF_PLUGIN_CACHE_DIR=/plugin-cache" in argv
        assert argv[argv.index("-w") + 1] == "/work"

    def test_plan_pipes_into_landscape(self, config: TfmkConfig, clean_env) -> None:
        steps = build_registry(config).get("terraform-plan-complete").build(config)

        assert [s.label for s in steps] == ["terraform init", "terraform plan", "terraform-landscape"]
        assert steps[1].capture is True
        assert steps[2].stdin_from_previous is True
        assert "tmknom/terraform-landscape" in steps[2].argv


class TestLint:
    """Tests for lint steps."""

    def test_shell_no_scripts(self, config: TfmkConfig) -> None:
        assert lint_shell(config) == []

    def test_shell_scripts(self, config: TfmkConfig) -> None:
        (config.project_dir / "scripts").mkdir()
        (config.project_dir / "scripts" / "setup.sh").write_text("#!/bin/sh\n")

        steps = lint_shell(config)
        assert len(steps) == 1
        assert steps[0].argv[-2:] == ["koalaman/shellcheck", "scripts/setup.sh"]

    def test_json_one_run_per_file(self, config: TfmkConfig) -> None:
        (config.project_dir / "a.json").write_text("{}")
        (config.project_dir / "b.json").write_text("{}")
        assert [s.label for s in lint_json(config)] == ["jsonlint a.json", "jsonlint b.json"]

    def test_lint_composite(self, config: TfmkConfig) -> None:
        labels = [s.label for s in build_registry(config).get("lint").build(config)]
        assert labels[:2] == ["terraform fmt -check=true -write=false -diff=true", "tflint"]
        assert "markdownlint" in labels
        assert "yamllint" in labels


class TestDocsAndRelease:
    """Tests for docs, release and install steps."""

    def test_docs_steps(self, config: TfmkConfig) -> None:
        steps = build_registry(config).get("docs").build(config)
        assert steps[0].capture is True
        assert isinstance(steps[1], Action)

    def test_release_tags_version_file(self, config: TfmkConfig) -> None:
        steps = release(config)
        assert [s.argv for s in steps] == [
            ["git", "tag", "-a", "0.1.0", "-m", "Release 0.1.0"],
            ["git", "push", "origin", "0.1.0"],
        ]

    def test_release_without_version_file(self, tmp_path: Path) -> None:
        with pytest.raises(VersionFileError):
            release(TfmkConfig(project_dir=tmp_path))

    def test_install_pulls_each_image_once(self, config: TfmkConfig) -> None:
        refs = images(config.with_overrides({"images.prettier": "tmknom/markdownlint"}))
        assert refs[0] == "hashicorp/terraform:0.11.9"
        assert len(refs) == len(set(refs))
        steps = build_registry(config).get("install").build(config)
        assert steps[0].argv == ["docker", "pull", "hashicorp/terraform:0.11.9"]
