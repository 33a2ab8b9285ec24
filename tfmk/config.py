"""tfmk configuration management using Pydantic."""

import os
import re
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from tfmk.constants import (
    CONFIG_FILE,
    CONTAINER_WORKDIR,
    CREDENTIAL_ENV_VARS,
    DEFAULT_TERRAFORM_VERSION,
    DOCS_BEGIN_MARKER,
    DOCS_END_MARKER,
    EXAMPLES_DIR,
    JSONLINT_IMAGE,
    MARKDOWNLINT_IMAGE,
    PLUGIN_CACHE_ENV_VAR,
    PRETTIER_IMAGE,
    README_FILE,
    REQUIRED_BINARIES,
    SHELLCHECK_IMAGE,
    SHFMT_IMAGE,
    TERRAFORM_DOCS_IMAGE,
    TERRAFORM_IMAGE,
    TERRAFORM_LANDSCAPE_IMAGE,
    TFLINT_IMAGE,
    VERSION_FILE,
    VERSION_PATTERN,
    YAMLLINT_IMAGE,
)
from tfmk.exceptions import ConfigurationError

# Make-style variable names accepted as KEY=VALUE overrides
OVERRIDE_ALIASES: dict[str, str] = {
    "VERSION": "release_version",
    "TERRAFORM_VERSION": "terraform.version",
    "EXAMPLES_DIR": "paths.examples_dir",
    "VERSION_FILE": "paths.version_file",
    "README": "paths.readme",
}


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class TerraformConfig(_Frozen):
    """Terraform CLI settings."""

    version: str = Field(default=DEFAULT_TERRAFORM_VERSION, min_length=1)
    credential_env_vars: tuple[str, ...] = CREDENTIAL_ENV_VARS
    plugin_cache_env_var: str = PLUGIN_CACHE_ENV_VAR


class ImagesConfig(_Frozen):
    """Container image per external tool."""

    terraform: str = TERRAFORM_IMAGE
    tflint: str = TFLINT_IMAGE
    shellcheck: str = SHELLCHECK_IMAGE
    shfmt: str = SHFMT_IMAGE
    markdownlint: str = MARKDOWNLINT_IMAGE
    yamllint: str = YAMLLINT_IMAGE
    jsonlint: str = JSONLINT_IMAGE
    prettier: str = PRETTIER_IMAGE
    terraform_docs: str = TERRAFORM_DOCS_IMAGE
    terraform_landscape: str = TERRAFORM_LANDSCAPE_IMAGE


class PathsConfig(_Frozen):
    """Project-relative paths."""

    examples_dir: str = EXAMPLES_DIR
    version_file: str = VERSION_FILE
    readme: str = README_FILE
    container_workdir: str = Field(default=CONTAINER_WORKDIR, pattern="^/")


class DocsConfig(_Frozen):
    """Markers delimiting the generated README section."""

    begin_marker: str = Field(default=DOCS_BEGIN_MARKER, min_length=1)
    end_marker: str = Field(default=DOCS_END_MARKER, min_length=1)


class RequirementsConfig(_Frozen):
    """What check-requirements looks for."""

    binaries: tuple[str, ...] = REQUIRED_BINARIES
    env_vars: tuple[str, ...] = CREDENTIAL_ENV_VARS


class LoggingConfig(_Frozen):
    """Logging configuration."""

    level: str = Field(default="info", pattern="^(debug|info|warning|error)$")
    json_output: bool = False


class TfmkConfig(_Frozen):
    """Complete tfmk configuration.

    Built once at startup from ``.tfmk.yaml`` plus KEY=VALUE overrides and
    passed explicitly to every task. Instances are immutable.
    """

    project_dir: Path = Field(default_factory=Path.cwd)
    terraform: TerraformConfig = Field(default_factory=TerraformConfig)
    images: ImagesConfig = Field(default_factory=ImagesConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    docs: DocsConfig = Field(default_factory=DocsConfig)
    requirements: RequirementsConfig = Field(default_factory=RequirementsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    release_version: str | None = None

    @field_validator("project_dir")
    @classmethod
    def _normalize_project_dir(cls, value: Path) -> Path:
        return Path(os.path.normpath(value))

    @field_validator("release_version")
    @classmethod
    def _check_release_version(cls, value: str | None) -> str | None:
        # blank means "not given"; the task reports it as a missing argument
        if value is None or not value.strip():
            return None
        value = value.strip()
        if not re.match(VERSION_PATTERN, value):
            raise ValueError(f"invalid version string: {value!r}")
        return value

    @model_validator(mode="after")
    def _examples_inside_project(self) -> "TfmkConfig":
        # only the project dir is mounted into the tool containers
        if not self.examples_path.is_relative_to(self.project_dir):
            raise ValueError(
                f"paths.examples_dir must be inside {self.project_dir}, got {self.paths.examples_dir}"
            )
        return self

    @classmethod
    def load(
        cls,
        project_dir: str | Path | None = None,
        config_path: str | Path | None = None,
    ) -> "TfmkConfig":
        """Load configuration from YAML file.

        Args:
            project_dir: Project root. Defaults to the current directory
            config_path: Path to config file. Defaults to <project_dir>/.tfmk.yaml

        Returns:
            TfmkConfig instance

        Raises:
            ConfigurationError: If the file is not valid YAML or fails validation
        """
        root = Path(project_dir) if project_dir is not None else Path.cwd()
        config_path = root / CONFIG_FILE if config_path is None else Path(config_path)

        data: dict[str, Any] = {}
        if config_path.exists():
            try:
                with open(config_path) as f:
                    data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e
            if not isinstance(data, dict):
                raise ConfigurationError(f"{config_path} must contain a mapping")

        data.setdefault("project_dir", str(root))
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TfmkConfig":
        """Create configuration from dictionary.

        Raises:
            ConfigurationError: If validation fails
        """
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a JSON/YAML-safe dictionary."""
        return self.model_dump(mode="json")

    def with_overrides(self, overrides: Mapping[str, str]) -> "TfmkConfig":
        """Return a new configuration with KEY=VALUE overrides applied.

        Keys are make-style aliases (``VERSION``, ``TERRAFORM_VERSION``) or
        dotted paths into the model (``terraform.version``). List-valued
        settings take comma-separated values.

        Raises:
            ConfigurationError: On an unknown key or an invalid value
        """
        if not overrides:
            return self

        data = self.to_dict()
        for key, value in overrides.items():
            parts = OVERRIDE_ALIASES.get(key, key).split(".")
            node = data
            for part in parts[:-1]:
                if not isinstance(node.get(part), dict):
                    raise ConfigurationError(f"Unknown configuration variable: {key}", key=key)
                node = node[part]
            leaf = parts[-1]
            if leaf not in node or isinstance(node[leaf], dict):
                raise ConfigurationError(f"Unknown configuration variable: {key}", key=key)
            if isinstance(node[leaf], list):
                node[leaf] = [item.strip() for item in value.split(",") if item.strip()]
            else:
                node[leaf] = value

        return self.from_dict(data)

    def lookup(self, key: str) -> Any:
        """Resolve an alias or dotted path to its current value.

        Raises:
            ConfigurationError: If the key does not name a setting
        """
        node: Any = self
        for part in OVERRIDE_ALIASES.get(key, key).split("."):
            if not isinstance(node, BaseModel) or part not in type(node).model_fields:
                raise ConfigurationError(f"Unknown configuration variable: {key}", key=key)
            node = getattr(node, part)
        return node

    @property
    def terraform_image(self) -> str:
        """Terraform image pinned to the configured version."""
        return f"{self.images.terraform}:{self.terraform.version}"

    @property
    def examples_path(self) -> Path:
        return Path(os.path.normpath(self.project_dir / self.paths.examples_dir))

    @property
    def version_path(self) -> Path:
        return self.project_dir / self.paths.version_file

    @property
    def readme_path(self) -> Path:
        return self.project_dir / self.paths.readme


def parse_overrides(pairs: Iterable[str]) -> dict[str, str]:
    """Parse ``KEY=VALUE`` arguments into a mapping.

    Args:
        pairs: Raw command-line arguments containing ``=``

    Returns:
        Mapping of key to value, later duplicates win

    Raises:
        ConfigurationError: If an argument has an empty key
    """
    overrides: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ConfigurationError(f"Expected KEY=VALUE, got: {pair!r}")
        overrides[key] = value
    return overrides
