"""tfmk constants and enumerations."""

from enum import Enum


class TaskCategory(Enum):
    """Section of the help table a task is listed under."""

    SETUP = "setup"
    LINT = "lint"
    FORMAT = "format"
    DOCS = "docs"
    TERRAFORM = "terraform"
    RELEASE = "release"
    MAINTENANCE = "maintenance"


# Default paths (relative to the project directory)
CONFIG_FILE = ".tfmk.yaml"
EXAMPLES_DIR = "examples"
VERSION_FILE = "VERSION"
README_FILE = "README.md"
CONTAINER_WORKDIR = "/work"
CONTAINER_PLUGIN_CACHE = "/plugin-cache"

# Default tool versions and images
DEFAULT_TERRAFORM_VERSION = "0.11.9"
TERRAFORM_IMAGE = "hashicorp/terraform"
TFLINT_IMAGE = "wata727/tflint"
SHELLCHECK_IMAGE = "koalaman/shellcheck"
SHFMT_IMAGE = "mvdan/shfmt"
MARKDOWNLINT_IMAGE = "tmknom/markdownlint"
YAMLLINT_IMAGE = "tmknom/yamllint"
JSONLINT_IMAGE = "tmknom/jsonlint"
PRETTIER_IMAGE = "tmknom/prettier"
TERRAFORM_DOCS_IMAGE = "tmknom/terraform-docs"
TERRAFORM_LANDSCAPE_IMAGE = "tmknom/terraform-landscape"

# Environment forwarded to the Terraform container
CREDENTIAL_ENV_VARS = ("AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY", "AWS_DEFAULT_REGION")
PLUGIN_CACHE_ENV_VAR = "TF_PLUGIN_CACHE_DIR"

REQUIRED_BINARIES = ("docker", "git")

# Accepted release versions: 1.2.3, v0.4.0-rc1, 2.0.0+build.5
VERSION_PATTERN = r"^[0-9A-Za-z][0-9A-Za-z.+_-]*$"

# Markers delimiting the generated section of the README
DOCS_BEGIN_MARKER = "<!-- BEGINNING OF GENERATED TERRAFORM DOCS -->"
DOCS_END_MARKER = "<!-- END OF GENERATED TERRAFORM DOCS -->"

# Directories never descended into by discovery
CACHE_DIRS = frozenset(
    {
        ".terraform",
        ".git",
        "node_modules",
        "__pycache__",
        ".venv",
        "venv",
    }
)

# CLI exit codes
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130
