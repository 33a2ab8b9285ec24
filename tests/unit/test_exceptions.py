"""Tests for the tfmk exception hierarchy."""

import pytest

from tfmk.exceptions import (
    CommandValidationError,
    ConfigurationError,
    DocsMarkerError,
    MissingArgumentError,
    ProjectFileError,
    StepFailedError,
    TaskError,
    TaskNotFoundError,
    TfmkError,
    VersionFileError,
)


class TestHierarchy:
    """Tests for inheritance and formatting."""

    @pytest.mark.parametrize(
        "error",
        [
            ConfigurationError("bad"),
            TaskNotFoundError("x"),
            MissingArgumentError("bump-version", "VERSION", "tfmk bump-version VERSION=x.y.z"),
            StepFailedError("lint", 1, 2, "tflint", 1),
            CommandValidationError("nope"),
            VersionFileError("missing"),
            DocsMarkerError("markers"),
        ],
    )
    def test_all_are_tfmk_errors(self, error: TfmkError) -> None:
        assert isinstance(error, TfmkError)

    def test_str_with_details(self) -> None:
        assert str(TfmkError("boom", {"k": 1})) == "boom: {'k': 1}"
        assert str(TfmkError("boom")) == "boom"

    def test_step_failed_fields(self) -> None:
        error = StepFailedError("lint", 2, 5, "shellcheck", 1)
        assert isinstance(error, TaskError)
        assert error.message == "Task 'lint' failed at step 2/5 (shellcheck)"
        assert error.details == {"exit_code": 1}

    def test_project_file_errors(self) -> None:
        error = VersionFileError("missing", path="VERSION")
        assert isinstance(error, ProjectFileError)
        assert error.path == "VERSION"
