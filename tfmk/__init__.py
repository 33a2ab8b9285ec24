"""tfmk - task runner for Terraform modules.

Lints, formats, documents and plans a Terraform module through
containerized tools.
"""

__version__ = "0.1.0"

from tfmk.config import TfmkConfig
from tfmk.exceptions import TfmkError

__all__ = [
    "__version__",
    "TfmkConfig",
    "TfmkError",
]
