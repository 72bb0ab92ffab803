from __future__ import annotations

__version__ = "0.3.0"

from pathlib import Path

from buildkeeper.utils.log import get_logger

PACKAGE_DIR = Path(__file__).resolve().parent
assert PACKAGE_DIR.is_dir()
REPO_ROOT = PACKAGE_DIR.parent
assert REPO_ROOT.is_dir()
CONFIG_DIR = PACKAGE_DIR.parent / "config"


def get_version_info() -> str:
    return f"This is buildkeeper version {__version__}."


get_logger("buildkeeper", emoji="🗄️").debug(get_version_info())


__all__ = [
    "PACKAGE_DIR",
    "CONFIG_DIR",
    "get_version_info",
    "__version__",
]
