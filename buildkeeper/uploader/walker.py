from __future__ import annotations

import re
from collections.abc import Iterator
from pathlib import Path

from buildkeeper.types import LogArtifact
from buildkeeper.utils.log import get_logger

logger = get_logger("bk-walker", emoji="🚶")

BUILD_NUMBER_PATTERN = re.compile(r"[0-9]+")


def _child_dirs(path: Path) -> list[Path]:
    try:
        return sorted(p for p in path.iterdir() if p.is_dir())
    except (FileNotFoundError, NotADirectoryError):
        return []
    except OSError as e:
        logger.warning("Cannot list %s: %s", path, e)
        return []


def iter_log_artifacts(
    root: Path,
    *,
    builds_subdir: str = "builds",
    log_filename: str = "log",
) -> Iterator[LogArtifact]:
    """Walk `root/<job>/<builds_subdir>/<build>/` and yield one artifact per build.

    Everything is derived from the filesystem when the generator advances,
    so calling this again always starts from scratch.
    Directories that are missing yield nothing instead of raising.
    Entries below the builds directory that are not build numbers
    (e.g., permalinks like `lastSuccessfulBuild`) are ignored.

    Args:
        root: Directory containing one subdirectory per job
        builds_subdir: Name of the directory holding the builds of a job
        log_filename: Name of the log file inside a build directory
    """
    if not root.is_dir():
        logger.warning("Jobs directory %s does not exist", root)
        return
    for job_dir in _child_dirs(root):
        builds_dir = job_dir / builds_subdir
        build_dirs = [p for p in _child_dirs(builds_dir) if BUILD_NUMBER_PATTERN.fullmatch(p.name)]
        if not build_dirs:
            logger.debug("No builds found for job %s", job_dir.name)
            continue
        for build_dir in sorted(build_dirs, key=lambda p: int(p.name)):
            yield LogArtifact(
                job_name=job_dir.name,
                build_number=int(build_dir.name),
                path=build_dir / log_filename,
            )
