from __future__ import annotations

import gzip
import shutil
from pathlib import Path

from buildkeeper.types import LogArtifact


def compressed_path(artifact: LogArtifact, tmp_dir: Path) -> Path:
    """Temporary location of the compressed log. Unique per job and build."""
    return tmp_dir / artifact.remote_key(compressed=True)


def compress_log(artifact: LogArtifact, tmp_dir: Path) -> Path:
    """Gzip the log of `artifact` into `tmp_dir` and return the path of the archive.

    The original file is left in place. If compression fails, the partially
    written archive is removed before the exception propagates.
    """
    target = compressed_path(artifact, tmp_dir)
    tmp_dir.mkdir(parents=True, exist_ok=True)
    try:
        with artifact.path.open("rb") as src, gzip.open(target, "wb") as dst:
            shutil.copyfileobj(src, dst)
    except BaseException:
        target.unlink(missing_ok=True)
        raise
    return target
