from __future__ import annotations

import datetime
from pathlib import Path


def modification_date(path: Path) -> datetime.date:
    """Local calendar date of the last modification of `path`"""
    return datetime.date.fromtimestamp(path.stat().st_mtime)


def is_eligible(path: Path, run_date: datetime.date) -> bool:
    """Is `path` a regular file that was last modified on `run_date`?

    Only the calendar date is compared. A log written shortly after midnight
    is not eligible for a run that started shortly before.
    """
    if not path.is_file():
        return False
    return modification_date(path) == run_date
