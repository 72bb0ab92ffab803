from __future__ import annotations

import datetime
import stat
from pathlib import Path

import pytest

from tests.utils import FAKE_AWS_SCRIPT, FakeStore


@pytest.fixture
def today() -> datetime.date:
    return datetime.date.today()


@pytest.fixture
def yesterday(today) -> datetime.date:
    return today - datetime.timedelta(days=1)


@pytest.fixture
def jobs_dir(tmp_path) -> Path:
    p = tmp_path / "jobs"
    p.mkdir()
    return p


@pytest.fixture
def tmp_archive_dir(tmp_path) -> Path:
    return tmp_path / "archives"


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def fake_aws(tmp_path) -> Path:
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    p = bin_dir / "aws"
    p.write_text(FAKE_AWS_SCRIPT)
    p.chmod(p.stat().st_mode | stat.S_IEXEC)
    return p
