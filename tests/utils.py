from __future__ import annotations

import datetime
import os
import time
from pathlib import Path

from buildkeeper.exceptions import MissingCapabilityError
from buildkeeper.types import TransferResult


def write_log(path: Path, content: str = "", *, day: datetime.date | None = None) -> Path:
    """Write a build log and set its modification time to noon of `day`."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content or f"log of {path.parent.name}\n")
    if day is not None:
        ts = time.mktime(datetime.datetime.combine(day, datetime.time(12, 0)).timetuple())
        os.utime(path, (ts, ts))
    return path


class FakeStore:
    """In-memory object store. Keys listed in `failing` are rejected."""

    def __init__(self, *, failing: set[str] | None = None, existing: set[str] | None = None, available: bool = True):
        self.failing = failing or set()
        self.existing = existing or set()
        self.available = available
        self.objects: dict[str, bytes] = {}
        self.copied: list[tuple[Path, str]] = []

    def check_available(self) -> None:
        if not self.available:
            raise MissingCapabilityError("aws", "not found on PATH")

    def destination(self, key: str) -> str:
        return f"s3://test-bucket/{key}"

    def copy(self, source: Path, key: str) -> TransferResult:
        self.copied.append((source, key))
        if key in self.failing:
            return TransferResult(success=False, destination=self.destination(key), reason="Access Denied")
        self.objects[key] = source.read_bytes()
        return TransferResult(success=True, destination=self.destination(key))

    def exists(self, key: str) -> bool:
        return key in self.existing or key in self.objects


FAKE_AWS_SCRIPT = """#!/bin/sh
echo "$@" >> "$(dirname "$0")/calls.txt"
if [ "$1" = "--version" ]; then
    echo "aws-cli/2.0.0 fake"
    exit 0
fi
if [ "$1" = "s3api" ]; then
    [ -n "$FAKE_AWS_EXISTS" ] && exit 0
    echo "An error occurred (404) when calling the HeadObject operation: Not Found" >&2
    exit 254
fi
if [ -n "$FAKE_AWS_FAIL" ]; then
    echo "upload failed: log to s3://bucket/key" >&2
    echo "An error occurred (AccessDenied) when calling the PutObject operation: Access Denied" >&2
    exit 1
fi
exit 0
"""
"""Stands in for the `aws` CLI. Records its arguments in `calls.txt` next to itself."""


def aws_calls(fake_aws: Path) -> list[str]:
    calls = fake_aws.parent / "calls.txt"
    if not calls.exists():
        return []
    return calls.read_text().splitlines()
