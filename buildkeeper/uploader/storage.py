"""Object storage access through the `aws` command line tool."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

from buildkeeper.exceptions import MissingCapabilityError
from buildkeeper.types import StorageTier, TransferResult
from buildkeeper.utils.log import get_logger

logger = get_logger("bk-storage", emoji="🪣")


def check_object_store_cli(executable: str = "aws") -> str:
    """Make sure that the object storage CLI is installed and runs.

    Returns:
        The resolved path of the executable

    Raises:
        MissingCapabilityError: If the executable cannot be found or invoked
    """
    resolved = shutil.which(executable)
    if resolved is None:
        raise MissingCapabilityError(executable, "not found on PATH")
    try:
        output = subprocess.run([resolved, "--version"], capture_output=True, text=True, check=False)
    except OSError as e:
        raise MissingCapabilityError(executable, str(e)) from e
    if output.returncode != 0:
        raise MissingCapabilityError(executable, f"`--version` exited with status {output.returncode}")
    logger.debug("Using %s (%s)", resolved, (output.stdout or output.stderr).strip())
    return resolved


def _last_line(text: str) -> str:
    lines = [line for line in text.strip().splitlines() if line.strip()]
    return lines[-1] if lines else ""


class ObjectStoreCLI:
    def __init__(self, bucket: str, *, prefix: str = "", tier: StorageTier = StorageTier.STANDARD, executable: str = "aws"):
        """Write objects to an S3 bucket by shelling out to `aws s3`.

        Args:
            bucket: Bucket name without the `s3://` scheme
            prefix: Prepended to every key, e.g., `jenkins/`
            tier: Storage tier of every object written
            executable: Name or path of the `aws` executable
        """
        self.bucket = bucket
        self.prefix = prefix
        self.tier = tier
        self.executable = executable

    def check_available(self) -> None:
        """Raises `MissingCapabilityError` if the CLI cannot be used."""
        check_object_store_cli(self.executable)

    def destination(self, key: str) -> str:
        return f"s3://{self.bucket}/{self.prefix}{key}"

    def copy_command(self, source: Path, key: str) -> list[str]:
        return [
            self.executable,
            "s3",
            "cp",
            str(source),
            self.destination(key),
            "--storage-class",
            self.tier.storage_class,
            "--only-show-errors",
        ]

    def copy(self, source: Path, key: str) -> TransferResult:
        """Upload `source` under `key`. Failures are reported in the result, never raised."""
        destination = self.destination(key)
        cmd = self.copy_command(source, key)
        logger.debug("Running %s", " ".join(cmd))
        try:
            output = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except OSError as e:
            return TransferResult(success=False, destination=destination, reason=str(e))
        if output.returncode != 0:
            reason = _last_line(output.stderr) or f"exit status {output.returncode}"
            return TransferResult(success=False, destination=destination, reason=reason)
        return TransferResult(success=True, destination=destination)

    def exists(self, key: str) -> bool:
        """Does an object with this key already exist in the bucket?"""
        cmd = [
            self.executable,
            "s3api",
            "head-object",
            "--bucket",
            self.bucket,
            "--key",
            f"{self.prefix}{key}",
        ]
        try:
            output = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except OSError as e:
            logger.warning("Could not check whether %s exists: %s", self.destination(key), e)
            return False
        return output.returncode == 0
