from __future__ import annotations

import tempfile
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from buildkeeper.types import StorageTier


class UploadLogsConfig(BaseSettings, cli_implicit_flags=False):
    """Upload today's build logs to object storage."""

    jobs_dir: Path = Field(description="Directory with one subdirectory per job, e.g., $JENKINS_HOME/jobs.")
    bucket: str = Field(description="Name of the destination bucket (without s3://).")
    prefix: str = ""
    """Prepended to every object key, e.g., `jenkins/`."""
    storage_tier: StorageTier = StorageTier.INFREQUENT_ACCESS
    compress: bool = True
    """Gzip logs before uploading them. Keys get a `.gz` suffix."""

    builds_subdir: str = "builds"
    log_filename: str = "log"
    tmp_dir: Path = Field(default_factory=lambda: Path(tempfile.gettempdir()) / "buildkeeper")
    """Where compressed logs are written before they are uploaded."""
    aws_executable: str = "aws"

    skip_existing: bool = False
    """Do not upload logs whose key already exists in the bucket.
    By default, running twice on the same day uploads a log again if it is still present locally.
    """
    fail_on_error: bool = False
    """Exit with a non-zero status if any upload failed."""

    log_file: Path | None = None
    """Also write the transcript of this run to this file."""
    env_var_path: Path | None = None
    """Path to a .env file to load environment variables from."""

    # pydantic config
    model_config = SettingsConfigDict(extra="forbid", env_prefix="BUILDKEEPER_", use_attribute_docstrings=True)

    @field_validator("bucket")
    @classmethod
    def _strip_scheme(cls, v: str) -> str:
        v = v.removeprefix("s3://").strip("/")
        if not v:
            msg = "bucket must not be empty"
            raise ValueError(msg)
        if "/" in v:
            msg = f"bucket must be a bare bucket name, use `prefix` for key prefixes (got {v!r})"
            raise ValueError(msg)
        return v
