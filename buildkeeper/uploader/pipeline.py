from __future__ import annotations

import datetime
from pathlib import Path
from typing import Protocol

from typing_extensions import Self

from buildkeeper.types import LogArtifact, TransferResult, UploadOutcome
from buildkeeper.uploader.compress import compress_log
from buildkeeper.uploader.config import UploadLogsConfig
from buildkeeper.uploader.eligibility import is_eligible
from buildkeeper.uploader.hooks import CombinedUploadHooks, TranscriptHook, UploadHook
from buildkeeper.uploader.storage import ObjectStoreCLI
from buildkeeper.uploader.walker import iter_log_artifacts
from buildkeeper.utils.log import get_logger


class ObjectStore(Protocol):
    """What the uploader needs from an object storage backend."""

    def check_available(self) -> None: ...

    def destination(self, key: str) -> str: ...

    def copy(self, source: Path, key: str) -> TransferResult: ...

    def exists(self, key: str) -> bool: ...


class LogUploader:
    def __init__(
        self,
        jobs_dir: Path,
        store: ObjectStore,
        *,
        compress: bool = True,
        tmp_dir: Path,
        builds_subdir: str = "builds",
        log_filename: str = "log",
        skip_existing: bool = False,
        hooks: list[UploadHook] | None = None,
    ):
        """Uploads the logs of all builds that were modified on the day of the run.

        Artifacts are processed one after the other. The local log is only deleted
        after the store confirmed the upload, temporary archives are always deleted.
        """
        self.logger = get_logger("bk-upload", emoji="📤")
        self.jobs_dir = jobs_dir
        self.store = store
        self.compress = compress
        self.tmp_dir = tmp_dir
        self.builds_subdir = builds_subdir
        self.log_filename = log_filename
        self.skip_existing = skip_existing
        self._chooks = CombinedUploadHooks()
        for hook in hooks or []:
            self.add_hook(hook)

    @property
    def hooks(self) -> list[UploadHook]:
        return self._chooks.hooks

    @classmethod
    def from_config(cls, config: UploadLogsConfig) -> Self:
        store = ObjectStoreCLI(
            config.bucket,
            prefix=config.prefix,
            tier=config.storage_tier,
            executable=config.aws_executable,
        )
        return cls(
            jobs_dir=config.jobs_dir,
            store=store,
            compress=config.compress,
            tmp_dir=config.tmp_dir,
            builds_subdir=config.builds_subdir,
            log_filename=config.log_filename,
            skip_existing=config.skip_existing,
            hooks=[TranscriptHook()],
        )

    def add_hook(self, hook: UploadHook) -> None:
        hook.on_init(uploader=self)
        self._chooks.add_hook(hook)

    def iter_artifacts(self):
        return iter_log_artifacts(self.jobs_dir, builds_subdir=self.builds_subdir, log_filename=self.log_filename)

    def run(self, *, run_date: datetime.date | None = None, check_store: bool = True) -> list[UploadOutcome]:
        """Process all eligible artifacts.

        Args:
            run_date: Logs modified on this day are uploaded. Defaults to today.
            check_store: Check that the store is usable first. Only disable this if the
                caller already did.

        Returns:
            One outcome per eligible artifact, in the order they were discovered.

        Raises:
            MissingCapabilityError: Before anything is touched, if the store is unusable.
        """
        if check_store:
            self.store.check_available()
        if run_date is None:
            run_date = datetime.date.today()
        self.logger.debug("Uploading logs from %s modified on %s", self.jobs_dir, run_date.isoformat())
        self._chooks.on_start()
        outcomes = []
        for artifact in self.iter_artifacts():
            if not is_eligible(artifact.path, run_date):
                self._chooks.on_artifact_skipped(artifact=artifact)
                continue
            self._chooks.on_artifact_start(artifact=artifact)
            outcome = self.process(artifact)
            self._chooks.on_artifact_completed(outcome=outcome)
            outcomes.append(outcome)
        self._chooks.on_end()
        return outcomes

    def _transfer(self, artifact: LogArtifact, key: str) -> TransferResult:
        if not self.compress:
            return self.store.copy(artifact.path, key)
        try:
            archive = compress_log(artifact, self.tmp_dir)
        except OSError as e:
            return TransferResult(
                success=False, destination=self.store.destination(key), reason=f"Compression failed: {e}"
            )
        try:
            return self.store.copy(archive, key)
        finally:
            archive.unlink(missing_ok=True)

    def process(self, artifact: LogArtifact) -> UploadOutcome:
        """Compress (optionally), upload and clean up a single artifact."""
        key = artifact.remote_key(compressed=self.compress)
        destination = self.store.destination(key)
        if self.skip_existing and self.store.exists(key):
            return UploadOutcome(artifact=artifact, key=key, destination=destination, status="skipped_existing")
        result = self._transfer(artifact, key)
        if not result.success:
            return UploadOutcome(
                artifact=artifact, key=key, destination=result.destination, status="failed", reason=result.reason
            )
        reason = None
        try:
            artifact.path.unlink()
        except FileNotFoundError:
            self.logger.warning("%s disappeared before it could be deleted", artifact.path)
        except OSError as e:
            self.logger.warning("Uploaded %s but could not delete it: %s", artifact.path, e)
            reason = f"Local log not deleted: {e}"
        return UploadOutcome(
            artifact=artifact, key=key, destination=result.destination, status="uploaded", reason=reason
        )
