from __future__ import annotations

import logging

from buildkeeper.types import LogArtifact, UploadOutcome
from buildkeeper.utils.log import get_logger


class UploadHook:
    """Hook structure for reporting and other addons to interface with the uploader"""

    def on_init(self, *, uploader):
        """Called when hook is added to the uploader"""

    def on_start(self):
        """Called at the beginning of `LogUploader.run`, after the precondition check"""

    def on_end(self):
        """Called at the end of `LogUploader.run`"""

    def on_artifact_start(self, *, artifact: LogArtifact):
        """Called for every eligible artifact before it is compressed or transferred"""

    def on_artifact_skipped(self, *, artifact: LogArtifact):
        """Called for every artifact that is not eligible for upload"""

    def on_artifact_completed(self, *, outcome: UploadOutcome):
        """Called once the outcome of an eligible artifact is known"""


class CombinedUploadHooks(UploadHook):
    def __init__(self):
        self._hooks = []

    def add_hook(self, hook: UploadHook) -> None:
        self._hooks.append(hook)

    @property
    def hooks(self) -> list[UploadHook]:
        return self._hooks

    def on_init(self, *, uploader):
        for hook in self._hooks:
            hook.on_init(uploader=uploader)

    def on_start(self):
        for hook in self._hooks:
            hook.on_start()

    def on_end(self):
        for hook in self._hooks:
            hook.on_end()

    def on_artifact_start(self, *, artifact: LogArtifact):
        for hook in self._hooks:
            hook.on_artifact_start(artifact=artifact)

    def on_artifact_skipped(self, *, artifact: LogArtifact):
        for hook in self._hooks:
            hook.on_artifact_skipped(artifact=artifact)

    def on_artifact_completed(self, *, outcome: UploadOutcome):
        for hook in self._hooks:
            hook.on_artifact_completed(outcome=outcome)


class TranscriptHook(UploadHook):
    """Writes exactly one line per eligible artifact, in the order they were discovered."""

    def __init__(self):
        self.logger = get_logger("bk-upload", emoji="📤")

    def on_artifact_skipped(self, *, artifact: LogArtifact):
        self.logger.log(logging.TRACE, "Not eligible: %s", artifact.path)  # type: ignore

    def on_artifact_completed(self, *, outcome: UploadOutcome):
        artifact = outcome.artifact
        if outcome.status == "uploaded" and outcome.reason:
            self.logger.warning(
                "Uploaded %s build #%d to %s (%s)",
                artifact.job_name,
                artifact.build_number,
                outcome.destination,
                outcome.reason,
            )
        elif outcome.status == "uploaded":
            self.logger.info(
                "Uploaded %s build #%d to %s", artifact.job_name, artifact.build_number, outcome.destination
            )
        elif outcome.status == "skipped_existing":
            self.logger.info(
                "Skipped %s build #%d, %s already exists",
                artifact.job_name,
                artifact.build_number,
                outcome.destination,
            )
        else:
            self.logger.error(
                "Failed to upload %s build #%d to %s: %s",
                artifact.job_name,
                artifact.build_number,
                outcome.destination,
                outcome.reason,
            )
