from __future__ import annotations

import logging
from pathlib import Path

from buildkeeper.types import LogArtifact, UploadOutcome
from buildkeeper.uploader.hooks import TranscriptHook
from buildkeeper.utils.log import get_logger, log_to_file


def _outcome(build: int, status: str, reason: str | None = None) -> UploadOutcome:
    artifact = LogArtifact(job_name="build-A", build_number=build, path=Path(f"/jobs/build-A/builds/{build}/log"))
    key = artifact.remote_key(compressed=True)
    return UploadOutcome(
        artifact=artifact, key=key, destination=f"s3://logs/{key}", status=status, reason=reason  # type: ignore
    )


def test_file_receives_messages(tmp_path):
    logger = get_logger("bk-test-file-handler")
    path = tmp_path / "out.log"
    with log_to_file(path, prefix="bk-test", level="INFO"):
        logger.info("hello")
        logger.debug("not written")
    logger.info("after the context")
    lines = path.read_text().splitlines()
    assert len(lines) == 1
    assert lines[0].endswith("INFO - bk-test-file-handler - hello")


def test_file_receives_messages_of_loggers_created_later(tmp_path):
    path = tmp_path / "out.log"
    with log_to_file(path, prefix="bk-test-late"):
        get_logger("bk-test-late-logger").info("late")
        get_logger("other-test-logger").info("not collected")
    lines = path.read_text().splitlines()
    assert len(lines) == 1
    assert lines[0].endswith("bk-test-late-logger - late")
    assert len(get_logger("bk-test-late-logger").handlers) == 1


def test_get_logger_is_idempotent():
    assert get_logger("bk-test-same") is get_logger("bk-test-same")
    assert len(get_logger("bk-test-same").handlers) == 1


def test_get_logger_ignores_configured_root_logger():
    root = logging.getLogger()
    handler = logging.NullHandler()
    root.addHandler(handler)
    try:
        logger = get_logger("bk-test-root-configured")
    finally:
        root.removeHandler(handler)
    assert len(logger.handlers) == 1
    assert not logger.propagate
    assert logger.isEnabledFor(logging.INFO)


def test_transcript_one_line_per_outcome(tmp_path):
    path = tmp_path / "transcript.log"
    hook = TranscriptHook()
    with log_to_file(path, prefix="bk-upload", level="INFO"):
        hook.on_artifact_skipped(artifact=_outcome(3, "uploaded").artifact)
        hook.on_artifact_completed(outcome=_outcome(1, "uploaded"))
        hook.on_artifact_completed(outcome=_outcome(2, "failed", "Access Denied"))
        hook.on_artifact_completed(outcome=_outcome(4, "uploaded", "Local log not deleted: Permission denied"))
    lines = path.read_text().splitlines()
    assert len(lines) == 3
    assert "Uploaded build-A build #1 to s3://logs/build-A-1.log.gz" in lines[0]
    assert "ERROR" in lines[1]
    assert "build-A build #2" in lines[1]
    assert "Access Denied" in lines[1]
    assert "WARNING" in lines[2]
    assert "Local log not deleted" in lines[2]
