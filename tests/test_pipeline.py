from __future__ import annotations

import gzip
from pathlib import Path

import pytest

from buildkeeper.exceptions import MissingCapabilityError
from buildkeeper.types import LogArtifact, UploadOutcome
from buildkeeper.uploader.hooks import UploadHook
from buildkeeper.uploader.pipeline import LogUploader
from tests.utils import FakeStore, write_log


class RecordingHook(UploadHook):
    def __init__(self):
        self.events = []

    def on_init(self, *, uploader):
        self.events.append("init")

    def on_start(self):
        self.events.append("start")

    def on_end(self):
        self.events.append("end")

    def on_artifact_start(self, *, artifact: LogArtifact):
        self.events.append(f"artifact_start {artifact.id}")

    def on_artifact_skipped(self, *, artifact: LogArtifact):
        self.events.append(f"skipped {artifact.id}")

    def on_artifact_completed(self, *, outcome: UploadOutcome):
        self.events.append(f"{outcome.status} {outcome.artifact.id}")


@pytest.fixture
def make_uploader(jobs_dir, tmp_archive_dir):
    def _make(store, **kwargs):
        return LogUploader(jobs_dir, store, tmp_dir=tmp_archive_dir, **kwargs)

    return _make


def test_build_a_scenario(jobs_dir, tmp_archive_dir, store, make_uploader, today, yesterday):
    log1 = write_log(jobs_dir / "build-A" / "builds" / "1" / "log", "first build\n", day=today)
    log2 = write_log(jobs_dir / "build-A" / "builds" / "2" / "log", "second build\n", day=yesterday)
    hook = RecordingHook()
    outcomes = make_uploader(store, hooks=[hook]).run(run_date=today)
    assert [o.key for o in outcomes] == ["build-A-1.log.gz"]
    assert outcomes[0].status == "uploaded"
    assert [key for _, key in store.copied] == ["build-A-1.log.gz"]
    assert gzip.decompress(store.objects["build-A-1.log.gz"]) == b"first build\n"
    assert not log1.exists()
    assert log2.read_text() == "second build\n"
    assert hook.events == [
        "init",
        "start",
        "artifact_start build-A-1",
        "uploaded build-A-1",
        "skipped build-A-2",
        "end",
    ]
    assert not tmp_archive_dir.exists() or list(tmp_archive_dir.iterdir()) == []


def test_old_logs_never_reach_transfer(jobs_dir, store, make_uploader, today, yesterday):
    for build in range(1, 4):
        write_log(jobs_dir / "job" / "builds" / str(build) / "log", day=yesterday)
    assert make_uploader(store).run(run_date=today) == []
    assert store.copied == []


def test_failed_upload_keeps_original(jobs_dir, tmp_archive_dir, make_uploader, today):
    log1 = write_log(jobs_dir / "job" / "builds" / "1" / "log", "one\n", day=today)
    log2 = write_log(jobs_dir / "job" / "builds" / "2" / "log", "two\n", day=today)
    before = log1.read_bytes()
    store = FakeStore(failing={"job-1.log.gz"})
    outcomes = make_uploader(store).run(run_date=today)
    assert [(o.key, o.status) for o in outcomes] == [("job-1.log.gz", "failed"), ("job-2.log.gz", "uploaded")]
    assert outcomes[0].reason == "Access Denied"
    assert not outcomes[0].ok
    assert log1.read_bytes() == before
    assert not log2.exists()
    assert list(tmp_archive_dir.iterdir()) == []


def test_uncompressed_upload(jobs_dir, store, make_uploader, today):
    log = write_log(jobs_dir / "job" / "builds" / "5" / "log", "plain\n", day=today)
    outcomes = make_uploader(store, compress=False).run(run_date=today)
    assert [o.key for o in outcomes] == ["job-5.log"]
    assert store.copied[0][0] == log
    assert store.objects["job-5.log"] == b"plain\n"
    assert not log.exists()


def test_second_run_is_a_noop(jobs_dir, store, make_uploader, today):
    write_log(jobs_dir / "job" / "builds" / "1" / "log", day=today)
    write_log(jobs_dir / "other" / "builds" / "9" / "log", day=today)
    uploader = make_uploader(store)
    assert len(uploader.run(run_date=today)) == 2
    assert uploader.run(run_date=today) == []
    assert len(store.copied) == 2


def test_missing_capability_touches_nothing(jobs_dir, tmp_archive_dir, make_uploader, today):
    log = write_log(jobs_dir / "job" / "builds" / "1" / "log", "keep me\n", day=today)
    store = FakeStore(available=False)
    hook = RecordingHook()
    with pytest.raises(MissingCapabilityError):
        make_uploader(store, hooks=[hook]).run(run_date=today)
    assert store.copied == []
    assert log.read_text() == "keep me\n"
    assert not tmp_archive_dir.exists()
    assert hook.events == ["init"]


def test_skip_existing(jobs_dir, make_uploader, today):
    log = write_log(jobs_dir / "job" / "builds" / "1" / "log", day=today)
    store = FakeStore(existing={"job-1.log.gz"})
    outcomes = make_uploader(store, skip_existing=True).run(run_date=today)
    assert [o.status for o in outcomes] == ["skipped_existing"]
    assert outcomes[0].ok
    assert store.copied == []
    assert log.exists()


def test_existing_objects_are_uploaded_again_by_default(jobs_dir, make_uploader, today):
    write_log(jobs_dir / "job" / "builds" / "1" / "log", day=today)
    store = FakeStore(existing={"job-1.log.gz"})
    outcomes = make_uploader(store).run(run_date=today)
    assert [o.status for o in outcomes] == ["uploaded"]


def test_unreadable_log_is_a_failed_outcome(jobs_dir, tmp_archive_dir, store, make_uploader, today, monkeypatch):
    write_log(jobs_dir / "job" / "builds" / "1" / "log", day=today)

    def broken_compress(artifact, tmp_dir):
        raise PermissionError(13, "Permission denied", str(artifact.path))

    monkeypatch.setattr("buildkeeper.uploader.pipeline.compress_log", broken_compress)
    outcomes = make_uploader(store).run(run_date=today)
    assert outcomes[0].status == "failed"
    assert "Compression failed" in outcomes[0].reason
    assert store.copied == []
    assert (jobs_dir / "job" / "builds" / "1" / "log").exists()


def test_temporary_archive_removed_when_transfer_raises(jobs_dir, tmp_archive_dir, make_uploader, today):
    write_log(jobs_dir / "job" / "builds" / "1" / "log", day=today)

    class ExplodingStore(FakeStore):
        def copy(self, source, key):
            assert source.exists()
            raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        make_uploader(ExplodingStore()).run(run_date=today)
    assert list(tmp_archive_dir.iterdir()) == []
    assert (jobs_dir / "job" / "builds" / "1" / "log").exists()


def test_undeletable_log_does_not_stop_the_run(jobs_dir, tmp_archive_dir, store, make_uploader, today, monkeypatch):
    log1 = write_log(jobs_dir / "job" / "builds" / "1" / "log", day=today)
    log2 = write_log(jobs_dir / "job" / "builds" / "2" / "log", day=today)
    unlink = Path.unlink

    def fake_unlink(self, *args, **kwargs):
        if self == log1:
            raise PermissionError(13, "Permission denied", str(self))
        return unlink(self, *args, **kwargs)

    monkeypatch.setattr(Path, "unlink", fake_unlink)
    hook = RecordingHook()
    outcomes = make_uploader(store, hooks=[hook]).run(run_date=today)
    assert [(o.key, o.status) for o in outcomes] == [("job-1.log.gz", "uploaded"), ("job-2.log.gz", "uploaded")]
    assert outcomes[0].ok
    assert "not deleted" in outcomes[0].reason
    assert outcomes[1].reason is None
    assert log1.exists()
    assert not log2.exists()
    assert hook.events[-1] == "end"
    assert list(tmp_archive_dir.iterdir()) == []


def test_store_check_can_be_left_to_the_caller(jobs_dir, make_uploader, today):
    write_log(jobs_dir / "job" / "builds" / "1" / "log", day=today)
    store = FakeStore(available=False)
    outcomes = make_uploader(store).run(run_date=today, check_store=False)
    assert [o.status for o in outcomes] == ["uploaded"]
