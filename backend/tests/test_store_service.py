import asyncio
import os
import re
import time
from contextlib import contextmanager

import pytest

from vidstash.services import store_service
from vidstash.services.store_service import StoreManager

MINUTE = 60


def make_file(store, name, age, now):
    path = os.path.join(store.directory, name)
    with open(path, "wb") as f:
        f.write(b"data")
    os.utime(path, (now - age, now - age))
    return path


class TestAllocate:
    def test_path_shape(self, store):
        path = store.allocate("My Song", "mp3")
        assert os.path.dirname(path) == store.directory
        assert re.fullmatch(r"My Song-[0-9a-f]{16}\.mp3", os.path.basename(path))

    def test_fresh_id_every_call(self, store):
        paths = {store.allocate("Same", "mp4") for _ in range(50)}
        assert len(paths) == 50

    def test_does_not_create_file(self, store):
        path = store.allocate("Nothing", "mp4")
        assert not os.path.exists(path)
        assert os.listdir(store.directory) == []


def test_directory_is_created(tmp_path):
    directory = tmp_path / "a" / "b"
    store = StoreManager(str(directory))
    assert directory.is_dir()
    assert store.directory == str(directory)


class TestSweep:
    def test_removes_only_expired(self, store):
        now = time.time()
        young = make_file(store, "young-1.mp4", 30 * MINUTE, now)
        old = make_file(store, "old-2.mp4", 90 * MINUTE, now)

        assert store.sweep(now=now) == 1
        assert os.path.exists(young)
        assert not os.path.exists(old)

    def test_age_at_threshold_is_kept(self, store):
        now = time.time()
        edge = make_file(store, "edge.mp3", 60 * MINUTE, now)
        assert store.sweep(now=now) == 0
        assert os.path.exists(edge)

    def test_age_is_measured_against_scan_time(self, store):
        now = time.time()
        path = make_file(store, "clip.mp4", 30 * MINUTE, now)
        assert store.sweep(now=now) == 0
        assert store.sweep(now=now + 31 * MINUTE) == 1
        assert not os.path.exists(path)

    def test_ignores_directories(self, store):
        now = time.time()
        os.mkdir(os.path.join(store.directory, "nested"))
        os.utime(os.path.join(store.directory, "nested"), (now - 10 * 3600, now - 10 * 3600))
        assert store.sweep(now=now) == 0
        assert os.path.isdir(os.path.join(store.directory, "nested"))

    def test_failures_do_not_stop_the_sweep(self, store, monkeypatch, caplog):
        now = time.time()
        paths = [make_file(store, f"old-{i}.mp4", 2 * 3600, now) for i in range(4)]
        keep = make_file(store, "young.mp4", MINUTE, now)
        stuck = paths[1]

        real_remove = os.remove

        def flaky_remove(path):
            if path == stuck:
                raise PermissionError("denied")
            real_remove(path)

        monkeypatch.setattr(store_service.os, "remove", flaky_remove)

        assert store.sweep(now=now) == 3
        assert os.path.exists(stuck)
        assert os.path.exists(keep)
        assert [p for p in paths if os.path.exists(p)] == [stuck]
        assert "Could not remove old-1.mp4" in caplog.text

    def test_stat_failure_does_not_stop_the_sweep(self, store, monkeypatch, caplog):
        now = time.time()
        paths = [make_file(store, f"old-{i}.mp4", 2 * 3600, now) for i in range(3)]
        unreadable = paths[1]
        real_scandir = os.scandir

        class UnreadableEntry:
            def __init__(self, entry):
                self.name = entry.name
                self.path = entry.path

            def is_file(self, follow_symlinks=True):
                return True

            def stat(self, follow_symlinks=True):
                raise PermissionError("denied")

        @contextmanager
        def scandir(path):
            with real_scandir(path) as it:
                yield [UnreadableEntry(e) if e.path == unreadable else e for e in it]

        monkeypatch.setattr(store_service.os, "scandir", scandir)

        assert store.sweep(now=now) == 2
        assert [p for p in paths if os.path.exists(p)] == [unreadable]
        assert "Could not remove old-1.mp4" in caplog.text

    def test_file_vanishing_mid_sweep(self, store, monkeypatch):
        now = time.time()
        make_file(store, "a.mp4", 2 * 3600, now)
        make_file(store, "b.mp4", 2 * 3600, now)

        def already_gone(path):
            raise FileNotFoundError(path)

        monkeypatch.setattr(store_service.os, "remove", already_gone)
        assert store.sweep(now=now) == 0

    def test_missing_directory(self, store):
        os.rmdir(store.directory)
        assert store.sweep() == 0


@pytest.mark.asyncio
async def test_run_periodic_sweeps_until_cancelled(store, monkeypatch):
    calls = []
    monkeypatch.setattr(store, "sweep", lambda: calls.append(1) or 0)

    task = asyncio.create_task(store.run_periodic(0.01))
    await asyncio.sleep(0.1)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert len(calls) >= 2


@pytest.mark.asyncio
async def test_run_periodic_survives_a_failing_sweep(store, monkeypatch):
    calls = []

    def broken_sweep():
        calls.append(1)
        raise RuntimeError("boom")

    monkeypatch.setattr(store, "sweep", broken_sweep)

    task = asyncio.create_task(store.run_periodic(0.01))
    await asyncio.sleep(0.1)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert len(calls) >= 2
