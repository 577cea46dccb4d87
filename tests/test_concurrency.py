"""Tests for the optimistic retry loop under concurrent writers."""

import logging
import threading

import pytest

from stashed import (
    NOT_FOUND,
    ConcurrentModificationError,
    MemoryBackend,
    Store,
    connect,
)


class InterleavingBackend(MemoryBackend):
    """MemoryBackend that runs queued callbacks just before a swap.

    Lets a test slip a competing write in between a controller's read and
    its conditional write.
    """

    def __init__(self):
        super().__init__()
        self.interleave = []
        self.swaps = 0

    def compare_and_swap(self, record, expected_version):
        self.swaps += 1
        if self.interleave:
            self.interleave.pop(0)()
        return super().compare_and_swap(record, expected_version)


class AlwaysConflictBackend(MemoryBackend):
    """MemoryBackend whose conditional writes always lose."""

    def __init__(self):
        super().__init__()
        self.swaps = 0

    def compare_and_swap(self, record, expected_version):
        self.swaps += 1
        return False


def _store(backend, max_retries=8):
    backend.connect()
    store = Store(backend, max_retries=max_retries)
    store.stash("/records/*", "doc")
    store.create("/records/1")
    return store


class TestInterleavedWriters:
    """Deterministic interleavings of two writers on one record."""

    @pytest.fixture
    def backend(self):
        return InterleavingBackend()

    @pytest.fixture
    def store(self, backend):
        store = _store(backend)
        yield store
        store.close()

    def test_different_paths_no_lost_update(self, backend, store):
        """Both writes land; the loser retries once."""
        a = store.stash_for("/records/1", "doc")
        b = store.stash_for("/records/1", "doc")
        backend.interleave.append(lambda: b.set("y", 2))

        assert a.set("x", 1) == 1

        assert a.document() == {"x": 1, "y": 2}
        assert backend.swaps == 3  # a (lost), b, a (retry)
        assert store.read("/records/1").version == 3

    def test_same_counter_no_lost_increment(self, backend, store):
        """Concurrent increments of one counter both count."""
        a = store.stash_for("/records/1", "doc")
        b = store.stash_for("/records/1", "doc")
        a.set("count", 7)
        backend.interleave.append(lambda: b.increment("count", 1))

        assert a.increment("count", 3) == 11
        assert a.get("count") == 11

    def test_transform_rerun_on_fresh_value(self, backend, store):
        """modify() re-applies transform to the re-read value."""
        a = store.stash_for("/records/1", "doc")
        b = store.stash_for("/records/1", "doc")
        a.set("log", [])
        seen = []

        def append_a(entries):
            seen.append(list(entries))
            return entries + ["a"]

        backend.interleave.append(lambda: b.modify("log", lambda entries: entries + ["b"]))

        assert a.modify("log", append_a) == ["b", "a"]
        assert seen == [[], ["b"]]

    def test_delete_retries(self, backend, store):
        """A delete that loses the race is retried against new state."""
        a = store.stash_for("/records/1", "doc")
        b = store.stash_for("/records/1", "doc")
        a.set("gone", 1)
        backend.interleave.append(lambda: b.set("kept", 2))

        assert a.delete("gone") == 1
        assert a.document() == {"kept": 2}

    def test_delete_after_concurrent_delete(self, backend, store):
        """If the other writer removed the value first, delete finds nothing."""
        a = store.stash_for("/records/1", "doc")
        b = store.stash_for("/records/1", "doc")
        a.set("gone", 1)
        backend.interleave.append(lambda: b.delete("gone"))

        assert a.delete("gone") is NOT_FOUND
        assert a.document() == {}


class TestRetryBudget:
    """Tests for giving up after repeated conflicts."""

    def test_exhausted_raises(self):
        """Persistent conflicts end in ConcurrentModificationError."""
        backend = AlwaysConflictBackend()
        store = _store(backend, max_retries=5)
        doc = store.stash_for("/records/1", "doc")

        with pytest.raises(ConcurrentModificationError) as exc_info:
            doc.set("x", 1)

        assert exc_info.value.attempts == 5
        assert exc_info.value.record_path == "/records/1"
        assert backend.swaps == 5

    def test_exhausted_leaves_record_unchanged(self):
        """A failed write leaves the record exactly as it was."""
        backend = AlwaysConflictBackend()
        store = _store(backend, max_retries=3)
        doc = store.stash_for("/records/1", "doc")

        with pytest.raises(ConcurrentModificationError):
            doc.set("x", 1)

        record = store.read("/records/1")
        assert record.data == {"doc": {}}
        assert record.version == 1

    def test_exhausted_logs_warning(self, caplog):
        """Giving up is logged as a warning, each conflict at debug."""
        backend = AlwaysConflictBackend()
        store = _store(backend, max_retries=2)
        doc = store.stash_for("/records/1", "doc")

        with caplog.at_level(logging.DEBUG, logger="stashed.stash.controller"):
            with pytest.raises(ConcurrentModificationError):
                doc.set("x", 1)

        levels = [r.levelno for r in caplog.records if r.name == "stashed.stash.controller"]
        assert levels == [logging.DEBUG, logging.DEBUG, logging.WARNING]

    def test_no_retry_on_other_errors(self):
        """Errors from the operation itself are not retried."""
        backend = InterleavingBackend()
        store = _store(backend)
        doc = store.stash_for("/records/1", "doc")
        calls = []

        def fail(value):
            calls.append(value)
            raise RuntimeError("boom")

        doc.set("x", 1)
        with pytest.raises(RuntimeError):
            doc.modify("x", fail)

        assert calls == [1]


class TestThreadedWriters:
    """Real threads hammering one record."""

    def test_parallel_sets_all_land(self):
        """Every thread's keys end up in the document."""
        # Each failed attempt implies another writer committed, so 200
        # writes can never need more than 200 retries
        store = connect("memory://?max_retries=1000")
        store.stash("/records/*", "doc")
        store.create("/records/1")
        errors = []

        def worker(n):
            doc = store.stash_for("/records/1", "doc")
            try:
                for i in range(25):
                    doc.set(f"thread{n}/key{i}", i)
            except Exception as e:  # surfaced below
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        final = store.stash_for("/records/1", "doc").document()
        assert len(final) == 8
        assert all(len(final[f"thread{n}"]) == 25 for n in range(8))
        assert store.read("/records/1").version == 1 + 200

    def test_parallel_increments_all_count(self):
        """No increment is lost."""
        store = connect("memory://?max_retries=1000")
        store.stash("/records/*", "doc", initial={"count": 0})
        store.create("/records/1")
        errors = []

        def worker():
            doc = store.stash_for("/records/1", "doc")
            try:
                for _ in range(50):
                    doc.increment("count")
            except Exception as e:  # surfaced below
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert store.stash_for("/records/1", "doc").get("count") == 200
