"""Unit tests for Checkpoint and FixtureCache."""

import gc
import threading
import weakref

import pytest

from erc721n_deployments.context import ExecutionContext
from erc721n_deployments.exceptions import AnonymousFixtureError, SnapshotRestoreFailedError
from erc721n_deployments.fixtures import Checkpoint, FixtureCache
from fake_node import FakeNode


class RecordingCheckpoint:
    """Checkpoint double that numbers snapshots and can be told to fail."""

    def __init__(self):
        self.captured = []
        self.restored = []
        self.fail_restore = False
        self._next = 0

    def capture(self):
        self._next += 1
        handle = f"0x{self._next:x}"
        self.captured.append(handle)
        return handle

    def restore(self, handle):
        if self.fail_restore:
            raise SnapshotRestoreFailedError("gone", handle=handle)
        self.restored.append(handle)


class TestCheckpoint:
    """Test Checkpoint against the fake node."""

    def test_capture_and_restore(self, ctx: ExecutionContext, fake_node: FakeNode):
        """Test that restore rewinds node state."""
        checkpoint = Checkpoint.from_context(ctx)
        handle = checkpoint.capture()
        fake_node.state["nonce"] = 7

        checkpoint.restore(handle)

        assert fake_node.state["nonce"] == 0

    def test_restore_consumes_handle(self, ctx: ExecutionContext, fake_node: FakeNode):
        """Test that a handle cannot be used twice."""
        checkpoint = Checkpoint.from_context(ctx)
        handle = checkpoint.capture()
        checkpoint.restore(handle)

        with pytest.raises(SnapshotRestoreFailedError) as exc_info:
            checkpoint.restore(handle)

        assert exc_info.value.handle == handle

    def test_unknown_handle_raises(self, ctx: ExecutionContext):
        """Test that an unknown handle raises SnapshotRestoreFailedError."""
        with pytest.raises(SnapshotRestoreFailedError):
            Checkpoint.from_context(ctx).restore("0x99")

    def test_node_error_raises(self, ctx: ExecutionContext, fake_node: FakeNode):
        """Test that an RPC error during revert raises SnapshotRestoreFailedError."""
        checkpoint = Checkpoint.from_context(ctx)
        handle = checkpoint.capture()
        fake_node.fail_methods.add("evm_revert")

        with pytest.raises(SnapshotRestoreFailedError, match="rejected"):
            checkpoint.restore(handle)


class TestFixtureCacheLoad:
    """Test the FixtureCache.load method."""

    def test_runs_setup_once(self):
        """Test that setup runs on the first load only."""
        cache = FixtureCache(RecordingCheckpoint())
        calls = []

        def deploy_token():
            calls.append(1)
            return {"token": "0x1"}

        first = cache.load(deploy_token)
        second = cache.load(deploy_token)

        assert calls == [1]
        assert first is second

    def test_snapshot_taken_after_setup(self):
        """Test that the snapshot is captured once setup returns."""
        checkpoint = RecordingCheckpoint()
        cache = FixtureCache(checkpoint)

        def deploy_token():
            assert checkpoint.captured == []
            return 1

        cache.load(deploy_token)

        assert checkpoint.captured == ["0x1"]

    def test_reload_restores_and_recaptures(self):
        """Test that later loads revert and take a fresh snapshot."""
        checkpoint = RecordingCheckpoint()
        cache = FixtureCache(checkpoint)

        def deploy_token():
            return 1

        cache.load(deploy_token)
        cache.load(deploy_token)
        cache.load(deploy_token)

        assert checkpoint.restored == ["0x1", "0x2"]
        assert checkpoint.captured == ["0x1", "0x2", "0x3"]

    def test_distinct_functions_cached_separately(self):
        """Test that each setup function has its own entry."""
        cache = FixtureCache(RecordingCheckpoint())

        def deploy_token():
            return "token"

        def deploy_consumer():
            return "consumer"

        assert cache.load(deploy_token) == "token"
        assert cache.load(deploy_consumer) == "consumer"
        assert len(cache) == 2

    def test_lambda_rejected(self):
        """Test that a lambda cannot be used as a fixture."""
        cache = FixtureCache(RecordingCheckpoint())

        with pytest.raises(AnonymousFixtureError):
            cache.load(lambda: 1)

    def test_bound_method_is_stable_key(self):
        """Test that the same bound method hits the cache."""

        class Fixtures:
            def __init__(self):
                self.calls = 0

            def deploy(self):
                self.calls += 1
                return self.calls

        fixtures = Fixtures()
        cache = FixtureCache(RecordingCheckpoint())

        cache.load(fixtures.deploy)
        cache.load(fixtures.deploy)

        assert fixtures.calls == 1

    def test_setup_error_not_cached(self):
        """Test that a failing setup leaves no entry behind."""
        checkpoint = RecordingCheckpoint()
        cache = FixtureCache(checkpoint)
        attempts = []

        def deploy_token():
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("boom")
            return "ok"

        with pytest.raises(RuntimeError):
            cache.load(deploy_token)

        assert cache.load(deploy_token) == "ok"
        assert len(attempts) == 2
        assert checkpoint.captured == ["0x1"]


class TestFixtureCacheRestoreFailure:
    """Test recovery when a snapshot cannot be restored."""

    def test_reruns_setup(self, caplog):
        """Test that a failed restore falls back to running setup again."""
        checkpoint = RecordingCheckpoint()
        cache = FixtureCache(checkpoint)
        calls = []

        def deploy_token():
            calls.append(1)
            return len(calls)

        cache.load(deploy_token)
        checkpoint.fail_restore = True

        result = cache.load(deploy_token)

        assert result == 2
        assert calls == [1, 1]
        assert len(cache) == 1
        assert "running setup again" in caplog.text

    def test_new_snapshot_used_after_recovery(self):
        """Test that the re-run's snapshot replaces the invalid one."""
        checkpoint = RecordingCheckpoint()
        cache = FixtureCache(checkpoint)

        def deploy_token():
            return 1

        cache.load(deploy_token)
        checkpoint.fail_restore = True
        cache.load(deploy_token)
        checkpoint.fail_restore = False
        cache.load(deploy_token)

        assert checkpoint.restored == ["0x2"]


class TestFixtureCacheOrdering:
    """Test that reverting to an earlier fixture drops later ones."""

    def test_later_fixture_dropped(self):
        """Test that restoring fixture A forgets fixture B captured after it."""
        cache = FixtureCache(RecordingCheckpoint())
        runs = {"a": 0, "b": 0}

        def fixture_a():
            runs["a"] += 1

        def fixture_b():
            runs["b"] += 1

        cache.load(fixture_a)
        cache.load(fixture_b)
        cache.load(fixture_a)
        cache.load(fixture_b)

        assert runs == {"a": 1, "b": 2}

    def test_earlier_fixture_kept(self):
        """Test that restoring fixture B keeps fixture A."""
        cache = FixtureCache(RecordingCheckpoint())
        runs = {"a": 0, "b": 0}

        def fixture_a():
            runs["a"] += 1

        def fixture_b():
            runs["b"] += 1

        cache.load(fixture_a)
        cache.load(fixture_b)
        cache.load(fixture_b)
        cache.load(fixture_a)

        assert runs == {"a": 1, "b": 1}


class TestFixtureCacheManagement:
    """Test invalidate and clear."""

    def test_invalidate(self):
        """Test that an invalidated fixture runs again."""
        cache = FixtureCache(RecordingCheckpoint())
        calls = []

        def deploy_token():
            calls.append(1)

        cache.load(deploy_token)
        cache.invalidate(deploy_token)
        cache.load(deploy_token)

        assert len(calls) == 2

    def test_clear(self):
        """Test that clear forgets everything."""
        cache = FixtureCache(RecordingCheckpoint())

        def deploy_token():
            return 1

        cache.load(deploy_token)
        cache.clear()

        assert len(cache) == 0

    def test_clear_releases_fixture_owner(self):
        """Test that clear drops every reference to a bound-method fixture's object."""
        cache = FixtureCache(RecordingCheckpoint())

        class Fixtures:
            def deploy_token(self):
                return "token"

        fixtures = Fixtures()
        cache.load(fixtures.deploy_token)
        owner = weakref.ref(fixtures)

        cache.clear()
        del fixtures
        gc.collect()

        assert owner() is None

    def test_invalidate_releases_fixture_owner(self):
        """Test that invalidate drops every reference to the fixture's object."""
        cache = FixtureCache(RecordingCheckpoint())

        class Fixtures:
            def deploy_token(self):
                return "token"

        fixtures = Fixtures()
        cache.load(fixtures.deploy_token)
        owner = weakref.ref(fixtures)

        cache.invalidate(fixtures.deploy_token)
        del fixtures
        gc.collect()

        assert owner() is None


class TestFixtureCacheConcurrency:
    """Test in-flight de-duplication."""

    def test_concurrent_loads_run_setup_once(self):
        """Test that two threads loading the same fixture run setup once."""
        cache = FixtureCache(RecordingCheckpoint())
        started = threading.Event()
        release = threading.Event()
        calls = []

        def deploy_token():
            calls.append(1)
            started.set()
            release.wait(timeout=5)
            return "token"

        results = []
        first = threading.Thread(target=lambda: results.append(cache.load(deploy_token)))
        first.start()
        started.wait(timeout=5)
        second = threading.Thread(target=lambda: results.append(cache.load(deploy_token)))
        second.start()
        release.set()
        first.join(timeout=5)
        second.join(timeout=5)

        assert calls == [1]
        assert results == ["token", "token"]
