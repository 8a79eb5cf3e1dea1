"""Snapshot-backed fixture cache for tests against a local development node."""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, TypeVar

from .context import ExecutionContext
from .exceptions import AnonymousFixtureError, RpcError, SnapshotRestoreFailedError
from .rpc import JsonRpcClient

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Checkpoint:
    """Capture and restore full node state (Hardhat / Anvil evm_snapshot)."""

    def __init__(self, rpc: JsonRpcClient):
        self.rpc = rpc

    @classmethod
    def from_context(cls, ctx: ExecutionContext) -> "Checkpoint":
        return cls(ctx.rpc)

    def capture(self) -> str:
        """Take a snapshot and return its handle."""
        return self.rpc.call("evm_snapshot")

    def restore(self, handle: str) -> None:
        """
        Revert the node to a snapshot.

        The node consumes the handle: capture again to be able to return here.

        Raises:
            SnapshotRestoreFailedError: If the node rejects or does not know the handle
        """
        try:
            reverted = self.rpc.call("evm_revert", [handle])
        except RpcError as e:
            raise SnapshotRestoreFailedError(
                f"Node rejected revert to snapshot {handle}: {e}", handle=handle
            ) from e
        if reverted is not True:
            raise SnapshotRestoreFailedError(
                f"Node could not revert to snapshot {handle}", handle=handle
            )


@dataclass(eq=False)
class FixtureCacheEntry:
    """A fixture's result and the snapshot taken right after it ran."""

    key: Callable[[], Any]
    snapshot_handle: str
    result: Any


class FixtureCache:
    """
    Run each fixture once per process and rewind the node on every later use.

    Entries are kept in capture order. Reverting to an entry's snapshot also
    discards every snapshot taken after it, so the entries that follow are
    dropped and will run their setup again next time.
    """

    def __init__(self, checkpoint: Checkpoint):
        self.checkpoint = checkpoint
        self._entries: List[FixtureCacheEntry] = []
        self._in_flight: Dict[Callable[[], Any], threading.Lock] = {}
        self._guard = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def load(self, setup: Callable[[], T]) -> T:
        """
        Get the result of a fixture, restoring node state to right after it ran.

        Args:
            setup: Named zero-argument function that deploys and returns what tests need

        Returns:
            The result setup returned on its first run

        Raises:
            AnonymousFixtureError: If setup is a lambda
        """
        if getattr(setup, "__name__", None) == "<lambda>":
            raise AnonymousFixtureError(
                "Fixtures are cached by function identity; pass a named function, not a lambda"
            )

        with self._lock_for(setup):
            entry = self._find(setup)
            if entry is not None:
                try:
                    self._restore(entry)
                    return entry.result
                except SnapshotRestoreFailedError as e:
                    logger.warning(
                        "Fixture %s: %s; running setup again", _fixture_name(setup), e
                    )
                    self._drop_entry(setup)

            logger.debug("Fixture %s: running setup", _fixture_name(setup))
            result = setup()
            handle = self.checkpoint.capture()
            with self._guard:
                self._entries.append(FixtureCacheEntry(setup, handle, result))
            return result

    def invalidate(self, setup: Callable[[], Any]) -> None:
        """Forget a fixture so its next load runs setup again."""
        self._drop_entry(setup)
        with self._guard:
            self._in_flight.pop(setup, None)

    def clear(self) -> None:
        """Forget every fixture."""
        with self._guard:
            self._entries.clear()
            self._in_flight.clear()

    def _drop_entry(self, setup: Callable[[], Any]) -> None:
        with self._guard:
            self._entries = [e for e in self._entries if e.key != setup]

    def _restore(self, entry: FixtureCacheEntry) -> None:
        self.checkpoint.restore(entry.snapshot_handle)
        handle = self.checkpoint.capture()
        with self._guard:
            position = self._entries.index(entry)
            dropped = self._entries[position + 1:]
            del self._entries[position + 1:]
            entry.snapshot_handle = handle
        for later in dropped:
            logger.debug(
                "Fixture %s: snapshot discarded by revert to %s",
                _fixture_name(later.key),
                _fixture_name(entry.key),
            )

    def _find(self, setup: Callable[[], Any]) -> Optional[FixtureCacheEntry]:
        with self._guard:
            for entry in self._entries:
                if entry.key == setup:
                    return entry
        return None

    def _lock_for(self, setup: Callable[[], Any]) -> threading.Lock:
        with self._guard:
            return self._in_flight.setdefault(setup, threading.Lock())


def _fixture_name(setup: Callable[[], Any]) -> str:
    return getattr(setup, "__qualname__", repr(setup))
