"""Keep a BoardStore and a DurableStore in step.

Two one-way channels:

- push: every store change is diffed into record writes and sent to the
  durable store in the background. The in-memory board has already
  changed, and a failed write is reported, never rolled back.
- pull: a durable snapshot wholesale replaces the in-memory board. The
  last snapshot to arrive wins.

All durable I/O runs via asyncio.to_thread to stay non-blocking.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable

from taskboard.durable import DurableStore
from taskboard.models import Board, Column, Task, default_columns
from taskboard.store import BoardStore

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """A durable store read or write failed."""

    def __init__(self, message: str, original: BaseException | None = None) -> None:
        super().__init__(message)
        self.original = original


@dataclass(frozen=True)
class RecordWrite:
    """One durable write: kind is "task", "column" or "delete"."""

    kind: str
    record_id: str
    record: Task | Column | None = None
    position: int | None = None


def diff_boards(old: Board, new: Board) -> list[RecordWrite]:
    """Record writes that turn old into new.

    Tasks are written first and deleted last, so a column record never
    names a task the durable store has not seen yet.
    """
    writes = [
        RecordWrite("task", task_id, task) for task_id, task in new.tasks.items() if old.tasks.get(task_id) != task
    ]

    old_columns = {col.id: (i, col) for i, col in enumerate(old.columns)}
    for i, col in enumerate(new.columns):
        if old_columns.get(col.id) != (i, col):
            writes.append(RecordWrite("column", col.id, col, position=i))

    writes.extend(RecordWrite("delete", task_id) for task_id in old.tasks if task_id not in new.tasks)
    return writes


class SyncAdapter:
    """Pushes store mutations to a durable store and pulls snapshots back.

    Call ``attach()`` from inside a running event loop. Push failures are
    logged, appended to ``errors``, passed to ``on_error`` and raised by
    the next ``flush()``. A change made while no loop is running is not
    pushed and is reported the same way.
    """

    def __init__(
        self,
        store: BoardStore,
        durable: DurableStore,
        on_error: Callable[[PersistenceError], None] | None = None,
    ) -> None:
        self.store = store
        self.durable = durable
        self.on_error = on_error
        self.errors: list[PersistenceError] = []
        self._pending: set[asyncio.Task] = set()
        self._push_lock: asyncio.Lock | None = None
        self._unwatch: Callable[[], None] | None = None
        self._suppressing = False
        self._running = False
        self._revision: str | None = None

    # --- push ---

    def attach(self) -> None:
        """Start pushing store changes."""
        if self._unwatch is None:
            self._unwatch = self.store.watch(self._on_change)

    def detach(self) -> None:
        if self._unwatch is not None:
            self._unwatch()
            self._unwatch = None

    @contextmanager
    def suppressing(self):
        """Context manager that stops store changes being pushed."""
        self._suppressing = True
        try:
            yield
        finally:
            self._suppressing = False

    def _on_change(self, old: Board, new: Board) -> None:
        if self._suppressing:
            return
        writes = diff_boards(old, new)
        if not writes:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as exc:
            self._report(PersistenceError(f"cannot push {len(writes)} writes outside an event loop", exc))
            return
        task = loop.create_task(self._push_reported(writes))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def push(self, writes: list[RecordWrite]) -> None:
        """Apply record writes in order. Raises PersistenceError on the first failure."""
        if self._push_lock is None:
            self._push_lock = asyncio.Lock()
        async with self._push_lock:
            for write in writes:
                try:
                    await asyncio.to_thread(self._apply, write)
                except Exception as exc:
                    raise PersistenceError(f"{write.kind} {write.record_id}: {exc}", exc) from exc

    def _apply(self, write: RecordWrite) -> None:
        if write.kind == "task":
            self.durable.write_task(write.record)
        elif write.kind == "column":
            self.durable.write_column(write.record, position=write.position)
        elif write.kind == "delete":
            self.durable.delete_task(write.record_id)
        else:
            raise ValueError(f"unknown write kind {write.kind!r}")

    async def _push_reported(self, writes: list[RecordWrite]) -> None:
        try:
            await self.push(writes)
        except PersistenceError as exc:
            self._report(exc)

    def _report(self, exc: PersistenceError) -> None:
        logger.warning("push failed: %s", exc)
        self.errors.append(exc)
        if self.on_error is not None:
            self.on_error(exc)

    async def flush(self) -> None:
        """Wait for in-flight pushes. Raises the first unreported failure."""
        while self._pending:
            await asyncio.gather(*list(self._pending))
        if self.errors:
            first = self.errors[0]
            self.errors.clear()
            raise first

    # --- pull ---

    async def pull(self) -> bool:
        """Replace the in-memory board with the durable snapshot.

        Returns True if the board changed.
        """
        try:
            revision = await asyncio.to_thread(self.durable.revision)
            board = await asyncio.to_thread(self.durable.load)
        except Exception as exc:
            raise PersistenceError(f"load failed: {exc}", exc) from exc
        self._revision = revision
        with self.suppressing():
            return self.store.replace(board)

    async def bootstrap(self, columns: tuple[Column, ...] | None = None) -> None:
        """Give an empty durable store its starting columns, then pull."""
        try:
            board = await asyncio.to_thread(self.durable.load)
            if not board.columns:
                logger.info("initializing empty board")
                await asyncio.to_thread(self.durable.initialize, columns or default_columns())
        except Exception as exc:
            raise PersistenceError(f"bootstrap failed: {exc}", exc) from exc
        await self.pull()

    async def run(self, interval: float = 2.0) -> None:
        """Poll the durable store and pull whenever its revision moves.

        Runs until stop() is called.
        """
        self._running = True
        while self._running:
            try:
                revision = await asyncio.to_thread(self.durable.revision)
                if revision != self._revision:
                    await self.pull()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("pull failed")
            await asyncio.sleep(interval)

    def stop(self) -> None:
        self._running = False
