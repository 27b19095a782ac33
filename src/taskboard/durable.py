"""Durable store interface and an in-memory implementation.

A durable store keeps one record per task and one per column, each
written independently with last-write-wins semantics. Methods block;
the sync adapter calls them from a worker thread.
"""

from __future__ import annotations

import threading

from taskboard.models import Board, Column, Task


class DurableStore:
    """Record-oriented persistence for a board.

    Subclasses implement every method below.
    """

    def load(self) -> Board:
        """Read every column and task record into a Board."""
        raise NotImplementedError

    def revision(self) -> str | None:
        """Opaque token that changes whenever any record changes."""
        raise NotImplementedError

    def write_task(self, task: Task) -> None:
        raise NotImplementedError

    def delete_task(self, task_id: str) -> None:
        raise NotImplementedError

    def write_column(self, column: Column, position: int | None = None) -> None:
        """Write a column record. position sets its place on the board."""
        raise NotImplementedError

    def initialize(self, columns: tuple[Column, ...]) -> None:
        """Write the starting columns of an empty store."""
        for i, column in enumerate(columns):
            self.write_column(column, position=i)


class MemoryDurableStore(DurableStore):
    """Thread-safe in-process store.

    ``fail_with`` makes every write raise the given exception, for
    exercising error paths.
    """

    def __init__(self, board: Board | None = None) -> None:
        self._lock = threading.Lock()
        self._columns: dict[str, tuple[int, Column]] = {}
        self._tasks: dict[str, Task] = {}
        self._revision = 0
        self.fail_with: Exception | None = None
        self.writes: list[tuple[str, str]] = []
        if board is not None:
            for i, column in enumerate(board.columns):
                self._columns[column.id] = (i, column)
            self._tasks.update(board.tasks)

    def _check(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with

    def load(self) -> Board:
        with self._lock:
            ordered = sorted(self._columns.values(), key=lambda entry: entry[0])
            return Board(columns=[column for _, column in ordered], tasks=dict(self._tasks))

    def revision(self) -> str | None:
        with self._lock:
            return str(self._revision)

    def write_task(self, task: Task) -> None:
        with self._lock:
            self._check()
            self._tasks[task.id] = task
            self._revision += 1
            self.writes.append(("task", task.id))

    def delete_task(self, task_id: str) -> None:
        with self._lock:
            self._check()
            self._tasks.pop(task_id, None)
            self._revision += 1
            self.writes.append(("delete", task_id))

    def write_column(self, column: Column, position: int | None = None) -> None:
        with self._lock:
            self._check()
            if position is None:
                existing = self._columns.get(column.id)
                position = existing[0] if existing else len(self._columns)
            self._columns[column.id] = (position, column)
            self._revision += 1
            self.writes.append(("column", column.id))
