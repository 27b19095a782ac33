"""Single-writer board state with change notification.

The store is the only place column membership and task status are
changed. Each operation builds a complete new Board and swaps it in with a
single assignment, then notifies watchers with (old, new). Invalid input
(unknown ids, tasks not where the caller says) is a logged no-op.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, Mapping

from taskboard.models import Board, Column, Task
from taskboard.ordering import reorder, transfer

logger = logging.getLogger(__name__)

Callback = Callable[[Board, Board], None]

UPDATABLE_FIELDS = frozenset({"title", "description", "status", "priority", "assignee", "tags", "due_date"})


def _set_task_ids(columns: tuple[Column, ...], changes: Mapping[str, tuple[str, ...]]) -> tuple[Column, ...]:
    """Return columns with task_ids replaced for the ids in changes."""
    return tuple(
        replace(col, task_ids=changes[col.id]) if col.id in changes and changes[col.id] != col.task_ids else col
        for col in columns
    )


def normalize(board: Board) -> Board:
    """Repair a board so every invariant holds.

    Drops ids of missing tasks and repeated ids (first occurrence wins),
    points each task's status at the column holding it, and appends tasks
    held by no column to their status column. Tasks with neither are dropped.
    """
    columns: list[Column] = []
    holder: dict[str, str] = {}
    for col in board.columns:
        if any(c.id == col.id for c in columns):
            logger.warning("dropping duplicate column %s", col.id)
            continue
        ids = []
        for task_id in col.task_ids:
            if task_id in board.tasks and task_id not in holder:
                holder[task_id] = col.id
                ids.append(task_id)
        columns.append(replace(col, task_ids=tuple(ids)) if tuple(ids) != col.task_ids else col)

    tasks: dict[str, Task] = {}
    orphans: dict[str, list[str]] = {}
    column_ids = {col.id for col in columns}
    for task_id, task in board.tasks.items():
        if task.id != task_id:
            task = replace(task, id=task_id)
        status = holder.get(task_id)
        if status is None:
            if task.status not in column_ids:
                logger.warning("dropping task %s: no column %r", task_id, task.status)
                continue
            status = task.status
            orphans.setdefault(status, []).append(task_id)
        tasks[task_id] = task if task.status == status else replace(task, status=status)

    for i, col in enumerate(columns):
        if col.id in orphans:
            columns[i] = replace(col, task_ids=col.task_ids + tuple(orphans[col.id]))
    return Board(columns=columns, tasks=tasks)


class BoardStore:
    """Owns the current Board and applies move/create/update/delete to it.

    Readers get immutable snapshots via ``board``. Watchers registered with
    ``watch()`` are called once per operation that changed anything.
    """

    def __init__(self, board: Board | None = None) -> None:
        self._board = normalize(board) if board is not None else Board()
        self._watchers: list[Callback] = []

    @property
    def board(self) -> Board:
        return self._board

    @property
    def columns(self) -> tuple[Column, ...]:
        return self._board.columns

    @property
    def tasks(self) -> Mapping[str, Task]:
        return self._board.tasks

    def watch(self, callback: Callback) -> Callable[[], None]:
        """Watch for board changes. Returns an unwatch callable."""
        self._watchers.append(callback)
        return lambda: callback in self._watchers and self._watchers.remove(callback)

    def _commit(self, board: Board) -> bool:
        old = self._board
        if board == old:
            return False
        self._board = board
        for cb in list(self._watchers):
            cb(old, board)
        return True

    def move(self, task_id: str, from_column_id: str, to_column_id: str, target_index: int) -> bool:
        """Move a task within or between columns.

        Returns True if the board changed.
        """
        board = self._board
        source = board.column(from_column_id)
        dest = board.column(to_column_id)
        if source is None or dest is None:
            logger.debug("move %s: unknown column %s or %s", task_id, from_column_id, to_column_id)
            return False
        if task_id not in source.task_ids:
            logger.debug("move %s: not in column %s", task_id, from_column_id)
            return False

        from_index = source.task_ids.index(task_id)

        if source.id == dest.id:
            ids = reorder(source.task_ids, from_index, target_index)
            return self._commit(Board(_set_task_ids(board.columns, {source.id: ids}), board.tasks))

        source_ids, dest_ids = transfer(source.task_ids, dest.task_ids, from_index, target_index)
        tasks = dict(board.tasks)
        tasks[task_id] = replace(tasks[task_id], status=dest.id)
        columns = _set_task_ids(board.columns, {source.id: source_ids, dest.id: dest_ids})
        return self._commit(Board(columns, tasks))

    def create(self, column_id: str, task: Task) -> bool:
        """Add a task to the end of a column.

        The column argument wins over task.status. Creating an id that
        already exists replaces that task and moves it to this column's end.
        """
        board = self._board
        if board.column(column_id) is None:
            logger.debug("create %s: unknown column %s", task.id, column_id)
            return False
        if task.id in board.tasks:
            logger.debug("create %s: replacing existing task", task.id)

        task = replace(task, status=column_id)
        changes = {}
        for col in board.columns:
            ids = tuple(tid for tid in col.task_ids if tid != task.id)
            if col.id == column_id:
                ids += (task.id,)
            changes[col.id] = ids
        tasks = dict(board.tasks)
        tasks[task.id] = task
        return self._commit(Board(_set_task_ids(board.columns, changes), tasks))

    def update(self, task_id: str, **fields: Any) -> bool:
        """Merge fields into a task.

        A status naming another column moves the task to that column's end.
        id and created_at cannot be changed; unknown columns and unknown
        field names are ignored.
        """
        board = self._board
        current = board.tasks.get(task_id)
        if current is None:
            logger.debug("update %s: no such task", task_id)
            return False

        ignored = set(fields) - UPDATABLE_FIELDS
        if ignored:
            logger.debug("update %s: ignoring fields %s", task_id, sorted(ignored))
        changes = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}

        status = changes.get("status", current.status)
        if status != current.status and board.column(status) is None:
            logger.debug("update %s: unknown column %s", task_id, status)
            del changes["status"]
            status = current.status

        if "tags" in changes:
            changes["tags"] = tuple(changes["tags"] or ())

        tasks = dict(board.tasks)
        tasks[task_id] = replace(current, **changes)

        columns = board.columns
        if status != current.status:
            moves = {}
            for col in board.columns:
                ids = tuple(tid for tid in col.task_ids if tid != task_id)
                if col.id == status:
                    ids += (task_id,)
                moves[col.id] = ids
            columns = _set_task_ids(columns, moves)

        return self._commit(Board(columns, tasks))

    def delete(self, task_id: str) -> bool:
        """Remove a task and every reference to it."""
        board = self._board
        if task_id not in board.tasks:
            logger.debug("delete %s: no such task", task_id)
            return False
        tasks = {tid: task for tid, task in board.tasks.items() if tid != task_id}
        changes = {col.id: tuple(tid for tid in col.task_ids if tid != task_id) for col in board.columns}
        return self._commit(Board(_set_task_ids(board.columns, changes), tasks))

    def replace(self, board: Board) -> bool:
        """Replace the whole board, e.g. from a durable store snapshot."""
        return self._commit(normalize(board))
