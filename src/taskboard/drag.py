"""Turn drop events into concrete task moves.

The sensor layer (pointer or keyboard) only reports which task was dragged
and which element it landed on. A drop target is either a column id
(append to that column) or a task id (take that task's place, pushing it
down). Anything else cancels the drag.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from taskboard.models import Board
from taskboard.store import BoardStore

logger = logging.getLogger(__name__)

DIRECTIONS = ("up", "down", "left", "right")


@dataclass(frozen=True)
class DropEvent:
    """What the drag sensor reports when a drag ends."""

    dragged_id: str
    drop_target_id: str | None = None


@dataclass(frozen=True)
class MoveInstruction:
    """Arguments for BoardStore.move."""

    task_id: str
    from_column: str
    to_column: str
    target_index: int


def resolve_drop(board: Board, event: DropEvent) -> MoveInstruction | None:
    """Work out where a dropped task should go.

    Returns None when the drag should be treated as cancelled or would
    leave the task where it already is.
    """
    if event.drop_target_id is None:
        return None

    source = board.column_of(event.dragged_id)
    if source is None:
        logger.debug("drop %s: task is in no column", event.dragged_id)
        return None
    source_index = source.task_ids.index(event.dragged_id)

    target_column = board.column(event.drop_target_id)
    target_task = board.task(event.drop_target_id)
    if target_column is not None:
        target_index = len(target_column.task_ids)
    elif target_task is not None:
        target_column = board.column(target_task.status)
        if target_column is None or target_task.id not in target_column.task_ids:
            return None
        target_index = target_column.task_ids.index(target_task.id)
    else:
        logger.debug("drop %s: unrecognised target %s", event.dragged_id, event.drop_target_id)
        return None

    # Within a column an index past the end lands on the last slot
    if target_column.id == source.id and min(target_index, len(source.task_ids) - 1) == source_index:
        return None

    return MoveInstruction(
        task_id=event.dragged_id,
        from_column=source.id,
        to_column=target_column.id,
        target_index=target_index,
    )


def apply_drop(store: BoardStore, event: DropEvent) -> MoveInstruction | None:
    """Resolve a drop against the store's board and perform the move."""
    instruction = resolve_drop(store.board, event)
    if instruction is not None:
        store.move(
            instruction.task_id,
            instruction.from_column,
            instruction.to_column,
            instruction.target_index,
        )
    return instruction


def step_instruction(board: Board, task_id: str, direction: str) -> MoveInstruction | None:
    """Move instruction for a one-step keyboard move.

    up/down swap with the neighbouring task; left/right move to the
    neighbouring column at the same index, or its end if shorter.
    Returns None at the board edges.
    """
    if direction not in DIRECTIONS:
        raise ValueError(f"unknown direction {direction!r}")

    source = board.column_of(task_id)
    if source is None:
        return None
    index = source.task_ids.index(task_id)

    if direction in ("up", "down"):
        new_index = index - 1 if direction == "up" else index + 1
        if not 0 <= new_index < len(source.task_ids):
            return None
        return MoveInstruction(task_id, source.id, source.id, new_index)

    positions = [col.id for col in board.columns]
    col_index = positions.index(source.id) + (-1 if direction == "left" else 1)
    if not 0 <= col_index < len(board.columns):
        return None
    dest = board.columns[col_index]
    return MoveInstruction(task_id, source.id, dest.id, min(index, len(dest.task_ids)))
