"""Handlers for 'taskboard task' commands."""

import sys

from taskboard.cli._common import (
    check_column,
    error,
    find_task,
    load_board_or_die,
    mutate,
    output_json,
    output_result,
    parse_due,
)
from taskboard.drag import DropEvent, apply_drop, step_instruction
from taskboard.gitstore import task_to_text
from taskboard.models import format_date, is_overdue, new_task, task_to_dict


def _task_line(task) -> str:
    """One-line text summary of a task."""
    parts = [f"  {task.id}  {task.title}"]
    if task.priority:
        parts.append(f"[{task.priority}]")
    if task.assignee:
        parts.append(f"@{task.assignee}")
    if task.due_date:
        overdue = " (overdue)" if is_overdue(task) else ""
        parts.append(f"due {format_date(task.due_date)}{overdue}")
    if task.tags:
        parts.append(" ".join(f"#{t}" for t in task.tags))
    return " ".join(parts)


def task_list(args) -> int:
    """List tasks grouped by column."""
    board = load_board_or_die(args.repo, args.json)
    if args.column:
        check_column(board, args.column, args.json)

    columns = [col for col in board.columns if not args.column or col.id == args.column]

    if args.json:
        output_json([task_to_dict(task) for col in columns for task in board.column_tasks(col.id)])
    else:
        for col in columns:
            print(f"{col.id}  {col.title}")
            for task in board.column_tasks(col.id):
                print(_task_line(task))

    return 0


def task_get(args) -> int:
    """Dump a task record."""
    board = load_board_or_die(args.repo, args.json)
    task = find_task(board, args.id, args.json)

    if args.json:
        output_json(task_to_dict(task))
    else:
        sys.stdout.write(task_to_text(task))

    return 0


def task_add(args) -> int:
    """Create a task at the end of a column (default: the first column)."""
    board = load_board_or_die(args.repo, args.json)
    if not args.title.strip():
        error("Task title must not be empty.", args.json)
    if args.column:
        check_column(board, args.column, args.json)
    elif not board.columns:
        error("Board has no columns.", args.json)
    column_id = args.column or board.columns[0].id
    due_date = parse_due(args.due, args.json)

    def operation(store):
        task = new_task(
            store.board,
            args.title.strip(),
            description=args.description,
            priority=args.priority,
            assignee=args.assignee,
            tags=tuple(args.tag or ()),
            due_date=due_date,
        )
        store.create(column_id, task)
        return task.id

    board, task_id = mutate(args.repo, args.json, operation)
    task = board.task(task_id)

    output_result(task_to_dict(task), f"Created task {task_id} in {board.column(column_id).title}", args.json)
    return 0


def task_update(args) -> int:
    """Change task fields. --status moves the task to the end of that column."""
    board = load_board_or_die(args.repo, args.json)
    find_task(board, args.id, args.json)
    if args.status:
        check_column(board, args.status, args.json)
    if args.title is not None and not args.title.strip():
        error("Task title must not be empty.", args.json)

    fields = {}
    for name in ("title", "description", "status", "priority", "assignee"):
        value = getattr(args, name)
        if value is not None:
            fields[name] = value
    if args.tag is not None:
        fields["tags"] = tuple(args.tag)
    if args.due is not None:
        fields["due_date"] = parse_due(args.due, args.json)

    board, changed = mutate(args.repo, args.json, lambda store: store.update(args.id, **fields))
    task = board.task(args.id)

    text = f"Updated task {args.id}" if changed else f"Task {args.id} unchanged"
    output_result(task_to_dict(task), text, args.json)
    return 0


def task_move(args) -> int:
    """Move a task to a column, optionally at a 1-indexed position."""
    board = load_board_or_die(args.repo, args.json)
    find_task(board, args.id, args.json)
    check_column(board, args.column, args.json)

    source = board.column_of(args.id)
    target = board.column(args.column)
    position = args.position - 1 if args.position is not None else len(target.task_ids)

    board, _ = mutate(args.repo, args.json, lambda store: store.move(args.id, source.id, target.id, position))
    column = board.column_of(args.id)

    output_result(
        {"id": args.id, "column": column.id, "position": column.task_ids.index(args.id) + 1},
        f"Moved task {args.id} to {column.title}",
        args.json,
    )
    return 0


def task_drop(args) -> int:
    """Drop a task onto a column or another task, as a drag gesture would."""
    board = load_board_or_die(args.repo, args.json)
    find_task(board, args.id, args.json)

    event = DropEvent(dragged_id=args.id, drop_target_id=args.target)
    board, instruction = mutate(args.repo, args.json, lambda store: apply_drop(store, event))

    if instruction is None:
        output_result({"id": args.id, "moved": False}, f"Task {args.id} not moved", args.json)
        return 0

    column = board.column_of(args.id)
    output_result(
        {"id": args.id, "moved": True, "column": column.id, "position": column.task_ids.index(args.id) + 1},
        f"Dropped task {args.id} into {column.title}",
        args.json,
    )
    return 0


def task_step(args) -> int:
    """Nudge a task one place up/down or one column left/right."""
    board = load_board_or_die(args.repo, args.json)
    find_task(board, args.id, args.json)

    def operation(store):
        instruction = step_instruction(store.board, args.id, args.direction)
        if instruction is None:
            return False
        return store.move(
            instruction.task_id,
            instruction.from_column,
            instruction.to_column,
            instruction.target_index,
        )

    board, moved = mutate(args.repo, args.json, operation)
    column = board.column_of(args.id)

    output_result(
        {"id": args.id, "moved": moved, "column": column.id, "position": column.task_ids.index(args.id) + 1},
        f"Task {args.id} now in {column.title} at {column.task_ids.index(args.id) + 1}",
        args.json,
    )
    return 0


def task_delete(args) -> int:
    """Delete a task."""
    board = load_board_or_die(args.repo, args.json)
    find_task(board, args.id, args.json)

    mutate(args.repo, args.json, lambda store: store.delete(args.id))

    output_result({"id": args.id, "deleted": True}, f"Deleted task {args.id}", args.json)
    return 0
