"""Handlers for 'taskboard board' and 'taskboard column' commands."""

from taskboard.cli._common import load_board_or_die, output_json
from taskboard.models import column_load, column_to_dict


def build_column_summaries(board) -> list[dict]:
    """Build column summary dicts from board."""
    items = []
    for col in board.columns:
        items.append(
            {
                "id": col.id,
                "title": col.title,
                "tasks": len(col.task_ids),
                "max_tasks": col.max_tasks,
                "load": column_load(col),
            }
        )
    return items


def format_column_line(c: dict, indent: str = "") -> str:
    """Format a column summary dict as a text line."""
    count = f"{c['tasks']}/{c['max_tasks']}" if c["max_tasks"] else str(c["tasks"])
    noun = "task" if c["tasks"] == 1 else "tasks"
    flag = {"near": "  (near limit)", "full": "  (at limit)"}.get(c["load"], "")
    return f"{indent}{c['id']:<12} {c['title']:<16} {count} {noun}{flag}"


def board_summary(args) -> int:
    """Show board summary: columns and task counts."""
    board = load_board_or_die(args.repo, args.json)
    columns = build_column_summaries(board)

    if args.json:
        output_json({"columns": columns, "tasks": len(board.tasks)})
    else:
        noun = "task" if len(board.tasks) == 1 else "tasks"
        print(f"{len(board.tasks)} {noun}")
        for c in columns:
            print(format_column_line(c, indent="  "))

    return 0


def column_list(args) -> int:
    """List columns with colours and task ids."""
    board = load_board_or_die(args.repo, args.json)

    if args.json:
        output_json([column_to_dict(col) for col in board.columns])
    else:
        for col in board.columns:
            color = f"  {col.color}" if col.color else ""
            print(f"{col.id}  {col.title}{color}")
            for task_id in col.task_ids:
                print(f"  {task_id}")

    return 0
