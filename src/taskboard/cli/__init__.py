"""CLI argument parser and dispatch for taskboard."""

import argparse

from taskboard.cli.board import board_summary, column_list
from taskboard.cli.init import init_board
from taskboard.cli.task import (
    task_add,
    task_delete,
    task_drop,
    task_get,
    task_list,
    task_move,
    task_step,
    task_update,
)
from taskboard.drag import DIRECTIONS
from taskboard.models import PRIORITIES


def _add_field_args(parser: argparse.ArgumentParser) -> None:
    """Optional task field flags shared by add and update."""
    parser.add_argument("--description", help="Task description")
    parser.add_argument("--priority", choices=PRIORITIES, help="Task priority")
    parser.add_argument("--assignee", help="Who the task is assigned to")
    parser.add_argument("--tag", action="append", help="Tag (repeatable)")
    parser.add_argument("--due", help="Due date (YYYY-MM-DD)")


def build_parser() -> argparse.ArgumentParser:
    """Build the full CLI argument parser."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--repo", default=".", help="Path to git repository (default: .)")
    common.add_argument("--json", action="store_true", help="Machine-readable JSON output")
    common.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")

    parser = argparse.ArgumentParser(
        prog="taskboard",
        description="Task board stored in git",
        parents=[common],
    )

    nouns = parser.add_subparsers(dest="noun")

    # --- init ---
    init_p = nouns.add_parser("init", help="Initialize a board", parents=[common])
    init_p.set_defaults(func=init_board)

    # --- board ---
    board_p = nouns.add_parser("board", help="Show board summary", parents=[common])
    board_p.set_defaults(func=board_summary)

    # --- column ---
    col_p = nouns.add_parser("column", help="Column operations", parents=[common])
    col_verbs = col_p.add_subparsers(dest="verb")

    col_list_p = col_verbs.add_parser("list", help="List columns", parents=[common])
    col_list_p.set_defaults(func=column_list)

    # column with no verb = list
    col_p.set_defaults(func=column_list)

    # --- task ---
    task_p = nouns.add_parser("task", help="Task operations", parents=[common])
    task_verbs = task_p.add_subparsers(dest="verb")

    task_list_p = task_verbs.add_parser("list", help="List tasks", parents=[common])
    task_list_p.add_argument("--column", dest="column", help="Filter by column ID")
    task_list_p.set_defaults(func=task_list)

    task_get_p = task_verbs.add_parser("get", help="Show a task", parents=[common])
    task_get_p.add_argument("id", help="Task ID")
    task_get_p.set_defaults(func=task_get)

    task_add_p = task_verbs.add_parser("add", help="Create a task", parents=[common])
    task_add_p.add_argument("title", help="Task title")
    task_add_p.add_argument("--column", dest="column", help="Target column ID (default: first column)")
    _add_field_args(task_add_p)
    task_add_p.set_defaults(func=task_add)

    task_update_p = task_verbs.add_parser("update", help="Change task fields", parents=[common])
    task_update_p.add_argument("id", help="Task ID")
    task_update_p.add_argument("--title", help="New title")
    task_update_p.add_argument("--status", help="Column ID to move the task to (appends)")
    _add_field_args(task_update_p)
    task_update_p.set_defaults(func=task_update)

    task_move_p = task_verbs.add_parser("move", help="Move a task", parents=[common])
    task_move_p.add_argument("id", help="Task ID")
    task_move_p.add_argument("--column", dest="column", required=True, help="Target column ID")
    task_move_p.add_argument("--position", type=int, help="Position in column (1-indexed)")
    task_move_p.set_defaults(func=task_move)

    task_drop_p = task_verbs.add_parser("drop", help="Drop a task onto a column or task", parents=[common])
    task_drop_p.add_argument("id", help="Dragged task ID")
    task_drop_p.add_argument("target", nargs="?", help="Column or task ID it lands on")
    task_drop_p.set_defaults(func=task_drop)

    task_step_p = task_verbs.add_parser("step", help="Nudge a task one place", parents=[common])
    task_step_p.add_argument("id", help="Task ID")
    task_step_p.add_argument("direction", choices=DIRECTIONS, help="Direction to move")
    task_step_p.set_defaults(func=task_step)

    task_delete_p = task_verbs.add_parser("delete", help="Delete a task", parents=[common])
    task_delete_p.add_argument("id", help="Task ID")
    task_delete_p.set_defaults(func=task_delete)

    # task with no verb = list
    task_p.set_defaults(func=task_list, column=None)

    return parser
