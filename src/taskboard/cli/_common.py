"""Shared helpers for CLI command handlers."""

import asyncio
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

from taskboard.git import is_git_repo, read_config
from taskboard.gitstore import GitDurableStore
from taskboard.models import Board, Task
from taskboard.store import BoardStore
from taskboard.sync import PersistenceError, SyncAdapter


def open_durable(repo: str, json_mode: bool) -> GitDurableStore:
    """Git store for the repo's configured branch. Exit 1 if not a repo."""
    repo_path = Path(repo).resolve()
    if not is_git_repo(repo_path):
        error(f"Not a git repository: {repo_path}", json_mode)
    config = read_config(repo_path)
    return GitDurableStore(repo_path, branch=config["branch"])


def load_board_or_die(repo: str, json_mode: bool) -> Board:
    """Load the board from the repo. Exit 1 with message if not found."""
    durable = open_durable(repo, json_mode)
    try:
        return BoardStore(durable.load()).board
    except Exception as e:
        error(str(e), json_mode)


def mutate(repo: str, json_mode: bool, operation: Callable[[BoardStore], Any]) -> tuple[Board, Any]:
    """Load the board, apply operation to the store and persist the result.

    Returns (board_after, operation_result). Exit 1 if persisting fails.
    """
    durable = open_durable(repo, json_mode)

    async def run():
        store = BoardStore()
        adapter = SyncAdapter(store, durable)
        await adapter.pull()
        adapter.attach()
        result = operation(store)
        await adapter.flush()
        return store.board, result

    try:
        return asyncio.run(run())
    except PersistenceError as e:
        error(str(e), json_mode)


def find_task(board: Board, task_id: str, json_mode: bool) -> Task:
    """Lookup task by ID. Exit 1 if not found."""
    task = board.task(task_id)
    if task is not None:
        return task
    error(f"Task '{task_id}' not found.", json_mode)


def check_column(board: Board, column_id: str, json_mode: bool) -> None:
    """Exit 1 listing available columns if column_id is unknown."""
    if board.column(column_id) is not None:
        return
    available = [f"  {c.id}  {c.title}" for c in board.columns]
    msg = f"Column '{column_id}' not found. Available:\n" + "\n".join(available)
    error(msg, json_mode)


def parse_due(value: str | None, json_mode: bool) -> datetime | None:
    """Parse a YYYY-MM-DD (or full ISO) date argument. Exit 1 if invalid."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        error(f"Invalid date: {value}", json_mode)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def output_json(data: dict | list) -> None:
    """Write JSON to stdout."""
    print(json.dumps(data, indent=2))


def output_result(data: dict, text: str, json_mode: bool) -> None:
    """Output mutation result as JSON or plain text."""
    if json_mode:
        output_json(data)
    else:
        print(text)


def error(message: str, json_mode: bool) -> None:
    """Print error to stderr and exit 1."""
    if json_mode:
        print(json.dumps({"error": message}), file=sys.stderr)
    else:
        print(f"error: {message}", file=sys.stderr)
    sys.exit(1)
