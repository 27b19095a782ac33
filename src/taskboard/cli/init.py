"""Handler for 'taskboard init'."""

import asyncio
from pathlib import Path

from taskboard.cli._common import output_json
from taskboard.git import init_repo, is_git_repo, read_config
from taskboard.gitstore import GitDurableStore
from taskboard.store import BoardStore
from taskboard.sync import SyncAdapter


def init_board(args) -> int:
    """Initialize a taskboard branch with the default columns."""
    repo_path = Path(args.repo).resolve()

    if not is_git_repo(repo_path):
        init_repo(repo_path)

    durable = GitDurableStore(repo_path, branch=read_config(repo_path)["branch"])
    created = not durable.exists()
    if created:
        durable.create_branch()

    store = BoardStore()
    asyncio.run(SyncAdapter(store, durable).bootstrap())

    columns = [col.title for col in store.columns]
    if args.json:
        output_json({"repo_path": str(repo_path), "columns": columns, "created": created})
    elif created:
        print(f"Initialized taskboard at {repo_path}")
        print(f"Columns: {', '.join(columns)}")
    else:
        print(f"Board already initialized at {repo_path}")

    return 0
