"""Durable store kept on a git branch, without touching the working tree.

Layout of the branch::

    columns/<column-id>.md   front-matter: position, color, max_tasks, task_ids
    tasks/<task-id>.md       front-matter: status, priority, assignee, tags, dates

Every record write is a single commit on top of the branch tip, so the
branch history doubles as an audit log and the tip sha is the revision.
"""

from __future__ import annotations

import subprocess
import threading
from datetime import date, datetime, timezone
from pathlib import Path

from git import GitCommandError, Repo
from git.objects import Blob, Tree

from taskboard.durable import DurableStore
from taskboard.git import DEFAULTS
from taskboard.models import Board, Column, Task
from taskboard.parser import parse_document, serialize_document

TASKS_DIR = "tasks"
COLUMNS_DIR = "columns"
DEFAULT_BRANCH = DEFAULTS["branch"]


# --- Record <-> document conversion ---


def _as_datetime(value) -> datetime | None:
    """Coerce a front-matter value (datetime, date or ISO string) to an aware datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    elif not isinstance(value, datetime) and isinstance(value, date):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def task_to_text(task: Task) -> str:
    """Serialize a task record to markdown with front-matter."""
    meta = {
        "status": task.status,
        "priority": task.priority,
        "assignee": task.assignee,
        "tags": list(task.tags) or None,
        "created_at": task.created_at.isoformat(),
        "due_date": task.due_date.isoformat() if task.due_date else None,
    }
    meta = {k: v for k, v in meta.items() if v is not None}
    return serialize_document(task.title, task.description or "", meta)


def task_from_text(task_id: str, text: str) -> Task:
    """Parse a task record. The file name is the id."""
    title, body, meta = parse_document(text)
    created_at = _as_datetime(meta.get("created_at")) or datetime.now(timezone.utc)
    return Task(
        id=task_id,
        title=title,
        status=str(meta.get("status") or ""),
        description=body or None,
        priority=meta.get("priority"),
        assignee=meta.get("assignee"),
        tags=tuple(str(t) for t in meta.get("tags") or ()),
        created_at=created_at,
        due_date=_as_datetime(meta.get("due_date")),
    )


def column_to_text(column: Column, position: int) -> str:
    """Serialize a column record to markdown with front-matter."""
    meta = {
        "position": position,
        "color": column.color or None,
        "max_tasks": column.max_tasks,
        "task_ids": list(column.task_ids),
    }
    meta = {k: v for k, v in meta.items() if v is not None}
    return serialize_document(column.title, "", meta)


def column_from_text(column_id: str, text: str) -> tuple[int, Column]:
    """Parse a column record into (position, column)."""
    title, _, meta = parse_document(text)
    column = Column(
        id=column_id,
        title=title or column_id,
        color=str(meta.get("color") or ""),
        task_ids=tuple(str(t) for t in meta.get("task_ids") or ()),
        max_tasks=meta.get("max_tasks"),
    )
    return int(meta.get("position", 0)), column


# --- Git plumbing ---


def _git(repo_path: Path, args: list[str]) -> str:
    """Run a git command and return stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=repo_path,
        capture_output=True,
        check=True,
    )
    return result.stdout.decode("utf-8").strip()


def _hash_object(repo_path: Path, content: str) -> str:
    """Write content to git object store and return the blob hash."""
    result = subprocess.run(
        ["git", "hash-object", "-w", "--stdin"],
        cwd=repo_path,
        input=content.encode("utf-8"),
        capture_output=True,
        check=True,
    )
    return result.stdout.decode("utf-8").strip()


def _mktree(repo_path: Path, entries: list[tuple[str, str, str, str]]) -> str:
    """Create a tree object from entries and return its hash.

    Each entry is (mode, type, sha, name).
    """
    lines = [f"{mode} {typ} {sha}\t{name}" for mode, typ, sha, name in entries]
    content = "\n".join(lines) + "\n" if lines else ""

    result = subprocess.run(
        ["git", "mktree"],
        cwd=repo_path,
        input=content.encode("utf-8"),
        capture_output=True,
        check=True,
    )
    return result.stdout.decode("utf-8").strip()


def _tree_get(tree: Tree, name: str) -> Blob | Tree | None:
    """Get an item from a tree by name, returning None if not found."""
    try:
        return tree[name]
    except KeyError:
        return None


def _entries(tree: Tree | None) -> list[tuple[str, str, str, str]]:
    """List a tree's direct children as mktree entries."""
    if tree is None:
        return []
    return [(f"{item.mode:06o}", item.type, item.hexsha, item.name) for item in tree]


def _record_name(record_id: str) -> str:
    if not record_id or "/" in record_id or record_id.startswith("."):
        raise ValueError(f"invalid record id {record_id!r}")
    return f"{record_id}.md"


def _read_records(tree: Tree | None) -> dict[str, str]:
    """Map record id to document text for every .md blob in tree."""
    records: dict[str, str] = {}
    if not isinstance(tree, Tree):
        return records
    for item in tree:
        if not isinstance(item, Blob) or not item.name.endswith(".md"):
            continue
        records[item.name[:-3]] = item.data_stream.read().decode("utf-8")
    return records


class GitDurableStore(DurableStore):
    """Task and column records on a dedicated git branch."""

    def __init__(self, repo_path: str | Path, branch: str = DEFAULT_BRANCH) -> None:
        self.repo_path = Path(repo_path)
        self.branch = branch
        self._lock = threading.Lock()

    @property
    def ref(self) -> str:
        return f"refs/heads/{self.branch}"

    def exists(self) -> bool:
        return self.revision() is not None

    def create_branch(self) -> str:
        """Create the branch as an orphan with an empty commit.

        Returns the commit hash.
        """
        repo = Repo(self.repo_path)
        empty_tree = repo.git.hash_object("-t", "tree", "/dev/null")
        commit = repo.git.commit_tree(empty_tree, m="Initialize taskboard")
        repo.git.update_ref(self.ref, commit)
        return commit

    def revision(self) -> str | None:
        try:
            return Repo(self.repo_path).git.rev_parse("--verify", "--quiet", self.ref)
        except GitCommandError:
            return None

    def _tip_tree(self) -> Tree | None:
        tip = self.revision()
        if tip is None:
            return None
        return Repo(self.repo_path).commit(tip).tree

    def load(self) -> Board:
        tree = self._tip_tree()
        if tree is None:
            raise ValueError(f"Branch '{self.branch}' not found in repository")

        columns = []
        for column_id, text in _read_records(_tree_get(tree, COLUMNS_DIR)).items():
            position, column = column_from_text(column_id, text)
            columns.append((position, column_id, column))
        columns.sort(key=lambda entry: (entry[0], entry[1]))

        tasks = {
            task_id: task_from_text(task_id, text)
            for task_id, text in _read_records(_tree_get(tree, TASKS_DIR)).items()
        }
        return Board(columns=[column for _, _, column in columns], tasks=tasks)

    def write_task(self, task: Task) -> None:
        self._write(TASKS_DIR, _record_name(task.id), task_to_text(task), f"Update task {task.id}: {task.title}")

    def delete_task(self, task_id: str) -> None:
        self._write(TASKS_DIR, _record_name(task_id), None, f"Delete task {task_id}")

    def write_column(self, column: Column, position: int | None = None) -> None:
        if position is None:
            position = self._column_position(column.id)
        text = column_to_text(column, position)
        self._write(COLUMNS_DIR, _record_name(column.id), text, f"Update column {column.id}")

    def _column_position(self, column_id: str) -> int:
        """Existing position of a column, or one past the last for new columns."""
        tree = self._tip_tree()
        records = _read_records(_tree_get(tree, COLUMNS_DIR)) if tree is not None else {}
        if column_id in records:
            return column_from_text(column_id, records[column_id])[0]
        positions = [column_from_text(cid, text)[0] for cid, text in records.items()]
        return max(positions, default=-1) + 1

    def _write(self, directory: str, name: str, content: str | None, message: str) -> None:
        """Commit one record change: content replaces the file, None deletes it."""
        with self._lock:
            tip = self.revision()
            if tip is None:
                raise ValueError(f"Branch '{self.branch}' not found in repository")
            root = Repo(self.repo_path).commit(tip).tree

            entries = [e for e in _entries(_tree_get(root, directory)) if e[3] != name]
            if content is not None:
                entries.append(("100644", "blob", _hash_object(self.repo_path, content), name))

            root_entries = [e for e in _entries(root) if e[3] != directory]
            if entries:
                root_entries.append(("040000", "tree", _mktree(self.repo_path, entries), directory))
            tree = _mktree(self.repo_path, root_entries)

            if tree == root.hexsha:
                return

            commit = _git(self.repo_path, ["commit-tree", tree, "-p", tip, "-m", message])
            _git(self.repo_path, ["update-ref", self.ref, commit, tip])
