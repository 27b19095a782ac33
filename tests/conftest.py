"""Shared fixtures and board builders."""

from datetime import datetime, timezone

import pytest
from git import Repo

from taskboard.gitstore import GitDurableStore
from taskboard.models import Board, Column, Task


def _make_task(task_id, status, title=None, **fields):
    """Helper to build a task with a fixed creation time."""
    fields.setdefault("created_at", datetime(2024, 1, 10, tzinfo=timezone.utc))
    return Task(id=task_id, title=title or task_id.title(), status=status, **fields)


def _make_board(**columns):
    """Helper to build a consistent board from column_id=[task ids]."""
    cols = []
    tasks = {}
    for column_id, task_ids in columns.items():
        cols.append(Column(id=column_id, title=column_id.title(), task_ids=tuple(task_ids)))
        for task_id in task_ids:
            tasks[task_id] = _make_task(task_id, column_id)
    return Board(columns=cols, tasks=tasks)


def _ids(board, column_id):
    return list(board.column(column_id).task_ids)


@pytest.fixture(autouse=True)
def git_identity(monkeypatch):
    """Commits made with git plumbing need an identity."""
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")


@pytest.fixture
def empty_repo(tmp_path):
    """Create an empty git repo."""
    repo = Repo.init(tmp_path)
    (tmp_path / ".gitkeep").write_text("")
    repo.index.add([".gitkeep"])
    repo.index.commit("Initial commit")
    return tmp_path


@pytest.fixture
def git_store(empty_repo):
    """A GitDurableStore on a fresh, empty taskboard branch."""
    store = GitDurableStore(empty_repo)
    store.create_branch()
    return store
