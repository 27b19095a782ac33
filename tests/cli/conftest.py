"""Shared fixtures for CLI tests."""

from dataclasses import replace

import pytest

from taskboard.models import default_columns

from tests.conftest import _make_task


@pytest.fixture
def initialized_repo(git_store):
    """Create a repo with an initialized board (default columns, 2 tasks in To Do)."""
    columns = default_columns()
    git_store.initialize(columns)
    git_store.write_task(_make_task("task-1", "todo", title="First task", description="Description one."))
    git_store.write_task(_make_task("task-2", "todo", title="Second task", priority="high"))
    git_store.write_column(replace(columns[0], task_ids=("task-1", "task-2")))
    return git_store.repo_path
