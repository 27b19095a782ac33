"""Data models for taskboard boards.

All records are immutable. The store swaps whole snapshots rather than
editing records in place, so a Board handed to a renderer never changes
underneath it.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from taskboard.ids import next_id

PRIORITIES = ("low", "medium", "high", "urgent")

NEAR_LIMIT_RATIO = 0.8


def _dedupe(tags: Iterable[str]) -> tuple[str, ...]:
    """Trim tags and drop blanks and repeats, keeping first-seen order."""
    seen: list[str] = []
    for raw in tags:
        tag = raw.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return tuple(seen)


@dataclass(frozen=True)
class Task:
    """A unit of work. ``status`` is the id of the column holding it."""

    id: str
    title: str
    status: str = ""
    description: str | None = None
    priority: str | None = None
    assignee: str | None = None
    tags: tuple[str, ...] = ()
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    due_date: datetime | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", _dedupe(self.tags))


@dataclass(frozen=True)
class Column:
    """A named, ordered bucket of task ids."""

    id: str
    title: str
    color: str = ""
    task_ids: tuple[str, ...] = ()
    max_tasks: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "task_ids", tuple(self.task_ids))


@dataclass(frozen=True)
class Board:
    """Snapshot of the ordered columns and the task mapping."""

    columns: tuple[Column, ...] = ()
    tasks: Mapping[str, Task] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "tasks", MappingProxyType(dict(self.tasks)))

    def column(self, column_id: str) -> Column | None:
        """Find a column by id."""
        for col in self.columns:
            if col.id == column_id:
                return col
        return None

    def column_of(self, task_id: str) -> Column | None:
        """Find the column whose task_ids contains task_id."""
        for col in self.columns:
            if task_id in col.task_ids:
                return col
        return None

    def task(self, task_id: str) -> Task | None:
        return self.tasks.get(task_id)

    def column_tasks(self, column_id: str) -> list[Task]:
        """Tasks of a column in display order."""
        col = self.column(column_id)
        if col is None:
            return []
        return [self.tasks[tid] for tid in col.task_ids if tid in self.tasks]


def check_invariants(board: Board) -> list[str]:
    """Return a description of every broken board invariant (empty if none)."""
    problems = []
    seen: dict[str, str] = {}
    column_ids = [col.id for col in board.columns]
    if len(set(column_ids)) != len(column_ids):
        problems.append("duplicate column ids")
    for col in board.columns:
        for task_id in col.task_ids:
            if task_id not in board.tasks:
                problems.append(f"column {col.id} references missing task {task_id}")
            if task_id in seen:
                problems.append(f"task {task_id} listed in {seen[task_id]} and {col.id}")
            seen[task_id] = col.id
    for task_id, task in board.tasks.items():
        if task.id != task_id:
            problems.append(f"task keyed {task_id} has id {task.id}")
        holder = seen.get(task_id)
        if holder is None:
            problems.append(f"task {task_id} is in no column")
        elif task.status != holder:
            problems.append(f"task {task_id} has status {task.status} but sits in {holder}")
    return problems


def new_task(board: Board, title: str, status: str = "", **fields: Any) -> Task:
    """Build a task with a fresh id and creation time."""
    return Task(id=next_id(board.tasks.keys()), title=title, status=status, **fields)


def add_tag(task: Task, tag: str) -> Task:
    """Return task with tag added. Blank and repeated tags are ignored."""
    return replace(task, tags=task.tags + (tag,))


def remove_tag(task: Task, tag: str) -> Task:
    return replace(task, tags=tuple(t for t in task.tags if t != tag.strip()))


def priority_rank(priority: str | None) -> int:
    """Severity rank of a priority, -1 when unset or unknown."""
    try:
        return PRIORITIES.index(priority)
    except ValueError:
        return -1


def is_overdue(task: Task, today: date | None = None) -> bool:
    """A task is overdue once its due date has passed, not counting today."""
    if task.due_date is None:
        return False
    today = today or datetime.now(timezone.utc).date()
    return task.due_date.date() < today


def format_date(value: datetime) -> str:
    """Format a date for display, e.g. "Jan 5, 2024"."""
    return f"{value:%b} {value.day}, {value.year}"


def initials(name: str) -> str:
    """Up to two upper-case initials from a name."""
    return "".join(part[0] for part in name.split() if part).upper()[:2]


def column_load(column: Column) -> str:
    """Describe how full a column is relative to its soft limit.

    Returns "full" at or over max_tasks, "near" from 80%, otherwise "ok".
    """
    if not column.max_tasks:
        return "ok"
    count = len(column.task_ids)
    if count >= column.max_tasks:
        return "full"
    if count >= column.max_tasks * NEAR_LIMIT_RATIO:
        return "near"
    return "ok"


def default_columns() -> tuple[Column, ...]:
    """The columns a fresh board starts with."""
    return (
        Column(id="todo", title="To Do", color="#6b7280", max_tasks=10),
        Column(id="in-progress", title="In Progress", color="#3b82f6", max_tasks=5),
        Column(id="review", title="Review", color="#f59e0b", max_tasks=3),
        Column(id="done", title="Done", color="#10b981"),
    )


def task_to_dict(task: Task) -> dict[str, Any]:
    """Plain dict form of a task for JSON output."""
    return {
        "id": task.id,
        "title": task.title,
        "status": task.status,
        "description": task.description,
        "priority": task.priority,
        "assignee": task.assignee,
        "tags": list(task.tags),
        "created_at": task.created_at.isoformat(),
        "due_date": task.due_date.isoformat() if task.due_date else None,
    }


def column_to_dict(column: Column) -> dict[str, Any]:
    return {
        "id": column.id,
        "title": column.title,
        "color": column.color,
        "task_ids": list(column.task_ids),
        "max_tasks": column.max_tasks,
    }
