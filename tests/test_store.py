"""Tests for the board state store."""

import random

import pytest

from taskboard.models import Board, Column, check_invariants
from taskboard.store import BoardStore, normalize

from tests.conftest import _ids, _make_board, _make_task


# --- move ---


def test_move_between_columns():
    store = BoardStore(_make_board(todo=["t1", "t2"], done=[]))
    assert store.move("t1", "todo", "done", 0)
    assert _ids(store.board, "todo") == ["t2"]
    assert _ids(store.board, "done") == ["t1"]
    assert store.tasks["t1"].status == "done"


def test_move_between_columns_at_position():
    store = BoardStore(_make_board(todo=["t1"], done=["d1", "d2"]))
    store.move("t1", "todo", "done", 1)
    assert _ids(store.board, "done") == ["d1", "t1", "d2"]


def test_move_between_columns_index_past_end_appends():
    store = BoardStore(_make_board(todo=["t1"], done=["d1"]))
    store.move("t1", "todo", "done", 42)
    assert _ids(store.board, "done") == ["d1", "t1"]


def test_move_reorder_within_column():
    store = BoardStore(_make_board(todo=["a", "b", "c"]))
    store.move("a", "todo", "todo", 2)
    assert _ids(store.board, "todo") == ["b", "c", "a"]
    assert store.tasks["a"].status == "todo"


def test_move_reorder_changes_only_one_column():
    store = BoardStore(_make_board(todo=["a", "b"], done=["c"]))
    before = store.board
    store.move("b", "todo", "todo", 0)
    assert store.board.column("done") is before.column("done")
    assert store.board.tasks == before.tasks


def test_move_to_current_position_is_unchanged():
    store = BoardStore(_make_board(todo=["a", "b", "c"]))
    before = store.board
    events = []
    store.watch(lambda old, new: events.append(1))
    assert not store.move("b", "todo", "todo", 1)
    assert store.board == before
    assert events == []


def test_move_unknown_column_is_noop():
    store = BoardStore(_make_board(todo=["a"]))
    before = store.board
    assert not store.move("a", "todo", "nowhere", 0)
    assert not store.move("a", "nowhere", "todo", 0)
    assert store.board == before


def test_move_task_not_in_from_column_is_noop():
    store = BoardStore(_make_board(todo=["a"], done=["b"]))
    before = store.board
    assert not store.move("b", "todo", "done", 0)
    assert not store.move("zzz", "todo", "done", 0)
    assert store.board == before


# --- create ---


def test_create_appends_to_column():
    store = BoardStore(_make_board(todo=["t1"]))
    store.create("todo", _make_task("t9", status="anything"))
    assert _ids(store.board, "todo") == ["t1", "t9"]
    assert store.tasks["t9"].status == "todo"


def test_create_unknown_column_is_noop():
    store = BoardStore(_make_board(todo=[]))
    assert not store.create("nowhere", _make_task("t1", "todo"))
    assert "t1" not in store.tasks


def test_create_existing_id_replaces_without_duplicating():
    store = BoardStore(_make_board(todo=["t1", "t2"], done=[]))
    store.create("done", _make_task("t1", "done", title="Replaced"))
    assert _ids(store.board, "todo") == ["t2"]
    assert _ids(store.board, "done") == ["t1"]
    assert store.tasks["t1"].title == "Replaced"
    assert check_invariants(store.board) == []


# --- update ---


def test_update_merges_fields():
    store = BoardStore(_make_board(todo=["t1"]))
    store.update("t1", title="New title", priority="high")
    task = store.tasks["t1"]
    assert task.title == "New title"
    assert task.priority == "high"
    assert task.status == "todo"


def test_update_status_moves_to_tail():
    store = BoardStore(_make_board(todo=["t1"], done=["d1"]))
    store.update("t1", status="done")
    assert _ids(store.board, "todo") == []
    assert _ids(store.board, "done") == ["d1", "t1"]
    assert store.tasks["t1"].status == "done"


def test_update_status_scenario():
    store = BoardStore(_make_board(todo=["t1"], done=[]))
    store.update("t1", status="done")
    assert _ids(store.board, "todo") == []
    assert _ids(store.board, "done") == ["t1"]


def test_update_same_status_keeps_position():
    store = BoardStore(_make_board(todo=["t1", "t2"]))
    store.update("t1", status="todo", title="Renamed")
    assert _ids(store.board, "todo") == ["t1", "t2"]


def test_update_unknown_status_is_ignored():
    store = BoardStore(_make_board(todo=["t1"]))
    store.update("t1", status="nowhere", title="Still here")
    assert store.tasks["t1"].status == "todo"
    assert store.tasks["t1"].title == "Still here"
    assert _ids(store.board, "todo") == ["t1"]


def test_update_cannot_change_id_or_created_at():
    store = BoardStore(_make_board(todo=["t1"]))
    created = store.tasks["t1"].created_at
    store.update("t1", id="other", created_at=None, title="x")
    assert store.tasks["t1"].id == "t1"
    assert store.tasks["t1"].created_at == created
    assert "other" not in store.tasks


def test_update_tags_are_deduplicated():
    store = BoardStore(_make_board(todo=["t1"]))
    store.update("t1", tags=["ui", "ui", " backend ", ""])
    assert store.tasks["t1"].tags == ("ui", "backend")


def test_update_unknown_task_is_noop():
    store = BoardStore(_make_board(todo=["t1"]))
    before = store.board
    assert not store.update("nope", title="x")
    assert store.board == before


# --- delete ---


def test_delete_removes_task_and_reference():
    store = BoardStore(_make_board(todo=["t1", "t2"]))
    store.delete("t1")
    assert "t1" not in store.tasks
    assert _ids(store.board, "todo") == ["t2"]


def test_delete_is_idempotent():
    store = BoardStore(_make_board(todo=["t1"]))
    store.delete("missing")
    once = store.board
    store.delete("missing")
    assert store.board == once


# --- watchers and snapshots ---


def test_watch_receives_old_and_new():
    store = BoardStore(_make_board(todo=["t1"], done=[]))
    events = []
    store.watch(lambda old, new: events.append((old, new)))
    before = store.board
    store.move("t1", "todo", "done", 0)
    assert len(events) == 1
    assert events[0][0] is before
    assert events[0][1] is store.board


def test_watchers_see_consistent_state():
    store = BoardStore(_make_board(todo=["t1", "t2"], done=[]))
    seen = []
    store.watch(lambda old, new: seen.append(check_invariants(store.board)))
    store.move("t1", "todo", "done", 0)
    store.update("t2", status="done")
    store.delete("t1")
    assert seen == [[], [], []]


def test_unwatch():
    store = BoardStore(_make_board(todo=["t1"]))
    events = []
    unwatch = store.watch(lambda old, new: events.append(1))
    store.update("t1", title="a")
    unwatch()
    store.update("t1", title="b")
    assert len(events) == 1


def test_snapshot_is_read_only():
    store = BoardStore(_make_board(todo=["t1"]))
    with pytest.raises(TypeError):
        store.tasks["t2"] = store.tasks["t1"]
    with pytest.raises(AttributeError):
        store.columns[0].task_ids.append("t2")


def test_old_snapshot_unchanged_after_mutation():
    store = BoardStore(_make_board(todo=["t1"], done=[]))
    before = store.board
    store.move("t1", "todo", "done", 0)
    assert list(before.column("todo").task_ids) == ["t1"]
    assert before.tasks["t1"].status == "todo"


# --- replace / normalize ---


def test_replace_swaps_whole_board():
    store = BoardStore(_make_board(todo=["t1"]))
    store.replace(_make_board(backlog=["x"]))
    assert [c.id for c in store.columns] == ["backlog"]
    assert list(store.tasks) == ["x"]


def test_normalize_drops_dangling_and_duplicate_ids():
    board = Board(
        columns=[
            Column(id="a", title="A", task_ids=("t1", "ghost", "t1")),
            Column(id="b", title="B", task_ids=("t1", "t2")),
        ],
        tasks={"t1": _make_task("t1", "b"), "t2": _make_task("t2", "b")},
    )
    fixed = normalize(board)
    assert _ids(fixed, "a") == ["t1"]
    assert _ids(fixed, "b") == ["t2"]
    assert fixed.tasks["t1"].status == "a"
    assert check_invariants(fixed) == []


def test_normalize_places_orphans_by_status():
    board = Board(
        columns=[Column(id="a", title="A", task_ids=("t1",))],
        tasks={
            "t1": _make_task("t1", "a"),
            "t2": _make_task("t2", "a"),
            "t3": _make_task("t3", "missing"),
        },
    )
    fixed = normalize(board)
    assert _ids(fixed, "a") == ["t1", "t2"]
    assert "t3" not in fixed.tasks
    assert check_invariants(fixed) == []


# --- random operation sequences ---


def _random_operation(rng, store, counter):
    board = store.board
    column_ids = [c.id for c in board.columns] + ["bogus"]
    task_ids = list(board.tasks) + ["bogus-task"]
    op = rng.choice(["move", "create", "update", "delete"])
    if op == "move":
        store.move(rng.choice(task_ids), rng.choice(column_ids), rng.choice(column_ids), rng.randint(-1, 6))
    elif op == "create":
        task_id = rng.choice(task_ids[:-1] + [f"n{counter}"]) if rng.random() < 0.2 else f"n{counter}"
        store.create(rng.choice(column_ids), _make_task(task_id, rng.choice(column_ids)))
    elif op == "update":
        store.update(rng.choice(task_ids), status=rng.choice(column_ids), title=f"t{counter}")
    else:
        store.delete(rng.choice(task_ids))


@pytest.mark.parametrize("seed", range(25))
def test_random_operations_keep_invariants(seed):
    rng = random.Random(seed)
    columns = {f"c{i}": [f"s{i}-{j}" for j in range(rng.randint(0, 4))] for i in range(rng.randint(1, 4))}
    store = BoardStore(_make_board(**columns))
    column_order = [c.id for c in store.columns]

    for counter in range(60):
        _random_operation(rng, store, counter)
        assert check_invariants(store.board) == []
        assert [c.id for c in store.columns] == column_order
