"""Tests for id sequence reordering."""

import itertools

import pytest

from taskboard.ordering import reorder, transfer


def test_reorder_first_to_last():
    assert reorder(["a", "b", "c"], 0, 2) == ("b", "c", "a")


def test_reorder_last_to_first():
    assert reorder(["a", "b", "c"], 2, 0) == ("c", "a", "b")


def test_reorder_same_index_is_identity():
    assert reorder(["a", "b", "c"], 1, 1) == ("a", "b", "c")


def test_reorder_from_out_of_range_is_noop():
    assert reorder(["a", "b"], 5, 0) == ("a", "b")
    assert reorder(["a", "b"], -1, 0) == ("a", "b")


def test_reorder_to_past_end_appends():
    assert reorder(["a", "b", "c"], 0, 99) == ("b", "c", "a")


def test_reorder_negative_to_inserts_at_front():
    assert reorder(["a", "b", "c"], 2, -3) == ("c", "a", "b")


def test_reorder_empty():
    assert reorder([], 0, 0) == ()


@pytest.mark.parametrize("from_index,to_index", list(itertools.product(range(4), range(4))))
def test_reorder_preserves_ids(from_index, to_index):
    ids = ["a", "b", "c", "d"]
    result = reorder(ids, from_index, to_index)
    assert sorted(result) == sorted(ids)
    assert result[to_index] == ids[from_index]


def test_transfer_basic():
    source, dest = transfer(["t1", "t2"], [], 0, 0)
    assert source == ("t2",)
    assert dest == ("t1",)


def test_transfer_into_middle():
    source, dest = transfer(["a"], ["x", "y"], 0, 1)
    assert source == ()
    assert dest == ("x", "a", "y")


def test_transfer_to_index_clamped():
    source, dest = transfer(["a", "b"], ["x"], 1, 10)
    assert source == ("a",)
    assert dest == ("x", "b")


def test_transfer_out_of_range_raises():
    with pytest.raises(IndexError):
        transfer(["a"], ["x"], 1, 0)
    with pytest.raises(IndexError):
        transfer([], ["x"], 0, 0)


@pytest.mark.parametrize("from_index,to_index", list(itertools.product(range(3), range(4))))
def test_transfer_moves_exactly_one(from_index, to_index):
    source_ids = ["a", "b", "c"]
    dest_ids = ["x", "y"]
    source, dest = transfer(source_ids, dest_ids, from_index, to_index)
    moved = source_ids[from_index]
    assert moved not in source
    assert dest.count(moved) == 1
    assert dest.index(moved) == min(to_index, len(dest_ids))
    assert len(source) + len(dest) == 5


def test_transfer_does_not_mutate_inputs():
    source_ids = ["a", "b"]
    dest_ids = ["x"]
    transfer(source_ids, dest_ids, 0, 0)
    assert source_ids == ["a", "b"]
    assert dest_ids == ["x"]
