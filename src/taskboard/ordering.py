"""Pure reordering of task id sequences."""

from typing import Sequence


def _clamp(index: int, length: int) -> int:
    return max(0, min(index, length))


def reorder(ids: Sequence[str], from_index: int, to_index: int) -> tuple[str, ...]:
    """Move the id at from_index to to_index within one sequence.

    An out-of-range from_index leaves the sequence unchanged. to_index is
    applied after removal, so anything past the end appends.
    """
    if not 0 <= from_index < len(ids):
        return tuple(ids)
    items = list(ids)
    moved = items.pop(from_index)
    items.insert(_clamp(to_index, len(items)), moved)
    return tuple(items)


def transfer(
    source: Sequence[str],
    dest: Sequence[str],
    from_index: int,
    to_index: int,
) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Move the id at source[from_index] into dest at to_index.

    Returns (source', dest'). Raises IndexError if from_index is out of
    range rather than dropping the id.
    """
    if not 0 <= from_index < len(source):
        raise IndexError(f"from_index {from_index} out of range for {len(source)} ids")
    items = list(source)
    moved = items.pop(from_index)
    target = list(dest)
    target.insert(_clamp(to_index, len(target)), moved)
    return tuple(items), tuple(target)
