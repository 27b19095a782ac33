"""Task ID comparison and generation."""

import re

TASK_PREFIX = "task-"

_SUFFIX = re.compile(r"^(?:.*-)?(\d+)$")


def compare_ids(left: str, right: str) -> int:
    """Compare two numeric IDs, padding with leading zeros.

    Returns -1 if left < right, 0 if equal, 1 if left > right.
    """
    max_len = max(len(left), len(right))
    left_padded = left.zfill(max_len)
    right_padded = right.zfill(max_len)

    if left_padded < right_padded:
        return -1
    if left_padded > right_padded:
        return 1
    return 0


def numeric_suffix(task_id: str) -> str | None:
    """Return the trailing digits of an ID, or None.

    "task-12" → "12", "7" → "7", "task-x" → None
    """
    match = _SUFFIX.match(task_id)
    return match.group(1).lstrip("0") or "0" if match else None


def max_id(ids) -> str | None:
    """Find the highest numeric suffix among ids, or None if there is none."""
    highest = None
    for id_ in ids:
        suffix = numeric_suffix(id_)
        if suffix is None:
            continue
        if highest is None or compare_ids(suffix, highest) > 0:
            highest = suffix
    return highest


def next_id(existing, prefix: str = TASK_PREFIX) -> str:
    """Generate an unused ID one past the highest numeric suffix.

    - No numeric IDs in use → "task-1"
    - ["task-1", "task-9"] → "task-10"
    """
    current_max = max_id(existing)
    n = int(current_max) + 1 if current_max is not None else 1
    taken = set(existing)
    while f"{prefix}{n}" in taken:
        n += 1
    return f"{prefix}{n}"
