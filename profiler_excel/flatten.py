"""
flatten.py

Flatten a profile tree into report rows, one per node in depth-first
pre-order. Nodes reached through nested models get their model names
wrapped in parentheses, e.g. ``["Top", "SubA/Gain"]`` becomes
``"Top (SubA)/Gain"``.
"""

import logging
from typing import List, NamedTuple, Sequence, Tuple

from profiler_excel.profile_data import InvalidNode, ProfileNode

logger = logging.getLogger(__name__)


class FlattenedRow(NamedTuple):
    name: str
    total_time: float
    self_time: float
    number_of_calls: int


def display_name(path: Sequence[str]) -> str:
    """
    Combine a node path into one name relative to the top-most model.

    Each segment after the first starts with the name of the nested model it
    belongs to; every occurrence of that name in the segment is rewritten as
    `` (name)`` before the segment is appended.
    """
    if not path:
        raise InvalidNode("Profile node has an empty path")
    if len(path) == 1:
        return path[0]
    name = path[0]
    for segment in path[1:]:
        model = segment.split("/", 1)[0]
        if model:
            segment = segment.replace(model, f" ({model})")
        name += segment
    return name


def flatten(root: ProfileNode) -> List[FlattenedRow]:
    """Return one row per node of ``root``'s tree, parents before children."""
    rows = []
    stack = [root]
    while stack:
        node = stack.pop()
        rows.append(
            FlattenedRow(
                display_name(node.path),
                node.total_time,
                node.self_time,
                node.number_of_calls,
            )
        )
        if node.children:
            # reversed so the first child is popped first
            stack.extend(reversed(node.children))
    logger.debug("Flattened %d profile nodes", len(rows))
    return rows


def flatten_columns(
    root: ProfileNode,
) -> Tuple[List[str], List[float], List[float], List[int]]:
    """Flatten ``root`` into parallel name, total, self and call-count lists."""
    rows = flatten(root)
    return (
        [row.name for row in rows],
        [row.total_time for row in rows],
        [row.self_time for row in rows],
        [row.number_of_calls for row in rows],
    )
