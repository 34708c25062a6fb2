"""Interval Rebuild - nested-set renumbering from parent/child edges.

Invariants:
    - root gets lft = start; every node's rgt = lft + 2 * (descendant count) + 1
    - Children are numbered in the order given (caller sorts by insertion)
    - Nodes unreachable from root are absent from the result

Design Decisions:
    - Iterative DFS with an explicit stack: deep trees must not hit the recursion limit
"""

from collections import defaultdict
from typing import Hashable, Iterable


def compute_intervals(
    root_id: Hashable,
    edges: Iterable[tuple[Hashable, Hashable | None]],
    start: int = 1,
) -> dict[Hashable, tuple[int, int]]:
    """Map node id -> (lft, rgt) for the tree hanging from root_id.

    `edges` is an ordered iterable of (node_id, parent_id) pairs.
    """
    children: dict[Hashable, list[Hashable]] = defaultdict(list)
    for node_id, parent_id in edges:
        if parent_id is not None:
            children[parent_id].append(node_id)

    intervals: dict[Hashable, tuple[int, int]] = {}
    lefts: dict[Hashable, int] = {}
    counter = start
    # (node_id, next child index)
    stack: list[tuple[Hashable, int]] = [(root_id, 0)]
    lefts[root_id] = counter
    while stack:
        node_id, idx = stack[-1]
        kids = children.get(node_id, [])
        if idx < len(kids):
            stack[-1] = (node_id, idx + 1)
            child = kids[idx]
            if child in lefts:
                # cycle through a node already on the path
                continue
            counter += 1
            lefts[child] = counter
            stack.append((child, 0))
        else:
            counter += 1
            intervals[node_id] = (lefts[node_id], counter)
            stack.pop()
    return intervals
