"""Interval Rebuild - pure tests for nested-set numbering.

Tests cover:
    - Canonical A -> {B, C}, B -> {D} numbering
    - Custom start value
    - Child order follows edge order
    - Unreachable nodes and cycles do not break numbering
    - Deep chains (no recursion limit)
"""

from treestore.infrastructure.interval_rebuild import compute_intervals


_EDGES = [("A", None), ("B", "A"), ("C", "A"), ("D", "B")]


def test_canonical_tree():
    assert compute_intervals("A", _EDGES) == {
        "A": (1, 8), "B": (2, 5), "D": (3, 4), "C": (6, 7),
    }


def test_start_value_shifts_every_interval():
    intervals = compute_intervals("A", _EDGES, start=10)
    assert intervals["A"] == (10, 17)
    assert intervals["D"] == (12, 13)


def test_children_numbered_in_edge_order():
    edges = [("A", None), ("C", "A"), ("B", "A")]
    intervals = compute_intervals("A", edges)
    assert intervals["C"] == (2, 3)
    assert intervals["B"] == (4, 5)


def test_single_node():
    assert compute_intervals("A", [("A", None)]) == {"A": (1, 2)}


def test_rgt_counts_descendants():
    intervals = compute_intervals("A", _EDGES)
    for node, descendants in {"A": 3, "B": 1, "C": 0, "D": 0}.items():
        lft, rgt = intervals[node]
        assert rgt == lft + 2 * descendants + 1


def test_unreachable_nodes_are_excluded():
    edges = _EDGES + [("X", "missing"), ("Y", "X")]
    intervals = compute_intervals("A", edges)
    assert "X" not in intervals
    assert "Y" not in intervals
    assert intervals["A"] == (1, 8)


def test_cycle_back_to_ancestor_is_skipped():
    edges = [("A", None), ("B", "A"), ("A", "B")]
    assert compute_intervals("A", edges) == {"A": (1, 4), "B": (2, 3)}


def test_deep_chain_does_not_recurse():
    depth = 5000
    edges = [(0, None)] + [(i, i - 1) for i in range(1, depth)]
    intervals = compute_intervals(0, edges)
    assert intervals[0] == (1, 2 * depth)
    assert intervals[depth - 1] == (depth, depth + 1)
