"""Tree Builder - materializes a nested structure from a flat interval-tagged record set.

Invariants:
    - build_tree mutates `root` in place and returns it
    - Children keep the order they have in `records`
    - A leaf gets no children key at all
    - build_tree and build_tree_indexed produce identical output for unique ids

Design Decisions:
    - build_tree re-filters the full list per level (O(n^2)); build_tree_indexed groups
      by parent_id first (O(n)) behind the same contract
"""

from collections import defaultdict

from treestore.core.domain_types import ID_FIELD, PARENT_FIELD, NodeRecord


def build_tree(
    root: NodeRecord, records: list[NodeRecord], children_field: str = "children",
) -> NodeRecord:
    """Attach every record whose parent_id is root's id, recursively."""
    children = [
        item for item in records
        if item.get(PARENT_FIELD) is not None
        and item.get(PARENT_FIELD) == root[ID_FIELD]
    ]
    if not children:
        return root

    root[children_field] = [
        build_tree(item, records, children_field) for item in children
    ]
    return root


def build_tree_indexed(
    root: NodeRecord, records: list[NodeRecord], children_field: str = "children",
) -> NodeRecord:
    """Same result as build_tree, one pass to group children by parent_id."""
    by_parent: dict[object, list[NodeRecord]] = defaultdict(list)
    for item in records:
        parent_id = item.get(PARENT_FIELD)
        if parent_id is not None:
            by_parent[parent_id].append(item)

    stack = [root]
    while stack:
        node = stack.pop()
        children = by_parent.get(node[ID_FIELD])
        if children:
            node[children_field] = list(children)
            stack.extend(children)
    return root


def flatten_tree(
    tree: NodeRecord, children_field: str = "children",
) -> list[NodeRecord]:
    """Pre-order list of shallow copies with the children key stripped."""
    flat: list[NodeRecord] = []
    _collect(tree, children_field, flat)
    return flat


def _collect(node: NodeRecord, children_field: str, out: list[NodeRecord]) -> None:
    out.append({k: v for k, v in node.items() if k != children_field})
    for child in node.get(children_field, []):
        _collect(child, children_field, out)
