# promptadmin/services/reorder.py
"""Sibling-group reordering.

Every call rewrites the whole group to ``1..N``; it never shifts only the
affected range. The same functions serve the main-category group and each
parent's subcategory group. Moving a node to another parent is not
supported.
"""
from typing import Any, Iterable, List, Tuple

from ..models.category import CategoryTreeNode

SortAssignment = Tuple[Any, int]

def renumber(ordered_ids: Iterable[Any]) -> List[SortAssignment]:
    """Assign sort_order = position + 1 to ids already in display order"""
    return [(node_id, position + 1) for position, node_id in enumerate(ordered_ids)]

def reorder(siblings: List[CategoryTreeNode], moved_id: Any, target_index: int) -> List[SortAssignment]:
    """Move one node to target_index and renumber the group.

    target_index is clamped to the valid range. Raises ValueError when
    moved_id is not in siblings.
    """
    ids = [node.id for node in siblings]
    if moved_id not in ids:
        raise ValueError(f"{moved_id} is not in this sibling group")

    target_index = max(0, min(target_index, len(ids) - 1))
    ids.remove(moved_id)
    ids.insert(target_index, moved_id)
    return renumber(ids)

def changed_orders(siblings: List[CategoryTreeNode],
                   assignments: List[SortAssignment]) -> List[SortAssignment]:
    """The assignments that differ from the current sort_order values"""
    current = {node.id: node.sort_order for node in siblings}
    return [(node_id, order) for node_id, order in assignments if current.get(node_id) != order]
