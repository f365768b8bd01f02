# promptadmin/services/tree_assembler.py
"""Two-level category tree built from the flat category collections."""
import logging
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from ..models.category import Category, Subcategory, CategoryTreeNode

logger = logging.getLogger(__name__)

def _by_sort_order(node: CategoryTreeNode) -> int:
    return node.sort_order

def build_tree(categories: Iterable[Category],
               subcategories: Iterable[Subcategory]) -> List[CategoryTreeNode]:
    """Nest subcategories under their parents, both levels ordered by sort_order.

    Equal sort_order values keep their input order. Subcategories whose
    parent is unknown are dropped.
    """
    categories = list(categories)
    children: Dict[UUID, List[CategoryTreeNode]] = {category.id: [] for category in categories}

    for subcategory in subcategories:
        siblings = children.get(subcategory.category_id)
        if siblings is None:
            logger.debug(f"Dropping orphan subcategory {subcategory.id} (parent {subcategory.category_id})")
            continue
        siblings.append(CategoryTreeNode.from_subcategory(subcategory))

    tree = [
        CategoryTreeNode.from_category(category, sorted(children[category.id], key=_by_sort_order))
        for category in categories
    ]
    return sorted(tree, key=_by_sort_order)

def find_node(tree: List[CategoryTreeNode], node_id: UUID) -> Optional[CategoryTreeNode]:
    """Locate a main category or subcategory node by id"""
    for node in tree:
        if node.id == node_id:
            return node
        for child in node.children or []:
            if child.id == node_id:
                return child
    return None

def siblings_of(tree: List[CategoryTreeNode], node: CategoryTreeNode) -> List[CategoryTreeNode]:
    """The ordered sibling group a node belongs to (itself included)"""
    if node.is_main:
        return list(tree)
    parent = find_node(tree, node.parent_id)
    return list(parent.children or []) if parent else []

def _matches(node: CategoryTreeNode, query: str) -> bool:
    return (
        query in node.name.lower()
        or (node.description is not None and query in node.description.lower())
    )

def filter_tree(tree: List[CategoryTreeNode], query: str) -> List[CategoryTreeNode]:
    """Keep main categories whose name or description contains the query,
    with their children filtered the same way."""
    query = (query or '').strip().lower()
    if not query:
        return tree

    return [
        node.model_copy(update={
            'children': [child for child in node.children or [] if _matches(child, query)]
        })
        for node in tree if _matches(node, query)
    ]

def count_nodes(tree: List[CategoryTreeNode]) -> int:
    """Main categories plus subcategories"""
    return sum(1 + len(node.children or []) for node in tree)
