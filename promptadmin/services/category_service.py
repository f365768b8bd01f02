# promptadmin/services/category_service.py
import logging
from typing import Any, Dict, List, Optional

from ..exceptions import CategoryValidationError, StoreError
from ..models.category import CategoryTreeNode
from .category_store import CategoryStore
from .category_validator import as_uuid, validate_create, validate_edit
from .reorder import SortAssignment, changed_orders, renumber, reorder
from .sort_order_repair import SortOrderRepair
from .tree_assembler import build_tree, count_nodes, filter_tree, find_node, siblings_of

class CategoryService:
    """Category hierarchy operations used by the admin screens"""

    def __init__(self, db=None, store: Optional[CategoryStore] = None):
        self.db = db
        self.store = store or CategoryStore.for_database(db)
        self.logger = logging.getLogger(__name__)

    async def get_tree(self) -> List[CategoryTreeNode]:
        """Load both collections and assemble the two-level tree"""
        categories = await self.store.list_categories()
        subcategories = await self.store.list_subcategories()
        return build_tree(categories, subcategories)

    async def get_node(self, node_id: Any) -> Optional[CategoryTreeNode]:
        """A category or subcategory node from a freshly assembled tree"""
        node_id = as_uuid(node_id)
        if node_id is None:
            return None
        return find_node(await self.get_tree(), node_id)

    async def search(self, query: str) -> List[CategoryTreeNode]:
        """Tree filtered by name/description"""
        return filter_tree(await self.get_tree(), query)

    async def stats(self) -> Dict[str, int]:
        """Category counts for the admin header"""
        tree = await self.get_tree()
        total = count_nodes(tree)
        return {
            'categories': len(tree),
            'subcategories': total - len(tree),
            'total': total
        }

    async def create(self, category_data: Dict[str, Any]) -> CategoryTreeNode:
        """Create a main category, or a subcategory when parent_id is set.

        Without an explicit sort_order the node goes after the last sibling.
        An explicit value is stored as given, even if a sibling already has it.
        """
        tree = await self.get_tree()
        errors = validate_create(category_data, tree)
        if errors:
            raise CategoryValidationError(errors)

        name = category_data['name'].strip()
        description = (category_data.get('description') or '').strip() or None
        sort_order = category_data.get('sort_order')
        parent_id = as_uuid(category_data.get('parent_id'))

        if parent_id is None:
            category = await self.store.create_category(name, description, sort_order)
            return CategoryTreeNode.from_category(category, [])

        subcategory = await self.store.create_subcategory(parent_id, name, description, sort_order)
        return CategoryTreeNode.from_subcategory(subcategory)

    async def update(self, node_id: Any, update_data: Dict[str, Any]) -> Optional[CategoryTreeNode]:
        """Edit name, description or sort_order. None when the node is gone."""
        node_id = as_uuid(node_id)
        tree = await self.get_tree()
        node = find_node(tree, node_id) if node_id is not None else None
        if node is None:
            return None

        errors = validate_edit(node.id, update_data, tree)
        if errors:
            raise CategoryValidationError(errors)

        fields = {}
        if 'name' in update_data:
            fields['name'] = update_data['name'].strip()
        if 'description' in update_data:
            fields['description'] = (update_data['description'] or '').strip() or None
        if 'sort_order' in update_data and update_data['sort_order'] is not None:
            fields['sort_order'] = update_data['sort_order']

        if node.is_main:
            category = await self.store.update_category(node.id, fields)
            return CategoryTreeNode.from_category(category, node.children or []) if category else None

        subcategory = await self.store.update_subcategory(node.id, fields)
        return CategoryTreeNode.from_subcategory(subcategory) if subcategory else None

    async def delete(self, node_id: Any) -> bool:
        """Delete a node; a category takes its subcategories with it.
        Remaining siblings keep their sort_order."""
        node_id = as_uuid(node_id)
        if node_id is None:
            return False

        if await self.store.delete_category(node_id):
            self.logger.info(f"Deleted category {node_id}")
            return True
        if await self.store.delete_subcategory(node_id):
            self.logger.info(f"Deleted subcategory {node_id}")
            return True
        return False

    async def reorder_siblings(self, parent_id: Any, ordered_ids: List[Any]) -> bool:
        """Persist a new display order for one sibling group.

        ordered_ids must contain exactly the ids of the group; the group is
        renumbered 1..N in that order.
        """
        parent_id = as_uuid(parent_id)
        ordered_ids = [as_uuid(node_id) for node_id in ordered_ids]
        tree = await self._load_tree_for("Reorder")
        if tree is None:
            return False

        if parent_id is None:
            siblings = tree
        else:
            parent = find_node(tree, parent_id)
            if parent is None or not parent.is_main:
                self.logger.warning(f"Reorder skipped, parent {parent_id} not found")
                return False
            siblings = parent.children or []

        if len(ordered_ids) != len(siblings) or set(ordered_ids) != {node.id for node in siblings}:
            self.logger.warning(f"Reorder skipped, ids do not match the sibling group of {parent_id}")
            return False

        changes = changed_orders(siblings, renumber(ordered_ids))
        return await self._persist(changes, subcategory=parent_id is not None)

    async def move(self, node_id: Any, target_index: int) -> bool:
        """Move a node to target_index within its own sibling group"""
        node_id = as_uuid(node_id)
        tree = await self._load_tree_for("Move")
        if tree is None:
            return False
        node = find_node(tree, node_id) if node_id is not None else None
        if node is None:
            return False

        siblings = siblings_of(tree, node)
        changes = changed_orders(siblings, reorder(siblings, node.id, target_index))
        return await self._persist(changes, subcategory=not node.is_main)

    async def repair(self) -> bool:
        """Renumber every sibling group from creation order"""
        return await SortOrderRepair(self.store).repair()

    async def _load_tree_for(self, action: str) -> Optional[List[CategoryTreeNode]]:
        try:
            return await self.get_tree()
        except StoreError as e:
            self.logger.error(f"{action} aborted, cannot load categories: {e}")
            return None

    async def _persist(self, changes: List[SortAssignment], subcategory: bool) -> bool:
        """Write sort_order changes one row at a time.

        A failure part way leaves the group partially renumbered; repair
        heals it.
        """
        for node_id, sort_order in changes:
            try:
                updated = await self.store.set_sort_order(node_id, sort_order, subcategory=subcategory)
            except StoreError as e:
                self.logger.error(f"Reorder interrupted at {node_id}: {e}")
                return False
            if not updated:
                self.logger.warning(f"Reorder interrupted, {node_id} no longer exists")
                return False

        self.logger.info(f"Reordered {len(changes)} node(s)")
        return True
