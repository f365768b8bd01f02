# promptadmin/services/category_store.py
import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from ..models.category import Category, Subcategory
from .record_store import RecordStore, PostgresRecordStore

logger = logging.getLogger(__name__)

# Fields an edit may touch. A subcategory's category_id is fixed at creation.
EDITABLE_FIELDS = ('name', 'description', 'sort_order')

class CategoryStore:
    """Persistence boundary for categories and subcategories.

    Both collections are flat; subcategories reference their parent
    through ``category_id``. Deleting a category cascades to its
    subcategories in the database schema, not here.
    """

    def __init__(self, categories: RecordStore, subcategories: RecordStore):
        self.categories = categories
        self.subcategories = subcategories

    @classmethod
    def for_database(cls, db) -> 'CategoryStore':
        return cls(
            PostgresRecordStore(db, 'categories', ('name', 'description', 'sort_order')),
            PostgresRecordStore(db, 'subcategories', ('category_id', 'name', 'description', 'sort_order')),
        )

    async def list_categories(self, order_by: str = 'sort_order') -> List[Category]:
        """All main categories"""
        rows = await self.categories.list(order_by=order_by)
        return [Category.model_validate(row) for row in rows]

    async def list_subcategories(self, category_id: Optional[UUID] = None,
                                 order_by: str = 'sort_order') -> List[Subcategory]:
        """Subcategories of one parent, or of every parent when category_id is None"""
        where = {'category_id': category_id} if category_id is not None else None
        rows = await self.subcategories.list(order_by=order_by, where=where)
        return [Subcategory.model_validate(row) for row in rows]

    async def get_category(self, category_id: UUID) -> Optional[Category]:
        row = await self.categories.get(category_id)
        return Category.model_validate(row) if row else None

    async def get_subcategory(self, subcategory_id: UUID) -> Optional[Subcategory]:
        row = await self.subcategories.get(subcategory_id)
        return Subcategory.model_validate(row) if row else None

    async def next_sort_order(self, category_id: Optional[UUID] = None) -> int:
        """Highest sort_order in the sibling group plus one (gaps are not filled)"""
        if category_id is None:
            rows = await self.categories.list(order_by='sort_order', descending=True, limit=1)
        else:
            rows = await self.subcategories.list(
                order_by='sort_order', descending=True,
                where={'category_id': category_id}, limit=1
            )
        return rows[0]['sort_order'] + 1 if rows else 1

    async def create_category(self, name: str, description: Optional[str] = None,
                              sort_order: Optional[int] = None) -> Category:
        if sort_order is None:
            sort_order = await self.next_sort_order()

        row = await self.categories.insert({
            'name': name,
            'description': description,
            'sort_order': sort_order
        })
        logger.info(f"Created category {row['id']} ({name}) at sort_order {sort_order}")
        return Category.model_validate(row)

    async def create_subcategory(self, category_id: UUID, name: str,
                                 description: Optional[str] = None,
                                 sort_order: Optional[int] = None) -> Subcategory:
        if sort_order is None:
            sort_order = await self.next_sort_order(category_id)

        row = await self.subcategories.insert({
            'category_id': category_id,
            'name': name,
            'description': description,
            'sort_order': sort_order
        })
        logger.info(
            f"Created subcategory {row['id']} ({name}) under {category_id} at sort_order {sort_order}"
        )
        return Subcategory.model_validate(row)

    async def update_category(self, category_id: UUID, fields: Dict[str, Any]) -> Optional[Category]:
        row = await self.categories.update(category_id, self._editable(fields))
        return Category.model_validate(row) if row else None

    async def update_subcategory(self, subcategory_id: UUID, fields: Dict[str, Any]) -> Optional[Subcategory]:
        row = await self.subcategories.update(subcategory_id, self._editable(fields))
        return Subcategory.model_validate(row) if row else None

    async def set_sort_order(self, record_id: UUID, sort_order: int, subcategory: bool = False) -> bool:
        """Write one sort_order value, False when the row no longer exists"""
        store = self.subcategories if subcategory else self.categories
        row = await store.update(record_id, {'sort_order': sort_order})
        return row is not None

    async def delete_category(self, category_id: UUID) -> bool:
        return await self.categories.delete(category_id)

    async def delete_subcategory(self, subcategory_id: UUID) -> bool:
        return await self.subcategories.delete(subcategory_id)

    @staticmethod
    def _editable(fields: Dict[str, Any]) -> Dict[str, Any]:
        return {key: value for key, value in fields.items() if key in EDITABLE_FIELDS}
