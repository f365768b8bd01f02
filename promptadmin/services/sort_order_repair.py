# promptadmin/services/sort_order_repair.py
import logging
from typing import List, Union

from ..exceptions import StoreError
from ..models.category import Category, Subcategory
from .category_store import CategoryStore
from .reorder import renumber

class SortOrderRepair:
    """Re-derive sort_order for every sibling group from creation time.

    Each group is renumbered 1..N in created_at order. Updates are issued
    one row at a time; a store failure stops the current group, is
    logged, and the walk moves on to the next group. Running it twice
    with no writes in between yields the same ordering.
    """

    def __init__(self, store: CategoryStore):
        self.store = store
        self.logger = logging.getLogger(__name__)

    async def repair(self) -> bool:
        """Repair every group, True when all of them were fixed"""
        try:
            categories = await self.store.list_categories(order_by='created_at')
        except StoreError as e:
            self.logger.error(f"Sort order repair aborted, cannot fetch categories: {e}")
            return False

        success = await self._repair_group(categories, subcategory=False)

        for category in categories:
            try:
                subcategories = await self.store.list_subcategories(category.id, order_by='created_at')
            except StoreError as e:
                self.logger.error(f"Cannot fetch subcategories of {category.name}: {e}")
                success = False
                continue

            if not await self._repair_group(subcategories, subcategory=True):
                success = False

        if success:
            self.logger.info("Sort orders repaired")
        else:
            self.logger.warning("Sort order repair finished with errors")
        return success

    async def _repair_group(self, records: List[Union[Category, Subcategory]], subcategory: bool) -> bool:
        current = {record.id: record for record in records}
        kind = "subcategory" if subcategory else "category"

        for record_id, sort_order in renumber(record.id for record in records):
            record = current[record_id]
            if record.sort_order == sort_order:
                continue
            try:
                updated = await self.store.set_sort_order(record_id, sort_order, subcategory=subcategory)
            except StoreError as e:
                self.logger.error(f"Updating {kind} {record.name} failed, skipping the rest of its group: {e}")
                return False

            if updated:
                self.logger.info(f"Updated {kind} {record.name} sort_order {record.sort_order} -> {sort_order}")
            else:
                self.logger.warning(f"{kind.capitalize()} {record.name} disappeared during repair")
        return True
