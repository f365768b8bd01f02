from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

import pytest

from promptadmin.exceptions import StoreError
from promptadmin.models.category import Category, Subcategory
from promptadmin.services.category_service import CategoryService
from promptadmin.services.category_store import CategoryStore
from promptadmin.services.record_store import RecordStore

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


class MemoryRecordStore(RecordStore):
    """In-memory RecordStore used in place of a PostgreSQL table"""

    def __init__(self, table: str):
        self.table = table
        self.rows: Dict[UUID, Dict[str, Any]] = {}
        self.updates: List[tuple] = []
        self.fail_on_update = set()
        self.fail_on_list = False
        self._cascades = []
        self._inserted = 0

    def cascade_to(self, store: 'MemoryRecordStore', field: str):
        self._cascades.append((store, field))

    async def list(self, order_by=None, descending=False, where=None, limit=None):
        if self.fail_on_list:
            raise StoreError(f"{self.table}: connection lost")
        rows = [
            dict(row) for row in self.rows.values()
            if all(row.get(key) == value for key, value in (where or {}).items())
        ]
        if order_by:
            rows.sort(key=lambda row: (row[order_by], str(row['id'])), reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return rows

    async def get(self, record_id):
        row = self.rows.get(record_id)
        return dict(row) if row else None

    async def insert(self, fields):
        self._inserted += 1
        row = {
            'id': uuid4(),
            'description': None,
            'created_at': BASE_TIME + timedelta(seconds=self._inserted),
            'updated_at': None,
        }
        row.update(fields)
        self.rows[row['id']] = row
        return dict(row)

    async def update(self, record_id, fields):
        if record_id in self.fail_on_update:
            raise StoreError(f"{self.table}: update rejected")
        row = self.rows.get(record_id)
        if row is None:
            return None
        row.update(fields)
        row['updated_at'] = BASE_TIME
        self.updates.append((record_id, dict(fields)))
        return dict(row)

    async def delete(self, record_id):
        if self.rows.pop(record_id, None) is None:
            return False
        for store, field in self._cascades:
            for child_id in [key for key, row in store.rows.items() if row.get(field) == record_id]:
                del store.rows[child_id]
        return True


@pytest.fixture
def category_records():
    categories = MemoryRecordStore('categories')
    subcategories = MemoryRecordStore('subcategories')
    categories.cascade_to(subcategories, 'category_id')
    return categories, subcategories


@pytest.fixture
def store(category_records):
    categories, subcategories = category_records
    return CategoryStore(categories, subcategories)


@pytest.fixture
def service(store):
    return CategoryService(store=store)


@pytest.fixture
def make_category():
    def factory(name: str, sort_order: int, created_at: Optional[datetime] = None,
                description: Optional[str] = None) -> Category:
        return Category(
            id=uuid4(),
            name=name,
            description=description,
            sort_order=sort_order,
            created_at=created_at or BASE_TIME,
        )
    return factory


@pytest.fixture
def make_subcategory():
    def factory(parent: Category, name: str, sort_order: int,
                created_at: Optional[datetime] = None,
                description: Optional[str] = None) -> Subcategory:
        return Subcategory(
            id=uuid4(),
            category_id=parent.id,
            name=name,
            description=description,
            sort_order=sort_order,
            created_at=created_at or BASE_TIME,
        )
    return factory
