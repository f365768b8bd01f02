"""Category services"""
from .record_store import RecordStore, PostgresRecordStore
from .category_store import CategoryStore
from .category_service import CategoryService
from .sort_order_repair import SortOrderRepair

__all__ = [
    'RecordStore',
    'PostgresRecordStore',
    'CategoryStore',
    'CategoryService',
    'SortOrderRepair',
]
