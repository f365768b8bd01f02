"""Data models"""
from .base import StoredRecord, OrderedRecord
from .category import Category, Subcategory, CategoryTreeNode

__all__ = [
    'StoredRecord',
    'OrderedRecord',
    'Category',
    'Subcategory',
    'CategoryTreeNode',
]
