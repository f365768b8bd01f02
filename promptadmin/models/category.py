# promptadmin/models/category.py
import re
from datetime import datetime
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel
from .base import OrderedRecord

class Category(OrderedRecord):
    """Main category, sibling of every other main category"""

class Subcategory(OrderedRecord):
    """Second-level category owned by exactly one main category"""
    category_id: UUID

class CategoryTreeNode(BaseModel):
    """Assembled view of a category or subcategory.

    Main-category nodes carry an ordered ``children`` list; subcategory
    nodes have ``children = None`` and a ``parent_id``. Two nodes are
    equal when their ids are equal.
    """
    id: UUID
    name: str
    description: Optional[str] = None
    sort_order: int
    created_at: datetime
    parent_id: Optional[UUID] = None
    children: Optional[List['CategoryTreeNode']] = None

    @classmethod
    def from_category(cls, category: Category, children: List['CategoryTreeNode']) -> 'CategoryTreeNode':
        return cls(
            id=category.id,
            name=category.name,
            description=category.description,
            sort_order=category.sort_order,
            created_at=category.created_at,
            parent_id=None,
            children=children,
        )

    @classmethod
    def from_subcategory(cls, subcategory: Subcategory) -> 'CategoryTreeNode':
        return cls(
            id=subcategory.id,
            name=subcategory.name,
            description=subcategory.description,
            sort_order=subcategory.sort_order,
            created_at=subcategory.created_at,
            parent_id=subcategory.category_id,
            children=None,
        )

    @property
    def is_main(self) -> bool:
        return self.parent_id is None

    @property
    def slug(self) -> str:
        slug = re.sub(r'[^a-z0-9\s-]', '', self.name.lower())
        return re.sub(r'\s+', '-', slug)

    def __eq__(self, other):
        if isinstance(other, CategoryTreeNode):
            return self.id == other.id
        return NotImplemented

    def __hash__(self):
        return hash(self.id)
