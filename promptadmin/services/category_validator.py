# promptadmin/services/category_validator.py
"""Form validation for category create/edit flows.

Validators return a dict of field name -> message; an empty dict means
the input is valid. They never touch the store.
"""
from typing import Any, Dict, List, Optional
from uuid import UUID

from ..models.category import CategoryTreeNode
from .tree_assembler import find_node

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
SORT_ORDER_MIN = 1
SORT_ORDER_MAX = 999

def as_uuid(value: Any) -> Optional[UUID]:
    if value is None or isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None

def _validate_name(name: Any) -> Optional[str]:
    if name is not None and not isinstance(name, str):
        return 'Category name must be text'
    name = (name or '').strip()
    if not name:
        return 'Category name is required'
    if len(name) < NAME_MIN_LENGTH:
        return f'Category name must be at least {NAME_MIN_LENGTH} characters'
    if len(name) > NAME_MAX_LENGTH:
        return f'Category name must be at most {NAME_MAX_LENGTH} characters'
    return None

def _validate_description(description: Any) -> Optional[str]:
    if description is None:
        return None
    if not isinstance(description, str):
        return 'Description must be text'
    # measured as stored
    if len(description.strip()) > DESCRIPTION_MAX_LENGTH:
        return f'Description must be at most {DESCRIPTION_MAX_LENGTH} characters'
    return None

def _validate_sort_order(sort_order: Any) -> Optional[str]:
    if sort_order is None:
        return None
    # bool is an int subclass
    if isinstance(sort_order, bool) or not isinstance(sort_order, int):
        return 'Sort order must be a whole number'
    if sort_order < SORT_ORDER_MIN:
        return f'Sort order must be at least {SORT_ORDER_MIN}'
    if sort_order > SORT_ORDER_MAX:
        return f'Sort order must be less than {SORT_ORDER_MAX + 1}'
    return None

def _is_duplicate(name: str, scope: List[CategoryTreeNode], exclude_id: Optional[UUID] = None) -> bool:
    candidate = name.strip().lower()
    return any(
        node.id != exclude_id and node.name.strip().lower() == candidate
        for node in scope
    )

def _validate_parent(node_id: Optional[UUID], parent_id: Optional[UUID],
                     tree: List[CategoryTreeNode]) -> Optional[str]:
    """A node may not be its own parent or the parent of its ancestor, and
    only main categories can hold children."""
    if parent_id is None:
        return None

    if node_id is not None:
        if parent_id == node_id:
            return 'A category cannot be its own parent'
        node = find_node(tree, node_id)
        if node is not None and any(child.id == parent_id for child in node.children or []):
            return 'A category cannot be placed under one of its own subcategories'

    parent = find_node(tree, parent_id)
    if parent is None:
        return 'Parent category not found'
    if not parent.is_main:
        return 'Subcategories cannot have children'
    return None

def _scope(tree: List[CategoryTreeNode], parent_id: Optional[UUID]) -> List[CategoryTreeNode]:
    if parent_id is None:
        return tree
    parent = find_node(tree, parent_id)
    return list(parent.children or []) if parent else []

def validate_create(data: Dict[str, Any], tree: Optional[List[CategoryTreeNode]] = None) -> Dict[str, str]:
    """Validate a new category or subcategory.

    ``data`` holds name, description, parent_id (None for a main category)
    and an optional explicit sort_order. Without a tree only the field
    rules are checked.
    """
    errors = {}

    name_error = _validate_name(data.get('name'))
    if name_error:
        errors['name'] = name_error

    description_error = _validate_description(data.get('description'))
    if description_error:
        errors['description'] = description_error

    sort_order_error = _validate_sort_order(data.get('sort_order'))
    if sort_order_error:
        errors['sort_order'] = sort_order_error

    if tree is None:
        return errors

    raw_parent = data.get('parent_id')
    parent_id = as_uuid(raw_parent)
    if raw_parent is not None and parent_id is None:
        errors['parent_id'] = 'Parent category not found'
        return errors

    parent_error = _validate_parent(as_uuid(data.get('id')), parent_id, tree)
    if parent_error:
        errors['parent_id'] = parent_error
        return errors

    if 'name' not in errors and _is_duplicate(data['name'], _scope(tree, parent_id)):
        errors['name'] = 'A category with this name already exists'

    return errors

def validate_edit(node_id: Any, data: Dict[str, Any], tree: List[CategoryTreeNode]) -> Dict[str, str]:
    """Validate changes to an existing node.

    Only the fields present in ``data`` are checked. The parent of an
    existing node cannot change; a parent_id that would make the node its
    own ancestor is reported as circular first.
    """
    errors = {}
    node_id = as_uuid(node_id)
    node = find_node(tree, node_id) if node_id is not None else None

    if 'name' in data:
        name_error = _validate_name(data['name'])
        if name_error:
            errors['name'] = name_error
        elif node is not None and _is_duplicate(data['name'], _scope(tree, node.parent_id), exclude_id=node.id):
            errors['name'] = 'A category with this name already exists'

    if 'description' in data:
        description_error = _validate_description(data['description'])
        if description_error:
            errors['description'] = description_error

    if 'sort_order' in data:
        sort_order_error = _validate_sort_order(data['sort_order'])
        if sort_order_error:
            errors['sort_order'] = sort_order_error

    if 'parent_id' in data and node is not None:
        raw_parent = data['parent_id']
        parent_id = as_uuid(raw_parent)
        if raw_parent is not None and parent_id is None:
            errors['parent_id'] = 'Parent category not found'
        elif parent_id != node.parent_id:
            errors['parent_id'] = (
                _validate_parent(node.id, parent_id, tree)
                or 'Moving a category to another parent is not supported'
            )

    return errors
