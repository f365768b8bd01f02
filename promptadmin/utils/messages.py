# promptadmin/utils/messages.py
from typing import Dict, List, Optional
from ..models.category import CategoryTreeNode
from .formatters import format_datetime, truncate

FIELD_LABELS = {
    'name': 'Name',
    'description': 'Description',
    'sort_order': 'Sort order',
    'parent_id': 'Parent',
}

class Messages:
    @staticmethod
    def format_category_tree(tree: List[CategoryTreeNode], stats: Optional[Dict[str, int]] = None) -> str:
        """Category tree as an indented list"""
        header = "🗂 Category management"
        if stats:
            header += f"\n{stats['categories']} categories, {stats['subcategories']} subcategories"

        if not tree:
            return f"{header}\n\nNo categories found. Create your first category to get started."

        return f"{header}\n\n{Messages.format_tree_lines(tree)}"

    @staticmethod
    def format_search_results(tree: List[CategoryTreeNode], search: str) -> str:
        if not tree:
            return f"🔍 No categories match \"{search}\"."
        return f"🔍 Results for \"{search}\":\n\n{Messages.format_tree_lines(tree)}"

    @staticmethod
    def format_tree_lines(tree: List[CategoryTreeNode]) -> str:
        lines = []
        for node in tree:
            lines.append(f"{node.sort_order}. 📁 {truncate(node.name)}")
            for child in node.children or []:
                lines.append(f"    {node.sort_order}.{child.sort_order} 📂 {truncate(child.name)}")
        return "\n".join(lines)

    @staticmethod
    def format_category(node: CategoryTreeNode, parent: Optional[CategoryTreeNode] = None) -> str:
        """Details of one node"""
        kind = "📁 Category" if node.is_main else "📂 Subcategory"
        message = (
            f"{kind}: {node.name}\n\n"
            f"🔗 Slug: {node.slug}\n"
            f"📝 Description: {node.description or '—'}\n"
            f"🔢 Sort order: {node.sort_order}\n"
            f"🕒 Created: {format_datetime(node.created_at)}\n"
        )

        if parent is not None:
            message += f"👥 Parent: {parent.name}\n"

        if node.is_main:
            children = node.children or []
            message += f"\n📂 Subcategories ({len(children)}):\n"
            if children:
                for child in children:
                    message += f"{child.sort_order}. {child.name}\n"
            else:
                message += "- none\n"
        return message

    @staticmethod
    def format_errors(errors: Dict[str, str]) -> str:
        """Field-level validation messages"""
        lines = ["❌ Please fix the following:"]
        for field, error in errors.items():
            lines.append(f"• {FIELD_LABELS.get(field, field)}: {error}")
        return "\n".join(lines)

    @staticmethod
    def delete_warning(node: CategoryTreeNode) -> str:
        message = f"⚠️ Delete \"{node.name}\"?\n"
        children = node.children or []
        if children:
            message += (
                f"\nThis category contains {len(children)} subcategories "
                "that will also be deleted."
            )
        return message
