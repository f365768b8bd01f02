# promptadmin/utils/keyboards.py
from typing import List
from telegram import InlineKeyboardButton, InlineKeyboardMarkup
from ..constants import (
    MANAGE_CATEGORIES, ADD_CATEGORY, ADD_SUBCATEGORY, VIEW_CATEGORY,
    EDIT_CATEGORY, EDIT_FIELD, DELETE_CATEGORY, CONFIRM_DELETE,
    MOVE_UP, MOVE_DOWN, MOVE_TOP, PARENT_CATEGORY, PARENT_NONE,
    REPAIR_SORT_ORDERS, CANCEL
)
from ..models.category import CategoryTreeNode
from .formatters import truncate

class Keyboards:
    @staticmethod
    def categories_menu(tree: List[CategoryTreeNode]) -> InlineKeyboardMarkup:
        """Category management menu"""
        keyboard = [
            [InlineKeyboardButton("➕ Add category", callback_data=ADD_CATEGORY)],
        ]

        for node in tree:
            keyboard.append([
                InlineKeyboardButton(
                    f"📁 {truncate(node.name, 40)}",
                    callback_data=f"{VIEW_CATEGORY}{node.id}"
                )
            ])

        keyboard.append([
            InlineKeyboardButton("🔧 Fix sort orders", callback_data=REPAIR_SORT_ORDERS),
            InlineKeyboardButton("🔄 Refresh", callback_data=MANAGE_CATEGORIES)
        ])
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def category_detail(node: CategoryTreeNode, position: int, group_size: int) -> InlineKeyboardMarkup:
        """Actions for one category or subcategory"""
        keyboard = [
            [
                InlineKeyboardButton("✏️ Edit", callback_data=f"{EDIT_CATEGORY}{node.id}"),
                InlineKeyboardButton("❌ Delete", callback_data=f"{DELETE_CATEGORY}{node.id}")
            ]
        ]

        move_buttons = []
        if position > 0:
            move_buttons.append(InlineKeyboardButton("⏫ Top", callback_data=f"{MOVE_TOP}{node.id}"))
            move_buttons.append(InlineKeyboardButton("⬆️ Up", callback_data=f"{MOVE_UP}{node.id}"))
        if position < group_size - 1:
            move_buttons.append(InlineKeyboardButton("⬇️ Down", callback_data=f"{MOVE_DOWN}{node.id}"))
        if move_buttons:
            keyboard.append(move_buttons)

        if node.is_main:
            keyboard.append([
                InlineKeyboardButton("➕ Add subcategory", callback_data=f"{ADD_SUBCATEGORY}{node.id}")
            ])
            for child in node.children or []:
                keyboard.append([
                    InlineKeyboardButton(
                        f"📂 {truncate(child.name, 40)}",
                        callback_data=f"{VIEW_CATEGORY}{child.id}"
                    )
                ])
            back = MANAGE_CATEGORIES
        else:
            back = f"{VIEW_CATEGORY}{node.parent_id}"

        keyboard.append([InlineKeyboardButton("🔙 Back", callback_data=back)])
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def parent_choices(tree: List[CategoryTreeNode]) -> InlineKeyboardMarkup:
        """Pick where a new category goes"""
        keyboard = [[InlineKeyboardButton("🌐 Main category", callback_data=PARENT_NONE)]]

        for node in tree:
            keyboard.append([
                InlineKeyboardButton(
                    truncate(node.name, 40),
                    callback_data=f"{PARENT_CATEGORY}{node.id}"
                )
            ])

        keyboard.append([InlineKeyboardButton("🔙 Cancel", callback_data=CANCEL)])
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def edit_fields(node: CategoryTreeNode) -> InlineKeyboardMarkup:
        """Pick the field to edit"""
        keyboard = [
            [
                InlineKeyboardButton("🏷 Name", callback_data=f"{EDIT_FIELD}name"),
                InlineKeyboardButton("📝 Description", callback_data=f"{EDIT_FIELD}description")
            ],
            [InlineKeyboardButton("🔢 Sort order", callback_data=f"{EDIT_FIELD}sort_order")],
            [InlineKeyboardButton("🔙 Cancel", callback_data=CANCEL)]
        ]
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def confirm_delete(node: CategoryTreeNode) -> InlineKeyboardMarkup:
        keyboard = [
            [
                InlineKeyboardButton("✅ Confirm delete", callback_data=CONFIRM_DELETE),
                InlineKeyboardButton("❌ Cancel", callback_data=CANCEL)
            ]
        ]
        return InlineKeyboardMarkup(keyboard)

    @staticmethod
    def cancel_keyboard() -> InlineKeyboardMarkup:
        return InlineKeyboardMarkup([[InlineKeyboardButton("🔙 Cancel", callback_data=CANCEL)]])

    @staticmethod
    def back_to_menu() -> InlineKeyboardMarkup:
        return InlineKeyboardMarkup([[
            InlineKeyboardButton("🔙 Back to categories", callback_data=MANAGE_CATEGORIES)
        ]])
