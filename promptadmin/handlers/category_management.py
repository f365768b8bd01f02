# promptadmin/handlers/category_management.py
import logging
from typing import List, Optional
from telegram import Update, InlineKeyboardButton, InlineKeyboardMarkup
from telegram.ext import (
    BaseHandler as TelegramHandler, ContextTypes, ConversationHandler,
    CommandHandler, MessageHandler, CallbackQueryHandler, filters
)
from .base_handler import BaseHandler
from ..exceptions import CategoryValidationError, StoreError
from ..services.category_service import CategoryService
from ..services.category_validator import as_uuid, validate_create
from ..services.tree_assembler import count_nodes, find_node, siblings_of

from ..constants import *

NOT_FOUND_MESSAGE = "❌ Category not found. It may have been removed by another admin."
STORE_ERROR_MESSAGE = "❌ Categories are unavailable right now. Please try again."

class CategoryManagementHandler(BaseHandler):
    """Category management screens"""

    def __init__(self, db, category_service: Optional[CategoryService] = None):
        super().__init__(db)
        self.category_service = category_service or CategoryService(db)
        self.logger = logging.getLogger(__name__)

    async def categories_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/categories: open the category menu"""
        if not await self.is_admin(update.effective_user.id):
            await update.message.reply_text("⛔️ You do not have access to this section.")
            return

        await self._send_menu(update)

    async def show_categories_menu(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Show the category tree with management buttons"""
        query = update.callback_query
        await query.answer()

        if not await self.is_admin(update.effective_user.id):
            await query.edit_message_text("⛔️ You do not have access to this section.")
            return

        await self._send_menu(update)

    async def find_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """/find <text>: search categories by name or description"""
        if not await self.is_admin(update.effective_user.id):
            await update.message.reply_text("⛔️ You do not have access to this section.")
            return

        search = " ".join(context.args or []).strip()
        if not search:
            await update.message.reply_text("🔍 Usage: /find <text>")
            return

        try:
            tree = await self.category_service.search(search)
        except StoreError as e:
            await self._store_failure(update, "Searching categories", e)
            return

        reply_markup = self.keyboards.categories_menu(tree) if tree else self.keyboards.back_to_menu()
        await update.message.reply_text(
            self.messages.format_search_results(tree, search),
            reply_markup=reply_markup
        )

    async def view_category(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Show details of a category or subcategory"""
        query = update.callback_query
        await query.answer()

        if not await self.is_admin(update.effective_user.id):
            await query.edit_message_text("⛔️ You do not have access to this section.")
            return

        await self._show_node(update, query.data[len(VIEW_CATEGORY):])

    async def move_category(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Move a node one step up/down or to the top of its sibling group"""
        query = update.callback_query
        await query.answer()

        if not await self.is_admin(update.effective_user.id):
            await query.edit_message_text("⛔️ You do not have access to this section.")
            return

        for prefix in (MOVE_TOP, MOVE_UP, MOVE_DOWN):
            if query.data.startswith(prefix):
                direction = prefix
                node_id = as_uuid(query.data[len(prefix):])
                break
        else:
            return

        try:
            tree = await self.category_service.get_tree()
        except StoreError as e:
            await self._store_failure(update, "Loading categories for move", e)
            return

        node = find_node(tree, node_id) if node_id else None
        if node is None:
            await query.edit_message_text(NOT_FOUND_MESSAGE, reply_markup=self.keyboards.back_to_menu())
            return

        position = siblings_of(tree, node).index(node)
        if direction == MOVE_TOP:
            target = 0
        elif direction == MOVE_UP:
            target = position - 1
        else:
            target = position + 1

        if not await self.category_service.move(node.id, target):
            await query.edit_message_text(
                "❌ Reordering failed. Use 🔧 Fix sort orders to restore a consistent order.",
                reply_markup=self.keyboards.back_to_menu()
            )
            return

        await self._show_node(update, node.id)

    async def repair_sort_orders(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Renumber every sibling group from creation order"""
        query = update.callback_query
        await query.answer()

        if not await self.is_admin(update.effective_user.id):
            await query.edit_message_text("⛔️ You do not have access to this section.")
            return

        if await self.category_service.repair():
            message = "✅ Sort orders have been fixed successfully!"
        else:
            message = "❌ Failed to fix sort orders. Please try again."

        await query.edit_message_text(message, reply_markup=self.keyboards.back_to_menu())

    async def start_add_category(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Start adding a category (or a subcategory of the chosen parent)"""
        query = update.callback_query
        await query.answer()

        if not await self.is_admin(update.effective_user.id):
            await query.edit_message_text("⛔️ You do not have access to this section.")
            return ConversationHandler.END

        context.user_data.clear()
        if query.data.startswith(ADD_SUBCATEGORY):
            context.user_data['new_category_parent'] = query.data[len(ADD_SUBCATEGORY):]

        await query.edit_message_text(
            "📝 Enter the category name:",
            reply_markup=self.keyboards.cancel_keyboard()
        )
        return WAITING_CATEGORY_NAME

    async def handle_category_name(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Receive the category name"""
        name = update.message.text.strip()
        error = validate_create({'name': name}).get('name')
        if error:
            await update.message.reply_text(f"❌ {error}\nEnter the category name:")
            return WAITING_CATEGORY_NAME

        context.user_data['new_category_name'] = name

        await update.message.reply_text(
            "📝 Enter a description:\n"
            "(send /skip to leave it empty)",
            reply_markup=self.keyboards.cancel_keyboard()
        )
        return WAITING_CATEGORY_DESCRIPTION

    async def handle_category_description(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Receive the description"""
        if update.message.text == "/skip":
            description = None
        else:
            description = update.message.text
            error = validate_create({
                'name': context.user_data.get('new_category_name'),
                'description': description
            }).get('description')
            if error:
                await update.message.reply_text(f"❌ {error}\nEnter a description:")
                return WAITING_CATEGORY_DESCRIPTION

        context.user_data['new_category_description'] = description

        await update.message.reply_text(
            "🔢 Enter a sort order between 1 and 999:\n"
            "(send /skip to place it after the last sibling)",
            reply_markup=self.keyboards.cancel_keyboard()
        )
        return WAITING_CATEGORY_SORT_ORDER

    async def handle_category_sort_order(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Receive an explicit sort order, then the parent if not chosen yet"""
        text = update.message.text.strip()
        if text == "/skip":
            sort_order = None
        else:
            sort_order = self._parse_int(text)
            error = validate_create({
                'name': context.user_data.get('new_category_name'),
                'sort_order': sort_order
            }).get('sort_order')
            if error:
                await update.message.reply_text(f"❌ {error}\nEnter a sort order:")
                return WAITING_CATEGORY_SORT_ORDER

        context.user_data['new_category_sort_order'] = sort_order

        if 'new_category_parent' in context.user_data:
            return await self._create_category(update, context)

        try:
            tree = await self.category_service.get_tree()
        except StoreError as e:
            context.user_data.clear()
            await self._store_failure(update, "Loading parent categories", e)
            return ConversationHandler.END

        await update.message.reply_text(
            "🔍 Is this a subcategory of another category?\n"
            "Choose its parent:",
            reply_markup=self.keyboards.parent_choices(tree)
        )
        return WAITING_PARENT_CATEGORY

    async def handle_parent_selection(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Receive the parent choice and create the category"""
        query = update.callback_query
        await query.answer()

        if query.data == PARENT_NONE:
            context.user_data['new_category_parent'] = None
        else:
            context.user_data['new_category_parent'] = query.data[len(PARENT_CATEGORY):]

        return await self._create_category(update, context)

    async def start_edit_category(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Start editing a category"""
        query = update.callback_query
        await query.answer()

        if not await self.is_admin(update.effective_user.id):
            await query.edit_message_text("⛔️ You do not have access to this section.")
            return ConversationHandler.END

        try:
            node = await self.category_service.get_node(query.data[len(EDIT_CATEGORY):])
        except StoreError as e:
            await self._store_failure(update, "Loading category for edit", e)
            return ConversationHandler.END

        if node is None:
            await query.edit_message_text(NOT_FOUND_MESSAGE, reply_markup=self.keyboards.back_to_menu())
            return ConversationHandler.END

        context.user_data.clear()
        context.user_data['editing_category_id'] = str(node.id)

        await query.edit_message_text(
            f"✏️ Editing \"{node.name}\"\n"
            "Choose the field to edit:",
            reply_markup=self.keyboards.edit_fields(node)
        )
        return WAITING_EDIT_VALUE

    async def handle_category_edit_field(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Receive the field to edit"""
        query = update.callback_query
        await query.answer()

        field = query.data[len(EDIT_FIELD):]
        if field not in EDITABLE_FIELDS:
            return WAITING_EDIT_VALUE
        context.user_data['editing_field'] = field

        prompts = {
            'name': '🏷 Enter the new name:',
            'description': '📝 Enter the new description (send - to clear it):',
            'sort_order': '🔢 Enter the new sort order (1-999):'
        }

        await query.edit_message_text(prompts[field], reply_markup=self.keyboards.cancel_keyboard())
        return WAITING_EDIT_VALUE

    async def handle_edit_category_value(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Apply the new value"""
        field = context.user_data.get('editing_field')
        if not field:
            await update.message.reply_text("👆 Choose the field to edit first.")
            return WAITING_EDIT_VALUE

        text = update.message.text.strip()
        if field == 'sort_order':
            value = self._parse_int(text)
        elif field == 'description' and text == '-':
            value = None
        else:
            value = text

        try:
            node = await self.category_service.update(context.user_data['editing_category_id'], {field: value})
        except CategoryValidationError as e:
            await update.message.reply_text(self.messages.format_errors(e.errors))
            return WAITING_EDIT_VALUE
        except StoreError as e:
            self.logger.error(f"Updating category failed: {e}")
            await update.message.reply_text(
                "❌ Could not update the category. Please try again.",
                reply_markup=self.keyboards.back_to_menu()
            )
            context.user_data.clear()
            return ConversationHandler.END

        context.user_data.clear()
        if node is None:
            await update.message.reply_text(NOT_FOUND_MESSAGE, reply_markup=self.keyboards.back_to_menu())
            return ConversationHandler.END

        await self._show_node(update, node.id)
        return ConversationHandler.END

    async def handle_delete_category(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Ask for delete confirmation, warning about subcategories"""
        query = update.callback_query
        await query.answer()

        if not await self.is_admin(update.effective_user.id):
            await query.edit_message_text("⛔️ You do not have access to this section.")
            return ConversationHandler.END

        try:
            node = await self.category_service.get_node(query.data[len(DELETE_CATEGORY):])
        except StoreError as e:
            await self._store_failure(update, "Loading category for delete", e)
            return ConversationHandler.END

        if node is None:
            await query.edit_message_text(NOT_FOUND_MESSAGE, reply_markup=self.keyboards.back_to_menu())
            return ConversationHandler.END

        context.user_data['deleting_category_id'] = str(node.id)

        await query.edit_message_text(
            self.messages.delete_warning(node),
            reply_markup=self.keyboards.confirm_delete(node)
        )
        return CONFIRM_DELETE_CATEGORY

    async def handle_delete_confirmation(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Delete after confirmation"""
        query = update.callback_query
        await query.answer()

        node_id = context.user_data.pop('deleting_category_id', None)
        try:
            deleted = await self.category_service.delete(node_id)
        except StoreError as e:
            self.logger.error(f"Deleting category {node_id} failed: {e}")
            deleted = False

        if deleted:
            message = "✅ Category deleted."
        else:
            message = "❌ Could not delete the category. Please refresh and try again."

        await query.edit_message_text(message, reply_markup=self.keyboards.back_to_menu())
        context.user_data.clear()
        return ConversationHandler.END

    async def _create_category(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        category_data = {
            'name': context.user_data.get('new_category_name'),
            'description': context.user_data.get('new_category_description'),
            'sort_order': context.user_data.get('new_category_sort_order'),
            'parent_id': context.user_data.get('new_category_parent')
        }
        context.user_data.clear()

        try:
            node = await self.category_service.create(category_data)
        except CategoryValidationError as e:
            await self.reply(update, self.messages.format_errors(e.errors), reply_markup=self.keyboards.back_to_menu())
            return ConversationHandler.END
        except StoreError as e:
            self.logger.error(f"Creating category failed: {e}")
            await self.reply(
                update,
                "❌ Could not create the category. Please try again.",
                reply_markup=self.keyboards.back_to_menu()
            )
            return ConversationHandler.END

        keyboard = InlineKeyboardMarkup([
            [InlineKeyboardButton("👁 View", callback_data=f"{VIEW_CATEGORY}{node.id}")],
            [InlineKeyboardButton("🔙 Back to categories", callback_data=MANAGE_CATEGORIES)]
        ])
        await self.reply(
            update,
            f"✅ \"{node.name}\" created with sort order {node.sort_order}.",
            reply_markup=keyboard
        )
        return ConversationHandler.END

    async def _store_failure(self, update: Update, action: str, error: StoreError):
        self.logger.error(f"{action} failed: {error}")
        await self.reply(update, STORE_ERROR_MESSAGE, reply_markup=self.keyboards.back_to_menu())

    async def _send_menu(self, update: Update):
        try:
            tree = await self.category_service.get_tree()
        except StoreError as e:
            await self._store_failure(update, "Loading category menu", e)
            return

        stats = {
            'categories': len(tree),
            'subcategories': count_nodes(tree) - len(tree)
        }
        await self.reply(
            update,
            self.messages.format_category_tree(tree, stats),
            reply_markup=self.keyboards.categories_menu(tree)
        )

    async def _show_node(self, update: Update, node_id):
        try:
            tree = await self.category_service.get_tree()
        except StoreError as e:
            await self._store_failure(update, "Loading category", e)
            return

        node_id = as_uuid(node_id)
        node = find_node(tree, node_id) if node_id else None
        if node is None:
            await self.reply(update, NOT_FOUND_MESSAGE, reply_markup=self.keyboards.back_to_menu())
            return

        siblings = siblings_of(tree, node)
        parent = None if node.is_main else find_node(tree, node.parent_id)
        await self.reply(
            update,
            self.messages.format_category(node, parent),
            reply_markup=self.keyboards.category_detail(node, siblings.index(node), len(siblings))
        )

    @staticmethod
    def _parse_int(text: str):
        """int when the text is a whole number, the raw text otherwise"""
        try:
            return int(text)
        except ValueError:
            return text

    def get_handlers(self) -> List[TelegramHandler]:
        """Telegram handlers for the category screens, in registration order"""
        cancel_fallbacks = [
            CommandHandler('cancel', self.cancel_conversation),
            CallbackQueryHandler(self.cancel_conversation, pattern=f'^{CANCEL}$')
        ]

        add_conversation = ConversationHandler(
            entry_points=[
                CallbackQueryHandler(
                    self.start_add_category,
                    pattern=f'^({ADD_CATEGORY}$|{ADD_SUBCATEGORY})'
                )
            ],
            states={
                WAITING_CATEGORY_NAME: [
                    MessageHandler(filters.TEXT & ~filters.COMMAND, self.handle_category_name)
                ],
                WAITING_CATEGORY_DESCRIPTION: [
                    MessageHandler(filters.TEXT & ~filters.COMMAND, self.handle_category_description),
                    CommandHandler('skip', self.handle_category_description)
                ],
                WAITING_CATEGORY_SORT_ORDER: [
                    MessageHandler(filters.TEXT & ~filters.COMMAND, self.handle_category_sort_order),
                    CommandHandler('skip', self.handle_category_sort_order)
                ],
                WAITING_PARENT_CATEGORY: [
                    CallbackQueryHandler(self.handle_parent_selection, pattern=f'^{PARENT_CATEGORY}')
                ]
            },
            fallbacks=cancel_fallbacks
        )

        edit_conversation = ConversationHandler(
            entry_points=[
                CallbackQueryHandler(self.start_edit_category, pattern=f'^{EDIT_CATEGORY}')
            ],
            states={
                WAITING_EDIT_VALUE: [
                    CallbackQueryHandler(self.handle_category_edit_field, pattern=f'^{EDIT_FIELD}'),
                    MessageHandler(filters.TEXT & ~filters.COMMAND, self.handle_edit_category_value)
                ]
            },
            fallbacks=cancel_fallbacks
        )

        delete_conversation = ConversationHandler(
            entry_points=[
                CallbackQueryHandler(self.handle_delete_category, pattern=f'^{DELETE_CATEGORY}')
            ],
            states={
                CONFIRM_DELETE_CATEGORY: [
                    CallbackQueryHandler(self.handle_delete_confirmation, pattern=f'^{CONFIRM_DELETE}$')
                ]
            },
            fallbacks=cancel_fallbacks
        )

        return [
            CommandHandler('categories', self.categories_command),
            CommandHandler('find', self.find_command),
            add_conversation,
            edit_conversation,
            delete_conversation,
            CallbackQueryHandler(self.show_categories_menu, pattern=f'^{MANAGE_CATEGORIES}$'),
            CallbackQueryHandler(self.view_category, pattern=f'^{VIEW_CATEGORY}'),
            CallbackQueryHandler(self.move_category, pattern=f'^({MOVE_TOP}|{MOVE_UP}|{MOVE_DOWN})'),
            CallbackQueryHandler(self.repair_sort_orders, pattern=f'^{REPAIR_SORT_ORDERS}$'),
            CallbackQueryHandler(self.cancel_conversation, pattern=f'^{CANCEL}$')
        ]
