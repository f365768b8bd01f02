"""Tests for the Telegram category screens, with mocked updates."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from telegram.ext import ConversationHandler

from promptadmin.config import Config
from promptadmin.constants import (
    MOVE_DOWN, MOVE_TOP, MOVE_UP, REPAIR_SORT_ORDERS, VIEW_CATEGORY,
    WAITING_CATEGORY_NAME, WAITING_CATEGORY_SORT_ORDER, WAITING_EDIT_VALUE, WAITING_PARENT_CATEGORY
)
from promptadmin.handlers.category_management import CategoryManagementHandler

ADMIN_ID = 42


@pytest.fixture(autouse=True)
def admins(monkeypatch):
    monkeypatch.setattr(Config, 'ADMIN_IDS', [ADMIN_ID])


@pytest.fixture
def handler(service):
    return CategoryManagementHandler(None, category_service=service)


@pytest.fixture
def context():
    return SimpleNamespace(user_data={}, args=[])


def callback_update(data, user_id=ADMIN_ID):
    update = MagicMock()
    update.effective_user.id = user_id
    update.callback_query.data = data
    update.callback_query.answer = AsyncMock()
    update.callback_query.edit_message_text = AsyncMock()
    return update


def message_update(text, user_id=ADMIN_ID):
    update = MagicMock()
    update.effective_user.id = user_id
    update.callback_query = None
    update.message.text = text
    update.message.reply_text = AsyncMock()
    update.effective_message = update.message
    return update


def sent_text(mock):
    return mock.await_args.args[0]


async def create_main(service, *names):
    return [await service.create({'name': name}) for name in names]


class TestAccess:
    @pytest.mark.asyncio
    async def test_non_admin_denied(self, handler, context, service):
        update = message_update("/categories", user_id=7)
        service.get_tree = AsyncMock()

        await handler.categories_command(update, context)

        assert "do not have access" in sent_text(update.message.reply_text)
        service.get_tree.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_menu_lists_tree(self, handler, context, service):
        marketing, _ = await create_main(service, "Marketing", "Design")
        await service.create({'name': "Email", 'parent_id': marketing.id})
        update = message_update("/categories")

        await handler.categories_command(update, context)

        text = sent_text(update.message.reply_text)
        assert "2 categories, 1 subcategories" in text
        assert text.index("1. 📁 Marketing") < text.index("1.1 📂 Email") < text.index("2. 📁 Design")

    @pytest.mark.asyncio
    async def test_empty_menu(self, handler, context):
        update = message_update("/categories")

        await handler.categories_command(update, context)

        assert "No categories found" in sent_text(update.message.reply_text)


class TestFind:
    @pytest.mark.asyncio
    async def test_usage_without_text(self, handler, context):
        update = message_update("/find")

        await handler.find_command(update, context)

        assert sent_text(update.message.reply_text).startswith("🔍 Usage")

    @pytest.mark.asyncio
    async def test_results(self, handler, context, service):
        await create_main(service, "Marketing", "Design")
        update = message_update("/find design")
        context.args = ["design"]

        await handler.find_command(update, context)

        text = sent_text(update.message.reply_text)
        assert "Design" in text
        assert "Marketing" not in text


class TestMoveAndRepair:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("prefix, index, expected", [
        (MOVE_UP, 2, ["Alpha", "Gamma", "Beta"]),
        (MOVE_DOWN, 0, ["Beta", "Alpha", "Gamma"]),
        (MOVE_TOP, 2, ["Gamma", "Alpha", "Beta"]),
    ])
    async def test_move_buttons(self, handler, context, service, prefix, index, expected):
        nodes = await create_main(service, "Alpha", "Beta", "Gamma")
        update = callback_update(f"{prefix}{nodes[index].id}")

        await handler.move_category(update, context)

        tree = await service.get_tree()
        assert [node.name for node in tree] == expected
        assert [node.sort_order for node in tree] == [1, 2, 3]
        assert f"Category: {nodes[index].name}" in sent_text(update.callback_query.edit_message_text)

    @pytest.mark.asyncio
    async def test_move_missing_node(self, handler, context):
        update = callback_update(f"{MOVE_UP}not-an-id")

        await handler.move_category(update, context)

        assert "not found" in sent_text(update.callback_query.edit_message_text)

    @pytest.mark.asyncio
    async def test_move_failure_suggests_repair(self, handler, context, service, category_records):
        categories, _ = category_records
        a, b = await create_main(service, "Alpha", "Beta")
        categories.fail_on_update.add(a.id)
        update = callback_update(f"{MOVE_TOP}{b.id}")

        await handler.move_category(update, context)

        assert "Fix sort orders" in sent_text(update.callback_query.edit_message_text)

    @pytest.mark.asyncio
    async def test_repair_messages(self, handler, context, service):
        service.repair = AsyncMock(return_value=True)
        update = callback_update(REPAIR_SORT_ORDERS)
        await handler.repair_sort_orders(update, context)
        assert sent_text(update.callback_query.edit_message_text).startswith("✅")

        service.repair = AsyncMock(return_value=False)
        update = callback_update(REPAIR_SORT_ORDERS)
        await handler.repair_sort_orders(update, context)
        assert sent_text(update.callback_query.edit_message_text).startswith("❌")


class TestAddFlow:
    @pytest.mark.asyncio
    async def test_short_name_keeps_state(self, handler, context):
        update = message_update("a")

        state = await handler.handle_category_name(update, context)

        assert state == WAITING_CATEGORY_NAME
        assert "at least 2 characters" in sent_text(update.message.reply_text)
        assert 'new_category_name' not in context.user_data

    @pytest.mark.asyncio
    async def test_invalid_sort_order_keeps_state(self, handler, context):
        context.user_data['new_category_name'] = "Writing"
        update = message_update("1000")

        state = await handler.handle_category_sort_order(update, context)

        assert state == WAITING_CATEGORY_SORT_ORDER

    @pytest.mark.asyncio
    async def test_main_category_created_after_parent_choice(self, handler, context, service):
        context.user_data.update({'new_category_name': "Writing", 'new_category_description': None})

        state = await handler.handle_category_sort_order(message_update("/skip"), context)
        assert state == WAITING_PARENT_CATEGORY

        update = callback_update("parent_category_none")
        state = await handler.handle_parent_selection(update, context)

        assert state == ConversationHandler.END
        assert "created with sort order 1" in sent_text(update.callback_query.edit_message_text)
        assert [node.name for node in await service.get_tree()] == ["Writing"]
        assert context.user_data == {}

    @pytest.mark.asyncio
    async def test_subcategory_created_under_preset_parent(self, handler, context, service):
        parent, = await create_main(service, "Marketing")
        context.user_data.update({
            'new_category_parent': str(parent.id),
            'new_category_name': "Email",
            'new_category_description': None,
        })
        update = message_update("/skip")

        state = await handler.handle_category_sort_order(update, context)

        assert state == ConversationHandler.END
        assert "created with sort order 1" in sent_text(update.message.reply_text)
        assert [child.name for child in (await service.get_tree())[0].children] == ["Email"]


class TestEditFlow:
    @pytest.mark.asyncio
    async def test_edit_rejects_duplicate_name(self, handler, context, service):
        _, design = await create_main(service, "Marketing", "Design")
        context.user_data.update({'editing_category_id': str(design.id), 'editing_field': 'name'})
        update = message_update("marketing")

        state = await handler.handle_edit_category_value(update, context)

        assert state == WAITING_EDIT_VALUE
        assert "already exists" in sent_text(update.message.reply_text)

    @pytest.mark.asyncio
    async def test_edit_applies_value(self, handler, context, service):
        node, = await create_main(service, "Marketing")
        context.user_data.update({'editing_category_id': str(node.id), 'editing_field': 'sort_order'})
        update = message_update("5")

        state = await handler.handle_edit_category_value(update, context)

        assert state == ConversationHandler.END
        assert (await service.get_node(node.id)).sort_order == 5


class TestDeleteFlow:
    @pytest.mark.asyncio
    async def test_delete_warns_and_deletes(self, handler, context, service):
        parent, = await create_main(service, "Marketing")
        await service.create({'name': "Email", 'parent_id': parent.id})

        update = callback_update(f"delete_category_{parent.id}")
        await handler.handle_delete_category(update, context)
        assert "contains 1 subcategories" in sent_text(update.callback_query.edit_message_text)

        update = callback_update("confirm_delete_category")
        state = await handler.handle_delete_confirmation(update, context)

        assert state == ConversationHandler.END
        assert sent_text(update.callback_query.edit_message_text) == "✅ Category deleted."
        assert await service.get_tree() == []


class TestRegistration:
    def test_handlers_bound_to_instance(self, handler):
        handlers = handler.get_handlers()

        assert len(handlers) == 10
        assert sum(isinstance(h, ConversationHandler) for h in handlers) == 3

    @pytest.mark.asyncio
    async def test_view_category(self, handler, context, service):
        node, = await create_main(service, "Marketing")
        update = callback_update(f"{VIEW_CATEGORY}{node.id}")

        await handler.view_category(update, context)

        text = sent_text(update.callback_query.edit_message_text)
        assert "Slug: marketing" in text
        assert "Sort order: 1" in text


class TestStoreOutage:
    @pytest.mark.asyncio
    async def test_menu_and_search_report_outage(self, handler, context, category_records):
        categories, _ = category_records
        categories.fail_on_list = True

        update = message_update("/categories")
        await handler.categories_command(update, context)
        assert "unavailable" in sent_text(update.message.reply_text)

        update = message_update("/find design")
        context.args = ["design"]
        await handler.find_command(update, context)
        assert "unavailable" in sent_text(update.message.reply_text)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("screen, prefix", [
        ('view_category', VIEW_CATEGORY),
        ('move_category', MOVE_DOWN),
        ('start_edit_category', "edit_category_"),
        ('handle_delete_category', "delete_category_"),
    ])
    async def test_callback_screens_report_outage(self, handler, context, service, category_records,
                                                  screen, prefix):
        categories, _ = category_records
        alpha, = await create_main(service, "Alpha")
        categories.fail_on_list = True
        update = callback_update(f"{prefix}{alpha.id}")

        state = await getattr(handler, screen)(update, context)

        assert "unavailable" in sent_text(update.callback_query.edit_message_text)
        assert state in (None, ConversationHandler.END)
        assert categories.updates == []

    @pytest.mark.asyncio
    async def test_parent_picker_ends_conversation_on_outage(self, handler, context, category_records):
        categories, _ = category_records
        categories.fail_on_list = True
        context.user_data.update({'new_category_name': "Writing", 'new_category_description': None})
        update = message_update("/skip")

        state = await handler.handle_category_sort_order(update, context)

        assert state == ConversationHandler.END
        assert "unavailable" in sent_text(update.message.reply_text)
        assert context.user_data == {}
