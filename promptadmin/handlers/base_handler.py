# promptadmin/handlers/base_handler.py
from telegram import Update
from telegram.ext import ContextTypes, ConversationHandler
from ..config import Config
from ..utils.keyboards import Keyboards
from ..utils.messages import Messages

class BaseHandler:
    """Base class for admin screen handlers"""
    def __init__(self, db):
        self.db = db
        self.keyboards = Keyboards()
        self.messages = Messages()

    @staticmethod
    async def cancel_conversation(update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Cancel the current conversation"""
        context.user_data.clear()
        if update.callback_query:
            await update.callback_query.answer()
            await update.callback_query.edit_message_text(
                "❌ Cancelled.",
                reply_markup=Keyboards.back_to_menu()
            )
        else:
            await update.message.reply_text("❌ Cancelled.", reply_markup=Keyboards.back_to_menu())
        return ConversationHandler.END

    @staticmethod
    async def reply(update: Update, text: str, reply_markup=None):
        """Edit the callback message, or answer the text message"""
        if update.callback_query:
            await update.callback_query.edit_message_text(text, reply_markup=reply_markup)
        else:
            await update.effective_message.reply_text(text, reply_markup=reply_markup)

    async def is_admin(self, user_id: int) -> bool:
        """Check admin access"""
        return user_id in Config.ADMIN_IDS
