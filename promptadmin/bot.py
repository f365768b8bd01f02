# promptadmin/bot.py
import logging
from telegram import Update
from telegram.ext import Application, CommandHandler, ContextTypes
from .config import Config
from .database import Database
from .handlers import CategoryManagementHandler

class PromptAdminBot:
    def __init__(self):
        """Build the Telegram application"""
        Config.validate()
        self.logger = logging.getLogger(__name__)
        self.db = Database()
        self.application = (
            Application.builder()
            .token(Config.TELEGRAM_TOKEN)
            .post_init(self._on_startup)
            .post_shutdown(self._on_shutdown)
            .build()
        )
        self.setup_handlers()

    def setup_handlers(self):
        """Register the admin screens"""
        category_handler = CategoryManagementHandler(self.db)

        self.application.add_handler(CommandHandler("start", category_handler.categories_command))
        for handler in category_handler.get_handlers():
            self.application.add_handler(handler)

        self.application.add_error_handler(self._on_error)

    async def _on_startup(self, application: Application):
        await self.db.connect()

    async def _on_shutdown(self, application: Application):
        await self.db.close()

    async def _on_error(self, update: object, context: ContextTypes.DEFAULT_TYPE):
        self.logger.error("Unhandled error while processing an update", exc_info=context.error)

    def run(self):
        """Poll Telegram until interrupted"""
        self.logger.info("Starting admin bot...")
        self.application.run_polling(allowed_updates=Update.ALL_TYPES)
