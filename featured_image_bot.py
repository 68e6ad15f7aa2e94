"""
Featured Image Telegram Bot
Send a headline (and optionally a photo) and get back a 1200x630 blog header.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Optional

from telegram import Update
from telegram.error import TelegramError
from telegram.ext import Application, CommandHandler, ContextTypes, MessageHandler, filters
from telegram.request import HTTPXRequest

from config import get_config, validate_config
from exceptions import ValidationError
from image_templates.featured_image import FeaturedImageGenerator
from logging_config import setup_logging, error_handler, log_exception, LogStyler, Colors
from models import Variant
from session import ImageSession, Notice

logger = logging.getLogger(__name__)

NOTICE_ICONS = {'success': '✅', 'error': '❌', 'warning': '⚠️'}

USAGE = (
    "🖼 Featured Image Generator\n\n"
    "Send any text to render it as a 1200x630 header image.\n"
    "Send a photo to use it as the background.\n\n"
    "/generate [text] - render (again)\n"
    "/download - get the PNG file\n"
    "/variant classic|banner|tinted - pick a style\n"
    "/category <text> - label above the banner title\n"
    "/set <field> <value> - change a color or opacity\n"
    "/style - show current style\n"
    "/reset - restore the default style\n"
    "/clearbg - drop the background photo"
)


def format_notice(notice: Notice) -> str:
    return f"{NOTICE_ICONS.get(notice.level, '')} {notice.message}".strip()


class FeaturedImageBot:
    def __init__(self, generator: Optional[FeaturedImageGenerator] = None):
        if not validate_config():
            raise ValueError("Invalid configuration")

        self.config = get_config()
        self.generator = generator or FeaturedImageGenerator()

        # Pillow rendering is CPU bound -> run in executor
        self.executor = ThreadPoolExecutor(max_workers=self.config.get('generator_workers', 2))

    def get_session(self, context: ContextTypes.DEFAULT_TYPE) -> ImageSession:
        session = context.chat_data.get('session')
        if session is None:
            session = ImageSession(self.generator)
            context.chat_data['session'] = session
        return session

    async def run_generation(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        session = self.get_session(context)

        loop = asyncio.get_running_loop()
        notice = await loop.run_in_executor(self.executor, session.generate)

        if notice.ok and session.current is not None:
            await update.message.reply_photo(
                photo=session.current.to_bytesio(),
                caption=f"{format_notice(notice)}\nUse /download for the PNG file."
            )
        else:
            await update.message.reply_text(format_notice(notice))

    async def text_message(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        self.get_session(context).set_text(update.message.text or "")
        await self.run_generation(update, context)

    async def generate_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        if context.args:
            self.get_session(context).set_text(" ".join(context.args))
        await self.run_generation(update, context)

    async def download_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        notice, image = self.get_session(context).download()
        if image is None:
            await update.message.reply_text(format_notice(notice))
            return
        await update.message.reply_document(
            document=image.to_bytesio(),
            filename=image.filename(),
            caption=format_notice(notice)
        )

    async def background_upload(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        message = update.message
        if message.photo:
            attachment = message.photo[-1]  # largest size
        else:
            attachment = message.document

        try:
            telegram_file = await attachment.get_file()
            data = await telegram_file.download_as_bytearray()
        except TelegramError as e:
            log_exception(e, "Upload failed")
            await message.reply_text(format_notice(Notice('error', "Could not receive the image")))
            return

        notice = self.get_session(context).upload_background(data)
        await message.reply_text(format_notice(notice))

    async def variant_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        session = self.get_session(context)
        if not context.args:
            names = ", ".join(v.value for v in Variant)
            await update.message.reply_text(f"Current variant: {session.variant.value}\nAvailable: {names}")
            return
        try:
            variant = session.set_variant(context.args[0])
        except ValidationError as e:
            await update.message.reply_text(format_notice(Notice('error', str(e))))
            return
        await update.message.reply_text(f"Variant set to {variant.value}")

    async def category_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        session = self.get_session(context)
        session.set_category(" ".join(context.args or []))
        if session.category:
            await update.message.reply_text(f"Category set to {session.category.upper()}")
        else:
            await update.message.reply_text("Category cleared")

    async def set_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        args = context.args or []
        if len(args) < 2:
            await update.message.reply_text("Usage: /set <field> <value>, e.g. /set text_color #ffcc00")
            return
        try:
            self.get_session(context).set_style(args[0], " ".join(args[1:]))
        except ValidationError as e:
            await update.message.reply_text(format_notice(Notice('error', str(e))))
            return
        await update.message.reply_text(f"{args[0]} updated")

    async def style_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        rows = self.get_session(context).style.describe()
        await update.message.reply_text("\n".join(f"{name}: {value}" for name, value in rows))

    async def reset_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        self.get_session(context).reset_style()
        await update.message.reply_text("Style reset to defaults")

    async def clearbg_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        self.get_session(context).clear_background()
        await update.message.reply_text("Background photo removed")

    async def start_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        await update.message.reply_text(USAGE)

    async def post_shutdown(self, application: Application):
        """Hook to close resources"""
        self.executor.shutdown(wait=False)
        logger.info("Generator pool closed")

    def build_application(self) -> Application:
        request = HTTPXRequest(
            connection_pool_size=8,
            read_timeout=30.0,
            write_timeout=30.0,
            connect_timeout=20.0
        )

        application = (
            Application.builder()
            .token(self.config['telegram_bot_token'])
            .post_shutdown(self.post_shutdown)
            .request(request)
            .build()
        )

        application.add_error_handler(error_handler)

        application.add_handler(CommandHandler(["start", "help"], self.start_command))
        application.add_handler(CommandHandler("generate", self.generate_command))
        application.add_handler(CommandHandler("download", self.download_command))
        application.add_handler(CommandHandler("variant", self.variant_command))
        application.add_handler(CommandHandler("category", self.category_command))
        application.add_handler(CommandHandler("set", self.set_command))
        application.add_handler(CommandHandler("style", self.style_command))
        application.add_handler(CommandHandler("reset", self.reset_command))
        application.add_handler(CommandHandler("clearbg", self.clearbg_command))
        application.add_handler(MessageHandler(filters.PHOTO | filters.Document.IMAGE, self.background_upload))
        application.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, self.text_message))
        return application

    def run(self):
        """Main entry point"""
        application = self.build_application()

        LogStyler.box("FEATURED IMAGE BOT STARTED", [
            ("Time:", datetime.now().strftime("%H:%M:%S")),
            ("Workers:", f"{self.config.get('generator_workers', 2)} Threads"),
            ("Canvas:", "{width}x{height}".format(**self.config['image_settings'])),
            ("Google Fonts:", "On" if self.config.get('google_fonts') else "Off"),
        ], color=Colors.GREEN)

        logger.info("Initializing Poll Loop...")
        application.run_polling(allowed_updates=Update.ALL_TYPES)


def main():
    setup_logging()
    try:
        bot = FeaturedImageBot()
        bot.run()
    except Exception as e:
        log_exception(e, "Fatal Error in Main Loop")


if __name__ == "__main__":
    main()
