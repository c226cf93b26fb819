# app.py

import asyncio
import io
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Optional, Sequence

from telegram import Update
from telegram.ext import (
    Application,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)
from telegram.request import HTTPXRequest

from config import Settings
from domain.dtos import Color, Palette
from domain.enums import PALETTE_SIZES
from services.color_format import describe
from services.image_utils import ImageDecodeError, bytes_to_buffer
from services.palette_extractor import PaletteExtractor
from services.palette_repository import PaletteRepository
from services.session import ExtractionSession

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
log = logging.getLogger("app")

SESSION_KEY = "session"
COUNT_KEY = "count"


def format_palette(colors: Sequence[Color]) -> str:
    lines = []
    for i, color in enumerate(colors, start=1):
        d = describe(color)
        lines.append(f"{i}. {d['hex']}  {d['rgb']}  {d['hsl']}")
    return "\n".join(lines)


def format_saved(palettes: Iterable[Palette]) -> str:
    lines = []
    for i, p in enumerate(palettes, start=1):
        codes = " ".join(describe(c)["hex"] for c in p.colors)
        lines.append(f"{i}. {p.date:%Y-%m-%d}  {codes}")
    return "\n".join(lines)


class BotApp:
    """Composition root. Wires services and Telegram handlers."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.repo = PaletteRepository(settings.db_url)
        self.extractor = PaletteExtractor(stride=settings.sampling_stride)
        self.pool = ThreadPoolExecutor(max_workers=settings.workers)

    def _count_for(self, context: ContextTypes.DEFAULT_TYPE) -> int:
        return context.chat_data.get(COUNT_KEY, self.settings.default_color_count)

    @staticmethod
    def _chat_id(update: Update) -> int:
        return update.effective_chat.id

    @staticmethod
    def _saved_index(context: ContextTypes.DEFAULT_TYPE) -> Optional[int]:
        try:
            return int(context.args[0]) - 1
        except (IndexError, ValueError):
            return None

    async def _generate(self, session: ExtractionSession):
        return await asyncio.get_running_loop().run_in_executor(self.pool, session.generate)

    async def start(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await update.message.reply_html(
            "<b>Hi!</b> Send me a picture and I will pull its dominant colors.\n"
            "/regenerate samples another third of the same picture.\n\n"
            "Commands: /help, /colors, /save, /saved, /export"
        )

    async def help(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        sizes = ", ".join(str(n) for n in PALETTE_SIZES)
        await update.message.reply_text(
            "Send a photo (or an image file).\n"
            f"/colors N - palette size, one of {sizes}\n"
            "/regenerate - sample the next band of the current image\n"
            "/save - keep the current palette\n"
            "/saved - list saved palettes\n"
            "/saved N - show every color of saved palette N\n"
            "/export - download saved palettes as JSON\n"
            "/delete N - remove saved palette N\n"
            "/clear - remove all saved palettes"
        )

    async def on_image(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.message
        if not message:
            return
        if message.photo:
            file_id = message.photo[-1].file_id
        elif message.document:
            file_id = message.document.file_id
        else:
            return
        file = await context.bot.get_file(file_id)

        bio = io.BytesIO()
        await file.download_to_memory(out=bio)
        img_bytes = bio.getvalue()

        loop = asyncio.get_running_loop()
        try:
            buffer = await loop.run_in_executor(self.pool, bytes_to_buffer, img_bytes)
        except ImageDecodeError:
            await message.reply_text("Could not read that image. Try a JPEG or PNG.")
            return
        except Exception:
            log.exception("Image decoding failed")
            await message.reply_text("Something went wrong reading the image. Try another one.")
            return

        # a new image starts over at the top third
        session = ExtractionSession(buffer, self.extractor, self._count_for(context))
        context.chat_data[SESSION_KEY] = session
        await self._reply_palette(message, session)

    async def regenerate(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        session: Optional[ExtractionSession] = context.chat_data.get(SESSION_KEY)
        if session is None:
            await update.message.reply_text("Send an image first.")
            return
        await self._reply_palette(update.message, session)

    async def colors(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        try:
            count = int(context.args[0])
        except (IndexError, ValueError):
            count = None
        if count not in PALETTE_SIZES:
            sizes = ", ".join(str(n) for n in PALETTE_SIZES)
            await update.message.reply_text(f"Usage: /colors N where N is one of {sizes}")
            return
        context.chat_data[COUNT_KEY] = count
        session: Optional[ExtractionSession] = context.chat_data.get(SESSION_KEY)
        if session is None:
            await update.message.reply_text(f"Palettes will have {count} colors.")
            return
        session.set_count(count)
        await self._reply_palette(update.message, session)

    async def save(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        session: Optional[ExtractionSession] = context.chat_data.get(SESSION_KEY)
        if session is None or not session.colors:
            await update.message.reply_text("Nothing to save yet.")
            return
        chat_id = self._chat_id(update)
        self.repo.add(chat_id, session.snapshot())
        await update.message.reply_text(f"Saved. {self.repo.count(chat_id)} palette(s) stored.")

    async def saved(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        palettes = self.repo.all(self._chat_id(update))
        if not context.args:
            await update.message.reply_text(format_saved(palettes) or "No saved palettes yet.")
            return
        index = self._saved_index(context)
        if index is None or not 0 <= index < len(palettes):
            await update.message.reply_text(f"Usage: /saved N with N between 1 and {len(palettes)}")
            return
        palette = palettes[index]
        await update.message.reply_text(
            f"Palette {index + 1} ({palette.date:%Y-%m-%d}):\n{format_palette(palette.colors)}"
        )

    async def export(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        chat_id = self._chat_id(update)
        if not self.repo.count(chat_id):
            await update.message.reply_text("No saved palettes yet.")
            return
        body = self.repo.export_json(chat_id).encode("utf-8")
        await update.message.reply_document(document=io.BytesIO(body), filename="palettes.json")

    async def delete(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        chat_id = self._chat_id(update)
        palettes = self.repo.all(chat_id)
        index = self._saved_index(context)
        if index is None or not 0 <= index < len(palettes):
            await update.message.reply_text(f"Usage: /delete N with N between 1 and {len(palettes)}")
            return
        self.repo.delete(chat_id, palettes[index].id)
        await update.message.reply_text(f"Deleted palette {index + 1}.")

    async def clear(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        n = self.repo.clear(self._chat_id(update))
        await update.message.reply_text(f"Removed {n} saved palette(s).")

    async def _reply_palette(self, message, session: ExtractionSession) -> None:
        zone, colors = await self._generate(session)
        if not colors:
            await message.reply_text("That image is too small to sample.")
            return
        await message.reply_text(f"Palette ({zone.name} third):\n{format_palette(colors)}")

    def build_application(self) -> Application:
        request = HTTPXRequest(
            connect_timeout=20.0,
            read_timeout=40.0,
            write_timeout=20.0,
            pool_timeout=10.0,
            connection_pool_size=8,
        )

        app = (
            Application.builder()
            .token(self.settings.bot_token)
            .request(request)
            .concurrent_updates(True)
            .build()
        )
        app.add_handler(CommandHandler("start", self.start))
        app.add_handler(CommandHandler("help", self.help))
        app.add_handler(CommandHandler("regenerate", self.regenerate))
        app.add_handler(CommandHandler("colors", self.colors))
        app.add_handler(CommandHandler("save", self.save))
        app.add_handler(CommandHandler("saved", self.saved))
        app.add_handler(CommandHandler("export", self.export))
        app.add_handler(CommandHandler("delete", self.delete))
        app.add_handler(CommandHandler("clear", self.clear))
        app.add_handler(MessageHandler(filters.PHOTO | filters.Document.IMAGE, self.on_image))
        return app


def main() -> None:
    settings = Settings()
    if not settings.bot_token:
        raise SystemExit("BOT_TOKEN is not set")
    bot = BotApp(settings)
    app = bot.build_application()
    log.info("Bot started")
    app.run_polling(close_loop=False)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
