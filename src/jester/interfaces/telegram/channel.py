"""
Telegram Channel Implementation

Bridges python-telegram-bot and the dispatch orchestrator: converts
updates into events, runs the (blocking) dispatch in a worker thread and
delivers the resulting messages.
"""
import asyncio
from typing import Awaitable, Callable, Optional, Sequence

from telegram import Bot, Message as TelegramMessage, Update, User
from telegram.constants import ChatType, DiceEmoji, ParseMode
from telegram.error import TelegramError
from telegram.ext import Application, CallbackQueryHandler, ContextTypes, MessageHandler, filters

from jester.core.config import GameConfig, MessagingConfig
from jester.core.content import ZodiacSign
from jester.core.logging import logger
from jester.interfaces.telegram.keyboards import build_keyboard
from jester.models.schemas import (
    CallbackAction,
    DispatchResult,
    OutgoingMessage,
    TextMessage,
)
from jester.services import templates
from jester.services.chat.orchestrator import DispatchOrchestrator

GROUP_CHAT_TYPES = (ChatType.GROUP, ChatType.SUPERGROUP)

# New text messages only; edits and channel posts are not dispatched
TEXT_MESSAGES = filters.UpdateType.MESSAGE & filters.TEXT


class ChannelNotAvailableError(RuntimeError):
    """The bot token is missing."""


def display_name(user: Optional[User]) -> str:
    """Best-effort human name for the message log."""
    if user is None:
        return "Unknown User"
    full = " ".join(part for part in (user.first_name, user.last_name) if part).strip()
    if full:
        return full
    if user.username:
        return f"@{user.username}"
    return "Unknown User"


def addresses_bot(message: TelegramMessage, bot_username: str) -> bool:
    """Mention of the bot, or a reply to one of the bot's messages."""
    text = message.text or ""
    if bot_username:
        if f"@{bot_username.lstrip('@').lower()}" in text.lower():
            return True
    elif "@" in text:
        return True

    reply = message.reply_to_message
    return bool(reply and reply.from_user and reply.from_user.is_bot)


class TelegramChannel:
    """
    Telegram bot channel.

    Features:
    - Text messages and commands go through the dispatch orchestrator
    - Inline keyboard presses are answered and dispatched as callbacks
    - Long answers arrive as several messages, controls on the last one
    - Roulette answers are delivered after a slot-machine animation
    """

    def __init__(
        self,
        orchestrator: DispatchOrchestrator,
        bot_token: str,
        bot_username: str = "",
        messaging: Optional[MessagingConfig] = None,
        game: Optional[GameConfig] = None,
        zodiac: Sequence[ZodiacSign] = (),
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize Telegram channel.

        Args:
            orchestrator: Dispatch orchestrator that produces the answers
            bot_token: Telegram bot token
            bot_username: Bot username used to detect mentions in groups
        """
        self.orchestrator = orchestrator
        self.bot_token = bot_token
        self.bot_username = bot_username.lstrip("@")
        self.messaging = messaging or MessagingConfig()
        self.game = game or GameConfig()
        self.zodiac = list(zodiac)
        self._sleep = sleep
        self.application: Optional[Application] = None

    def is_available(self) -> bool:
        """Check if Telegram is configured."""
        return bool(self.bot_token)

    def handlers(self):
        """Update handlers; commands are classified by the orchestrator like any other text."""
        return [
            CallbackQueryHandler(self._handle_callback),
            MessageHandler(TEXT_MESSAGES, self._handle_text_message),
        ]

    async def start(self):
        """Start the Telegram bot (begin polling for updates)."""
        if not self.is_available():
            raise ChannelNotAvailableError("Telegram channel not configured")

        logger.info("Starting Telegram bot...")

        self.application = Application.builder().token(self.bot_token).build()

        self.application.add_handlers(self.handlers())

        await self.application.initialize()
        if not self.bot_username:
            self.bot_username = self.application.bot.username or ""
        await self.application.start()
        await self.application.updater.start_polling()

        logger.info(f"Telegram bot started as @{self.bot_username}")

    async def stop(self):
        """Stop the Telegram bot."""
        if not self.application:
            return

        logger.info("Stopping Telegram bot...")

        await self.application.updater.stop()
        await self.application.stop()
        await self.application.shutdown()
        self.application = None

        logger.info("Telegram bot stopped")

    def text_event(self, update: Update) -> Optional[TextMessage]:
        """Convert a text update into an event (None when there is no text)."""
        message = update.effective_message
        if message is None or not message.text:
            return None

        chat = update.effective_chat
        user = update.effective_user
        return TextMessage(
            text=message.text,
            chat_id=chat.id,
            user_id=user.id if user else None,
            user_name=display_name(user),
            is_group=chat.type in GROUP_CHAT_TYPES,
            addresses_bot=addresses_bot(message, self.bot_username),
        )

    def callback_event(self, update: Update) -> Optional[CallbackAction]:
        query = update.callback_query
        if query is None or not query.data:
            return None

        chat = update.effective_chat
        return CallbackAction(
            data=query.data,
            chat_id=chat.id if chat else query.from_user.id,
            user_id=query.from_user.id,
            user_name=display_name(query.from_user),
            is_group=bool(chat and chat.type in GROUP_CHAT_TYPES),
        )

    async def _handle_text_message(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle incoming text messages (commands included)."""
        event = self.text_event(update)
        if event is None:
            return

        logger.info(f"Received message from {event.user_name} in chat {event.chat_id}: {event.text[:50]}")
        result = await asyncio.to_thread(self.orchestrator.dispatch, event)
        await self.deliver(context.bot, event.chat_id, result)

    async def _handle_callback(self, update: Update, context: ContextTypes.DEFAULT_TYPE):
        """Handle inline keyboard presses."""
        query = update.callback_query
        try:
            await query.answer()
        except TelegramError as e:
            logger.warning(f"Could not answer callback query: {e}")

        event = self.callback_event(update)
        if event is None:
            return

        logger.info(f"Callback from {event.user_name} in chat {event.chat_id}: {event.data}")
        result = await asyncio.to_thread(self.orchestrator.dispatch, event)
        await self.deliver(context.bot, event.chat_id, result)

    async def deliver(self, bot: Bot, chat_id: int, result: DispatchResult):
        """Send every message of a dispatch result, in order."""
        if not result.should_reply:
            return

        if result.animate:
            await self._animate(bot, chat_id)

        for i, message in enumerate(result.messages):
            if i and self.messaging.message_delay > 0:
                await self._sleep(self.messaging.message_delay)
            await self.send(bot, chat_id, message)

    async def _animate(self, bot: Bot, chat_id: int):
        """Filler text, a slot-machine dice, then a pause."""
        await self.send(bot, chat_id, OutgoingMessage(templates.ROULETTE_FILLER))
        try:
            await bot.send_dice(chat_id=chat_id, emoji=DiceEmoji.SLOT_MACHINE)
        except TelegramError as e:
            logger.warning(f"Could not send roulette animation: {e}")
        await self._sleep(self.game.animation_delay)

    async def send(self, bot: Bot, chat_id: int, message: OutgoingMessage) -> bool:
        """Send with Markdown; on failure retry once as plain text."""
        reply_markup = build_keyboard(message.controls, self.zodiac)
        try:
            await bot.send_message(
                chat_id=chat_id,
                text=message.text,
                parse_mode=ParseMode.MARKDOWN,
                reply_markup=reply_markup,
            )
            return True
        except TelegramError as e:
            logger.warning(f"Markdown send failed for chat {chat_id}: {e}, retrying as plain text")

        try:
            await bot.send_message(chat_id=chat_id, text=message.text, reply_markup=reply_markup)
            return True
        except TelegramError as e:
            logger.error(f"Error sending Telegram message to chat {chat_id}: {e}")
            return False
