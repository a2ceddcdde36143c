"""Telegram messenger adapter using python-telegram-bot v21+."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any

from telegram import (
    InlineKeyboardButton,
    InlineKeyboardMarkup,
    Message,
    MessageEntity,
    Update,
    User,
)
from telegram.constants import ChatAction, ChatType
from telegram.ext import (
    Application,
    CallbackQueryHandler,
    MessageHandler as TGMessageHandler,
    filters,
)

from talkbot.core.commands import Command
from talkbot.core.types import Platform
from talkbot.log import get_logger
from talkbot.messenger.base import MessengerAdapter
from talkbot.messenger.models import Attachment, IncomingMessage, OutgoingMessage

logger = get_logger(__name__)


def strip_mention(text: str, username: str) -> str:
    """Remove @username handles (any case) so they stay out of the prompt."""
    pattern = rf"\s*@{re.escape(username)}(?!\w)"
    return re.sub(pattern, "", text, flags=re.IGNORECASE).strip()


def build_keyboard(actions: tuple[Command, ...]) -> InlineKeyboardMarkup | None:
    """One row of inline buttons; pressing a button sends the command text back."""
    if not actions:
        return None
    return InlineKeyboardMarkup(
        [[InlineKeyboardButton(a.label, callback_data=a.text) for a in actions]]
    )


class TelegramAdapter(MessengerAdapter):
    """Telegram bot adapter using python-telegram-bot."""

    def __init__(self, bot_id: str, config: dict):
        super().__init__(bot_id, config)
        self._app: Application | None = None  # type: ignore[type-arg]

    @property
    def platform_name(self) -> str:
        return Platform.TELEGRAM

    async def start(self) -> None:
        token = self.config.get("token", "")
        if not token:
            raise ValueError(f"Telegram bot token not configured for bot '{self.bot_id}'")

        self._app = Application.builder().token(token).build()

        # Commands are routed by the dispatcher, so take them as plain text
        self._app.add_handler(
            TGMessageHandler(filters.TEXT | filters.PHOTO, self._on_telegram_message)
        )
        self._app.add_handler(CallbackQueryHandler(self._on_callback_query))

        await self._app.initialize()
        await self._app.start()
        await self._app.updater.start_polling(drop_pending_updates=True)  # type: ignore[union-attr]
        logger.info("telegram_adapter_started", bot_id=self.bot_id)

    async def stop(self) -> None:
        if self._app:
            await self._app.updater.stop()  # type: ignore[union-attr]
            await self._app.stop()
            await self._app.shutdown()
            logger.info("telegram_adapter_stopped", bot_id=self.bot_id)

    async def send_message(self, message: OutgoingMessage) -> None:
        if not self._app or not self._app.bot:
            raise RuntimeError(f"Telegram adapter '{self.bot_id}' is not started")

        reply_id = int(message.reply_to_message_id) if message.reply_to_message_id else None
        await self._app.bot.send_message(
            chat_id=int(message.chat_id),
            text=message.text,
            reply_to_message_id=reply_id,
            reply_markup=build_keyboard(message.actions),
        )

    async def send_typing_indicator(self, chat_id: str) -> None:
        if self._app and self._app.bot:
            await self._app.bot.send_chat_action(
                chat_id=int(chat_id), action=ChatAction.TYPING
            )

    def _mentions_bot(self, msg: Message) -> bool:
        if not self._app or not self._app.bot.username:
            return False
        handle = f"@{self._app.bot.username}".lower()
        mentions = msg.parse_entities([MessageEntity.MENTION])
        caption_mentions = msg.parse_caption_entities([MessageEntity.MENTION])
        return any(
            text.lower() == handle
            for text in (*mentions.values(), *caption_mentions.values())
        )

    async def _on_telegram_message(self, update: Update, context: Any) -> None:
        """Handle incoming Telegram message (text and/or photo)."""
        if not update.message or not self._message_callback:
            return

        msg = update.message
        text = msg.text or msg.caption or ""
        attachments: list[Attachment] = []

        # Highest resolution is the last element
        if msg.photo:
            try:
                tg_file = await msg.photo[-1].get_file()
                photo_bytes = await tg_file.download_as_bytearray()
                attachments.append(
                    Attachment(data=bytes(photo_bytes), media_type="image/jpeg", filename="photo.jpg")
                )
            except Exception as e:
                logger.warning("telegram_photo_download_error", error=str(e))

        mentions_bot = self._mentions_bot(msg)
        if mentions_bot:
            text = strip_mention(text, self._app.bot.username)  # type: ignore[union-attr]
        if not text and not attachments and not mentions_bot:
            return

        await self._dispatch(
            self._incoming(
                msg,
                user=msg.from_user,
                text=text,
                attachments=attachments,
                mentions_bot=mentions_bot,
            )
        )

    async def _on_callback_query(self, update: Update, context: Any) -> None:
        """A follow-up action button was pressed; replay its command as a message."""
        query = update.callback_query
        if not query or not query.data or not self._message_callback:
            return
        await query.answer()
        if not isinstance(query.message, Message):
            return
        await self._dispatch(
            self._incoming(query.message, user=query.from_user, text=query.data)
        )

    def _incoming(
        self,
        msg: Message,
        user: User | None,
        text: str,
        attachments: list[Attachment] | None = None,
        mentions_bot: bool = False,
    ) -> IncomingMessage:
        return IncomingMessage(
            platform=Platform.TELEGRAM,
            bot_id=self.bot_id,
            chat_id=str(msg.chat_id),
            user_id=str(user.id) if user else "unknown",
            user_display_name=user.full_name if user else "Unknown",
            text=text,
            timestamp=msg.date or datetime.now(timezone.utc),
            is_private=msg.chat.type == ChatType.PRIVATE,
            mentions_bot=mentions_bot,
            reply_to_message_id=(
                str(msg.reply_to_message.message_id) if msg.reply_to_message else None
            ),
            attachments=attachments or [],
        )

    async def _dispatch(self, incoming: IncomingMessage) -> None:
        try:
            await self._message_callback(incoming)  # type: ignore[misc]
        except Exception as e:
            logger.error("telegram_handler_error", error=str(e), chat_id=incoming.chat_id)
