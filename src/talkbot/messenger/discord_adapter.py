"""Discord messenger adapter using discord.py v2+."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

import discord
from discord.ext import commands

from talkbot.core.commands import Command
from talkbot.core.types import Platform
from talkbot.log import get_logger
from talkbot.messenger.base import MessengerAdapter
from talkbot.messenger.models import Attachment, IncomingMessage, OutgoingMessage

logger = get_logger(__name__)

ButtonHandler = Callable[[discord.Interaction, Command], Awaitable[None]]


class ActionView(discord.ui.View):
    """Follow-up action buttons attached to the first chunk of a reply."""

    def __init__(self, actions: tuple[Command, ...], on_press: ButtonHandler):
        super().__init__(timeout=None)
        for action in actions:
            button: discord.ui.Button = discord.ui.Button(
                label=action.label, style=discord.ButtonStyle.secondary
            )
            button.callback = self._make_callback(action, on_press)  # type: ignore[method-assign]
            self.add_item(button)

    @staticmethod
    def _make_callback(action: Command, on_press: ButtonHandler):
        async def _callback(interaction: discord.Interaction) -> None:
            await interaction.response.defer()
            await on_press(interaction, action)

        return _callback


class DiscordAdapter(MessengerAdapter):
    """Discord bot adapter using discord.py."""

    def __init__(self, bot_id: str, config: dict):
        super().__init__(bot_id, config)
        intents = discord.Intents.default()
        intents.message_content = True
        self._bot = commands.Bot(command_prefix="!", intents=intents)
        self._task: asyncio.Task[Any] | None = None
        self._ready = asyncio.Event()

        @self._bot.event
        async def on_ready() -> None:
            logger.info("discord_bot_ready", user=str(self._bot.user), bot_id=self.bot_id)
            self._ready.set()

        @self._bot.event
        async def on_message(message: discord.Message) -> None:
            if message.author == self._bot.user or message.author.bot:
                return
            await self._on_discord_message(message)

    @property
    def platform_name(self) -> str:
        return Platform.DISCORD

    async def start(self) -> None:
        token = self.config.get("token", "")
        if not token:
            raise ValueError(f"Discord bot token not configured for bot '{self.bot_id}'")

        self._task = asyncio.create_task(self._bot.start(token))
        try:
            await asyncio.wait_for(self._ready.wait(), timeout=30)
        except asyncio.TimeoutError:
            logger.warning("discord_ready_timeout", bot_id=self.bot_id)

        logger.info("discord_adapter_started", bot_id=self.bot_id)

    async def stop(self) -> None:
        await self._bot.close()
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        logger.info("discord_adapter_stopped", bot_id=self.bot_id)

    async def send_message(self, message: OutgoingMessage) -> None:
        channel = self._bot.get_channel(int(message.chat_id))
        if channel is None:
            channel = await self._bot.fetch_channel(int(message.chat_id))

        if not isinstance(channel, (discord.TextChannel, discord.DMChannel, discord.Thread)):
            raise TypeError(f"Channel {message.chat_id} cannot receive messages")

        if message.actions:
            await channel.send(
                message.text, view=ActionView(message.actions, self._on_button_press)
            )
        else:
            await channel.send(message.text)

    async def send_typing_indicator(self, chat_id: str) -> None:
        channel = self._bot.get_channel(int(chat_id))
        if channel and hasattr(channel, "typing"):
            await channel.typing()  # type: ignore[union-attr]

    async def _on_button_press(self, interaction: discord.Interaction, action: Command) -> None:
        if not self._message_callback or interaction.channel_id is None:
            return
        await self._dispatch(
            IncomingMessage(
                platform=Platform.DISCORD,
                bot_id=self.bot_id,
                chat_id=str(interaction.channel_id),
                user_id=str(interaction.user.id),
                user_display_name=interaction.user.display_name,
                text=action.text,
                timestamp=datetime.now(timezone.utc),
                is_private=isinstance(interaction.channel, discord.DMChannel),
            )
        )

    async def _on_discord_message(self, message: discord.Message) -> None:
        """Handle incoming Discord message (text and/or attachments)."""
        if not self._message_callback:
            return

        text = message.content or ""
        attachments: list[Attachment] = []

        for att in message.attachments:
            try:
                data = await att.read()
                media_type = att.content_type or "application/octet-stream"
                attachments.append(
                    Attachment(data=data, media_type=media_type, filename=att.filename)
                )
            except Exception as e:
                logger.warning("discord_attachment_download_error", error=str(e))

        if not text and not attachments:
            return

        mentions_bot = self._bot.user is not None and self._bot.user in message.mentions
        if mentions_bot and self._bot.user is not None:
            # Drop the raw <@id> token so it does not end up in the prompt
            text = text.replace(f"<@{self._bot.user.id}>", "").strip()

        await self._dispatch(
            IncomingMessage(
                platform=Platform.DISCORD,
                bot_id=self.bot_id,
                chat_id=str(message.channel.id),
                user_id=str(message.author.id),
                user_display_name=message.author.display_name,
                text=text,
                timestamp=message.created_at or datetime.now(timezone.utc),
                is_private=isinstance(message.channel, discord.DMChannel),
                mentions_bot=mentions_bot,
                reply_to_message_id=(
                    str(message.reference.message_id) if message.reference else None
                ),
                attachments=attachments,
            )
        )

    async def _dispatch(self, incoming: IncomingMessage) -> None:
        try:
            await self._message_callback(incoming)  # type: ignore[misc]
        except Exception as e:
            logger.error("discord_handler_error", error=str(e), channel_id=incoming.chat_id)
