"""
Telegram Relay - Chat Adapter for the Command Execution Guard
==============================================================

Forwards private text messages from the single authorized user to the
agent and posts the reply back in chunks. Short yes/no answers are left
alone: the terminal approval hook reads those itself.

All collaborators are injected; this class does not load configuration.
"""

import asyncio
import logging
import re
from typing import Optional

from telegram import Update
from telegram.constants import ChatAction, ChatType
from telegram.error import TelegramError
from telegram.ext import Application, ContextTypes, MessageHandler, filters

from agent_orange.config.settings import RelayConfig
from agent_orange.relay import CommandGuard, CommandOutcome, chunk_text

logger = logging.getLogger(__name__)

YES_NO_PATTERN = re.compile(r"^(1|y|yes|n|no|allow|ok|deny|reject)$", re.IGNORECASE)


class TelegramRelay:
    def __init__(self, guard: CommandGuard, config: RelayConfig) -> None:
        self.guard = guard
        self.config = config
        self.authorized_user_id = config.authorized_user_id
        self.application: Optional[Application] = None

    # ========================================================================
    # AUTHORIZATION & FILTERING
    # ========================================================================

    def _is_authorized(self, update: Update) -> bool:
        chat = update.effective_chat
        user = update.effective_user
        if chat is None or user is None:
            return False
        if chat.type != ChatType.PRIVATE or user.is_bot:
            return False
        return user.id == self.authorized_user_id

    @staticmethod
    def is_yes_no(text: str) -> bool:
        return bool(YES_NO_PATTERN.match(text))

    # ========================================================================
    # TYPING INDICATOR
    # ========================================================================

    async def _keep_typing(self, update: Update) -> None:
        """Refresh the typing indicator until cancelled."""
        while True:
            try:
                await update.effective_chat.send_action(ChatAction.TYPING)
            except TelegramError as e:
                logger.debug("Typing indicator failed: %s", e)
            await asyncio.sleep(self.config.typing_interval)

    # ========================================================================
    # MESSAGE HANDLER
    # ========================================================================

    async def handle_text_message(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if not self._is_authorized(update) or update.message is None:
            return

        content = (update.message.text or "").strip()
        if not content or self.is_yes_no(content):
            return

        typing_task: Optional[asyncio.Task] = None

        def start_typing() -> None:
            nonlocal typing_task
            typing_task = asyncio.create_task(self._keep_typing(update))

        try:
            result = await self.guard.execute(content, on_accept=start_typing)
        finally:
            if typing_task is not None:
                typing_task.cancel()

        if not result.accepted:
            await update.message.reply_text(result.text)
            return

        chat = update.effective_chat
        if result.outcome == CommandOutcome.FAILED:
            await chat.send_message(f"Error: {result.text}")
            return

        chunks = chunk_text(result.text, self.config.max_message_length)
        for chunk in chunks:
            await chat.send_message(chunk)
        logger.info("[done] sent %d message(s)", len(chunks))

    async def _on_error(self, update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
        logger.error("Telegram handler error: %s", context.error, exc_info=context.error)

    # ========================================================================
    # STARTUP & RUN
    # ========================================================================

    def build_application(self) -> Application:
        # A second command must reach the guard while the first runs, not wait behind it
        application = (
            Application.builder()
            .token(self.config.bot_token)
            .concurrent_updates(True)
            .build()
        )
        application.add_handler(
            MessageHandler(
                filters.ChatType.PRIVATE & filters.TEXT & ~filters.COMMAND,
                self.handle_text_message,
                block=False,
            )
        )
        application.add_error_handler(self._on_error)
        return application

    def run(self) -> None:
        """Start polling; blocks until the process is stopped."""
        self.application = self.build_application()
        logger.info("Telegram relay starting")
        logger.info("  Project directory: %s", self.config.project_dir)
        logger.info("  Authorized user: %s", self.authorized_user_id)
        self.application.run_polling(allowed_updates=Update.ALL_TYPES)
