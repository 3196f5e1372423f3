# backend/bot/handler.py
import asyncio
import logging
from typing import Any, Dict, Optional, Set

import aiohttp

from backend.bot.replies import build_reply
from backend.bot.telegram_client import TelegramAPIError, TelegramClient

logger = logging.getLogger("calcbot.handler")


class BotHandler:
    """
    Long-polls the Bot API and answers every text message.

    Each update is handled on its own task behind a fault boundary, so a
    failing reply never stalls the loop or the other messages.
    """

    def __init__(self, client: TelegramClient, poll_timeout: int = 60, retry_delay: float = 5):
        self.client = client
        self.poll_timeout = poll_timeout
        self.retry_delay = retry_delay
        self.offset: Optional[int] = None
        self._tasks: Set[asyncio.Task] = set()

    # ---------------------------
    # Messages
    # ---------------------------

    async def handle_message(self, message: Optional[Dict[str, Any]]) -> None:
        if not message or not message.get("text"):
            return

        text = message["text"].strip()
        reply = build_reply(text)

        chat_id = message["chat"]["id"]
        try:
            await self.client.send_message(
                chat_id, reply, reply_to_message_id=message.get("message_id")
            )
        except (TelegramAPIError, aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Failed to send reply to chat {chat_id}: {e}")

    async def process_update(self, update: Dict[str, Any]) -> None:
        try:
            await self.handle_message(update.get("message"))
        except Exception:
            logger.exception(f"Unexpected error while handling update {update.get('update_id')}")

    def dispatch(self, update: Dict[str, Any]) -> asyncio.Task:
        update_id = update.get("update_id")
        if isinstance(update_id, int):
            self.offset = update_id + 1

        task = asyncio.get_running_loop().create_task(self.process_update(update))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    # ---------------------------
    # Polling loop
    # ---------------------------

    async def _sleep_or_stop(self, stop: asyncio.Event, delay: float) -> None:
        try:
            await asyncio.wait_for(stop.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass

    async def run(self, stop: asyncio.Event) -> None:
        logger.info("🤖 Bot started and ready to work!")

        stop_waiter = asyncio.ensure_future(stop.wait())
        try:
            while not stop.is_set():
                poll = asyncio.ensure_future(
                    self.client.get_updates(offset=self.offset, timeout=self.poll_timeout)
                )
                await asyncio.wait({poll, stop_waiter}, return_when=asyncio.FIRST_COMPLETED)

                if stop.is_set():
                    poll.cancel()
                    await asyncio.gather(poll, return_exceptions=True)
                    break

                try:
                    updates = poll.result()
                except (TelegramAPIError, aiohttp.ClientError, asyncio.TimeoutError) as e:
                    logger.error(f"Polling failed, retrying in {self.retry_delay}s: {e}")
                    await self._sleep_or_stop(stop, self.retry_delay)
                    continue

                for update in updates:
                    if not isinstance(update, dict):
                        logger.warning(f"Skipping malformed update: {update!r}")
                        continue
                    self.dispatch(update)
        finally:
            stop_waiter.cancel()

        logger.info("📴 Stop signal received, shutting down...")

    async def drain(self, grace: float) -> None:
        """Waits up to `grace` seconds for in-flight replies, then cancels the rest."""
        if not self._tasks:
            return

        pending = set(self._tasks)
        logger.info(f"Waiting for {len(pending)} in-flight message(s)")
        _, still_running = await asyncio.wait(pending, timeout=grace)

        for task in still_running:
            task.cancel()
        if still_running:
            logger.warning(f"Cancelled {len(still_running)} unfinished message(s)")
            await asyncio.gather(*still_running, return_exceptions=True)
