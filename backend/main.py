"""
CalcBot: Telegram calculator bot
Run with: python -m backend.main [--debug]
"""
import argparse
import asyncio
import logging
import signal
import sys

from backend.bot.handler import BotHandler
from backend.bot.telegram_client import TelegramAPIError, TelegramClient, get_me
from backend.core.config import settings

logger = logging.getLogger("calcbot.main")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Telegram bot that evaluates two-operand arithmetic expressions",
    )
    parser.add_argument("--debug", action="store_true", help="Enable DEBUG logging")
    return parser.parse_args(argv)


async def serve(token: str) -> None:
    stop = asyncio.Event()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            # Windows event loops have no signal handler support
            signal.signal(sig, lambda *_: loop.call_soon_threadsafe(stop.set))

    async with TelegramClient(
        token,
        base_url=settings.TELEGRAM_API_URL,
        request_timeout=settings.REQUEST_TIMEOUT,
    ) as client:
        handler = BotHandler(
            client,
            poll_timeout=settings.POLL_TIMEOUT,
            retry_delay=settings.RETRY_DELAY,
        )
        await handler.run(stop)
        await handler.drain(settings.SHUTDOWN_GRACE)


def main(argv=None) -> int:
    args = parse_args(argv)

    debug = args.debug or settings.DEBUG
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    token = settings.TELEGRAM_BOT_TOKEN
    if not token:
        logger.critical("Missing TELEGRAM_BOT_TOKEN in environment. Aborting.")
        return 1

    try:
        me = get_me(token, base_url=settings.TELEGRAM_API_URL, timeout=settings.REQUEST_TIMEOUT)
    except TelegramAPIError as e:
        logger.critical(f"❌ Failed to authorize bot: {e}")
        return 1

    logger.info(f"✅ Authorized as @{me.get('username')}")

    asyncio.run(serve(token))

    logger.info("👋 Bot stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
