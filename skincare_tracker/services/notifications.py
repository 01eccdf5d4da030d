"""Notification delivery for reminders

Two kinds of side effects:
- show(): the reminder itself, delivered on a persistent channel when one
  is configured (Telegram push), otherwise as an in-process banner
- toast(): short-lived confirmations ("Reminder deleted", ...), banner only
"""
import logging
from collections import deque
from typing import Any, Optional, Protocol

from telegram import Bot
from telegram.error import TelegramError

from skincare_tracker.config import TELEGRAM_BOT_TOKEN, TELEGRAM_CHAT_ID
from skincare_tracker.exceptions import NotificationError
from skincare_tracker.resilience.fallback import FallbackStrategy, execute_with_fallbacks

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    async def show(self, title: str, body: str, metadata: Optional[dict[str, Any]] = None) -> None:
        ...

    async def toast(self, message: str) -> None:
        ...


class ToastNotifier:
    """
    In-process transient banner

    Keeps the most recent messages so a front end can poll and display
    them; every message is also logged.
    """

    def __init__(self, max_messages: int = 20):
        self.messages: deque[str] = deque(maxlen=max_messages)

    async def show(self, title: str, body: str, metadata: Optional[dict[str, Any]] = None) -> None:
        # The banner has no room for a title
        await self.toast(body)

    async def toast(self, message: str) -> None:
        self.messages.append(message)
        logger.info(f"[BANNER] {message}")

    async def start(self) -> None:
        pass

    async def stop(self) -> None:
        pass

    def latest(self) -> Optional[str]:
        return self.messages[-1] if self.messages else None


class TelegramNotifier:
    """Persistent notification channel via a Telegram bot chat"""

    def __init__(self, bot: Bot, chat_id: str):
        self.bot = bot
        self.chat_id = chat_id

    async def start(self) -> None:
        """Open the bot's HTTP session"""
        await self.bot.initialize()

    async def stop(self) -> None:
        await self.bot.shutdown()

    async def show(self, title: str, body: str, metadata: Optional[dict[str, Any]] = None) -> None:
        try:
            await self.bot.send_message(
                chat_id=self.chat_id,
                text=f"*{title}*\n\n{body}",
                parse_mode="Markdown",
            )
        except TelegramError as e:
            raise NotificationError(
                f"Telegram delivery failed: {e}",
                channel="telegram",
                cause=e
            )
        logger.info(f"Sent reminder notification to chat {self.chat_id}: {body}")

    async def toast(self, message: str) -> None:
        # Confirmations are not worth a push message
        logger.debug(f"Ignoring toast on Telegram channel: {message}")


class FallbackNotifier:
    """
    Prefer the persistent channel, fall back to the banner

    show() only raises NotificationError when every channel failed.
    """

    def __init__(self, primary: Notifier, fallback: ToastNotifier):
        self.primary = primary
        self.fallback = fallback

    async def start(self) -> None:
        await self.primary.start()
        await self.fallback.start()

    async def stop(self) -> None:
        await self.primary.stop()
        await self.fallback.stop()

    async def show(self, title: str, body: str, metadata: Optional[dict[str, Any]] = None) -> None:
        strategies = [
            FallbackStrategy(type(self.primary).__name__, self.primary.show, priority=1),
            FallbackStrategy(type(self.fallback).__name__, self.fallback.show, priority=2),
        ]
        try:
            await execute_with_fallbacks(strategies, title, body, metadata or {})
        except NotificationError:
            raise
        except Exception as e:
            raise NotificationError(f"All notification channels failed: {e}", cause=e)

    async def toast(self, message: str) -> None:
        await self.fallback.toast(message)


def build_notifier(
    bot_token: str = TELEGRAM_BOT_TOKEN,
    chat_id: str = TELEGRAM_CHAT_ID
) -> Notifier:
    """
    Build the notifier from configuration

    Returns a Telegram-first FallbackNotifier when a bot token and chat id
    are configured, otherwise a plain banner.
    """
    banner = ToastNotifier()
    if bot_token and chat_id:
        logger.info("Reminder notifications: Telegram with banner fallback")
        return FallbackNotifier(TelegramNotifier(Bot(token=bot_token), chat_id), banner)

    logger.info("Reminder notifications: in-process banner only")
    return banner
