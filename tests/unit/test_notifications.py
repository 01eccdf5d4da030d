"""Unit tests for notification channels and fallback"""
import pytest
from unittest.mock import AsyncMock

from telegram.error import NetworkError

from skincare_tracker.exceptions import NotificationError
from skincare_tracker.resilience.fallback import FallbackStrategy, execute_with_fallbacks
from skincare_tracker.services.notifications import (
    FallbackNotifier,
    TelegramNotifier,
    ToastNotifier,
    build_notifier,
)


# ============================================================================
# Banner
# ============================================================================

@pytest.mark.asyncio
async def test_toast_notifier_keeps_recent_messages():
    banner = ToastNotifier(max_messages=2)

    await banner.toast("one")
    await banner.toast("two")
    await banner.show("⏰ Skincare Reminder", "three")

    assert list(banner.messages) == ["two", "three"]
    assert banner.latest() == "three"


def test_toast_notifier_empty():
    assert ToastNotifier().latest() is None


# ============================================================================
# Telegram
# ============================================================================

@pytest.mark.asyncio
async def test_telegram_show_sends_message():
    bot = AsyncMock()
    channel = TelegramNotifier(bot, "987654321")

    await channel.show("⏰ Skincare Reminder", "Apply sunscreen", {"reminderId": "r-1"})

    bot.send_message.assert_awaited_once_with(
        chat_id="987654321",
        text="*⏰ Skincare Reminder*\n\nApply sunscreen",
        parse_mode="Markdown",
    )


@pytest.mark.asyncio
async def test_telegram_failure_raises_notification_error():
    bot = AsyncMock()
    bot.send_message.side_effect = NetworkError("unreachable")
    channel = TelegramNotifier(bot, "987654321")

    with pytest.raises(NotificationError) as exc_info:
        await channel.show("title", "body")

    assert exc_info.value.channel == "telegram"


@pytest.mark.asyncio
async def test_telegram_toast_is_not_sent():
    bot = AsyncMock()

    await TelegramNotifier(bot, "987654321").toast("✅ Reminder scheduled in 5 minutes")

    bot.send_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_telegram_lifecycle():
    bot = AsyncMock()
    channel = TelegramNotifier(bot, "987654321")

    await channel.start()
    await channel.stop()

    bot.initialize.assert_awaited_once()
    bot.shutdown.assert_awaited_once()


# ============================================================================
# Fallback
# ============================================================================

@pytest.mark.asyncio
async def test_fallback_prefers_primary():
    primary = AsyncMock()
    banner = ToastNotifier()

    await FallbackNotifier(primary, banner).show("title", "Apply sunscreen", {"reminderId": "r-1"})

    primary.show.assert_awaited_once_with("title", "Apply sunscreen", {"reminderId": "r-1"})
    assert banner.latest() is None


@pytest.mark.asyncio
async def test_fallback_uses_banner_when_primary_fails():
    primary = AsyncMock()
    primary.show.side_effect = NotificationError("down", channel="telegram")
    banner = ToastNotifier()

    await FallbackNotifier(primary, banner).show("title", "Apply sunscreen")

    assert banner.latest() == "Apply sunscreen"


@pytest.mark.asyncio
async def test_fallback_all_channels_fail():
    primary = AsyncMock()
    primary.show.side_effect = NotificationError("down", channel="telegram")
    banner = AsyncMock()
    banner.show.side_effect = RuntimeError("no display")

    with pytest.raises(NotificationError):
        await FallbackNotifier(primary, banner).show("title", "body")


@pytest.mark.asyncio
async def test_fallback_toast_goes_to_banner():
    primary = AsyncMock()
    banner = ToastNotifier()

    await FallbackNotifier(primary, banner).toast("🗑️ Reminder deleted")

    primary.toast.assert_not_awaited()
    assert banner.latest() == "🗑️ Reminder deleted"


@pytest.mark.asyncio
async def test_execute_with_fallbacks_priority_order():
    calls = []

    async def second():
        calls.append("second")
        return 2

    async def first():
        calls.append("first")
        raise RuntimeError("fail")

    result = await execute_with_fallbacks([
        FallbackStrategy("second", second, priority=2),
        FallbackStrategy("first", first, priority=1),
    ])

    assert result == 2
    assert calls == ["first", "second"]


@pytest.mark.asyncio
async def test_execute_with_fallbacks_requires_strategies():
    with pytest.raises(ValueError):
        await execute_with_fallbacks([])


# ============================================================================
# Factory
# ============================================================================

def test_build_notifier_banner_only():
    assert isinstance(build_notifier(bot_token="", chat_id=""), ToastNotifier)


def test_build_notifier_with_telegram():
    notifier = build_notifier(bot_token="123456789:ABC-DEF", chat_id="987654321")

    assert isinstance(notifier, FallbackNotifier)
    assert isinstance(notifier.primary, TelegramNotifier)
    assert notifier.primary.chat_id == "987654321"
