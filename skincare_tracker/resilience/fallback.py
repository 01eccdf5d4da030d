"""Ordered fallback across delivery channels

A reminder notification should reach the user even when the preferred
channel is down. Channels are wrapped as strategies and tried from the
lowest priority number up; the first that returns wins.
"""

import logging
from typing import Any, Awaitable, Callable, List, TypeVar
from dataclasses import dataclass

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass
class FallbackStrategy:
    """
    One way of getting something done, ranked against the others.

    Attributes:
        name: Label used in log lines (usually the channel class name)
        handler: Coroutine function called with the shared arguments
        priority: 1 for the preferred channel, higher numbers are fallbacks
    """
    name: str
    handler: Callable[..., Awaitable[T]]
    priority: int


async def execute_with_fallbacks(
    strategies: List[FallbackStrategy],
    *args: Any,
    **kwargs: Any
) -> T:
    """
    Run strategies by ascending priority, returning the first success.

    Every strategy receives the same *args/**kwargs. A failure is logged
    and the next strategy is tried.

    Raises:
        ValueError: no strategies were given
        Exception: whatever the last strategy raised, when all of them failed

    Example:
        await execute_with_fallbacks(
            [
                FallbackStrategy("telegram", telegram.show, priority=1),
                FallbackStrategy("banner", banner.show, priority=2),
            ],
            "⏰ Skincare Reminder", "Apply sunscreen", {"reminderId": "r-1"},
        )
    """
    if not strategies:
        raise ValueError("No fallback strategies given")

    ordered = sorted(strategies, key=lambda s: s.priority)
    errors: list[Exception] = []

    for strategy in ordered:
        try:
            result = await strategy.handler(*args, **kwargs)
        except Exception as e:
            logger.warning(f"[FALLBACK] {strategy.name} failed: {type(e).__name__}: {e}")
            errors.append(e)
            continue

        if errors:
            logger.info(f"[FALLBACK] Delivered via {strategy.name} after {len(errors)} failed channel(s)")
        return result

    logger.error(f"[FALLBACK] All {len(ordered)} channels failed")
    raise errors[-1]
