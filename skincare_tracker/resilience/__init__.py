"""Resilience patterns for delivery channels"""

from skincare_tracker.resilience.fallback import execute_with_fallbacks, FallbackStrategy

__all__ = [
    "execute_with_fallbacks",
    "FallbackStrategy",
]
