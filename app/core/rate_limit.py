"""Process-wide rate limiter instances for the HTTP layer.

Design goals:
- Minimal coupling: services receive limiters through FastAPI dependencies.
- Swap-friendly: storage can be replaced (e.g., Redis) behind the abstract
  interfaces in app.adapters.rate_limit.base.
- State survives across requests: instances are cached in-module and only
  rebuilt when their configuration changes (primarily in tests).
"""

from __future__ import annotations

import threading

from app.adapters.rate_limit.base import AbstractAttemptCounter, AbstractCooldownLimiter
from app.adapters.rate_limit.in_memory import InMemoryAttemptCounter, InMemoryCooldownLimiter
from app.core.config import settings


_comment_limiter: AbstractCooldownLimiter | None = None
_comment_limiter_config: tuple[float, float] | None = None

_attempt_counter: AbstractAttemptCounter | None = None
_attempt_counter_config: tuple[int, float, float] | None = None

# FastAPI runs sync dependencies in a threadpool
_build_lock = threading.Lock()


def get_comment_limiter() -> AbstractCooldownLimiter:
    """Return the cooldown limiter for comment submissions (keyed by GitHub id)."""

    global _comment_limiter, _comment_limiter_config

    config = (
        settings.app.comment_cooldown_seconds,
        settings.app.limiter_sweep_interval_seconds,
    )

    with _build_lock:
        if _comment_limiter is None or _comment_limiter_config != config:
            _comment_limiter = InMemoryCooldownLimiter(
                cooldown_seconds=settings.app.comment_cooldown_seconds,
                sweep_interval_seconds=settings.app.limiter_sweep_interval_seconds,
            )
            _comment_limiter_config = config

    return _comment_limiter


def get_attempt_counter() -> AbstractAttemptCounter:
    """Return the failed password attempt counter (keyed by client address)."""

    global _attempt_counter, _attempt_counter_config

    config = (
        settings.app.password_attempt_threshold,
        settings.app.password_block_seconds,
        settings.app.limiter_sweep_interval_seconds,
    )

    with _build_lock:
        if _attempt_counter is None or _attempt_counter_config != config:
            _attempt_counter = InMemoryAttemptCounter(
                threshold=settings.app.password_attempt_threshold,
                block_seconds=settings.app.password_block_seconds,
                sweep_interval_seconds=settings.app.limiter_sweep_interval_seconds,
            )
            _attempt_counter_config = config

    return _attempt_counter


def reset_rate_limiters() -> None:
    """Drop cached limiter instances so the next call starts from a clean state."""

    global _comment_limiter, _comment_limiter_config, _attempt_counter, _attempt_counter_config
    _comment_limiter = None
    _comment_limiter_config = None
    _attempt_counter = None
    _attempt_counter_config = None
