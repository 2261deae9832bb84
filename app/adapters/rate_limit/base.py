"""Rate limiter interfaces.

The API depends on these abstractions (not the concrete implementations) so
the storage backend can be swapped later (e.g., Redis) with minimal changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class AbstractCooldownLimiter(ABC):
    """Interface for per-key cooldown limiters.

    A key is allowed at most once per cooldown interval.
    """

    @abstractmethod
    def authorize(self, key: str, now: float | None = None) -> bool:
        """Check the cooldown for ``key`` and record the attempt when allowed.

        Args:
            key: Unique identifier (e.g., a GitHub account id).
            now: Optional UNIX time in seconds; defaults to the limiter clock.

        Returns:
            True if allowed. State is left untouched on denial.
        """
        raise NotImplementedError


class AbstractAttemptCounter(ABC):
    """Interface for per-key failed attempt counters with a block window."""

    @abstractmethod
    def record_failure(self, key: str, now: float | None = None) -> None:
        """Count one failed attempt for ``key``."""
        raise NotImplementedError

    @abstractmethod
    def is_blocked(self, key: str, now: float | None = None) -> bool:
        """Return True while ``key`` is over the threshold and inside the window."""
        raise NotImplementedError

    @abstractmethod
    def reset(self, key: str) -> None:
        """Zero the failure count for ``key`` (the last failure time is kept)."""
        raise NotImplementedError

    @abstractmethod
    def check(self, key: str, now: float | None = None) -> bool:
        """Gate an attempt: False while blocked, resetting an expired block.

        Returns:
            True if the attempt may be evaluated.
        """
        raise NotImplementedError
