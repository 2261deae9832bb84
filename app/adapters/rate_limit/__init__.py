"""Rate limiting adapters.

This package provides a small abstraction layer so the service can start with
in-memory limiters and later migrate to Redis or another shared store without
changing the API layer.
"""

from app.adapters.rate_limit.base import AbstractAttemptCounter, AbstractCooldownLimiter
from app.adapters.rate_limit.in_memory import InMemoryAttemptCounter, InMemoryCooldownLimiter

__all__ = [
    "AbstractAttemptCounter",
    "AbstractCooldownLimiter",
    "InMemoryAttemptCounter",
    "InMemoryCooldownLimiter",
]
