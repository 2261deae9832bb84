"""In-memory rate limiters for comment cooldowns and password attempts.

Notes:
- Per-process only: state is lost on restart and not shared between workers.
- Thread-safe: every key has its own lock, so requests bearing different keys
  never contend, while read-then-write sequences on one key are atomic.
- Stale entries are swept periodically so the maps do not grow forever.
"""

from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Generic, Iterator, TypeVar

from app.adapters.rate_limit.base import AbstractAttemptCounter, AbstractCooldownLimiter

S = TypeVar("S")


@dataclass
class _AttemptState:
    count: int
    last_failure: float


class _KeyedStateStore(Generic[S]):
    """Map of key -> state where each key is guarded by its own lock.

    The registry lock is held only while looking up or creating a key's lock,
    never while the caller works on the state itself.
    """

    def __init__(
        self,
        *,
        retention_seconds: float,
        sweep_interval_seconds: float,
        last_seen: Callable[[S], float],
    ) -> None:
        self._retention_seconds = retention_seconds
        self._sweep_interval_seconds = sweep_interval_seconds
        self._last_seen = last_seen
        self._registry_lock = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._states: dict[str, S] = {}
        self._last_sweep: float | None = None

    def _lock_for(self, key: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def locked(self, key: str) -> Iterator[None]:
        """Hold the key-scoped lock for a read-modify-write sequence."""
        while True:
            lock = self._lock_for(key)
            lock.acquire()
            with self._registry_lock:
                current = self._locks.get(key)
            if current is lock:
                break
            # The key was evicted while we waited; retry on its new lock.
            lock.release()
        try:
            yield
        finally:
            lock.release()

    def get(self, key: str) -> S | None:
        return self._states.get(key)

    def put(self, key: str, state: S) -> None:
        self._states[key] = state

    def __len__(self) -> int:
        return len(self._states)

    def maybe_sweep(self, now: float) -> None:
        if self._last_sweep is None:
            self._last_sweep = now
            return
        if now - self._last_sweep >= self._sweep_interval_seconds:
            self.sweep(now)

    def sweep(self, now: float) -> int:
        """Evict entries not touched within the retention window.

        Returns:
            Number of evicted entries.
        """
        self._last_sweep = now
        evicted = 0
        with self._registry_lock:
            for key, lock in list(self._locks.items()):
                # Keys busy in another request are skipped until the next sweep.
                if not lock.acquire(blocking=False):
                    continue
                try:
                    state = self._states.get(key)
                    if state is not None and now - self._last_seen(state) < self._retention_seconds:
                        continue
                    if state is not None:
                        del self._states[key]
                        evicted += 1
                    del self._locks[key]
                finally:
                    lock.release()
        return evicted


def _require_key(key: str) -> None:
    if not key:
        raise ValueError("key must be a non-empty string")


class InMemoryCooldownLimiter(AbstractCooldownLimiter):
    """Allow a key at most once per cooldown interval.

    Used for comment submissions, keyed by the verified GitHub account id.
    """

    def __init__(
        self,
        *,
        cooldown_seconds: float,
        sweep_interval_seconds: float = 300.0,
        retention_seconds: float | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the cooldown limiter.

        Args:
            cooldown_seconds: Minimum interval between allowed calls per key.
            sweep_interval_seconds: Minimum interval between stale entry sweeps.
            retention_seconds: Age after which an entry is evicted
                (defaults to ten cooldown intervals).
            clock: Time source function returning UNIX time in seconds.

        Raises:
            ValueError: If an interval is not positive.
        """
        if cooldown_seconds <= 0:
            raise ValueError("cooldown_seconds must be > 0")
        if sweep_interval_seconds <= 0:
            raise ValueError("sweep_interval_seconds must be > 0")
        retention = retention_seconds if retention_seconds is not None else cooldown_seconds * 10
        if retention < cooldown_seconds:
            raise ValueError("retention_seconds must be >= cooldown_seconds")

        self._cooldown_seconds = cooldown_seconds
        self._clock = clock
        self._store: _KeyedStateStore[float] = _KeyedStateStore(
            retention_seconds=retention,
            sweep_interval_seconds=sweep_interval_seconds,
            last_seen=lambda last_time: last_time,
        )

    @property
    def cooldown_seconds(self) -> float:
        return self._cooldown_seconds

    def authorize(self, key: str, now: float | None = None) -> bool:
        _require_key(key)
        now = self._clock() if now is None else now
        self._store.maybe_sweep(now)

        with self._store.locked(key):
            last_time = self._store.get(key)
            if last_time is not None and now - last_time < self._cooldown_seconds:
                return False
            self._store.put(key, now)
            return True

    def last_accepted(self, key: str) -> float | None:
        """Return the time of the last accepted call for ``key``, if tracked."""
        return self._store.get(key)

    def sweep(self, now: float | None = None) -> int:
        return self._store.sweep(self._clock() if now is None else now)

    def __len__(self) -> int:
        return len(self._store)


class InMemoryAttemptCounter(AbstractAttemptCounter):
    """Count failed attempts per key and block the key past a threshold.

    Used for article creation, keyed by the client address. Once a key has
    ``threshold`` failures, further attempts are refused until ``block_seconds``
    have passed since the last failure; the count then starts over.
    """

    def __init__(
        self,
        *,
        threshold: int,
        block_seconds: float,
        sweep_interval_seconds: float = 300.0,
        retention_seconds: float | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if threshold < 1:
            raise ValueError("threshold must be >= 1")
        if block_seconds <= 0:
            raise ValueError("block_seconds must be > 0")
        if sweep_interval_seconds <= 0:
            raise ValueError("sweep_interval_seconds must be > 0")
        retention = retention_seconds if retention_seconds is not None else block_seconds * 10
        if retention < block_seconds:
            raise ValueError("retention_seconds must be >= block_seconds")

        self._threshold = threshold
        self._block_seconds = block_seconds
        self._clock = clock
        self._store: _KeyedStateStore[_AttemptState] = _KeyedStateStore(
            retention_seconds=retention,
            sweep_interval_seconds=sweep_interval_seconds,
            last_seen=lambda state: state.last_failure,
        )

    @property
    def threshold(self) -> int:
        return self._threshold

    @property
    def block_seconds(self) -> float:
        return self._block_seconds

    def _blocked(self, state: _AttemptState | None, now: float) -> bool:
        return (
            state is not None
            and state.count >= self._threshold
            and now - state.last_failure < self._block_seconds
        )

    def record_failure(self, key: str, now: float | None = None) -> None:
        _require_key(key)
        now = self._clock() if now is None else now
        self._store.maybe_sweep(now)

        with self._store.locked(key):
            state = self._store.get(key)
            if state is None:
                self._store.put(key, _AttemptState(count=1, last_failure=now))
            else:
                state.count += 1
                state.last_failure = now

    def is_blocked(self, key: str, now: float | None = None) -> bool:
        _require_key(key)
        now = self._clock() if now is None else now
        with self._store.locked(key):
            return self._blocked(self._store.get(key), now)

    def reset(self, key: str) -> None:
        _require_key(key)
        with self._store.locked(key):
            state = self._store.get(key)
            if state is not None:
                state.count = 0

    def check(self, key: str, now: float | None = None) -> bool:
        _require_key(key)
        now = self._clock() if now is None else now

        with self._store.locked(key):
            state = self._store.get(key)
            if self._blocked(state, now):
                return False
            if state is not None and state.count >= self._threshold:
                state.count = 0
            return True

    def failures(self, key: str) -> int:
        """Return the current failure count for ``key`` (0 if untracked)."""
        state = self._store.get(key)
        return state.count if state is not None else 0

    def sweep(self, now: float | None = None) -> int:
        return self._store.sweep(self._clock() if now is None else now)

    def __len__(self) -> int:
        return len(self._store)
