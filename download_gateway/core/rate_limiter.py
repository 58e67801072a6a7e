"""Fixed-window rate limiting with debounced file persistence."""

import asyncio
import json
import os
import threading
import time
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

import structlog

logger = structlog.get_logger()


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass
class RateLimitEntry:
    """Request count and window reset time for one client."""

    count: int
    reset_time: int  # epoch milliseconds

    def to_dict(self) -> Dict[str, int]:
        return {"count": self.count, "resetTime": self.reset_time}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RateLimitEntry":
        return cls(count=int(data["count"]), reset_time=int(data["resetTime"]))


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a rate limit check."""

    allowed: bool
    limit: int
    remaining: int
    reset_time: Optional[int] = None


class InMemoryRateLimiter:
    """Per-client fixed-window counter kept in process memory.

    The window for a client opens on its first request and closes
    ``window_ms`` later. Requests beyond ``max_requests`` inside the window are
    refused without being counted. Check-and-mutate runs under a lock so two
    concurrent requests for the same client cannot both take the last slot.
    """

    def __init__(
        self,
        max_requests: int,
        window_ms: int,
        clock: Callable[[], int] = now_ms,
    ):
        if max_requests <= 0:
            raise ValueError("max_requests must be positive")
        if window_ms <= 0:
            raise ValueError("window_ms must be positive")

        self.max_requests = max_requests
        self.window_ms = window_ms
        self._clock = clock
        self._lock = threading.Lock()
        self.store: Dict[str, RateLimitEntry] = {}

    def check(self, client_id: str) -> RateLimitResult:
        """Count a request for ``client_id`` and report whether it is allowed."""
        with self._lock:
            now = self._clock()
            entry = self.store.get(client_id)

            if entry is None or now >= entry.reset_time:
                entry = RateLimitEntry(count=1, reset_time=now + self.window_ms)
                self.store[client_id] = entry
                self._mark_dirty()
                return RateLimitResult(
                    allowed=True,
                    limit=self.max_requests,
                    remaining=self.max_requests - 1,
                    reset_time=entry.reset_time,
                )

            if entry.count >= self.max_requests:
                return RateLimitResult(
                    allowed=False,
                    limit=self.max_requests,
                    remaining=0,
                    reset_time=entry.reset_time,
                )

            entry.count += 1
            self._mark_dirty()
            return RateLimitResult(
                allowed=True,
                limit=self.max_requests,
                remaining=self.max_requests - entry.count,
                reset_time=entry.reset_time,
            )

    def reset(self, client_id: str) -> bool:
        """Drop the entry for a client. Returns True if one existed."""
        with self._lock:
            removed = self.store.pop(client_id, None) is not None
            if removed:
                self._mark_dirty()
        return removed

    def get_status(self, client_id: str) -> Optional[RateLimitEntry]:
        """Return a copy of the client's current window, or None if it has none."""
        with self._lock:
            entry = self.store.get(client_id)
            if entry is None or self._clock() >= entry.reset_time:
                return None
            return replace(entry)

    def cleanup(self) -> int:
        """Evict every entry whose window has closed."""
        with self._lock:
            now = self._clock()
            expired = [
                client_id
                for client_id, entry in self.store.items()
                if now >= entry.reset_time
            ]
            for client_id in expired:
                del self.store[client_id]
            if expired:
                self._mark_dirty()

        if expired:
            logger.debug("Cleaned up rate limiter entries", count=len(expired))
        return len(expired)

    def _mark_dirty(self) -> None:
        """Hook called under the lock whenever the store changes."""

    def __len__(self) -> int:
        return len(self.store)


class RateLimiter(InMemoryRateLimiter):
    """Rate limiter whose state survives restarts through a JSON file.

    The whole store is loaded at construction and rewritten on save. Changes
    only set a dirty flag; a background task writes at most once per
    ``save_debounce`` seconds, and :meth:`close` always performs a final flush.
    Load and save failures are logged and never raised, so the limiter keeps
    working from memory when the disk misbehaves.
    """

    def __init__(
        self,
        db_path: Union[str, Path],
        max_requests: int,
        window_ms: int,
        save_debounce: float = 5.0,
        cleanup_interval: float = 60.0,
        clock: Callable[[], int] = now_ms,
    ):
        super().__init__(max_requests, window_ms, clock=clock)
        self.db_path = Path(db_path)
        self.save_debounce = save_debounce
        self.cleanup_interval = cleanup_interval

        self._dirty = False
        self._save_lock = threading.Lock()
        self._flush_lock: Optional[asyncio.Lock] = None
        self.flush_task: Optional[asyncio.Task] = None
        self.cleanup_task: Optional[asyncio.Task] = None

        self.load()

    @property
    def dirty(self) -> bool:
        return self._dirty

    def _mark_dirty(self) -> None:
        self._dirty = True

    def load(self) -> None:
        """Replace the in-memory store with the persisted one."""
        store: Dict[str, RateLimitEntry] = {}

        if self.db_path.exists():
            try:
                raw = json.loads(self.db_path.read_text(encoding="utf-8"))
                now = self._clock()
                for client_id, data in raw.items():
                    entry = RateLimitEntry.from_dict(data)
                    if now < entry.reset_time:
                        store[str(client_id)] = entry
            except (OSError, ValueError, TypeError, KeyError, AttributeError) as exc:
                logger.warning(
                    "Failed to load rate limit data, starting empty",
                    path=str(self.db_path),
                    error=str(exc),
                )
                store = {}

        with self._lock:
            self.store = store
            self._dirty = False

        logger.info(
            "Rate limiter initialized",
            window_ms=self.window_ms,
            max_requests=self.max_requests,
            db_path=str(self.db_path),
            entries=len(store),
        )

    def save(self) -> bool:
        """Write the current store to disk. Returns False on failure."""
        with self._save_lock:
            with self._lock:
                snapshot = {
                    client_id: entry.to_dict()
                    for client_id, entry in self.store.items()
                }
                self._dirty = False

            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                tmp_path = self.db_path.with_name(f"{self.db_path.name}.tmp")
                tmp_path.write_text(json.dumps(snapshot), encoding="utf-8")
                os.replace(tmp_path, self.db_path)
            except Exception as exc:
                with self._lock:
                    self._dirty = True
                logger.error(
                    "Failed to save rate limit data",
                    path=str(self.db_path),
                    error=str(exc),
                )
                return False

        logger.debug("Rate limit data saved", entries=len(snapshot))
        return True

    async def flush(self) -> bool:
        """Persist pending changes, if any, without blocking the event loop."""
        if self._flush_lock is None:
            self._flush_lock = asyncio.Lock()

        async with self._flush_lock:
            if not self._dirty:
                return True
            return await asyncio.to_thread(self.save)

    def start(self) -> None:
        """Start the debounced flush and the expiry sweep background tasks."""
        try:
            if self.flush_task is None or self.flush_task.done():
                self.flush_task = asyncio.create_task(self._flush_periodically())
            if self.cleanup_task is None or self.cleanup_task.done():
                self.cleanup_task = asyncio.create_task(self._cleanup_periodically())
        except RuntimeError:  # pragma: no cover - depends on loop availability
            logger.warning("No running event loop, rate limiter tasks not started")

    async def _flush_periodically(self) -> None:
        while True:
            try:
                await asyncio.sleep(self.save_debounce)
                await self.flush()
            except asyncio.CancelledError:
                break
            except Exception as exc:  # pragma: no cover
                logger.error("Rate limiter flush error", error=str(exc))

    async def _cleanup_periodically(self) -> None:
        while True:
            try:
                await asyncio.sleep(self.cleanup_interval)
                self.cleanup()
            except asyncio.CancelledError:
                break
            except Exception as exc:  # pragma: no cover
                logger.error("Rate limiter cleanup error", error=str(exc))

    async def close(self) -> None:
        """Stop background tasks and write the final state."""
        for task in (self.flush_task, self.cleanup_task):
            if task and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self.flush_task = None
        self.cleanup_task = None

        await self.flush()


__all__ = [
    "RateLimitEntry",
    "RateLimitResult",
    "InMemoryRateLimiter",
    "RateLimiter",
    "now_ms",
]
